"""ReactForm — Entry point."""
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication

from reactform.core.settings_manager import SettingsManager
from reactform.gui.main_window import MainWindow

BASE_DIR = Path(__file__).parent


def main() -> None:
    app = QApplication(sys.argv)
    app.setApplicationName("ReactForm")
    app.setApplicationVersion("0.1.0")
    app.setOrganizationName("ReactForm")
    app.setStyle("Fusion")

    settings = SettingsManager(BASE_DIR / "settings.ini")
    window = MainWindow(settings, BASE_DIR)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
