"""Main application window — hosts a built form, its variables and the log."""
from __future__ import annotations

from pathlib import Path

from PySide6.QtWidgets import (
    QMainWindow, QDockWidget, QScrollArea, QWidget, QVBoxLayout,
    QLabel, QFileDialog, QMessageBox,
)
from PySide6.QtCore import Qt, QSettings
from PySide6.QtGui import QAction, QKeySequence, QCloseEvent

from reactform.core.persistence import save_json, load_json
from reactform.core.settings_manager import SettingsManager
from reactform.core.view_model import ViewModel
from reactform.gui.builder import UIBuilder
from reactform.gui.log_panel import LogPanel
from reactform.gui.styles import MAIN_WINDOW
from reactform.gui.variable_panel import VariablePanel


class MainWindow(QMainWindow):
    def __init__(self, settings: SettingsManager, base_dir: Path) -> None:
        super().__init__()
        self._settings = settings
        self._base_dir = base_dir
        self._ui_path: Path | None = None

        self.setWindowTitle("ReactForm")
        self.setMinimumSize(720, 520)
        self.setStyleSheet(MAIN_WINDOW)

        self._build_log_dock()
        self._build_variable_dock()
        self._build_central()
        self._build_menu()
        self._build_statusbar()
        self._restore_geometry()

        self._builder = UIBuilder(log_fn=self._log, parent=self)
        self._builder.build_error.connect(self._on_build_error)
        self._builder.reloaded.connect(self._on_reloaded)
        self._connect_demo_actions()

        self._log("INFO", "ReactForm started")
        self.open_ui(self._resolve(settings.ui_file))

    # ================================================================
    # UI construction
    # ================================================================

    def _build_central(self) -> None:
        self._host = QWidget()
        self._host_layout = QVBoxLayout(self._host)
        self._host_layout.setContentsMargins(0, 0, 0, 0)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(self._host)
        self.setCentralWidget(scroll)

    def _build_log_dock(self) -> None:
        self._log_panel = LogPanel(self._settings.log_level)

        dock = QDockWidget("Log", self)
        dock.setAllowedAreas(Qt.DockWidgetArea.BottomDockWidgetArea)
        dock.setFeatures(
            QDockWidget.DockWidgetFeature.DockWidgetClosable |
            QDockWidget.DockWidgetFeature.DockWidgetMovable
        )
        dock.setWidget(self._log_panel)
        self.addDockWidget(Qt.DockWidgetArea.BottomDockWidgetArea, dock)
        self._log_dock = dock
        self.resizeDocks([dock], [160], Qt.Orientation.Vertical)

    def _build_variable_dock(self) -> None:
        self._var_panel = VariablePanel()

        dock = QDockWidget("Variables", self)
        dock.setAllowedAreas(
            Qt.DockWidgetArea.RightDockWidgetArea |
            Qt.DockWidgetArea.BottomDockWidgetArea
        )
        dock.setFeatures(
            QDockWidget.DockWidgetFeature.DockWidgetClosable |
            QDockWidget.DockWidgetFeature.DockWidgetMovable |
            QDockWidget.DockWidgetFeature.DockWidgetFloatable
        )
        dock.setWidget(self._var_panel)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, dock)
        self._var_dock = dock

    def _build_menu(self) -> None:
        mb = self.menuBar()

        # ── File ────────────────────────────────────────────────────────
        file_menu = mb.addMenu("&File")
        self._a_open   = QAction("&Open UI...",      self, shortcut=QKeySequence.StandardKey.Open)
        self._a_reload = QAction("&Reload UI",       self, shortcut=QKeySequence("F5"))
        self._a_save   = QAction("&Save State...",   self, shortcut=QKeySequence.StandardKey.Save)
        self._a_load   = QAction("&Load State...",   self, shortcut=QKeySequence("Ctrl+L"))
        self._a_exit   = QAction("E&xit",            self, shortcut=QKeySequence("Alt+F4"))
        file_menu.addActions([self._a_open, self._a_reload])
        file_menu.addSeparator()
        file_menu.addActions([self._a_save, self._a_load])
        file_menu.addSeparator()
        file_menu.addAction(self._a_exit)

        self._a_open.triggered.connect(self._open_ui_dialog)
        self._a_reload.triggered.connect(self._do_reload)
        self._a_save.triggered.connect(self._save_state)
        self._a_load.triggered.connect(self._load_state)
        self._a_exit.triggered.connect(self.close)

        # ── View ────────────────────────────────────────────────────────
        view_menu = mb.addMenu("&View")
        log_toggle = self._log_dock.toggleViewAction()
        log_toggle.setText("&Log Panel")
        var_toggle = self._var_dock.toggleViewAction()
        var_toggle.setText("&Variables")
        view_menu.addActions([log_toggle, var_toggle])

        # ── Help ────────────────────────────────────────────────────────
        help_menu = mb.addMenu("&Help")
        a_about = QAction("&About", self)
        a_about.triggered.connect(self._show_about)
        help_menu.addAction(a_about)

    def _build_statusbar(self) -> None:
        self._status_label = QLabel("Ready")
        self._file_label   = QLabel("")
        sb = self.statusBar()
        sb.addWidget(self._status_label)
        sb.addPermanentWidget(self._file_label)

    # ================================================================
    # Form handling
    # ================================================================

    def open_ui(self, path: Path) -> None:
        old_root = self._builder.root
        root = self._builder.build_from_file(path, self._host)
        if root is None:
            self._status_label.setText("Build failed")
            return
        if old_root is not None:
            self._host_layout.removeWidget(old_root)
            old_root.deleteLater()
        self._builder.disable_hot_reload()
        self._host_layout.addWidget(root)
        self._ui_path = path
        self._var_panel.attach(self._builder.store)
        self._file_label.setText(path.name)
        self.setWindowTitle(f"ReactForm  -  {path.name}")
        self._status_label.setText("Ready")

        if self._settings.hot_reload:
            self._builder.enable_hot_reload(path, self._settings.reload_debounce_ms)

    def _connect_demo_actions(self) -> None:
        """Buttons of the bundled demo form; other forms simply lack them."""
        self._builder.connect_button("addForm", self._add_form)
        self._builder.connect_button("clearForms", self._clear_forms)
        self._builder.connect_button("saveState", self._save_state)

    def _add_form(self) -> None:
        forms = ViewModel(self._builder.store).list("forms")
        number = len(forms) + 1
        forms.append({"name": f"Form {number}", "val": str(number - 1)})

    def _clear_forms(self) -> None:
        ViewModel(self._builder.store).list("forms").clear()

    def _on_reloaded(self) -> None:
        # The builder replaced its store.
        self._var_panel.attach(self._builder.store)
        self._status_label.setText("Reloaded")

    def _on_build_error(self, message: str) -> None:
        self._status_label.setText(message)

    # ================================================================
    # Action handlers
    # ================================================================

    def _open_ui_dialog(self) -> None:
        start = str(self._ui_path.parent if self._ui_path else self._base_dir)
        path, _ = QFileDialog.getOpenFileName(
            self, "Open UI", start, "UI markup (*.xml);;All files (*)"
        )
        if path:
            self.open_ui(Path(path))

    def _do_reload(self) -> None:
        if self._ui_path is None:
            return
        if not self._builder.is_hot_reload_enabled():
            self._builder.enable_hot_reload(self._ui_path, self._settings.reload_debounce_ms)
        self._builder.reload()

    def _save_state(self) -> None:
        path, _ = QFileDialog.getSaveFileName(
            self, "Save State", str(self._resolve(self._settings.state_file)),
            "JSON (*.json);;All files (*)",
        )
        if path:
            save_json(self._builder.store, path, log=self._log)

    def _load_state(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self, "Load State", str(self._resolve(self._settings.state_file)),
            "JSON (*.json);;All files (*)",
        )
        if path:
            load_json(self._builder.store, path, log=self._log)

    # ================================================================
    # Helpers
    # ================================================================

    def _resolve(self, path: Path) -> Path:
        return path if path.is_absolute() else self._base_dir / path

    def _log(self, level: str, message: str) -> None:
        self._log_panel.log(level, message)

    def _show_about(self) -> None:
        QMessageBox.about(
            self, "About",
            "<b>ReactForm</b> v0.1.0<br>"
            "Python 3 + PySide6<br><br>"
            "Reactive forms built from XML markup",
        )

    # ================================================================
    # Geometry persistence
    # ================================================================

    def _restore_geometry(self) -> None:
        qs = QSettings("ReactForm", "MainWindow")
        geom = qs.value("geometry")
        state = qs.value("windowState")
        if geom:
            self.restoreGeometry(geom)
        else:
            self.resize(1100, 720)
        if state:
            self.restoreState(state)

    def closeEvent(self, event: QCloseEvent) -> None:
        self._builder.disable_hot_reload()
        self._var_panel.detach()

        qs = QSettings("ReactForm", "MainWindow")
        qs.setValue("geometry",    self.saveGeometry())
        qs.setValue("windowState", self.saveState())
        event.accept()
