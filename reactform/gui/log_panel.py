"""Bottom log panel — timestamped binding and build messages."""
from datetime import datetime

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout,
    QTextEdit, QPushButton, QLabel, QComboBox,
)
from PySide6.QtGui import QColor, QTextCharFormat, QTextCursor, QFont

from reactform.core.constants import LOG_LEVELS

_LEVEL_COLORS: dict[str, str] = {
    "INFO":    "#D4D4D4",
    "WARNING": "#CE9178",
    "ERROR":   "#F44747",
    "DEBUG":   "#858585",
}


class LogPanel(QWidget):
    """Read-only text area with colour-coded levels and a minimum-level filter."""

    def __init__(self, level: str = "INFO") -> None:
        super().__init__()
        self._min_rank = _rank(level)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 2, 4, 4)
        layout.setSpacing(2)

        # Header
        header = QHBoxLayout()
        title = QLabel("Log")
        title.setStyleSheet("color: #CCCCCC; font-size: 12px;")
        header.addWidget(title)
        header.addStretch()

        self._level_box = QComboBox()
        self._level_box.addItems(list(LOG_LEVELS))
        self._level_box.setCurrentIndex(self._min_rank)
        self._level_box.currentTextChanged.connect(self.set_level)
        header.addWidget(self._level_box)

        clear_btn = QPushButton("Clear")
        clear_btn.setFixedWidth(56)
        clear_btn.setStyleSheet(
            "QPushButton { background:#3C3C3C; color:#CCCCCC; border:none;"
            " border-radius:3px; padding:2px 6px; }"
            "QPushButton:hover { background:#4A4A4A; }"
        )
        clear_btn.clicked.connect(self.clear)
        header.addWidget(clear_btn)
        layout.addLayout(header)

        # Log text area
        self._text = QTextEdit()
        self._text.setReadOnly(True)
        font = QFont("Consolas", 9)
        font.setStyleHint(QFont.StyleHint.Monospace)
        self._text.setFont(font)
        self._text.setStyleSheet(
            "QTextEdit { background:#0C0C0C; color:#CCCCCC; border:none; }"
        )
        layout.addWidget(self._text)

    def set_level(self, level: str) -> None:
        self._min_rank = _rank(level)

    def log(self, level: str, message: str) -> None:
        """Append a timestamped, colour-coded log entry."""
        level = level.upper()
        if _rank(level) < self._min_rank:
            return
        ts = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        color = _LEVEL_COLORS.get(level, "#D4D4D4")

        cursor = self._text.textCursor()
        cursor.movePosition(QTextCursor.MoveOperation.End)

        ts_fmt = QTextCharFormat()
        ts_fmt.setForeground(QColor("#858585"))
        cursor.setCharFormat(ts_fmt)
        cursor.insertText(f"[{ts}] ")

        lvl_fmt = QTextCharFormat()
        lvl_fmt.setForeground(QColor(color))
        cursor.setCharFormat(lvl_fmt)
        cursor.insertText(f"[{level:7}] {message}\n")

        self._text.setTextCursor(cursor)
        self._text.ensureCursorVisible()

    def clear(self) -> None:
        self._text.clear()


def _rank(level: str) -> int:
    level = level.upper()
    return LOG_LEVELS.index(level) if level in LOG_LEVELS else LOG_LEVELS.index("INFO")
