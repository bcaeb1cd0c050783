"""Variable watch panel — shows live store values while the form is used.

Displayed as a two-column QTableWidget (Name | Value) inside a QDockWidget.
attach() subscribes to a VariableStore; every change refreshes the table.
"""
from __future__ import annotations

from typing import Any, Callable

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QTableWidget, QTableWidgetItem,
    QHeaderView, QPushButton, QHBoxLayout,
)
from PySide6.QtGui import QColor, QFont

from reactform.core.variable_store import VariableStore

_DARK = """
    QTableWidget {
        background-color: #1E1E1E;
        color: #D4D4D4;
        border: none;
        gridline-color: #3C3C3C;
    }
    QTableWidget::item { padding: 2px 6px; }
    QTableWidget::item:selected {
        background: #264F78;
    }
    QHeaderView::section {
        background-color: #2D2D2D;
        color: #AAAAAA;
        border: none;
        border-bottom: 1px solid #3C3C3C;
        padding: 3px 6px;
    }
    QPushButton {
        background: #3C3C3C; color: #CCCCCC;
        border: 1px solid #555; border-radius: 3px;
        padding: 2px 10px; font-size: 11px;
    }
    QPushButton:hover { background: #4A4A4A; }
"""

_COL_NAME        = "#9CDCFE"
_COL_VALUE_NUM   = "#B5CEA8"   # numbers
_COL_VALUE_LIST  = "#C586C0"   # collections
_COL_VALUE_STR   = "#CE9178"   # strings


def _value_color(val: Any) -> str:
    if isinstance(val, (int, float)):
        return _COL_VALUE_NUM
    if isinstance(val, (list, tuple)):
        return _COL_VALUE_LIST
    return _COL_VALUE_STR


def _value_text(val: Any) -> str:
    if isinstance(val, (list, tuple)):
        return f"[{len(val)} item(s)]"
    return str(val)


class VariablePanel(QWidget):
    """A table that displays the current variable snapshot."""

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setStyleSheet(_DARK)
        self._unsubscribe: Callable[[], None] | None = None
        self._store: VariableStore | None = None
        self._build_ui()

    # ------------------------------------------------------------------
    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(2, 2, 2, 2)
        layout.setSpacing(2)

        # Toolbar
        bar = QHBoxLayout()
        self._refresh_btn = QPushButton("Refresh")
        self._refresh_btn.setFixedHeight(22)
        self._refresh_btn.clicked.connect(self.refresh)
        bar.addStretch()
        bar.addWidget(self._refresh_btn)
        layout.addLayout(bar)

        # Table
        self._table = QTableWidget(0, 2)
        self._table.setHorizontalHeaderLabels(["Name", "Value"])
        self._table.horizontalHeader().setSectionResizeMode(
            0, QHeaderView.ResizeMode.Interactive
        )
        self._table.horizontalHeader().setSectionResizeMode(
            1, QHeaderView.ResizeMode.Stretch
        )
        self._table.horizontalHeader().setDefaultSectionSize(150)
        self._table.verticalHeader().setVisible(False)
        self._table.setSelectionBehavior(
            QTableWidget.SelectionBehavior.SelectRows
        )
        self._table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)

        mono = QFont("Consolas", 10)
        mono.setStyleHint(QFont.StyleHint.Monospace)
        self._table.setFont(mono)

        layout.addWidget(self._table)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def attach(self, store: VariableStore) -> None:
        """Follow ``store``; the previous store (if any) is let go."""
        self.detach()
        self._store = store
        self._unsubscribe = store.subscribe(lambda name, value: self.refresh())
        self.refresh()

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
        self._unsubscribe = None
        self._store = None

    def refresh(self) -> None:
        if self._store is not None:
            self.update_vars(self._store.get_snapshot())

    def update_vars(self, variables: dict) -> None:
        """Refresh the table with a new variable snapshot.

        Existing rows are updated in-place; new variables are appended;
        variables that no longer exist are removed.
        """
        current: dict[str, int] = {}
        for row in range(self._table.rowCount()):
            item = self._table.item(row, 0)
            if item:
                current[item.text()] = row

        for name, val in sorted(variables.items()):
            if name in current:
                row = current[name]
            else:
                row = self._table.rowCount()
                self._table.insertRow(row)
                name_item = QTableWidgetItem(name)
                name_item.setForeground(QColor(_COL_NAME))
                self._table.setItem(row, 0, name_item)

            val_item = QTableWidgetItem(_value_text(val))
            val_item.setForeground(QColor(_value_color(val)))
            self._table.setItem(row, 1, val_item)

        surviving = set(variables.keys())
        rows_to_remove = [
            row for name, row in current.items()
            if name not in surviving
        ]
        for row in sorted(rows_to_remove, reverse=True):
            self._table.removeRow(row)

    def clear(self) -> None:
        """Remove all rows from the table."""
        self._table.setRowCount(0)
