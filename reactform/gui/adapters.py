"""PySide6 element adapters — the only place that knows concrete widget types.

Each adapter wraps one widget and exposes the ElementAdapter surface the
store expects (get_value / set_value / on_change / set_property).
set_value() writes with the widget's signals blocked, so pushing a value
from the store never echoes back as a user edit.

Value conventions
-----------------
CheckBox / RadioButton  → 1 / 0
ComboBox                → item data of the current entry, else its text
LineEdit / Label        → text
SpinBox / Slider        → int
DoubleSpinBox           → float
"""
from __future__ import annotations

from typing import Any, Callable

from PySide6.QtWidgets import (
    QWidget, QAbstractButton, QCheckBox, QRadioButton, QComboBox,
    QLineEdit, QSpinBox, QDoubleSpinBox, QAbstractSlider, QLabel,
    QProgressBar, QBoxLayout,
)

from reactform.core.expression import to_number, to_text


class WidgetAdapter:
    """Adapter for a widget that carries no value, only bound properties."""

    def __init__(self, widget: QWidget) -> None:
        self.widget = widget
        self._callbacks: list[Callable[[Any], None]] = []

    # ------------------------------------------------------------------
    def get_value(self) -> Any:
        return None

    def set_value(self, value: Any) -> None:
        blocked = self.widget.blockSignals(True)
        try:
            self._write(value)
        finally:
            self.widget.blockSignals(blocked)

    def on_change(self, callback: Callable[[Any], None]) -> None:
        self._callbacks.append(callback)

    def set_property(self, name: str, flag: bool) -> None:
        if name == "visible":
            self.widget.setVisible(flag)
        elif name == "enabled":
            self.widget.setEnabled(flag)

    # ------------------------------------------------------------------
    def _write(self, value: Any) -> None:
        pass

    def _emit(self, value: Any) -> None:
        for callback in list(self._callbacks):
            callback(value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({type(self.widget).__name__})"


class ToggleAdapter(WidgetAdapter):
    """QCheckBox / QRadioButton."""

    def __init__(self, widget: QAbstractButton) -> None:
        super().__init__(widget)
        widget.toggled.connect(lambda checked: self._emit(1 if checked else 0))

    def get_value(self) -> int:
        return 1 if self.widget.isChecked() else 0

    def _write(self, value: Any) -> None:
        num = to_number(value)
        self.widget.setChecked(bool(num))


class ComboBoxAdapter(WidgetAdapter):
    def __init__(self, widget: QComboBox) -> None:
        super().__init__(widget)
        widget.currentIndexChanged.connect(lambda index: self._emit(self._value_at(index)))

    def get_value(self) -> Any:
        return self._value_at(self.widget.currentIndex())

    def _value_at(self, index: int) -> Any:
        if index < 0:
            return ""
        data = self.widget.itemData(index)
        return data if data is not None else self.widget.itemText(index)

    def _write(self, value: Any) -> None:
        wanted = to_text(value)
        index  = find_choice(self.widget, wanted)
        if index >= 0:
            self.widget.setCurrentIndex(index)


class LineEditAdapter(WidgetAdapter):
    def __init__(self, widget: QLineEdit) -> None:
        super().__init__(widget)
        widget.textChanged.connect(self._emit)

    def get_value(self) -> str:
        return self.widget.text()

    def _write(self, value: Any) -> None:
        self.widget.setText(to_text(value))


class SpinBoxAdapter(WidgetAdapter):
    def __init__(self, widget: QSpinBox) -> None:
        super().__init__(widget)
        widget.valueChanged.connect(self._emit)

    def get_value(self) -> int:
        return self.widget.value()

    def _write(self, value: Any) -> None:
        num = to_number(value)
        self.widget.setValue(int(num) if num is not None else self.widget.minimum())


class DoubleSpinBoxAdapter(WidgetAdapter):
    def __init__(self, widget: QDoubleSpinBox) -> None:
        super().__init__(widget)
        widget.valueChanged.connect(self._emit)

    def get_value(self) -> float:
        return self.widget.value()

    def _write(self, value: Any) -> None:
        num = to_number(value)
        self.widget.setValue(num if num is not None else self.widget.minimum())


class SliderAdapter(WidgetAdapter):
    def __init__(self, widget: QAbstractSlider) -> None:
        super().__init__(widget)
        widget.valueChanged.connect(self._emit)

    def get_value(self) -> int:
        return self.widget.value()

    def _write(self, value: Any) -> None:
        num = to_number(value)
        if num is not None:
            self.widget.setValue(int(num))


class LabelAdapter(WidgetAdapter):
    """Read-only text; never reports changes."""

    def get_value(self) -> str:
        return self.widget.text()

    def _write(self, value: Any) -> None:
        self.widget.setText(to_text(value))


class ProgressBarAdapter(WidgetAdapter):
    def get_value(self) -> int:
        return self.widget.value()

    def _write(self, value: Any) -> None:
        num = to_number(value)
        if num is not None:
            self.widget.setValue(int(num))


# Checked in order; the first matching class wins.
_ADAPTERS: list[tuple[type, type]] = [
    (QCheckBox,       ToggleAdapter),
    (QRadioButton,    ToggleAdapter),
    (QComboBox,       ComboBoxAdapter),
    (QLineEdit,       LineEditAdapter),
    (QSpinBox,        SpinBoxAdapter),
    (QDoubleSpinBox,  DoubleSpinBoxAdapter),
    (QAbstractSlider, SliderAdapter),
    (QLabel,          LabelAdapter),
    (QProgressBar,    ProgressBarAdapter),
]


def adapt(widget: QWidget) -> WidgetAdapter:
    """Return the adapter matching ``widget``'s class."""
    for widget_cls, adapter_cls in _ADAPTERS:
        if isinstance(widget, widget_cls):
            return adapter_cls(widget)
    return WidgetAdapter(widget)


def find_choice(combo: QComboBox, wanted: str) -> int:
    """Index of the entry whose data or text equals ``wanted``, else -1."""
    for i in range(combo.count()):
        data = combo.itemData(i)
        if (data is not None and to_text(data) == wanted) or combo.itemText(i) == wanted:
            return i
    return -1


# ---------------------------------------------------------------------------
# Placeholders for repeated templates
# ---------------------------------------------------------------------------

class LayoutPlaceholder(WidgetAdapter):
    """Container widget standing where a repeated element was declared."""

    def __init__(self, widget: QWidget, direction: QBoxLayout.Direction) -> None:
        super().__init__(widget)
        self._layout = QBoxLayout(direction, widget)
        self._layout.setContentsMargins(0, 0, 0, 0)
        self._generated: list[QWidget] = []

    def discard_generated(self) -> None:
        for child in self._generated:
            self._layout.removeWidget(child)
            child.hide()
            child.deleteLater()
        self._generated = []

    def add_generated(self, element: QWidget) -> None:
        self._layout.addWidget(element)
        self._generated.append(element)

    def finish_generated(self) -> None:
        pass


class ChoicePlaceholder:
    """Repeated <Choice> entries appended to a combo box.

    The selection is restored by value after every re-render, with the
    combo's signals blocked, so regenerating the list is not a user edit.
    When the selected entry is gone, the combo's new current entry is
    reported through currentIndexChanged so the store follows the view.
    """

    def __init__(self, combo: QComboBox) -> None:
        self.combo  = combo
        self._start = combo.count()
        self._count = 0
        self._selected: str | None = None

    def discard_generated(self) -> None:
        self._selected = self._current_value()
        blocked = self.combo.blockSignals(True)
        try:
            for _ in range(self._count):
                self.combo.removeItem(self._start)
        finally:
            self.combo.blockSignals(blocked)
        self._count = 0

    def add_generated(self, element: tuple[str, str]) -> None:
        text, val = element
        blocked = self.combo.blockSignals(True)
        try:
            self.combo.insertItem(self._start + self._count, text, val if val else None)
            self._count += 1
            if self._selected is not None and self._selected in (val, text):
                self.combo.setCurrentIndex(self._start + self._count - 1)
        finally:
            self.combo.blockSignals(blocked)

    def finish_generated(self) -> None:
        selected, self._selected = self._selected, None
        if selected is None or self._current_value() == selected:
            return
        self.combo.currentIndexChanged.emit(self.combo.currentIndex())

    def _current_value(self) -> str | None:
        current = self.combo.currentIndex()
        if current < 0:
            return None
        data = self.combo.itemData(current)
        return to_text(data if data is not None else self.combo.itemText(current))
