"""Widget registry — maps markup tag names to widget creators.

A registry is an ordinary object: the application builds one (usually via
``WidgetRegistry()`` which pre-loads the stock tags) and hands it to the
UIBuilder.  Custom tags are added with ``registry.register(tag, creator)``.

A creator receives the XML element and the builder and returns the widget
(or None to skip the element).  Binding attributes (var, visible, enabled,
title, q-for) are handled by the builder, not by creators.
"""
from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING, Callable, Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QWidget, QLabel, QLineEdit, QCheckBox, QRadioButton, QComboBox,
    QSpinBox, QDoubleSpinBox, QPushButton, QGroupBox, QFrame, QSlider,
    QProgressBar, QVBoxLayout, QHBoxLayout,
)

from reactform.core.constants import REPEAT_ATTRIBUTE

if TYPE_CHECKING:
    from reactform.gui.builder import UIBuilder

Creator = Callable[[ET.Element, "UIBuilder"], Optional[QWidget]]

# Tags whose children are compiled into the created widget.
CONTAINER_TAGS = frozenset({
    "GroupBox", "Frame", "Widget", "HLayoutWidget", "VLayoutWidget",
})

# Input tags that get a "title" label on their left.
LABELED_TAGS = frozenset({
    "LineEdit", "ComboBox", "SpinBox", "DoubleSpinBox", "Slider",
})

_INT_MAX = 2**31 - 1


class WidgetRegistry:
    def __init__(self, builtins: bool = True) -> None:
        self._creators: dict[str, Creator] = {}
        if builtins:
            register_builtin_widgets(self)

    def register(self, tag: str, creator: Creator) -> None:
        self._creators[tag] = creator

    def has(self, tag: str) -> bool:
        return tag in self._creators

    def tags(self) -> list[str]:
        return sorted(self._creators)

    def create(self, tag: str, element: ET.Element, builder: "UIBuilder") -> QWidget | None:
        creator = self._creators.get(tag)
        if creator is None:
            return None
        return creator(element, builder)


# ---------------------------------------------------------------------------
# Attribute helpers
# ---------------------------------------------------------------------------

def attr(element: ET.Element, name: str, default: str = "") -> str:
    return element.get(name, default)


def bool_attr(element: ET.Element, name: str, default: bool = False) -> bool:
    value = element.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("true", "1", "yes", "on")


def int_attr(element: ET.Element, name: str, default: int = 0) -> int:
    try:
        return int(element.get(name, default))
    except ValueError:
        return default


def float_attr(element: ET.Element, name: str, default: float = 0.0) -> float:
    try:
        return float(element.get(name, default))
    except ValueError:
        return default


def _caption(element: ET.Element) -> str:
    return attr(element, "text") or attr(element, "title")


# ---------------------------------------------------------------------------
# Stock creators
# ---------------------------------------------------------------------------

def _label(element, builder) -> QWidget:
    label = QLabel(attr(element, "title") or attr(element, "text"))
    align = attr(element, "align", "left")
    if align == "right":
        label.setAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)
    elif align == "center":
        label.setAlignment(Qt.AlignmentFlag.AlignCenter)
    else:
        label.setAlignment(Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter)
    label.setWordWrap(bool_attr(element, "wrap"))
    return label


def _line_edit(element, builder) -> QWidget:
    edit = QLineEdit(attr(element, "default"))
    edit.setPlaceholderText(attr(element, "placeholder"))
    return edit


def _check_box(element, builder) -> QWidget:
    box = QCheckBox(_caption(element))
    box.setChecked(bool_attr(element, "default"))
    return box


def _radio_button(element, builder) -> QWidget:
    button = QRadioButton(_caption(element))
    button.setChecked(bool_attr(element, "default"))
    return button


def _combo_box(element, builder) -> QWidget:
    combo   = QComboBox()
    default = attr(element, "default")
    default_index = 0

    for choice in element.findall("Choice"):
        if REPEAT_ATTRIBUTE in choice.attrib:
            builder.repeat_choices(combo, choice)
            continue
        text, val = attr(choice, "text"), attr(choice, "val")
        if val:
            if val == default:
                default_index = combo.count()
            combo.addItem(text, val)
        else:
            combo.addItem(text)

    if combo.count():
        if default.isdigit() and int(default) < combo.count():
            combo.setCurrentIndex(int(default))
        else:
            combo.setCurrentIndex(default_index)
    return combo


def _spin_box(element, builder) -> QWidget:
    spin = QSpinBox()
    low  = int_attr(element, "min", 0)
    high = attr(element, "max", "100")
    spin.setRange(low, _INT_MAX if high in ("+", "max") else int_attr(element, "max", 100))
    spin.setValue(int_attr(element, "default", low))
    return spin


def _double_spin_box(element, builder) -> QWidget:
    spin = QDoubleSpinBox()
    low  = float_attr(element, "min", 0.0)
    spin.setDecimals(int_attr(element, "decimals", 2))
    spin.setRange(low, float_attr(element, "max", 100.0))
    spin.setValue(float_attr(element, "default", low))
    return spin


def _push_button(element, builder) -> QWidget:
    return QPushButton(_caption(element))


def _group_box(element, builder) -> QWidget:
    box = QGroupBox(attr(element, "title"))
    layout = QVBoxLayout(box)
    layout.setContentsMargins(8, 8, 8, 8)
    layout.setSpacing(5)
    return box


def _vbox_widget(element, builder) -> QWidget:
    widget = QWidget()
    layout = QVBoxLayout(widget)
    layout.setContentsMargins(0, 0, 0, 0)
    layout.setSpacing(5)
    return widget


def _hbox_widget(element, builder) -> QWidget:
    widget = QWidget()
    layout = QHBoxLayout(widget)
    layout.setContentsMargins(0, 0, 0, 0)
    layout.setSpacing(5)
    return widget


def _hline(element, builder) -> QWidget:
    line = QFrame()
    line.setFrameShape(QFrame.Shape.HLine)
    line.setFrameShadow(QFrame.Shadow.Sunken)
    return line


def _slider(element, builder) -> QWidget:
    slider = QSlider(Qt.Orientation.Horizontal)
    slider.setRange(int_attr(element, "min", 0), int_attr(element, "max", 100))
    slider.setValue(int_attr(element, "default", slider.minimum()))
    return slider


def _progress_bar(element, builder) -> QWidget:
    bar = QProgressBar()
    bar.setRange(int_attr(element, "min", 0), int_attr(element, "max", 100))
    bar.setValue(int_attr(element, "default", bar.minimum()))
    return bar


def register_builtin_widgets(registry: WidgetRegistry) -> None:
    registry.register("Label",         _label)
    registry.register("LineEdit",      _line_edit)
    registry.register("CheckBox",      _check_box)
    registry.register("RadioButton",   _radio_button)
    registry.register("ComboBox",      _combo_box)
    registry.register("SpinBox",       _spin_box)
    registry.register("DoubleSpinBox", _double_spin_box)
    registry.register("PushButton",    _push_button)
    registry.register("GroupBox",      _group_box)
    registry.register("Frame",         _vbox_widget)
    registry.register("Widget",        _vbox_widget)
    registry.register("VLayoutWidget", _vbox_widget)
    registry.register("HLayoutWidget", _hbox_widget)
    registry.register("HLine",         _hline)
    registry.register("Separator",     _hline)
    registry.register("Slider",        _slider)
    registry.register("ProgressBar",   _progress_bar)
