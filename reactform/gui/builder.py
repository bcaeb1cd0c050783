"""Markup compiler — builds a PySide6 widget tree from XML and binds it.

Markup
------
    <Form>
      <CheckBox var="refine" text="Refine mesh" default="true"/>
      <DoubleSpinBox var="mesh.maxSize" title="Max size" visible="$refine==1"/>
      <ComboBox var="mode">
        <Choice q-for="item in modes" text="$item.text" val="$item.val"/>
      </ComboBox>
      <GroupBox q-for="(form, idx) in forms" title="$form.name"
                visible="$mode==$idx">
        <LineEdit var="formData.$idx.name" title="Name"/>
      </GroupBox>
    </Form>

Attributes handled here (everything else belongs to the widget creators):
  var       element binding, through the widget's adapter
  visible   expression (starts with $ or '(') or literal true / 1
  enabled   same as visible
  title     labelled row for input widgets; bindings then target the row
  q-for     repeat the element once per collection item

Building walks the tree once, then runs VariableStore.initialize_bindings().
Hot reload rebuilds a fresh store and widget tree from the file, restores
the previous variable values and re-attaches button callbacks and watchers.
"""
from __future__ import annotations

import copy
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Callable

from PySide6.QtCore import QObject, QTimer, QFileSystemWatcher, Signal
from PySide6.QtWidgets import (
    QWidget, QLabel, QPushButton, QComboBox, QLayout,
    QBoxLayout, QVBoxLayout, QHBoxLayout,
)

from reactform.core.bindings import TemplateContext
from reactform.core.condition import is_expression
from reactform.core.constants import RELOAD_DEBOUNCE_MS, REPEAT_ATTRIBUTE
from reactform.core.template import parse_repeat
from reactform.core.variable_store import VariableStore
from reactform.gui.adapters import (
    WidgetAdapter, LayoutPlaceholder, ChoicePlaceholder, adapt,
)
from reactform.gui.styles import ERROR_LABEL
from reactform.gui.widget_registry import (
    WidgetRegistry, CONTAINER_TAGS, LABELED_TAGS, attr, int_attr,
)

LogFn = Callable[[str, str], None]


class MarkupError(Exception):
    """Raised for markup that cannot be parsed into an element tree."""


def parse_markup(text: str) -> ET.Element:
    try:
        return ET.fromstring(text)
    except ET.ParseError as exc:
        line, column = exc.position
        raise MarkupError(f"XML parse error at line {line}, column {column}: {exc}") from exc


class UIBuilder(QObject):
    build_completed = Signal(object)   # root QWidget
    build_error     = Signal(str)
    reloaded        = Signal()

    def __init__(
        self,
        registry: WidgetRegistry | None = None,
        log_fn:   LogFn | None = None,
        parent:   QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._registry  = registry if registry is not None else WidgetRegistry()
        self._log       = log_fn or (lambda lvl, msg: None)
        self._store     = VariableStore(self._log)
        self._root: QWidget | None = None

        self._file_path: Path | None = None
        self._watcher:   QFileSystemWatcher | None = None
        self._reload_timer = QTimer(self)
        self._reload_timer.setSingleShot(True)
        self._reload_timer.setInterval(RELOAD_DEBOUNCE_MS)
        self._reload_timer.timeout.connect(self.reload)

        self._buttons:          dict[str, QPushButton]            = {}
        self._button_callbacks: dict[str, list[Callable[[], None]]] = {}
        self._watch_callbacks:  dict[str, Callable[[Any], None]]    = {}

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def store(self) -> VariableStore:
        """The store of the current build; replaced on every reload."""
        return self._store

    @property
    def root(self) -> QWidget | None:
        return self._root

    @property
    def registry(self) -> WidgetRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def build_from_file(self, path: Path | str, parent: QWidget | None = None) -> QWidget | None:
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            self._fail(f"Cannot open file {str(path)!r}: {exc}")
            return None
        root = self.build_from_string(text, parent)
        if root is not None:
            self._file_path = path
        return root

    def build_from_string(self, text: str, parent: QWidget | None = None) -> QWidget | None:
        try:
            element = parse_markup(text)
        except MarkupError as exc:
            self._fail(str(exc))
            return None
        self._store = VariableStore(self._log)
        root = self._build(element, parent)
        self._attach_watchers()
        return root

    def _build(self, element: ET.Element, parent: QWidget | None) -> QWidget:
        self._log("INFO", f"Building UI from <{element.tag}>")
        self._buttons = {}

        root = QWidget(parent)
        layout = QVBoxLayout(root)
        layout.setContentsMargins(10, 10, 10, 10)
        layout.setSpacing(8)
        self._root = root

        self._process_children(element, root)
        self._store.initialize_bindings()

        self._log("INFO", "UI build completed")
        self.build_completed.emit(root)
        return root

    def _process_children(self, element: ET.Element, container: QWidget) -> None:
        layout = container.layout()
        if layout is None:
            layout = QVBoxLayout(container)
            layout.setContentsMargins(5, 5, 5, 5)
            layout.setSpacing(5)

        for child in element:
            if child.tag == "Choice":
                continue
            if child.tag == "addStretch":
                if isinstance(layout, QBoxLayout):
                    layout.addStretch(int_attr(child, "stretch", 1))
                continue
            if REPEAT_ATTRIBUTE in child.attrib:
                self._repeat(child, layout)
                continue

            widget = self._build_element(child)
            layout.addWidget(self._decorate(child, widget))

    def _build_element(self, element: ET.Element) -> QWidget:
        widget = self._registry.create(element.tag, element, self)
        if widget is None:
            message = f"Unknown tag: <{element.tag}>"
            self._log("WARNING", message)
            self.build_error.emit(message)
            label = QLabel(f"[Error: {message}]")
            label.setStyleSheet(ERROR_LABEL)
            return label

        var = attr(element, "var")
        if var:
            self._store.register_element(var, adapt(widget))
            if isinstance(widget, QPushButton):
                self._buttons[var] = widget
                for callback in self._button_callbacks.get(var, ()):
                    _connect_click(widget, callback)

        if element.tag in CONTAINER_TAGS:
            self._process_children(element, widget)
        return widget

    def _decorate(self, element: ET.Element, widget: QWidget) -> QWidget:
        """Wrap in a labelled row if needed and apply visible / enabled."""
        target = widget
        title = attr(element, "title")
        if title and element.tag in LABELED_TAGS:
            target = _labeled_row(title, widget)

        for prop in ("visible", "enabled"):
            value = attr(element, prop).strip()
            if not value:
                continue
            if is_expression(value):
                self._store.bind_property(WidgetAdapter(target), prop, value)
            else:
                WidgetAdapter(target).set_property(prop, value.lower() in ("true", "1"))
        return target

    # ------------------------------------------------------------------
    # Repeats
    # ------------------------------------------------------------------

    def _repeat(self, element: ET.Element, layout: QLayout) -> None:
        repeat = parse_repeat(element.get(REPEAT_ATTRIBUTE, ""))
        if repeat is None:
            self._log("WARNING", f"Invalid {REPEAT_ATTRIBUTE} on <{element.tag}>: "
                                 f"{element.get(REPEAT_ATTRIBUTE)!r}")
            return

        template = copy.deepcopy(element)
        del template.attrib[REPEAT_ATTRIBUTE]

        direction = (layout.direction() if isinstance(layout, QBoxLayout)
                     else QBoxLayout.Direction.TopToBottom)
        holder = QWidget()
        layout.addWidget(holder)
        placeholder = LayoutPlaceholder(holder, direction)

        self._store.register_collection(
            repeat.collection, repeat.item_var, repeat.index_var,
            placeholder, self._produce, template,
        )

    def _produce(self, context: TemplateContext, index: int, item: Any) -> QWidget:
        element = _instantiate(context.template, context, index, item)
        return self._decorate(element, self._build_element(element))

    def repeat_choices(self, combo: QComboBox, choice: ET.Element) -> None:
        """Bind a repeated <Choice> to ``combo`` (called by the ComboBox creator)."""
        repeat = parse_repeat(choice.get(REPEAT_ATTRIBUTE, ""))
        if repeat is None:
            self._log("WARNING", f"Invalid {REPEAT_ATTRIBUTE} on <Choice>: "
                                 f"{choice.get(REPEAT_ATTRIBUTE)!r}")
            return
        text_template = attr(choice, "text")
        val_template  = attr(choice, "val")

        def produce(context: TemplateContext, index: int, item: Any) -> tuple[str, str]:
            return (context.substitute(text_template, index, item),
                    context.substitute(val_template, index, item))

        self._store.register_collection(
            repeat.collection, repeat.item_var, repeat.index_var,
            ChoicePlaceholder(combo), produce, choice,
        )

    # ------------------------------------------------------------------
    # Store pass-through (survives reloads)
    # ------------------------------------------------------------------

    def get_value(self, name: str, default: Any = None) -> Any:
        return self._store.get_value(name, default)

    def set_value(self, name: str, value: Any) -> None:
        self._store.set_value(name, value)

    def get_all_values(self) -> dict[str, Any]:
        return self._store.get_snapshot()

    def get_list_data(self, name: str) -> list[Any]:
        return self._store.get_collection(name)

    def set_list_data(self, name: str, items: list[Any]) -> None:
        self._store.set_collection(name, items)

    def get_widget(self, name: str) -> QWidget | None:
        adapter = self._store.get_element(name)
        return adapter.widget if adapter is not None else None

    def watch(self, name: str, callback: Callable[[Any], None]) -> None:
        self._watch_callbacks[name] = callback
        self._store.watch(name, callback)

    def unwatch(self, name: str) -> None:
        self._watch_callbacks.pop(name, None)
        self._store.unwatch(name)

    def connect_button(self, name: str, callback: Callable[[], None]) -> None:
        self._button_callbacks.setdefault(name, []).append(callback)
        button = self._buttons.get(name)
        if button is not None:
            _connect_click(button, callback)
        elif self._root is not None:
            self._log("WARNING", f"Widget is not a button: {name!r}")

    # ------------------------------------------------------------------
    # Hot reload
    # ------------------------------------------------------------------

    def enable_hot_reload(self, path: Path | str, debounce_ms: int | None = None) -> None:
        if self._watcher is not None:
            self.disable_hot_reload()
        self._file_path = Path(path)
        if debounce_ms is not None:
            self._reload_timer.setInterval(debounce_ms)
        self._watcher = QFileSystemWatcher([str(self._file_path)], self)
        self._watcher.fileChanged.connect(self._on_file_changed)
        self._log("INFO", f"Hot reload enabled for {str(self._file_path)!r}")

    def disable_hot_reload(self) -> None:
        self._reload_timer.stop()
        if self._watcher is None:
            return
        self._watcher.fileChanged.disconnect(self._on_file_changed)
        self._watcher.deleteLater()
        self._watcher = None
        self._log("INFO", "Hot reload disabled")

    def is_hot_reload_enabled(self) -> bool:
        return self._watcher is not None

    def _on_file_changed(self, path: str) -> None:
        self._reload_timer.start()
        # Editors that replace the file make the watcher drop it.
        if self._watcher is not None and path not in self._watcher.files():
            self._watcher.addPath(str(self._file_path))

    def reload(self) -> bool:
        """Rebuild from the current file, keeping variable values."""
        if self._file_path is None:
            self._log("WARNING", "No file to reload")
            return False
        try:
            text = self._file_path.read_text(encoding="utf-8")
        except OSError as exc:
            self._log("WARNING", f"Hot reload: cannot read file: {exc}")
            return False
        try:
            element = parse_markup(text)
        except MarkupError as exc:
            self._log("WARNING", f"Hot reload: {exc}; keeping the current UI")
            self.build_error.emit(str(exc))
            return False

        self._log("INFO", f"Hot reloading {str(self._file_path)!r}")
        state    = self._store.get_snapshot()
        old_root = self._root
        parent   = old_root.parentWidget() if old_root is not None else None
        parent_layout = parent.layout() if parent is not None else None
        position = parent_layout.indexOf(old_root) if parent_layout is not None else -1

        self._store = VariableStore(self._log)
        new_root = self._build(element, parent)

        if parent_layout is not None and position >= 0:
            parent_layout.removeWidget(old_root)
            if isinstance(parent_layout, QBoxLayout):
                parent_layout.insertWidget(position, new_root)
            else:
                parent_layout.addWidget(new_root)
        if old_root is not None:
            old_root.hide()
            old_root.deleteLater()

        # Collections first so per-item variables have their views again.
        for name, value in state.items():
            if isinstance(value, list):
                self._store.set_collection(name, value)
        for name, value in state.items():
            if not isinstance(value, list):
                self._store.set_value(name, value)

        self._attach_watchers()

        self._log("INFO", "Hot reload completed")
        self.reloaded.emit()
        return True

    # ------------------------------------------------------------------

    def _attach_watchers(self) -> None:
        for name, callback in self._watch_callbacks.items():
            self._store.watch(name, callback)

    def _fail(self, message: str) -> None:
        self._log("ERROR", message)
        self.build_error.emit(message)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _instantiate(template: ET.Element, context: TemplateContext, index: int, item: Any) -> ET.Element:
    """Copy ``template`` with every attribute and text substituted for one item."""
    element = copy.deepcopy(template)
    for node in element.iter():
        for key, value in node.attrib.items():
            node.set(key, context.substitute(value, index, item))
        if node.text:
            node.text = context.substitute(node.text, index, item)
    return element


def _connect_click(button: QPushButton, callback: Callable[[], None]) -> None:
    button.clicked.connect(lambda _checked=False: callback())


def _labeled_row(title: str, widget: QWidget) -> QWidget:
    row = QWidget()
    layout = QHBoxLayout(row)
    layout.setContentsMargins(0, 0, 0, 0)
    layout.setSpacing(10)

    label = QLabel(title)
    label.setMinimumWidth(120)
    layout.addWidget(label)
    layout.addWidget(widget, 1)
    return row
