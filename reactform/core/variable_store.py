"""Variable store and dependency graph for one built UI.

Variables are flat names (``mode``, ``formData.0.name``) mapped to plain
values; collections are variables whose value is a list of items.
All access is single-threaded (the GUI thread) and fully synchronous:
set_value() returns only after every view, watcher, property binding and
collection template depending on the name has been updated.

The store is rebuilt as a unit whenever the markup is rebuilt; there is
no way to delete a single variable.
"""
from __future__ import annotations

import copy
from contextlib import contextmanager
from typing import Any, Callable, Iterable, Iterator

from reactform.core.bindings import (
    CollectionBinding, ElementAdapter, Placeholder, Producer, PropertyBinding,
)
from reactform.core.collection import CollectionBinder
from reactform.core.condition import parse, is_compound
from reactform.core.constants import BINDABLE_PROPERTIES
from reactform.core.expression import evaluate, extract_variables
from reactform.core.prefix import GROUP_OPEN

LogFn      = Callable[[str, str], None]
WatchFn    = Callable[[Any], None]
ListenerFn = Callable[[str, Any], None]


def _same(old: Any, new: Any) -> bool:
    return old is new or (type(old) is type(new) and old == new)


class VariableStore:
    """Maps variable name → value, views, and dependent bindings."""

    def __init__(self, log_fn: LogFn | None = None) -> None:
        self._log          = log_fn or (lambda lvl, msg: None)
        self._vars:         dict[str, Any]                     = {}
        self._elements:     dict[str, list[ElementAdapter]]    = {}
        self._dependencies: dict[str, list[PropertyBinding]]   = {}
        self._bindings:     list[PropertyBinding]              = []
        self._watchers:     dict[str, WatchFn]                 = {}
        self._listeners:    list[ListenerFn]                   = []
        self._captures:     list[list[Any]]                    = []
        self._syncing:      set[str]                           = set()
        self._initialized  = False
        self._collections  = CollectionBinder(self, log_fn)

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    def get_value(self, name: str, default: Any = None) -> Any:
        return self._vars.get(name, default)

    def has_value(self, name: str) -> bool:
        return name in self._vars

    def get_snapshot(self) -> dict[str, Any]:
        return dict(self._vars)

    def set_value(self, name: str, value: Any) -> None:
        """Store ``value`` and propagate it; identical writes do nothing."""
        if name in self._vars and _same(self._vars[name], value):
            return
        self._vars[name] = value

        self._sync_views(name, value)
        for listener in list(self._listeners):
            listener(name, value)
        watcher = self._watchers.get(name)
        if watcher is not None:
            watcher(value)

        self._update_dependents(name)
        self._collections.refresh(name)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def register_element(self, name: str, adapter: ElementAdapter) -> None:
        """Attach a view to ``name`` and keep both sides in sync."""
        views = self._elements.setdefault(name, [])
        views.append(adapter)
        self._own(adapter)

        if name in self._vars:
            self._sync_view(name, adapter, self._vars[name])
        else:
            self._vars[name] = adapter.get_value()

        adapter.on_change(lambda value, _name=name: self._on_view_changed(_name, value))
        self._log("DEBUG", f"Registered variable {name!r} ({len(views)} view(s))")

    def get_element(self, name: str) -> ElementAdapter | None:
        views = self._elements.get(name)
        return views[0] if views else None

    def elements(self, name: str) -> list[ElementAdapter]:
        return list(self._elements.get(name, ()))

    # ------------------------------------------------------------------
    # Property bindings
    # ------------------------------------------------------------------

    def bind_property(
        self,
        target:        ElementAdapter,
        property_name: str,
        expression:    str,
    ) -> PropertyBinding | None:
        """Drive ``property_name`` of ``target`` from ``expression``.

        Compound and parenthesised expressions are listed under every
        variable they mention; a simple condition under its left variable
        and, when the right side is a variable, under that one too.
        """
        if target is None or not expression or not expression.strip():
            return None
        if property_name not in BINDABLE_PROPERTIES:
            self._log("WARNING", f"Cannot bind unknown property {property_name!r}")
            return None

        clean = expression.strip()
        if GROUP_OPEN in clean or is_compound(clean):
            binding = PropertyBinding(
                target, property_name, clean,
                sources=tuple(extract_variables(clean)),
            )
        else:
            condition = parse(clean)
            if not condition.is_valid:
                self._log("WARNING", f"Failed to parse expression: {expression!r}")
                return None
            binding = PropertyBinding(
                target, property_name, clean, condition, condition.variables,
            )

        for name in binding.sources:
            self._dependencies.setdefault(name, []).append(binding)
        self._bindings.append(binding)
        self._own(target)
        self._log("DEBUG", f"Bound {property_name} to {clean!r}")

        if self._initialized:
            self._apply(binding)
        return binding

    def bind_visible(self, target: ElementAdapter, expression: str) -> PropertyBinding | None:
        return self.bind_property(target, "visible", expression)

    def bind_enabled(self, target: ElementAdapter, expression: str) -> PropertyBinding | None:
        return self.bind_property(target, "enabled", expression)

    def dependents(self, name: str) -> list[PropertyBinding]:
        return list(self._dependencies.get(name, ()))

    def initialize_bindings(self) -> None:
        """Evaluate every binding once; later bindings apply as they are added."""
        self._log("DEBUG", f"Initializing {len(self._bindings)} binding(s)")
        for binding in list(self._bindings):
            self._apply(binding)
        self._initialized = True

    # ------------------------------------------------------------------
    # Watchers
    # ------------------------------------------------------------------

    def watch(self, name: str, callback: WatchFn) -> Callable[[], None]:
        """Call ``callback(value)`` when ``name`` changes; replaces any previous watcher."""
        self._watchers[name] = callback

        def _unwatch() -> None:
            if self._watchers.get(name) is callback:
                del self._watchers[name]
        return _unwatch

    def unwatch(self, name: str) -> None:
        self._watchers.pop(name, None)

    def subscribe(self, callback: ListenerFn) -> Callable[[], None]:
        """Call ``callback(name, value)`` for every change of any variable."""
        self._listeners.append(callback)

        def _unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)
        return _unsubscribe

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    def register_collection(
        self,
        collection:  str,
        item_var:    str,
        index_var:   str | None,
        placeholder: Placeholder,
        producer:    Producer,
        template:    Any = "",
    ) -> CollectionBinding:
        self._own(placeholder)
        return self._collections.register(
            collection, item_var, index_var, placeholder, producer, template,
        )

    def get_collection(self, name: str) -> list[Any]:
        value = self._vars.get(name)
        if not isinstance(value, (list, tuple)):
            return []
        return copy.deepcopy(list(value))

    def set_collection(self, name: str, items: Iterable[Any]) -> None:
        self.set_value(name, copy.deepcopy(list(items)))

    def append(self, name: str, item: Any) -> None:
        items = self.get_collection(name)
        items.append(copy.deepcopy(item))
        self.set_value(name, items)

    def clear(self, name: str) -> None:
        self.set_value(name, [])

    # ------------------------------------------------------------------
    # Ownership of generated sub-trees
    # ------------------------------------------------------------------

    @contextmanager
    def capture(self) -> Iterator[list[Any]]:
        """Record every view, bound target and placeholder added inside the block."""
        owned: list[Any] = []
        self._captures.append(owned)
        try:
            yield owned
        finally:
            self._captures.pop()

    def release(self, handles: Iterable[Any]) -> None:
        """Forget views, property bindings and templates attached to ``handles``."""
        handles = list(handles)
        dropped = {id(h) for h in handles}
        if not dropped:
            return

        for name, views in list(self._elements.items()):
            self._elements[name] = [v for v in views if id(v) not in dropped]
        for name, bindings in list(self._dependencies.items()):
            self._dependencies[name] = [b for b in bindings if id(b.target) not in dropped]
        self._bindings = [b for b in self._bindings if id(b.target) not in dropped]
        self._collections.release(handles)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _own(self, handle: Any) -> None:
        for owned in self._captures:
            owned.append(handle)

    def _on_view_changed(self, name: str, value: Any) -> None:
        if name in self._syncing:
            return
        self.set_value(name, value)

    def _sync_views(self, name: str, value: Any) -> None:
        for adapter in list(self._elements.get(name, ())):
            self._sync_view(name, adapter, value)

    def _sync_view(self, name: str, adapter: ElementAdapter, value: Any) -> None:
        self._syncing.add(name)
        try:
            adapter.set_value(value)
        finally:
            self._syncing.discard(name)

    def _update_dependents(self, name: str) -> None:
        for binding in list(self._dependencies.get(name, ())):
            self._apply(binding)

    def _apply(self, binding: PropertyBinding) -> None:
        result = evaluate(binding.expression, self._vars, self._log)
        binding.target.set_property(binding.property, result)
        self._log("DEBUG", f"Applied {binding.property}={result} for {binding.expression!r}")

    def __repr__(self) -> str:
        return f"VariableStore({self._vars!r})"
