"""List/template binder — expands a template once per collection item.

A collection is an ordinary store entry holding a list.  Every binding on
it is re-rendered wholesale whenever the list is replaced, appended to or
cleared: the placeholder drops the previous elements, the store forgets
the views and property bindings those elements registered, and the
producer runs again for each item in order.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Iterable

from reactform.core.bindings import (
    CollectionBinding, Placeholder, Producer, TemplateContext,
)

if TYPE_CHECKING:
    from reactform.core.variable_store import VariableStore

LogFn = Callable[[str, str], None]


class CollectionBinder:
    """Keeps every registered template in sync with its collection."""

    def __init__(self, store: "VariableStore", log_fn: LogFn | None = None) -> None:
        self._store    = store
        self._log      = log_fn or (lambda lvl, msg: None)
        self._bindings: dict[str, list[CollectionBinding]] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def register(
        self,
        collection:  str,
        item_var:    str,
        index_var:   str | None,
        placeholder: Placeholder,
        producer:    Producer,
        template:    Any = "",
    ) -> CollectionBinding:
        """Bind ``producer`` to ``collection`` and render the current items."""
        context = TemplateContext(collection, item_var, index_var or "", template, self._log)
        binding = CollectionBinding(context, placeholder, producer)
        self._bindings.setdefault(collection, []).append(binding)
        self._log("DEBUG", f"Bound template to collection {collection!r}")
        self._render(binding)
        return binding

    def refresh(self, collection: str) -> None:
        """Re-render every binding whose source is ``collection``."""
        for binding in list(self._bindings.get(collection, ())):
            self._render(binding)

    def is_bound(self, collection: str) -> bool:
        return bool(self._bindings.get(collection))

    def bindings(self, collection: str) -> list[CollectionBinding]:
        return list(self._bindings.get(collection, ()))

    def release(self, placeholders: Iterable[Any]) -> None:
        """Forget bindings whose placeholder belongs to a discarded sub-tree."""
        dropped = {id(p) for p in placeholders}
        if not dropped:
            return
        for name, bindings in list(self._bindings.items()):
            kept = [b for b in bindings if id(b.placeholder) not in dropped]
            if kept:
                self._bindings[name] = kept
            else:
                del self._bindings[name]

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render(self, binding: CollectionBinding) -> None:
        name  = binding.context.collection
        items = self._items(name)

        binding.placeholder.discard_generated()
        self._store.release(binding.owned)
        binding.generated = []
        binding.owned     = []

        for index, item in enumerate(items):
            with self._store.capture() as owned:
                element = binding.producer(binding.context, index, item)
            binding.owned.extend(owned)
            if element is not None:
                binding.placeholder.add_generated(element)
                binding.generated.append(element)

        binding.placeholder.finish_generated()

        self._log("DEBUG", f"Rendered {len(binding.generated)} item(s) for {name!r}")

    def _items(self, name: str) -> list[Any]:
        value = self._store.get_value(name)
        if value is None:
            return []
        if not isinstance(value, (list, tuple)):
            self._log("WARNING", f"Collection {name!r} is not a list: {value!r}")
            return []
        return list(value)
