"""Binding records and the adapter contracts the store relies on.

The store never looks at concrete widget types.  Everything it needs from
a view is the small ElementAdapter surface below; everything it needs from
a repeat placeholder is the Placeholder surface.  reactform.gui.adapters
implements both for PySide6 widgets and the tests implement them with
plain fakes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol

from reactform.core.condition import Condition
from reactform.core.template import substitute


class ElementAdapter(Protocol):
    """A view that can show and edit one variable value."""

    def get_value(self) -> Any: ...

    def set_value(self, value: Any) -> None:
        """Show ``value`` without firing the callback given to on_change()."""

    def on_change(self, callback: Callable[[Any], None]) -> None:
        """Call ``callback(new_value)`` whenever the user edits the view."""

    def set_property(self, name: str, flag: bool) -> None:
        """Apply a bound boolean property ('visible' or 'enabled')."""


class Placeholder(Protocol):
    """Container that receives the elements generated for a collection."""

    def discard_generated(self) -> None: ...

    def add_generated(self, element: Any) -> None: ...

    def finish_generated(self) -> None:
        """Called once all elements of a render have been added."""


@dataclass
class PropertyBinding:
    """A boolean property of ``target`` driven by ``expression``.

    sources: every variable the expression reads; the binding is listed
             under each of them in the store's dependency map.
    """
    target:     ElementAdapter
    property:   str
    expression: str
    condition:  Condition         = field(default_factory=Condition)
    sources:    tuple[str, ...]   = ()


@dataclass
class TemplateContext:
    """What a producer needs to render one repeated element."""
    collection: str
    item_var:   str
    index_var:  str = ""
    template:   Any = ""
    log:        Optional[Callable[[str, str], None]] = field(default=None, repr=False, compare=False)

    def substitute(self, text: str, index: int, item: Any) -> str:
        return substitute(text, index, item, self.item_var, self.index_var, self.log)


Producer = Callable[[TemplateContext, int, Any], Optional[Any]]


@dataclass
class CollectionBinding:
    """A template expanded once per item of ``context.collection``.

    generated: elements handed to the placeholder by the last render
    owned    : adapters the store registered while they were produced
    """
    context:     TemplateContext
    placeholder: Placeholder
    producer:    Producer
    generated:   list[Any] = field(default_factory=list)
    owned:       list[Any] = field(default_factory=list)
