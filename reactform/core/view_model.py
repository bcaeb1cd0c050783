"""Typed accessors over a VariableStore.

    vm = ViewModel(store)
    enabled = vm.var("enableRefine", bool)
    size    = vm.var("maxSize", float)
    if enabled.value:
        size.set(0.5)                  # views update at once
    size.watch(lambda v: print(v))     # v is already a float

    modes = vm.list("modes")
    modes.set([{"text": "Mode one", "val": "mode1"}])
    modes.append({"text": "Mode two", "val": "mode2"})

    vm.watch([enabled, size], refresh)  # any of them changed
    vm.watch_all(lambda name, value: ...)

Booleans are stored as 1 / 0, the same values check boxes report.
"""
from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator, Union

from reactform.core.expression import to_number, to_text
from reactform.core.variable_store import VariableStore


def _coerce(value: Any, type_: type) -> Any:
    if type_ is bool:
        num = to_number(value)
        if num is None:
            return to_text(value).lower() == "true"
        return num != 0
    if type_ is int:
        num = to_number(value)
        return int(num) if num is not None else 0
    if type_ is float:
        num = to_number(value)
        return num if num is not None else 0.0
    return to_text(value)


class Var:
    """Read, write and watch one variable as ``type_``."""

    def __init__(self, store: VariableStore, name: str, type_: type = str) -> None:
        self._store = store
        self._name  = name
        self._type  = type_

    @property
    def name(self) -> str:
        return self._name

    @property
    def value(self) -> Any:
        return _coerce(self._store.get_value(self._name), self._type)

    def set(self, value: Any) -> None:
        if self._type is bool:
            value = 1 if value else 0
        self._store.set_value(self._name, value)

    def watch(self, callback: Callable[[Any], None]) -> Callable[[], None]:
        return self._store.watch(
            self._name, lambda raw: callback(_coerce(raw, self._type))
        )

    def __repr__(self) -> str:
        return f"Var({self._name!r}, {self._type.__name__})"


class ListVar:
    """Collection accessor; every mutation re-renders bound templates."""

    def __init__(self, store: VariableStore, name: str) -> None:
        self._store = store
        self._name  = name

    @property
    def name(self) -> str:
        return self._name

    def get(self) -> list[Any]:
        return self._store.get_collection(self._name)

    def set(self, items: Iterable[Any]) -> None:
        self._store.set_collection(self._name, items)

    def append(self, item: Any) -> None:
        self._store.append(self._name, item)

    def clear(self) -> None:
        self._store.clear(self._name)

    def __len__(self) -> int:
        return len(self.get())

    def __iter__(self) -> Iterator[Any]:
        return iter(self.get())


class ViewModel:
    def __init__(self, store: VariableStore) -> None:
        self._store = store

    @property
    def store(self) -> VariableStore:
        return self._store

    def var(self, name: str, type_: type = str) -> Var:
        return Var(self._store, name, type_)

    def list(self, name: str) -> ListVar:
        return ListVar(self._store, name)

    def watch(
        self,
        variables: Iterable[Union[Var, ListVar, str]],
        callback:  Callable[[], None],
    ) -> Callable[[], None]:
        """Call ``callback()`` whenever any of ``variables`` changes."""
        names = {v if isinstance(v, str) else v.name for v in variables}

        def _listener(name: str, _value: Any) -> None:
            if name in names:
                callback()
        return self._store.subscribe(_listener)

    def watch_all(self, callback: Callable[[str, Any], None]) -> Callable[[], None]:
        return self._store.subscribe(callback)
