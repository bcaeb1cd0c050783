"""JSON import/export of variable state.

Dotted variable names become nested objects and back again::

    mesh.maxSize = 1.0, mesh.refine = 1, modes = [...]
      ⇄  {"mesh": {"maxSize": 1.0, "refine": 1}, "modes": [...]}

Lists are collections and stay arrays.  Everything goes through the
store's public surface (get_snapshot / set_value), so loading state
re-renders templates and updates views exactly like user edits do.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Mapping

from reactform.core.variable_store import VariableStore

LogFn = Callable[[str, str], None]


def to_json_object(
    store: VariableStore,
    extra: Mapping[str, Any] | None = None,
    log:   LogFn | None = None,
) -> dict[str, Any]:
    """Nest the store snapshot (plus ``extra``) by dotted name."""
    _log = log or (lambda lvl, msg: None)
    tree: dict[str, Any] = {}
    for name, value in sorted(store.get_snapshot().items()):
        _insert(tree, name, value, _log)
    for name, value in (extra or {}).items():
        _insert(tree, name, value, _log)
    return tree


def from_json_object(
    store: VariableStore,
    data:  Mapping[str, Any],
    log:   LogFn | None = None,
) -> None:
    """Write a nested object back into the store, collections first."""
    flat: dict[str, Any] = {}
    _flatten(data, "", flat)

    lists   = {k: v for k, v in flat.items() if isinstance(v, list)}
    scalars = {k: v for k, v in flat.items() if not isinstance(v, list)}
    for name, value in lists.items():
        store.set_collection(name, value)
    for name, value in scalars.items():
        store.set_value(name, value)

    if log:
        log("INFO", f"Loaded {len(lists)} collection(s), {len(scalars)} value(s)")


def save_json(
    store: VariableStore,
    path:  Path | str,
    extra: Mapping[str, Any] | None = None,
    log:   LogFn | None = None,
) -> bool:
    _log = log or (lambda lvl, msg: None)
    try:
        text = json.dumps(to_json_object(store, extra, _log), ensure_ascii=False, indent=2)
        Path(path).write_text(text, encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        _log("ERROR", f"Cannot save state to {str(path)!r}: {exc}")
        return False
    _log("INFO", f"State saved to {str(path)!r}")
    return True


def load_json(
    store: VariableStore,
    path:  Path | str,
    log:   LogFn | None = None,
) -> bool:
    _log = log or (lambda lvl, msg: None)
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        _log("ERROR", f"Cannot load state from {str(path)!r}: {exc}")
        return False
    if not isinstance(data, dict):
        _log("ERROR", f"State file {str(path)!r} does not hold a JSON object")
        return False
    from_json_object(store, data, _log)
    return True


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _insert(tree: dict[str, Any], name: str, value: Any, log: LogFn) -> None:
    *parents, leaf = name.split(".")
    node = tree
    for part in parents:
        child = node.setdefault(part, {})
        if not isinstance(child, dict):
            log("WARNING", f"Skipping {name!r}: {part!r} already holds a value")
            return
        node = child
    if isinstance(node.get(leaf), dict) and not isinstance(value, dict):
        log("WARNING", f"Skipping {name!r}: it is also a group of variables")
        return
    node[leaf] = value


def _flatten(data: Mapping[str, Any], prefix: str, out: dict[str, Any]) -> None:
    for key, value in data.items():
        name = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            _flatten(value, name, out)
        else:
            out[name] = value
