"""Template substitution for repeated elements.

Repeat syntax
-------------
    item in modes              → item_var="item", collection="modes"
    (item, idx) in modes       → also index_var="idx"

Template variables
------------------
    $item.text      → text form of item["text"]
    $item.a.0.b     → nested lookup (dict keys, list indices)
    $item           → text form of the whole item
    $idx            → the 0-based index

Substitution is a single regex pass: text that was substituted in is never
scanned again, so an item value containing ``$item.x`` stays literal.
A missing field becomes the empty string.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable

from reactform.core.prefix import VARIABLE_REGPREFIX
from reactform.core.expression import to_text

LogFn = Callable[[str, str], None]

_WITH_INDEX_RE = re.compile(r"\(\s*(\w+)\s*,\s*(\w+)\s*\)\s+in\s+(\w+)")
_SIMPLE_RE     = re.compile(r"(\w+)\s+in\s+(\w+)")

_MISSING = object()


@dataclass(frozen=True)
class RepeatSpec:
    item_var:   str
    index_var:  str
    collection: str


def parse_repeat(expr: str) -> RepeatSpec | None:
    """Parse a repeat directive; None if it matches neither form."""
    m = _WITH_INDEX_RE.search(expr)
    if m:
        return RepeatSpec(m.group(1), m.group(2), m.group(3))
    m = _SIMPLE_RE.search(expr)
    if m:
        return RepeatSpec(m.group(1), "", m.group(2))
    return None


def substitute(
    text:      str,
    index:     int,
    item:      Any,
    item_var:  str,
    index_var: str = "",
    log:       LogFn | None = None,
) -> str:
    """Replace item and index placeholders in ``text`` for one item."""
    _log = log or (lambda lvl, msg: None)
    if not text:
        return text

    alternatives = [
        VARIABLE_REGPREFIX + "(?P<item>" + re.escape(item_var) + ")"
        r"(?P<path>(?:\.[A-Za-z0-9_]+)*)(?![A-Za-z0-9_])"
    ]
    if index_var:
        alternatives.insert(
            0,
            VARIABLE_REGPREFIX + "(?P<index>" + re.escape(index_var) + ")(?![A-Za-z0-9_])",
        )
    pattern = re.compile("|".join(alternatives))

    def sub(m: re.Match) -> str:
        if index_var and m.group("index") is not None:
            return str(index)
        path  = m.group("path")
        value = resolve_path(item, path[1:].split(".")) if path else item
        if value is _MISSING:
            _log("DEBUG", f"Template field not found: {m.group(0)!r}")
            return ""
        return to_text(value)

    return pattern.sub(sub, text)


def resolve_path(item: Any, parts: list[str]) -> Any:
    """Walk ``parts`` down an item tree; returns a private sentinel if absent."""
    obj = item
    for part in parts:
        if isinstance(obj, dict):
            obj = obj.get(part, _MISSING)
        elif isinstance(obj, (list, tuple)) and part.isdigit() and int(part) < len(obj):
            obj = obj[int(part)]
        else:
            return _MISSING
        if obj is _MISSING:
            return _MISSING
    return obj
