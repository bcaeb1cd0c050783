"""Condition parsing for binding expressions.

Grammar
-------
A *condition* compares a variable against a literal or another variable::

    $mode==on          $count>5          $low<=$high

A *compound condition* chains conditions with ``and`` / ``or``::

    $a==1 and $b==2 or $c!=0

Connectives are applied strictly left to right; there is no precedence
between ``and`` and ``or``.  Grouping is done with parentheses, which are
resolved textually by expression.evaluate() before parsing reaches here.

The bare tokens ``1`` and ``0`` parse as constant conditions so that the
residue of a resolved group (``1 and 0``) still evaluates.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any

from reactform.core.prefix import VARIABLE_PREFIX, GROUP_OPEN
from reactform.core.constants import OPERATORS, TRUE_TOKEN, FALSE_TOKEN

# Whitespace-delimited connective word, case-insensitive.
LOGIC_RE = re.compile(r"\s+(and|or)\s+", re.IGNORECASE)


@dataclass(frozen=True)
class Condition:
    """One comparison.

    variable        : left-hand variable name, marker stripped
    op              : one of constants.OPERATORS
    compare_value   : right-hand literal (float or str) when not a variable
    compare_variable: right-hand variable name, marker stripped
    constant        : True/False for the literal ``1`` / ``0`` forms
    """
    variable:          str  = ""
    op:                str  = ""
    compare_value:     Any  = None
    compare_variable:  str  = ""
    is_right_variable: bool = False
    is_valid:          bool = False
    constant:          bool | None = None

    @property
    def variables(self) -> tuple[str, ...]:
        """Variable names this condition reads, left side first."""
        if not self.is_valid or self.constant is not None:
            return ()
        if self.is_right_variable and self.compare_variable:
            return (self.variable, self.compare_variable)
        return (self.variable,)


@dataclass(frozen=True)
class CompoundCondition:
    """Conditions joined by connectives, evaluated left to right."""
    conditions:  tuple[Condition, ...] = field(default_factory=tuple)
    logic_ops:   tuple[str, ...]       = field(default_factory=tuple)
    is_compound: bool = False
    is_valid:    bool = False


# ---------------------------------------------------------------------------
# Public interface
# ---------------------------------------------------------------------------

def parse(expr: str) -> Condition:
    """Parse a single condition such as ``$count>=5``.

    Operators are tried in the fixed order of constants.OPERATORS and the
    first one found past position 0 wins, so ``>=`` is never split into
    ``>`` and ``=``.  No operator gives an invalid condition.
    """
    if not expr:
        return Condition()

    clean = expr.strip()
    if clean == TRUE_TOKEN:
        return Condition(is_valid=True, constant=True)
    if clean == FALSE_TOKEN:
        return Condition(is_valid=True, constant=False)

    if clean.startswith(VARIABLE_PREFIX):
        clean = clean[len(VARIABLE_PREFIX):]

    for op in OPERATORS:
        pos = clean.find(op)
        if pos <= 0:
            continue
        variable = clean[:pos].strip()
        right    = clean[pos + len(op):].strip()

        if right.startswith(VARIABLE_PREFIX):
            return Condition(
                variable          = variable,
                op                = op,
                compare_variable  = right[len(VARIABLE_PREFIX):],
                is_right_variable = True,
                is_valid          = True,
            )
        return Condition(
            variable      = variable,
            op            = op,
            compare_value = _literal(right),
            is_valid      = True,
        )

    return Condition()


def parse_compound(expr: str) -> CompoundCondition:
    """Split ``expr`` on ``and`` / ``or`` and parse every segment.

    Segments that fail to parse are dropped without notice; the remaining
    conditions keep their original connective slots.
    """
    clean = expr.strip()
    ops   = tuple(m.group(1).lower() for m in LOGIC_RE.finditer(clean))
    parts = LOGIC_RE.split(clean)[::2]   # split() interleaves the captures

    conditions = tuple(
        cond for cond in (parse(part.strip()) for part in parts)
        if cond.is_valid
    )
    return CompoundCondition(
        conditions  = conditions,
        logic_ops   = ops,
        is_compound = len(conditions) > 1,
        is_valid    = bool(conditions),
    )


def is_compound(expr: str) -> bool:
    """True if ``expr`` contains a whitespace-delimited ``and`` / ``or``."""
    return LOGIC_RE.search(expr.strip()) is not None


def is_expression(text: str) -> bool:
    """True if an attribute value should be bound rather than taken literally."""
    clean = text.strip()
    return clean.startswith(VARIABLE_PREFIX) or clean.startswith(GROUP_OPEN)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def number_from_text(text: str) -> float | None:
    """Finite decimal number in ``text``; nan, inf and digit separators are not numbers."""
    if "_" in text:
        return None
    try:
        num = float(text)
    except ValueError:
        return None
    return num if math.isfinite(num) else None


def _literal(text: str) -> Any:
    num = number_from_text(text)
    return text if num is None else num
