"""Expression evaluator for binding conditions.

Expression evaluation
---------------------
evaluate() accepts three forms, checked in this order:

  - Parenthesised:   ($a==1 or $b==1) and $c!=0
        innermost groups are evaluated first and replaced by 1 / 0
  - Compound:        $a==1 and $b==2 or $c>3
        left to right, no and-before-or precedence
  - Single:          $mode==on,  $low<=$high

Value comparison
----------------
Both sides are tried as numbers first (bool, int, float, numeric text).
If both convert, == / != are fuzzy and two values within FUZZY_NULL of
zero are always equal; otherwise all six operators compare the text
forms lexicographically.  Text such as "nan", "inf" or "1_000" is not
a number.

Nothing here raises for bad input: parse failures, unresolved variables
and mismatched parentheses are reported through ``log`` and yield False.
"""
from __future__ import annotations

import re
from typing import Any, Callable, Mapping

from reactform.core.condition import (
    Condition, CompoundCondition,
    parse, parse_compound, is_compound, number_from_text,
)
from reactform.core.prefix import VARIABLE_REGPREFIX, GROUP_OPEN, GROUP_CLOSE
from reactform.core.constants import FUZZY_PRECISION, FUZZY_NULL, TRUE_TOKEN, FALSE_TOKEN

LogFn = Callable[[str, str], None]

# $name, $name_2, $formData.0.name
_VAR_RE = re.compile(VARIABLE_REGPREFIX + r"([A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z0-9_]+)*)")

_MISSING = object()


# ---------------------------------------------------------------------------
# Value conversion
# ---------------------------------------------------------------------------

def to_number(value: Any) -> float | None:
    """Return ``value`` as a float, or None if it has no numeric reading."""
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return number_from_text(value)
    return None


def to_text(value: Any) -> str:
    """Display form used for string comparison and template output."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def fuzzy_equal(left: float, right: float) -> bool:
    return abs(left - right) * FUZZY_PRECISION <= min(abs(left), abs(right))


def fuzzy_null(value: float) -> bool:
    return abs(value) <= FUZZY_NULL


def compare_values(left: Any, op: str, right: Any) -> bool:
    """Compare two values with one of ==, !=, >, <, >=, <=."""
    lnum = to_number(left)
    rnum = to_number(right)

    if lnum is not None and rnum is not None:
        if op == "==":
            if fuzzy_null(lnum) and fuzzy_null(rnum):
                return True
            return fuzzy_equal(lnum, rnum)
        if op == "!=":
            if fuzzy_null(lnum) and fuzzy_null(rnum):
                return False
            return not fuzzy_equal(lnum, rnum)
        if op == ">":  return lnum > rnum
        if op == "<":  return lnum < rnum
        if op == ">=": return lnum >= rnum
        if op == "<=": return lnum <= rnum

    lstr = to_text(left)
    rstr = to_text(right)
    if op == "==": return lstr == rstr
    if op == "!=": return lstr != rstr
    if op == ">":  return lstr > rstr
    if op == "<":  return lstr < rstr
    if op == ">=": return lstr >= rstr
    if op == "<=": return lstr <= rstr
    return False


# ---------------------------------------------------------------------------
# Evaluation (public)
# ---------------------------------------------------------------------------

def evaluate_condition(
    condition: Condition,
    snapshot:  Mapping[str, Any],
    log:       LogFn | None = None,
) -> bool:
    _log = log or (lambda lvl, msg: None)
    if not condition.is_valid:
        _log("WARNING", "Invalid condition")
        return False
    if condition.constant is not None:
        return condition.constant

    left = snapshot.get(condition.variable, _MISSING)
    if left is _MISSING:
        _log("WARNING", f"Variable not found: {condition.variable!r}")
        return False

    if condition.is_right_variable:
        right = snapshot.get(condition.compare_variable, _MISSING)
        if right is _MISSING:
            _log("WARNING", f"Variable not found: {condition.compare_variable!r}")
            return False
    else:
        right = condition.compare_value

    return compare_values(left, condition.op, right)


def evaluate_compound(
    compound: CompoundCondition,
    snapshot: Mapping[str, Any],
    log:      LogFn | None = None,
) -> bool:
    if not compound.is_valid or not compound.conditions:
        return False

    conditions = compound.conditions
    result = evaluate_condition(conditions[0], snapshot, log)
    if len(conditions) == 1:
        return result

    for i, op in enumerate(compound.logic_ops):
        if i + 1 >= len(conditions):
            break
        following = evaluate_condition(conditions[i + 1], snapshot, log)
        if op == "and":
            result = result and following
        elif op == "or":
            result = result or following
    return result


def evaluate(
    expr:     str,
    snapshot: Mapping[str, Any],
    log:      LogFn | None = None,
) -> bool:
    """Evaluate an expression string against a variable snapshot."""
    clean = expr.strip()
    if GROUP_OPEN in clean or GROUP_CLOSE in clean:
        return _evaluate_groups(clean, snapshot, log)
    if is_compound(clean):
        return evaluate_compound(parse_compound(clean), snapshot, log)
    return evaluate_condition(parse(clean), snapshot, log)


def extract_variables(expr: str) -> list[str]:
    """Every ``$name`` in ``expr``, de-duplicated, first occurrence first."""
    names: list[str] = []
    for m in _VAR_RE.finditer(expr):
        if m.group(1) not in names:
            names.append(m.group(1))
    return names


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _evaluate_groups(
    expr:     str,
    snapshot: Mapping[str, Any],
    log:      LogFn | None,
) -> bool:
    """Resolve innermost parentheses first, then evaluate what is left."""
    _log = log or (lambda lvl, msg: None)
    result = expr
    while GROUP_OPEN in result:
        close = result.find(GROUP_CLOSE)
        if close < 0:
            _log("WARNING", f"Mismatched parentheses in expression: {expr!r}")
            return False
        open_ = result.rfind(GROUP_OPEN, 0, close)
        if open_ < 0:
            _log("WARNING", f"Mismatched parentheses in expression: {expr!r}")
            return False

        inner = evaluate(result[open_ + 1:close], snapshot, log)
        token = TRUE_TOKEN if inner else FALSE_TOKEN
        result = result[:open_] + token + result[close + 1:]

    if GROUP_CLOSE in result:
        _log("WARNING", f"Mismatched parentheses in expression: {expr!r}")
        return False
    return evaluate(result, snapshot, log)
