"""Centralised tunables and magic numbers.

All constants that control runtime behaviour are collected here
so they are easy to find, document, and adjust.
"""

# ---------------------------------------------------------------------------
# Expression  (reactform/core/expression.py)
# ---------------------------------------------------------------------------
FUZZY_PRECISION = 1e12   # |a-b| * this <= min(|a|, |b|)  →  a == b
FUZZY_NULL      = 1e-12  # |a| <= this  →  a is zero
OPERATORS = ("==", "!=", ">=", "<=", ">", "<")   # scan order, longest first
TRUE_TOKEN  = "1"        # substituted for a parenthesised group that holds
FALSE_TOKEN = "0"        # substituted for a parenthesised group that fails

# ---------------------------------------------------------------------------
# Variable store  (reactform/core/variable_store.py)
# ---------------------------------------------------------------------------
BINDABLE_PROPERTIES = frozenset({"visible", "enabled"})

# ---------------------------------------------------------------------------
# Builder  (reactform/gui/builder.py)
# ---------------------------------------------------------------------------
RELOAD_DEBOUNCE_MS = 100   # wait after a file change before re-reading it
REPEAT_ATTRIBUTE   = "q-for"

# ---------------------------------------------------------------------------
# Logging  (LogFn consumers, reactform/gui/log_panel.py)
# ---------------------------------------------------------------------------
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
