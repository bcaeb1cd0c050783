"""Tests for reactform.core.expression — evaluate, compare_values, extract_variables."""
import pytest

from reactform.core.condition import parse, parse_compound
from reactform.core.expression import (
    compare_values, evaluate, evaluate_condition, evaluate_compound,
    extract_variables, to_number, to_text,
)


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------

class TestConversion:
    def test_to_number(self):
        assert to_number(True) == 1.0
        assert to_number(3) == 3.0
        assert to_number("2.5") == 2.5
        assert to_number("abc") is None
        assert to_number(None) is None
        assert to_number([1]) is None

    def test_non_finite_text_is_not_a_number(self):
        assert to_number("nan") is None
        assert to_number("inf") is None
        assert to_number("-Infinity") is None
        assert to_number("1_000") is None
        assert to_number(" 2 ") == 2.0

    def test_to_text(self):
        assert to_text(None) == ""
        assert to_text(True) == "true"
        assert to_text(2.0) == "2"
        assert to_text(2.5) == "2.5"
        assert to_text("x") == "x"


# ---------------------------------------------------------------------------
# compare_values
# ---------------------------------------------------------------------------

class TestCompareValues:
    def test_numeric_not_lexicographic(self):
        assert compare_values("10", ">", "9")
        assert not compare_values("10", "<", "9")

    def test_mixed_number_and_text_number(self):
        assert compare_values(1, "==", "1")
        assert compare_values("1.0", "==", 1)

    def test_zero(self):
        assert compare_values(0.0, "==", 0.0)
        assert not compare_values(0.0, "!=", 0.0)
        assert compare_values(-0.0, "==", 0)
        assert compare_values("0", "==", False)
        assert compare_values(0.1 + 0.2 - 0.3, "==", 0.0)
        assert not compare_values(0.1 + 0.2 - 0.3, "!=", 0)
        assert not compare_values(1e-15, "!=", 0)
        assert compare_values("1e-13", "==", "-0")
        assert not compare_values(1e-9, "==", 0)

    def test_fuzzy_equality(self):
        assert compare_values(1.1 * 3, "==", 3.3)
        assert not compare_values(1.1 * 3, "!=", 3.3)
        assert not compare_values(1.0, "==", 1.001)

    def test_ordering_operators(self):
        assert compare_values(2, ">=", 2)
        assert compare_values(2, "<=", 3)
        assert compare_values(3, "<", 4)

    def test_string_path(self):
        assert compare_values("abc", "==", "abc")
        assert compare_values("abc", "!=", "abd")
        assert compare_values("b", ">", "a")
        assert compare_values("a", "<=", "a")

    def test_bool_text(self):
        assert compare_values(True, "==", 1)

    def test_unknown_operator(self):
        assert not compare_values("a", "~=", "a")


# ---------------------------------------------------------------------------
# evaluate_condition / evaluate_compound
# ---------------------------------------------------------------------------

class TestEvaluateCondition:
    def test_literal(self):
        assert evaluate_condition(parse("$a==on"), {"a": "on"})

    def test_right_variable(self):
        assert evaluate_condition(parse("$low<$high"), {"low": 1, "high": 2})

    def test_missing_variable(self, logs, log_fn):
        assert not evaluate_condition(parse("$a==1"), {}, log_fn)
        assert any("Variable not found" in m for _, m in logs)

    def test_missing_right_variable(self, logs, log_fn):
        assert not evaluate_condition(parse("$a==$b"), {"a": 1}, log_fn)
        assert logs[0][0] == "WARNING"

    def test_invalid(self, logs, log_fn):
        assert not evaluate_condition(parse("nothing"), {"a": 1}, log_fn)
        assert any("Invalid condition" in m for _, m in logs)

    def test_constant(self):
        assert evaluate_condition(parse("1"), {})
        assert not evaluate_condition(parse("0"), {})


class TestEvaluateCompound:
    def test_and(self):
        comp = parse_compound("$a==1 and $b==2")
        assert evaluate_compound(comp, {"a": 1, "b": 2})
        assert not evaluate_compound(comp, {"a": 1, "b": 3})

    def test_or(self):
        comp = parse_compound("$a==1 or $b==2")
        assert evaluate_compound(comp, {"a": 0, "b": 2})

    def test_invalid(self):
        assert not evaluate_compound(parse_compound("x or y"), {})


# ---------------------------------------------------------------------------
# evaluate
# ---------------------------------------------------------------------------

class TestEvaluate:
    def test_single(self):
        assert evaluate("$mode==on", {"mode": "on"})

    def test_parentheses(self):
        expr = "($a==1) and ($b==2)"
        assert evaluate(expr, {"a": 1, "b": 2})
        assert not evaluate(expr, {"a": 1, "b": 3})

    def test_nested_parentheses(self):
        expr = "(($a==1 or $b==1) and $c!=0)"
        assert evaluate(expr, {"a": 0, "b": 1, "c": 5})
        assert not evaluate(expr, {"a": 0, "b": 1, "c": 0})

    def test_group_changes_grouping(self):
        expr = "$a==1 or ($a==2 and $a==3)"
        assert not evaluate(expr, {"a": 2})
        assert evaluate(expr, {"a": 1})

    def test_left_to_right(self):
        assert not evaluate("$a==1 or $a==2 and $a==3", {"a": 2})

    def test_numeric_variables(self):
        assert evaluate("$a>$b", {"a": "10", "b": "9"})

    def test_non_finite_text_compares_as_text(self):
        assert evaluate("$m==inf", {"m": "inf"})
        assert evaluate("$m==nan", {"m": "nan"})
        assert not evaluate("$m!=nan", {"m": "nan"})
        assert evaluate("$n==1_000", {"n": "1_000"})

    @pytest.mark.parametrize("expr", ["($a==1", "$a==1)", ")$a==1("])
    def test_mismatched_parentheses(self, expr, logs, log_fn):
        assert not evaluate(expr, {"a": 1}, log_fn)
        assert any("Mismatched parentheses" in m for _, m in logs)

    def test_single_group(self):
        assert evaluate("($a==1)", {"a": 1})

    def test_unparsable(self):
        assert not evaluate("garbage", {"a": 1})


# ---------------------------------------------------------------------------
# extract_variables
# ---------------------------------------------------------------------------

class TestExtractVariables:
    def test_order_and_dedup(self):
        assert extract_variables("$b==1 and ($a==$b or $c>2)") == ["b", "a", "c"]

    def test_dotted_names(self):
        assert extract_variables("$formData.0.name==x") == ["formData.0.name"]

    def test_none(self):
        assert extract_variables("1 and 0") == []
