"""Tests for computed-field formula evaluation."""

import time

import pytest

from dbconnect.common.exceptions import ConnectorError, ErrorCode
from dbconnect.transform import FormulaEvaluator


@pytest.fixture
def evaluator():
    return FormulaEvaluator()


class TestEvaluation:
    """Supported expressions."""

    def test_arithmetic(self, evaluator):
        """Test arithmetic over row values."""
        assert evaluator.evaluate("[price] * [qty]", {"price": 2.5, "qty": 4}) == 10.0
        assert evaluator.evaluate("([a] + [b]) / 2", {"a": 3, "b": 5}) == 4.0
        assert evaluator.evaluate("[a] % 3", {"a": 10}) == 1

    def test_string_concatenation(self, evaluator):
        """Test string concatenation with +."""
        row = {"first": "Ada", "last": "Lovelace", "id": 7}
        assert evaluator.evaluate("[first] + ' ' + [last]", row) == "Ada Lovelace"
        assert evaluator.evaluate("[first] + '-' + [id]", row) == "Ada-7"

    def test_values_with_quotes_are_substituted_safely(self, evaluator):
        """Test substitution of values containing quotes."""
        assert evaluator.evaluate("[name] + '!'", {"name": "O'Brien \"Bob\""}) == "O'Brien \"Bob\"!"

    def test_conditional_expression(self, evaluator):
        """Test conditional expressions."""
        formula = "'big' if [amount] > 100 else 'small'"
        assert evaluator.evaluate(formula, {"amount": 250}) == "big"
        assert evaluator.evaluate(formula, {"amount": 5}) == "small"

    def test_javascript_operator_spellings(self, evaluator):
        """Test ===, !==, && and """
        assert evaluator.evaluate("[a] === 1 && [b] !== 2", {"a": 1, "b": 3}) is True
        assert evaluator.evaluate("[a] === 2 || [b] === 3", {"a": 1, "b": 3}) is True

    def test_literals(self, evaluator):
        """Test literal values in formulas."""
        assert evaluator.evaluate("[flag]", {"flag": True}) is True
        assert evaluator.evaluate("[missing]", {}) is None
        assert evaluator.evaluate("null", {}) is None

    def test_chained_comparison(self, evaluator):
        """Test chained comparisons."""
        assert evaluator.evaluate("0 < [x] <= 10", {"x": 10}) is True
        assert evaluator.evaluate("0 < [x] <= 10", {"x": 11}) is False

    def test_functions(self, evaluator):
        """Test the whitelisted functions."""
        row = {"price": 19.999, "name": "widget", "discount": None, "a": -3, "b": 8}
        assert evaluator.evaluate("round([price], 2)", row) == 20.0
        assert evaluator.evaluate("upper([name])", row) == "WIDGET"
        assert evaluator.evaluate("coalesce([discount], 0)", row) == 0
        assert evaluator.evaluate("max(abs([a]), [b])", row) == 8
        assert evaluator.evaluate("len([name])", row) == 6

    def test_substitute_encodes_values_as_json(self, evaluator):
        """Test JSON encoding of substituted values."""
        assert evaluator.substitute("[a] + [b]", {"a": "x", "b": None}) == '"x" + null'


class TestRejection:
    """Everything outside the whitelist fails with a transform error."""

    @pytest.mark.parametrize(
        "formula",
        [
            "[name].upper()",
            "__import__('os')",
            "open('/etc/passwd')",
            "[items][0]",
            "[x for x in [1]]",
            "lambda: 1",
            "2 ** 1000",
            "'a' * 3",
            "1 / 0",
            "[price] * ",
            "round([price], ndigits=2)",
        ],
    )
    def test_rejected(self, evaluator, formula):
        """Test that constructs outside the whitelist are rejected."""
        row = {"name": "x", "price": 1.0, "items": [1, 2]}
        with pytest.raises(ConnectorError) as exc_info:
            evaluator.evaluate(formula, row)
        assert exc_info.value.error_code == ErrorCode.TRANSFORM_EVALUATION_ERROR

    def test_value_cannot_inject_code(self, evaluator):
        """Test that row values are never evaluated as code."""
        row = {"payload": "__import__('os').system('echo hi')"}
        assert evaluator.evaluate("[payload]", row) == "__import__('os').system('echo hi')"

    def test_overlong_formula(self, evaluator):
        """Test rejection of an overlong formula."""
        with pytest.raises(ConnectorError):
            evaluator.evaluate("1 + " * 1000 + "1", {})


class TestResourceLimits:
    """Arithmetic that would build huge integers fails fast."""

    def test_nested_powers_are_bounded(self, evaluator):
        """Test that nested powers fail quickly."""
        start = time.perf_counter()
        with pytest.raises(ConnectorError) as exc_info:
            evaluator.evaluate("((([a] ** 99) ** 99) ** 99) ** 20", {"a": 9})
        assert time.perf_counter() - start < 1.0
        assert exc_info.value.error_code == ErrorCode.TRANSFORM_EVALUATION_ERROR

    def test_repeated_multiplication_is_bounded(self, evaluator):
        """Test that repeated multiplication of large integers fails."""
        formula = " * ".join(["[a]"] * 200)
        with pytest.raises(ConnectorError):
            evaluator.evaluate(formula, {"a": 10 ** 30})

    def test_moderate_integers_still_evaluate(self, evaluator):
        """Test that moderate integer results are still computed."""
        assert evaluator.evaluate("[a] ** 99", {"a": 9}) == 9 ** 99
        assert evaluator.evaluate("[a] * [b]", {"a": 10 ** 300, "b": 10 ** 300}) == 10 ** 600

    def test_float_powers_are_unaffected(self, evaluator):
        """Test fractional powers of floats."""
        assert evaluator.evaluate("[a] ** 0.5", {"a": 16.0}) == 4.0
