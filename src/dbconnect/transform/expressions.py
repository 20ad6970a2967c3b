"""Safe evaluation of computed-field formulas.

Formulas reference row values as ``[column]``. Each reference is replaced
by the JSON encoding of the value, the result is parsed with ``ast`` and
walked by a small interpreter that only knows literals, arithmetic,
comparisons, boolean logic, conditional expressions and a fixed set of
functions. Attribute access, subscripts, comprehensions, lambdas and
names other than ``true``/``false``/``null`` are rejected.
"""

import ast
import json
import math
import operator
import re
from typing import Any, Callable, Dict, Mapping

from dbconnect.common.exceptions import ConnectorError, transform_evaluation_error

_PLACEHOLDER = re.compile(r"\[([^\[\]]+)\]")

# Operator spellings accepted from formulas written for JavaScript-style engines
_OPERATOR_ALIASES = (
    ("===", "=="),
    ("!==", "!="),
    ("&&", " and "),
    ("||", " or "),
)

_CONSTANTS: Dict[str, Any] = {
    "true": True,
    "false": False,
    "null": None,
    "None": None,
    "True": True,
    "False": False,
    "NaN": math.nan,
    "Infinity": math.inf,
}

_MAX_EXPONENT = 100
# Integer results are kept below this many bits
_MAX_INT_BITS = 4096
_MAX_FORMULA_LENGTH = 2000


def _coalesce(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def _text(value: Any) -> str:
    return "" if value is None else str(value)


FUNCTIONS: Dict[str, Callable[..., Any]] = {
    "abs": abs,
    "round": round,
    "min": min,
    "max": max,
    "len": len,
    "str": _text,
    "int": int,
    "float": float,
    "upper": lambda value: _text(value).upper(),
    "lower": lambda value: _text(value).lower(),
    "coalesce": _coalesce,
}


def _add(left: Any, right: Any) -> Any:
    if isinstance(left, str) or isinstance(right, str):
        return _text(left) + _text(right)
    return left + right


def _int_bits(value: Any) -> int:
    return abs(value).bit_length() if isinstance(value, int) else 0


def _power(left: Any, right: Any) -> Any:
    if abs(right) > _MAX_EXPONENT:
        raise ValueError("exponent too large")
    if isinstance(right, int) and right > 0 and _int_bits(left) * right > _MAX_INT_BITS:
        raise ValueError("result too large")
    return left ** right


def _multiply(left: Any, right: Any) -> Any:
    if isinstance(left, str) or isinstance(right, str):
        raise TypeError("string repetition is not supported")
    if _int_bits(left) + _int_bits(right) > _MAX_INT_BITS:
        raise ValueError("result too large")
    return left * right


_BINARY_OPERATORS: Dict[type, Callable[[Any, Any], Any]] = {
    ast.Add: _add,
    ast.Sub: operator.sub,
    ast.Mult: _multiply,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: _power,
}

_UNARY_OPERATORS: Dict[type, Callable[[Any], Any]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
    ast.Not: operator.not_,
}

_COMPARISONS: Dict[type, Callable[[Any, Any], bool]] = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
}


class FormulaEvaluator:
    """Evaluate computed-field formulas against a row.

    Example:
        >>> FormulaEvaluator().evaluate("[price] * [qty]", {"price": 2.5, "qty": 4})
        10.0
    """

    def substitute(self, formula: str, row: Mapping[str, Any]) -> str:
        """Replace ``[column]`` references with JSON literals."""
        for alias, replacement in _OPERATOR_ALIASES:
            formula = formula.replace(alias, replacement)
        return _PLACEHOLDER.sub(
            lambda match: json.dumps(row.get(match.group(1).strip()), default=str, ensure_ascii=False),
            formula,
        )

    def evaluate(self, formula: str, row: Mapping[str, Any]) -> Any:
        """Evaluate ``formula`` for ``row``.

        Raises:
            ConnectorError: TRANSFORM_EVALUATION_ERROR for rejected syntax or
                any failure while evaluating
        """
        if len(formula) > _MAX_FORMULA_LENGTH:
            raise transform_evaluation_error("Formula is too long", formula=formula[:100])
        expression = self.substitute(formula, row)
        try:
            tree = ast.parse(expression.strip(), mode="eval")
            return self._eval(tree.body)
        except ConnectorError:
            raise
        except Exception as exc:
            raise transform_evaluation_error(
                f"Failed to evaluate formula: {exc}",
                formula=formula,
                cause=exc,
            ) from exc

    def _eval(self, node: ast.AST) -> Any:
        if isinstance(node, ast.Constant):
            if isinstance(node.value, (str, int, float, bool)) or node.value is None:
                return node.value
            raise ValueError(f"unsupported literal {node.value!r}")

        if isinstance(node, ast.Name):
            if node.id in _CONSTANTS:
                return _CONSTANTS[node.id]
            raise ValueError(f"unknown name '{node.id}'")

        if isinstance(node, ast.BinOp):
            handler = _BINARY_OPERATORS.get(type(node.op))
            if handler is None:
                raise ValueError(f"operator {type(node.op).__name__} is not allowed")
            return handler(self._eval(node.left), self._eval(node.right))

        if isinstance(node, ast.UnaryOp):
            handler = _UNARY_OPERATORS.get(type(node.op))
            if handler is None:
                raise ValueError(f"operator {type(node.op).__name__} is not allowed")
            return handler(self._eval(node.operand))

        if isinstance(node, ast.BoolOp):
            if isinstance(node.op, ast.And):
                result: Any = True
                for value in node.values:
                    result = self._eval(value)
                    if not result:
                        return result
                return result
            result = False
            for value in node.values:
                result = self._eval(value)
                if result:
                    return result
            return result

        if isinstance(node, ast.Compare):
            left = self._eval(node.left)
            for op, comparator in zip(node.ops, node.comparators):
                handler = _COMPARISONS.get(type(op))
                if handler is None:
                    raise ValueError(f"comparison {type(op).__name__} is not allowed")
                right = self._eval(comparator)
                if not handler(left, right):
                    return False
                left = right
            return True

        if isinstance(node, ast.IfExp):
            return self._eval(node.body) if self._eval(node.test) else self._eval(node.orelse)

        if isinstance(node, ast.Call):
            if not isinstance(node.func, ast.Name) or node.func.id not in FUNCTIONS:
                raise ValueError("only whitelisted functions may be called")
            if node.keywords:
                raise ValueError("keyword arguments are not allowed")
            args = []
            for arg in node.args:
                if isinstance(arg, ast.Starred):
                    raise ValueError("argument unpacking is not allowed")
                args.append(self._eval(arg))
            return FUNCTIONS[node.func.id](*args)

        raise ValueError(f"{type(node).__name__} expressions are not allowed")
