"""Dialect-aware rendering of values and identifiers as SQL text.

``SqlFormatter`` is the only place where untrusted values become SQL. It
renders literals inline (quotes doubled, booleans and dates in the
dialect's native form) and quotes identifiers with the dialect's
delimiters.
"""

import json
import math
import re
import uuid
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Union

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

from dbconnect.common.exceptions import invalid_identifier, validation_error
from dbconnect.constants import ConcatStyle, DatabaseType
from dbconnect.utils.datetime import to_naive_utc
from .rules import DialectRules, get_dialect_rules

_QUOTE_PAIRS = (('"', '"'), ("[", "]"), ("`", "`"))

_ALIAS_PATTERN = re.compile(r"^(?P<expr>.+?)\s+AS\s+(?P<alias>\S+)$", re.IGNORECASE | re.DOTALL)

_COMMENT_TOKENS = (";", "--", "/*", "*/")

# Nodes a function-call column expression may consist of
_FUNCTION_CALL_NODES = (
    exp.Func,
    exp.Column,
    exp.Identifier,
    exp.Star,
    exp.Literal,
    exp.Null,
    exp.Boolean,
    exp.Distinct,
    exp.DataType,
    exp.DataTypeParam,
    exp.Var,
    exp.Neg,
    exp.Paren,
    exp.Add,
    exp.Sub,
    exp.Mul,
    exp.Div,
    exp.Mod,
)

# Boolean logic, comparisons and subqueries; some of these also derive from exp.Func
_FORBIDDEN_NODES = (exp.Connector, exp.Predicate, exp.Not, exp.Subquery, exp.Select)


def _is_quoted(name: str) -> bool:
    return len(name) >= 2 and any(
        name.startswith(open_) and name.endswith(close) for open_, close in _QUOTE_PAIRS
    )


class SqlFormatter:
    """Render values and identifiers for one dialect.

    Example:
        >>> formatter = SqlFormatter("sqlserver")
        >>> formatter.format_value("O'Brien")
        "N'O''Brien'"
        >>> formatter.quote_identifier("dbo.users")
        '[dbo].[users]'
    """

    def __init__(self, dialect: Union[DatabaseType, str]):
        self.rules: DialectRules = get_dialect_rules(dialect)
        self.dialect = self.rules.dialect

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    def format_value(self, value: Any) -> str:
        """Render a Python value as a SQL literal."""
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return self.rules.true_literal if value else self.rules.false_literal
        if isinstance(value, Enum):
            return self.format_value(value.value)
        if isinstance(value, (int, float, Decimal)):
            return self._format_number(value)
        if isinstance(value, datetime):
            return self._format_datetime(value)
        if isinstance(value, date):
            return self.rules.date_template.format(literal=self._quote(value.isoformat()))
        if isinstance(value, time):
            return self._quote(value.isoformat())
        if isinstance(value, (list, tuple, set, frozenset)):
            return self.format_value_list(value)
        if isinstance(value, str):
            return self.format_string(value)
        if isinstance(value, uuid.UUID):
            return self.format_string(str(value))
        return self.format_string(json.dumps(value, default=str))

    def format_string(self, value: str) -> str:
        """Quote a string literal, doubling embedded single quotes."""
        return f"{self.rules.string_prefix}{self._quote(value)}"

    def format_value_list(self, values: Iterable[Any]) -> str:
        """Comma-separated literals, without surrounding parentheses."""
        return ", ".join(self.format_value(item) for item in values)

    def _quote(self, text: str) -> str:
        return "'" + text.replace("'", "''") + "'"

    def _format_number(self, value: Union[int, float, Decimal]) -> str:
        if isinstance(value, float) and not math.isfinite(value):
            raise validation_error(
                "Non-finite numbers cannot be rendered as SQL literals", value=value
            )
        if isinstance(value, Decimal):
            if not value.is_finite():
                raise validation_error(
                    "Non-finite numbers cannot be rendered as SQL literals", value=value
                )
            return format(value, "f")
        return repr(value) if isinstance(value, float) else str(value)

    def _format_datetime(self, value: datetime) -> str:
        value = to_naive_utc(value)
        if value.microsecond:
            text = value.isoformat(sep=self.rules.datetime_separator, timespec="microseconds")
            template = self.rules.timestamp_template
        else:
            text = value.isoformat(sep=self.rules.datetime_separator, timespec="seconds")
            template = self.rules.datetime_template
        return template.format(literal=self._quote(text))

    # ------------------------------------------------------------------
    # Identifiers
    # ------------------------------------------------------------------

    def quote_identifier(self, identifier: str) -> str:
        """Quote a possibly schema-qualified identifier.

        Already-delimited names and ``*`` pass through unchanged; dotted
        names are quoted part by part.
        """
        name = identifier.strip() if isinstance(identifier, str) else ""
        if not name:
            raise validation_error(
                "Identifier must be a non-empty string",
                field="identifier",
                value=identifier,
            )
        if name == "*" or _is_quoted(name):
            return name
        return ".".join(self._quote_part(part.strip(), identifier) for part in name.split("."))

    def _quote_part(self, part: str, identifier: str) -> str:
        if part == "*" or _is_quoted(part):
            return part
        if not part:
            raise invalid_identifier(identifier, "empty name part")
        if self.rules.fold_identifiers_upper:
            part = part.upper()
        close = self.rules.quote_close
        return f"{self.rules.quote_open}{part.replace(close, close * 2)}{close}"

    def format_column(self, column: str) -> str:
        """Render a column reference for select lists and conditions.

        Plain or dotted names are quoted, ``expr AS alias`` quotes both
        sides, and function calls such as ``COUNT(*)`` or ``LOWER(name)``
        pass through once the dialect's parser confirms the text is a single
        function over columns and literals.

        Raises:
            ConnectorError: INVALID_IDENTIFIER for any other expression
        """
        text = column.strip() if isinstance(column, str) else ""
        if not text:
            raise validation_error("Column reference must be a non-empty string", field="column")

        match = _ALIAS_PATTERN.match(text)
        if match:
            return f"{self.format_column(match.group('expr'))} AS {self.quote_identifier(match.group('alias'))}"

        if "(" in text:
            self._check_function_call(text)
            return text
        return self.quote_identifier(text)

    def _check_function_call(self, text: str) -> None:
        if any(token in text for token in _COMMENT_TOKENS):
            raise invalid_identifier(text, "comments and statement separators are not allowed")
        try:
            tree = sqlglot.parse_one(text, read=self.rules.sqlglot_dialect)
        except SqlglotError as exc:
            raise invalid_identifier(text, "not a valid SQL expression", cause=exc) from exc
        if not isinstance(tree, exp.Func):
            raise invalid_identifier(text, "only a single function call is allowed")
        for node in tree.find_all(exp.Expression):
            if isinstance(node, _FORBIDDEN_NODES) or not isinstance(node, _FUNCTION_CALL_NODES):
                raise invalid_identifier(
                    text, f"'{node.key}' is not allowed inside a function call"
                )

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def concat(self, *parts: str) -> str:
        """Concatenate already-rendered SQL expressions."""
        if self.rules.concat_style is ConcatStyle.OPERATOR:
            return " + ".join(parts)
        return f"CONCAT({', '.join(parts)})"
