"""Query description constants.

Operator, connector and direction vocabularies shared by the query builder
(where clauses) and the result transformer (row filters). Lookups are
forgiving about casing and separators so that ``notEquals``,
``not_equals`` and ``NOTEQUALS`` all resolve to the same member.
"""

from enum import Enum


def _normalize(value: str) -> str:
    return value.replace("_", "").replace("-", "").replace(" ", "").lower()


class _LenientEnum(str, Enum):
    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            wanted = _normalize(value)
            for member in cls:
                if _normalize(member.value) == wanted:
                    return member
        return None


class WhereOperator(_LenientEnum):
    """Comparison operators for structured conditions."""

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    CONTAINS = "contains"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    IN = "in"
    BETWEEN = "between"
    IS_NULL = "isNull"
    IS_NOT_NULL = "isNotNull"

    @property
    def is_null_check(self) -> bool:
        return self in (WhereOperator.IS_NULL, WhereOperator.IS_NOT_NULL)

    @property
    def takes_list(self) -> bool:
        return self in (WhereOperator.IN, WhereOperator.BETWEEN)


class LogicOperator(_LenientEnum):
    """Connector joining a condition to the next one in sequence."""

    AND = "and"
    OR = "or"

    @property
    def keyword(self) -> str:
        return self.value.upper()


class JoinType(_LenientEnum):
    """Supported join kinds."""

    INNER = "inner"
    LEFT = "left"
    RIGHT = "right"
    FULL = "full"

    @property
    def keyword(self) -> str:
        if self is JoinType.FULL:
            return "FULL OUTER JOIN"
        return f"{self.value.upper()} JOIN"


class SortDirection(_LenientEnum):
    """Sort direction for ORDER BY clauses and result sorting."""

    ASC = "asc"
    DESC = "desc"
