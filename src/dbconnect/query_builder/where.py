"""Rendering of structured conditions into a WHERE (or HAVING) body."""

from typing import List, Optional, Sequence

from typing_extensions import assert_never

from dbconnect.constants import LogicOperator, WhereOperator
from dbconnect.dialects.formatter import SqlFormatter
from dbconnect.types.query import Condition, WhereCondition


class WhereClauseBuilder:
    """Render conditions for one dialect.

    Conditions are emitted left to right. Each condition's ``logic`` joins
    it to the following one (AND when unset) and no parentheses are added,
    so ``A AND B OR C`` keeps the engine's native precedence.
    """

    def __init__(self, formatter: SqlFormatter):
        self.formatter = formatter

    def build(self, conditions: Sequence[WhereCondition]) -> str:
        """Return the clause body without the WHERE keyword; empty when no conditions."""
        parts: List[str] = []
        pending: Optional[LogicOperator] = None
        for index, condition in enumerate(conditions):
            if index:
                parts.append((pending or LogicOperator.AND).keyword)
            parts.append(self.render_condition(condition))
            pending = getattr(condition, "logic", None)
        return " ".join(parts)

    def render_condition(self, condition: Condition) -> str:
        column = self.formatter.format_column(condition.field)
        fmt = self.formatter
        operator = condition.operator
        match operator:
            case WhereOperator.EQUALS:
                return f"{column} = {fmt.format_value(condition.value)}"
            case WhereOperator.NOT_EQUALS:
                return f"{column} <> {fmt.format_value(condition.value)}"
            case WhereOperator.GREATER_THAN:
                return f"{column} > {fmt.format_value(condition.value)}"
            case WhereOperator.LESS_THAN:
                return f"{column} < {fmt.format_value(condition.value)}"
            case WhereOperator.CONTAINS:
                return f"{column} LIKE {self._pattern(condition.value, prefix=True, suffix=True)}"
            case WhereOperator.STARTS_WITH:
                return f"{column} LIKE {self._pattern(condition.value, prefix=False, suffix=True)}"
            case WhereOperator.ENDS_WITH:
                return f"{column} LIKE {self._pattern(condition.value, prefix=True, suffix=False)}"
            case WhereOperator.IN:
                candidates = condition.operands
                if not candidates:
                    return "1 = 0"
                return f"{column} IN ({fmt.format_value_list(candidates)})"
            case WhereOperator.BETWEEN:
                low, high = condition.operands
                return f"{column} BETWEEN {fmt.format_value(low)} AND {fmt.format_value(high)}"
            case WhereOperator.IS_NULL:
                return f"{column} IS NULL"
            case WhereOperator.IS_NOT_NULL:
                return f"{column} IS NOT NULL"
            case _:
                assert_never(operator)

    def _pattern(self, value, prefix: bool, suffix: bool) -> str:
        parts = []
        if prefix:
            parts.append("'%'")
        parts.append(self.formatter.format_value(value))
        if suffix:
            parts.append("'%'")
        return self.formatter.concat(*parts)
