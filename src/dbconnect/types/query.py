"""Structured query description models.

``QueryBuilderConfig`` is the dialect-neutral description of a SELECT that
the query builders render into SQL text.
"""

from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator, model_validator

from dbconnect.constants import JoinType, LogicOperator, SortDirection, WhereOperator
from .base import ValueModel


class Condition(ValueModel):
    """A single ``field <operator> operand`` test.

    ``in`` takes its candidates from ``values`` (or from a list passed as
    ``value``); ``between`` needs exactly two bounds; ``isNull`` and
    ``isNotNull`` take no operand.
    """

    field: str = Field(..., min_length=1)
    operator: WhereOperator = WhereOperator.EQUALS
    value: Any = None
    values: Optional[List[Any]] = None

    @property
    def operands(self) -> List[Any]:
        """Operand list for ``in``/``between``."""
        if self.values is not None:
            return list(self.values)
        if isinstance(self.value, (list, tuple, set, frozenset)):
            return list(self.value)
        if self.value is None:
            return []
        return [self.value]

    @model_validator(mode="after")
    def _check_operands(self) -> "Condition":
        operator = self.operator
        if operator is WhereOperator.BETWEEN and len(self.operands) != 2:
            raise ValueError("between requires exactly two values")
        if operator is WhereOperator.IN and self.values is None and not isinstance(
            self.value, (list, tuple, set, frozenset)
        ):
            raise ValueError("in requires a list of values")
        if not operator.is_null_check and not operator.takes_list and self.value is None:
            raise ValueError(
                f"{operator.value} requires a value; use isNull/isNotNull to test for NULL"
            )
        return self


class WhereCondition(Condition):
    """A where-clause condition.

    ``logic`` joins this condition to the *next* one; it is ignored on the
    last condition and defaults to AND.
    """

    logic: Optional[LogicOperator] = None


class JoinClause(ValueModel):
    """Equality join against another table."""

    type: JoinType = JoinType.INNER
    table: str = Field(..., min_length=1)
    alias: Optional[str] = None
    on_left: str = Field(..., min_length=1)
    on_right: str = Field(..., min_length=1)


class OrderByClause(ValueModel):
    column: str = Field(..., min_length=1)
    direction: SortDirection = SortDirection.ASC


class QueryBuilderConfig(ValueModel):
    """Dialect-neutral description of a SELECT statement.

    ``where`` also accepts a plain mapping of column to value, which is
    read as a sequence of ``equals`` conditions (``in`` for list values).
    ``order_by`` entries may be given as bare column names.
    """

    table: str = Field(..., min_length=1)
    alias: Optional[str] = None
    distinct: bool = False
    columns: List[str] = Field(default_factory=list)
    joins: List[JoinClause] = Field(default_factory=list)
    where: List[WhereCondition] = Field(default_factory=list)
    group_by: List[str] = Field(default_factory=list)
    having: List[WhereCondition] = Field(default_factory=list)
    order_by: List[OrderByClause] = Field(default_factory=list)
    limit: Optional[int] = Field(default=None, ge=0)
    offset: Optional[int] = Field(default=None, ge=0)

    @field_validator("where", "having", mode="before")
    @classmethod
    def _mapping_to_conditions(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return [_equality_condition(column, value) for column, value in v.items()]
        return v

    @field_validator("order_by", mode="before")
    @classmethod
    def _bare_columns(cls, v: Any) -> Any:
        if isinstance(v, (str, dict)):
            v = [v]
        if isinstance(v, list):
            return [{"column": item} if isinstance(item, str) else item for item in v]
        return v

    @field_validator("columns", "group_by", mode="before")
    @classmethod
    def _single_column(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [v]
        return v


def _equality_condition(column: str, value: Any) -> Dict[str, Any]:
    if value is None:
        return {"field": column, "operator": WhereOperator.IS_NULL}
    if isinstance(value, (list, tuple, set, frozenset)):
        return {"field": column, "operator": WhereOperator.IN, "values": list(value)}
    return {"field": column, "operator": WhereOperator.EQUALS, "value": value}
