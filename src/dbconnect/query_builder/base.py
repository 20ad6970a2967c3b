from abc import ABC, abstractmethod
from typing import Any, ClassVar, List, Mapping, Union

from pydantic import ValidationError

from dbconnect.common.exceptions import from_validation_error
from dbconnect.constants import DatabaseType
from dbconnect.dialects.formatter import SqlFormatter
from dbconnect.types.query import QueryBuilderConfig
from .where import WhereClauseBuilder


class BaseQueryBuilder(ABC):
    """Base interface for dialect query builders.

    Query builders render a ``QueryBuilderConfig`` into SQL text for their
    dialect. They do NOT execute queries; that responsibility belongs to
    the connector adapters.

    Every value reaches the SQL text through ``SqlFormatter`` and every
    identifier through its quoting rules. Clauses are emitted in the order
    SELECT, FROM, JOIN, WHERE, GROUP BY, HAVING, ORDER BY, after which the
    dialect applies its pagination strategy.
    """

    dialect: ClassVar[DatabaseType]

    def __init__(self):
        self.formatter = SqlFormatter(self.dialect)
        self.where_builder = WhereClauseBuilder(self.formatter)

    def build_query(self, config: Union[QueryBuilderConfig, Mapping[str, Any]]) -> str:
        """Render a structured query description.

        Args:
            config: Query description, or a mapping that validates into one

        Returns:
            SQL text ready to send to the dialect's engine

        Raises:
            ConnectorError: VALIDATION_ERROR for a malformed description
        """
        config = self._coerce_config(config)

        clauses = [self._build_select_clause(config), self._build_from_clause(config)]
        clauses.extend(self._build_join_clauses(config))

        where = self.where_builder.build(config.where)
        if where:
            clauses.append(f"WHERE {where}")

        if config.group_by:
            clauses.append(f"GROUP BY {self._format_columns(config.group_by)}")

        having = self.where_builder.build(config.having)
        if having:
            clauses.append(f"HAVING {having}")

        order_by = self._build_order_by_clause(config)
        if order_by:
            clauses.append(order_by)

        return self._apply_pagination(" ".join(clauses), config)

    @staticmethod
    def _coerce_config(config: Union[QueryBuilderConfig, Mapping[str, Any]]) -> QueryBuilderConfig:
        if isinstance(config, QueryBuilderConfig):
            return config
        try:
            return QueryBuilderConfig.model_validate(config)
        except ValidationError as exc:
            raise from_validation_error(exc, "query description") from exc

    def _select_keyword(self, config: QueryBuilderConfig) -> str:
        return "SELECT DISTINCT" if config.distinct else "SELECT"

    def _build_select_clause(self, config: QueryBuilderConfig) -> str:
        columns = self._format_columns(config.columns) if config.columns else "*"
        return f"{self._select_keyword(config)} {columns}"

    def _build_from_clause(self, config: QueryBuilderConfig) -> str:
        return f"FROM {self._table_reference(config.table, config.alias)}"

    def _build_join_clauses(self, config: QueryBuilderConfig) -> List[str]:
        return [
            f"{join.type.keyword} {self._table_reference(join.table, join.alias)} "
            f"ON {self.formatter.format_column(join.on_left)} = {self.formatter.format_column(join.on_right)}"
            for join in config.joins
        ]

    def _build_order_by_clause(self, config: QueryBuilderConfig) -> str:
        if not config.order_by:
            return ""
        items = ", ".join(
            f"{self.formatter.format_column(item.column)} {item.direction.value.upper()}"
            for item in config.order_by
        )
        return f"ORDER BY {items}"

    def _table_reference(self, table: str, alias: Union[str, None]) -> str:
        reference = self.formatter.quote_identifier(table)
        if alias:
            reference = f"{reference} {self.formatter.quote_identifier(alias)}"
        return reference

    def _format_columns(self, columns: List[str]) -> str:
        return ", ".join(self.formatter.format_column(column) for column in columns)

    @abstractmethod
    def _apply_pagination(self, query: str, config: QueryBuilderConfig) -> str:
        """Apply the dialect's LIMIT/OFFSET strategy to the rendered query."""
        pass
