from dbconnect.constants import DatabaseType
from dbconnect.types.query import QueryBuilderConfig
from .postgres import PostgresQueryBuilder

# MySQL has no OFFSET without LIMIT; the documented idiom is the largest BIGINT UNSIGNED
MYSQL_MAX_LIMIT = 18446744073709551615


class MySQLQueryBuilder(PostgresQueryBuilder):
    """MySQL builder: ``LIMIT n OFFSET m`` with a maximal limit for offset-only pages."""

    dialect = DatabaseType.MYSQL

    def _apply_pagination(self, query: str, config: QueryBuilderConfig) -> str:
        if config.limit is None and config.offset is not None:
            return f"{query} LIMIT {MYSQL_MAX_LIMIT} OFFSET {config.offset}"
        return super()._apply_pagination(query, config)
