from dbconnect.constants import DatabaseType
from dbconnect.types.query import QueryBuilderConfig
from .base import BaseQueryBuilder


class SQLServerQueryBuilder(BaseQueryBuilder):
    """SQL Server (2012+) builder.

    A limit without offset becomes ``SELECT TOP n``. Any offset uses
    ``OFFSET m ROWS [FETCH NEXT n ROWS ONLY]``, which requires an ORDER BY;
    ``ORDER BY (SELECT NULL)`` is added when the description has none.
    """

    dialect = DatabaseType.SQLSERVER

    def _select_keyword(self, config: QueryBuilderConfig) -> str:
        keyword = super()._select_keyword(config)
        if config.limit is not None and config.offset is None:
            keyword = f"{keyword} TOP {config.limit}"
        return keyword

    def _apply_pagination(self, query: str, config: QueryBuilderConfig) -> str:
        if config.offset is None:
            return query
        if not config.order_by:
            query = f"{query} ORDER BY (SELECT NULL)"
        query = f"{query} OFFSET {config.offset} ROWS"
        if config.limit is not None:
            query = f"{query} FETCH NEXT {config.limit} ROWS ONLY"
        return query
