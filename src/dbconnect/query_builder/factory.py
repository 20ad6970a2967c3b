"""Query Builder Factory.

This module provides a factory for creating dialect-specific query
builders. Builders are stateless, so one instance per dialect is shared.
"""

from functools import lru_cache
from typing import Union

from typing_extensions import assert_never

from dbconnect.constants import DatabaseType
from dbconnect.dialects.rules import resolve_dialect
from dbconnect.query_builder.base import BaseQueryBuilder
from dbconnect.query_builder.mysql import MySQLQueryBuilder
from dbconnect.query_builder.oracle import OracleQueryBuilder
from dbconnect.query_builder.postgres import PostgresQueryBuilder
from dbconnect.query_builder.sqlserver import SQLServerQueryBuilder


class QueryBuilderFactory:
    """Factory for creating dialect-specific query builders.

    Example:
        >>> builder = QueryBuilderFactory.create("sqlserver")
        >>> builder.build_query({"table": "orders", "limit": 5})
        'SELECT TOP 5 * FROM [orders]'
    """

    @staticmethod
    def create(dialect: Union[DatabaseType, str]) -> BaseQueryBuilder:
        """Create the builder for ``dialect``.

        Raises:
            ConnectorError: DIALECT_NOT_SUPPORTED for unknown dialects
        """
        return _builder_for(resolve_dialect(dialect))


@lru_cache(maxsize=None)
def _builder_for(dialect: DatabaseType) -> BaseQueryBuilder:
    match dialect:
        case DatabaseType.POSTGRES:
            return PostgresQueryBuilder()
        case DatabaseType.MYSQL:
            return MySQLQueryBuilder()
        case DatabaseType.SQLSERVER:
            return SQLServerQueryBuilder()
        case DatabaseType.ORACLE:
            return OracleQueryBuilder()
        case _:
            assert_never(dialect)


def get_query_builder(dialect: Union[DatabaseType, str]) -> BaseQueryBuilder:
    """Get the query builder for ``dialect``."""
    return QueryBuilderFactory.create(dialect)
