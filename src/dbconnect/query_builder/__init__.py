"""Dialect query builders.

Render a ``QueryBuilderConfig`` into SQL text for PostgreSQL, MySQL,
SQL Server or Oracle, including each dialect's pagination strategy.
"""

from dbconnect.query_builder.base import BaseQueryBuilder
from dbconnect.query_builder.factory import QueryBuilderFactory, get_query_builder
from dbconnect.query_builder.mysql import MySQLQueryBuilder
from dbconnect.query_builder.oracle import OracleQueryBuilder
from dbconnect.query_builder.postgres import PostgresQueryBuilder
from dbconnect.query_builder.sqlserver import SQLServerQueryBuilder
from dbconnect.query_builder.where import WhereClauseBuilder

__all__ = [
    "BaseQueryBuilder",
    "QueryBuilderFactory",
    "get_query_builder",
    "PostgresQueryBuilder",
    "MySQLQueryBuilder",
    "SQLServerQueryBuilder",
    "OracleQueryBuilder",
    "WhereClauseBuilder",
]
