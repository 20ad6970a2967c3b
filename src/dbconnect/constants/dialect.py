"""Dialect-related constants and enumerations.

This module defines the closed set of relational engines the connector
subsystem can talk to, together with the per-dialect strategies that the
rules table (``dbconnect.dialects.rules``) assigns to each of them.
"""

from enum import Enum


class DatabaseType(str, Enum):
    """Supported relational engine dialects.

    The value doubles as the ``type`` tag stored on a connection profile.
    Changing the dialect of an existing profile is not allowed: pagination
    and escaping rules are derived from it.

    Values:
        POSTGRES: PostgreSQL
        MYSQL: MySQL / MariaDB
        SQLSERVER: Microsoft SQL Server (2012+)
        ORACLE: Oracle Database
    """

    POSTGRES = "postgres"
    MYSQL = "mysql"
    SQLSERVER = "sqlserver"
    ORACLE = "oracle"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            normalized = value.strip().lower()
            aliases = {
                "postgresql": cls.POSTGRES,
                "pg": cls.POSTGRES,
                "mssql": cls.SQLSERVER,
                "tsql": cls.SQLSERVER,
                "mariadb": cls.MYSQL,
            }
            for member in cls:
                if member.value == normalized:
                    return member
            return aliases.get(normalized)
        return None


class PaginationStrategy(str, Enum):
    """How a dialect limits and offsets a result set.

    Values:
        LIMIT_OFFSET: Trailing ``LIMIT n OFFSET m`` (PostgreSQL, MySQL)
        TOP_OFFSET_FETCH: ``TOP n`` or ``OFFSET m ROWS FETCH NEXT n ROWS ONLY``
            (SQL Server)
        ROWNUM: ``ROWNUM`` filtering subqueries (Oracle)
    """

    LIMIT_OFFSET = "limit_offset"
    TOP_OFFSET_FETCH = "top_offset_fetch"
    ROWNUM = "rownum"


class ConcatStyle(str, Enum):
    """How a dialect concatenates string expressions."""

    OPERATOR = "operator"  # a + b + c
    FUNCTION = "function"  # CONCAT(a, b, c)
