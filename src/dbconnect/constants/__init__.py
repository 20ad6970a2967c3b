"""Constants module for dbconnect.

This module contains the enumerations used throughout the connector
subsystem. It has no dependencies on other dbconnect modules.

Organization:
    - dialect: Supported engines and their pagination/concatenation styles
    - query: Operators, logic connectors, join kinds and sort directions
    - store: Configuration store backends
"""

from dbconnect.constants.dialect import ConcatStyle, DatabaseType, PaginationStrategy
from dbconnect.constants.query import JoinType, LogicOperator, SortDirection, WhereOperator
from dbconnect.constants.store import StoreBackend

__all__ = [
    "DatabaseType",
    "PaginationStrategy",
    "ConcatStyle",
    "WhereOperator",
    "LogicOperator",
    "JoinType",
    "SortDirection",
    "StoreBackend",
]
