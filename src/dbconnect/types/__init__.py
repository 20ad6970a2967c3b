"""Type definitions for dbconnect.

All models are pydantic v2 models derived from ``ConnectorBaseModel``.
Query descriptions, results and schemas are immutable value objects
(``ValueModel``); connection profiles are mutable records owned by the
configuration store.
"""

from dbconnect.types.base import ConnectorBaseModel, ValueModel
from dbconnect.types.config import DatabaseConfig, DatabaseConfigSummary, DatabaseCredentials
from dbconnect.types.query import (
    Condition,
    JoinClause,
    OrderByClause,
    QueryBuilderConfig,
    WhereCondition,
)
from dbconnect.types.result import (
    BatchTestResult,
    ConnectionTestItem,
    ConnectionTestResult,
    QueryMetadata,
    QueryResult,
)
from dbconnect.types.schema import ColumnSchema, ForeignKeySchema, IndexSchema, TableSchema
from dbconnect.types.transform import (
    ComputedField,
    DateFormatOption,
    FilterCondition,
    NumberFormatOption,
    PaginationOption,
    SortOption,
    TransformOptions,
)

__all__ = [
    "ConnectorBaseModel",
    "ValueModel",
    "DatabaseConfig",
    "DatabaseConfigSummary",
    "DatabaseCredentials",
    "Condition",
    "WhereCondition",
    "JoinClause",
    "OrderByClause",
    "QueryBuilderConfig",
    "QueryMetadata",
    "QueryResult",
    "ConnectionTestResult",
    "ConnectionTestItem",
    "BatchTestResult",
    "ColumnSchema",
    "ForeignKeySchema",
    "IndexSchema",
    "TableSchema",
    "ComputedField",
    "FilterCondition",
    "DateFormatOption",
    "NumberFormatOption",
    "SortOption",
    "PaginationOption",
    "TransformOptions",
]
