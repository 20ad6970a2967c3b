
from dbconnect.__version__ import __version__

from dbconnect.service import DatabaseConnectorService

from dbconnect.constants import (
    DatabaseType,
    JoinType,
    LogicOperator,
    SortDirection,
    StoreBackend,
    WhereOperator,
)

from dbconnect.types import (
    DatabaseConfig,
    DatabaseConfigSummary,
    DatabaseCredentials,
    QueryBuilderConfig,
    WhereCondition,
    JoinClause,
    OrderByClause,
    QueryResult,
    ConnectionTestResult,
    BatchTestResult,
    TableSchema,
    TransformOptions,
)

from dbconnect.common.exceptions import ConnectorError, ErrorCode

# Building blocks (public API)
from dbconnect.connectors import ConnectorRegistry, create_connector
from dbconnect.dialects import SqlFormatter
from dbconnect.query_builder import QueryBuilderFactory, WhereClauseBuilder, get_query_builder
from dbconnect.store import create_configuration_store
from dbconnect.transform import ResultTransformer, transform_result
from dbconnect.logging import get_logger, setup_logging


__all__ = [
    "__version__",

    "DatabaseConnectorService",

    # Enums
    "DatabaseType",
    "JoinType",
    "LogicOperator",
    "SortDirection",
    "StoreBackend",
    "WhereOperator",

    # Models
    "DatabaseConfig",
    "DatabaseConfigSummary",
    "DatabaseCredentials",
    "QueryBuilderConfig",
    "WhereCondition",
    "JoinClause",
    "OrderByClause",
    "QueryResult",
    "ConnectionTestResult",
    "BatchTestResult",
    "TableSchema",
    "TransformOptions",

    # Exceptions (public API)
    "ConnectorError",
    "ErrorCode",

    "ConnectorRegistry",
    "create_connector",
    "SqlFormatter",
    "QueryBuilderFactory",
    "WhereClauseBuilder",
    "get_query_builder",
    "create_configuration_store",
    "ResultTransformer",
    "transform_result",
    "get_logger",
    "setup_logging",
]
