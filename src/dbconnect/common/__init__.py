"""Common utilities shared across dbconnect modules."""

from dbconnect.common.exceptions import (
    ConnectorError,
    ErrorCode,
    configuration_error,
    configuration_not_found,
    connection_error,
    credential_decrypt_error,
    dialect_not_supported,
    from_validation_error,
    introspection_error,
    query_execution_error,
    store_error,
    table_not_found,
    transform_evaluation_error,
    validation_error,
)

__all__ = [
    "ConnectorError",
    "ErrorCode",
    "configuration_error",
    "configuration_not_found",
    "connection_error",
    "credential_decrypt_error",
    "dialect_not_supported",
    "from_validation_error",
    "introspection_error",
    "query_execution_error",
    "store_error",
    "table_not_found",
    "transform_evaluation_error",
    "validation_error",
]
