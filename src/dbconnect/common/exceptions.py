import logging
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import ValidationError


class ErrorCode(Enum):
    """Standard error codes for connector operations.

    This enum provides categorized error codes that can be used
    to identify error types without creating numerous exception classes.
    Each category has a specific prefix for easy identification.

    Attributes:
        CONFIG_*: Configuration-related errors
        VALIDATION_*: Input validation errors
        CONNECTION_*: Network and connection errors
        EXECUTION_*: Runtime execution errors
        RESOURCE_*: Resource availability errors
        STORE_*: Configuration store errors
    """
    # Configuration errors
    CONFIG_NOT_FOUND = "CONFIG_002"
    CONFIG_INVALID = "CONFIG_003"
    DIALECT_NOT_SUPPORTED = "CONFIG_004"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_001"
    INVALID_IDENTIFIER = "VALIDATION_003"

    # Connection errors
    CONNECTION_ERROR = "CONNECTION_001"
    AUTH_ERROR = "CONNECTION_002"
    TIMEOUT_ERROR = "CONNECTION_003"

    # Execution errors
    EXECUTION_ERROR = "EXECUTION_001"
    QUERY_EXECUTION_ERROR = "EXECUTION_002"
    INTROSPECTION_ERROR = "EXECUTION_003"
    TRANSFORM_EVALUATION_ERROR = "EXECUTION_004"

    # Resource errors
    TABLE_NOT_FOUND = "RESOURCE_001"

    # Store errors
    STORE_ERROR = "STORE_001"
    CREDENTIAL_DECRYPT_ERROR = "STORE_002"


# Expected, caller-facing failures that do not warrant an ERROR log line
_QUIET_CODES = frozenset({
    ErrorCode.CONFIG_NOT_FOUND,
    ErrorCode.VALIDATION_ERROR,
    ErrorCode.INVALID_IDENTIFIER,
    ErrorCode.TRANSFORM_EVALUATION_ERROR,
    ErrorCode.TABLE_NOT_FOUND,
})


class ConnectorError(Exception):
    """Base exception for all connector errors.

    This exception class uses error codes for categorization
    instead of creating numerous specific exception classes.

    Attributes:
        message: Error message
        error_code: Error code from ErrorCode enum
        details: Additional error details
        cause: Optional underlying exception
        is_retryable: Whether the error is transient. Informational only,
            nothing in the subsystem retries on its own.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.EXECUTION_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        is_retryable: bool = False
    ):
        """Initialize connector error.

        Args:
            message: Error message
            error_code: Error code from ErrorCode enum
            details: Additional error details
            cause: Optional underlying exception
            is_retryable: Whether error is transient
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause
        self.is_retryable = is_retryable

        # Lazy import to avoid circular dependency
        from dbconnect.logging import get_logger
        logger = get_logger(__name__)
        level = logging.DEBUG if error_code in _QUIET_CODES else logging.ERROR
        logger.log(
            level,
            message,
            extra={
                "error_code": error_code.value,
                "details": self.details,
                "is_retryable": is_retryable,
            },
            exc_info=cause if cause is not None and level >= logging.ERROR else None,
        )

    def __str__(self) -> str:
        """String representation of the error."""
        msg = f"[{self.error_code.value}] {self.message}"
        if self.cause:
            msg = f"{msg} (caused by: {type(self.cause).__name__}: {str(self.cause)})"
        return msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "error_name": self.error_code.name,
            "details": self.details,
            "is_retryable": self.is_retryable
        }

    @classmethod
    def from_error_code(
        cls,
        error_code: ErrorCode,
        message: str,
        **kwargs
    ) -> "ConnectorError":
        """Create exception from error code.

        Args:
            error_code: Error code
            message: Error message
            **kwargs: Additional arguments for ConnectorError

        Returns:
            ConnectorError instance
        """
        if error_code == ErrorCode.TIMEOUT_ERROR:
            kwargs.setdefault('is_retryable', True)

        return cls(message=message, error_code=error_code, **kwargs)


def _merge_details(kwargs: Dict[str, Any], **fields: Any) -> Dict[str, Any]:
    details = dict(kwargs.pop('details', None) or {})
    for key, value in fields.items():
        if value is not None:
            details[key] = value
    return details


# Helper functions for common error scenarios
def configuration_error(
    message: str,
    config_key: Optional[str] = None,
    **kwargs
) -> ConnectorError:
    """Create a configuration error.

    Args:
        message: Error message
        config_key: Configuration key that caused the error
        **kwargs: Additional error details

    Returns:
        ConnectorError with CONFIG_INVALID code
    """
    details = _merge_details(kwargs, config_key=config_key)
    return ConnectorError(
        message=message,
        error_code=ErrorCode.CONFIG_INVALID,
        details=details,
        **kwargs
    )


def configuration_not_found(config_id: str, **kwargs) -> ConnectorError:
    """Create an error for an unknown configuration id."""
    details = _merge_details(kwargs, config_id=config_id)
    return ConnectorError(
        message=f"Database configuration '{config_id}' not found",
        error_code=ErrorCode.CONFIG_NOT_FOUND,
        details=details,
        **kwargs
    )


def dialect_not_supported(dialect: Any, **kwargs) -> ConnectorError:
    """Create an error for a dialect tag outside the supported set."""
    from dbconnect.constants import DatabaseType

    details = _merge_details(
        kwargs,
        dialect=str(dialect),
        supported=[member.value for member in DatabaseType],
    )
    return ConnectorError(
        message=f"Unsupported database type: {dialect}",
        error_code=ErrorCode.DIALECT_NOT_SUPPORTED,
        details=details,
        **kwargs
    )


def validation_error(
    message: str,
    field: Optional[str] = None,
    value: Any = None,
    **kwargs
) -> ConnectorError:
    """Create a validation error.

    Args:
        message: Error message
        field: Field that failed validation
        value: Invalid value
        **kwargs: Additional error details

    Returns:
        ConnectorError with VALIDATION_ERROR code
    """
    details = _merge_details(
        kwargs,
        field=field,
        value=str(value) if value is not None else None,
    )
    return ConnectorError(
        message=message,
        error_code=ErrorCode.VALIDATION_ERROR,
        details=details,
        **kwargs
    )


def invalid_identifier(identifier: Any, reason: str, **kwargs) -> ConnectorError:
    """Create an error for a table, column or expression that cannot be rendered safely."""
    details = _merge_details(kwargs, identifier=str(identifier), reason=reason)
    return ConnectorError(
        message=f"Invalid identifier '{identifier}': {reason}",
        error_code=ErrorCode.INVALID_IDENTIFIER,
        details=details,
        **kwargs
    )


def from_validation_error(exc: ValidationError, model: Optional[str] = None) -> ConnectorError:
    """Convert a pydantic ``ValidationError`` into a connector validation error.

    The first reported problem becomes the message; every problem is kept
    under ``details["errors"]`` with its dotted location.
    """
    problems = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
    first = problems[0] if problems else {"field": None, "message": str(exc)}
    prefix = f"Invalid {model}: " if model else ""
    return validation_error(
        f"{prefix}{first['field']}: {first['message']}" if first["field"] else f"{prefix}{first['message']}",
        field=first["field"] or None,
        details={"errors": problems},
        cause=exc,
    )


def connection_error(
    message: str,
    service: Optional[str] = None,
    host: Optional[str] = None,
    **kwargs
) -> ConnectorError:
    """Create a connection error.

    Args:
        message: Error message
        service: Dialect or service that failed to connect
        host: Host/endpoint that failed
        **kwargs: Additional error details

    Returns:
        ConnectorError with CONNECTION_ERROR code
    """
    details = _merge_details(kwargs, service=service, host=host)
    return ConnectorError(
        message=message,
        error_code=ErrorCode.CONNECTION_ERROR,
        details=details,
        **kwargs
    )


def query_execution_error(
    message: str,
    query: Optional[str] = None,
    **kwargs
) -> ConnectorError:
    """Create a query execution error.

    Args:
        message: Error message
        query: SQL text that failed, truncated for logging
        **kwargs: Additional error details

    Returns:
        ConnectorError with QUERY_EXECUTION_ERROR code
    """
    details = _merge_details(kwargs, query=query[:500] if query else None)
    return ConnectorError(
        message=message,
        error_code=ErrorCode.QUERY_EXECUTION_ERROR,
        details=details,
        **kwargs
    )


def introspection_error(
    message: str,
    table_name: Optional[str] = None,
    **kwargs
) -> ConnectorError:
    """Create an error for failed catalog introspection."""
    details = _merge_details(kwargs, table_name=table_name)
    return ConnectorError(
        message=message,
        error_code=ErrorCode.INTROSPECTION_ERROR,
        details=details,
        **kwargs
    )


def table_not_found(table_name: str, schema: Optional[str] = None, **kwargs) -> ConnectorError:
    """Create an error for a table missing from the remote catalog."""
    details = _merge_details(kwargs, table_name=table_name, schema=schema)
    qualified = f"{schema}.{table_name}" if schema else table_name
    return ConnectorError(
        message=f"Table '{qualified}' not found",
        error_code=ErrorCode.TABLE_NOT_FOUND,
        details=details,
        **kwargs
    )


def transform_evaluation_error(
    message: str,
    formula: Optional[str] = None,
    **kwargs
) -> ConnectorError:
    """Create an error for a computed-field formula that could not be evaluated."""
    details = _merge_details(kwargs, formula=formula)
    return ConnectorError(
        message=message,
        error_code=ErrorCode.TRANSFORM_EVALUATION_ERROR,
        details=details,
        **kwargs
    )


def store_error(
    message: str,
    backend: Optional[str] = None,
    **kwargs
) -> ConnectorError:
    """Create a configuration store error.

    Args:
        message: Error message
        backend: Store backend that failed
        **kwargs: Additional error details

    Returns:
        ConnectorError with STORE_ERROR code
    """
    details = _merge_details(kwargs, backend=backend)
    return ConnectorError(
        message=message,
        error_code=ErrorCode.STORE_ERROR,
        details=details,
        **kwargs
    )


def credential_decrypt_error(config_id: Optional[str] = None, **kwargs) -> ConnectorError:
    """Create an error for stored credentials that cannot be decrypted."""
    details = _merge_details(kwargs, config_id=config_id)
    return ConnectorError(
        message="Stored credentials could not be decrypted with the configured key",
        error_code=ErrorCode.CREDENTIAL_DECRYPT_ERROR,
        details=details,
        **kwargs
    )
