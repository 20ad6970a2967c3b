"""Logging infrastructure for dbconnect.

This module provides structured logging with JSON output and context
tracking (request id and connection id) for connector operations.
"""

from dbconnect.logging.filters import (
    ContextFilter,
    clear_request_context,
    connection_context,
    set_logging_context,
    set_request_context,
)
from dbconnect.logging.logger import CustomJsonFormatter, get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "CustomJsonFormatter",
    "ContextFilter",
    "set_logging_context",
    "set_request_context",
    "clear_request_context",
    "connection_context",
]
