"""Utility functions and helpers for dbconnect.

This module provides common utility functions used throughout the package.
"""

from dbconnect.utils.datetime import (
    ensure_utc,
    get_current_timestamp,
    parse_sql_datetime,
    to_naive_utc,
)
from dbconnect.utils.decorators import traced

__all__ = [
    # DateTime utilities
    "get_current_timestamp",
    "ensure_utc",
    "to_naive_utc",
    "parse_sql_datetime",
    # Decorators
    "traced",
]
