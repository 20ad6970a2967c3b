"""Dialect rules and SQL literal/identifier formatting."""

from dbconnect.dialects.formatter import SqlFormatter
from dbconnect.dialects.rules import DialectRules, get_dialect_rules, resolve_dialect

__all__ = [
    "DialectRules",
    "SqlFormatter",
    "get_dialect_rules",
    "resolve_dialect",
]
