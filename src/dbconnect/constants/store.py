"""Configuration store constants."""

from enum import Enum


class StoreBackend(str, Enum):
    """Backing implementation of the configuration store.

    Values:
        MEMORY: Process-local dictionary, nothing persisted
        FILE: JSON document on disk with encrypted credentials
        SQL: Relational table reached through SQLAlchemy
    """

    MEMORY = "memory"
    FILE = "file"
    SQL = "sql"
