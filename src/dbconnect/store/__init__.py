"""Configuration stores for connection profiles.

Backends:
    - memory: InMemoryConfigurationStore
    - file: JsonFileConfigurationStore (JSON document, encrypted credentials)
    - sql: SqlConfigurationStore (SQLAlchemy table, encrypted credentials)
"""

from dbconnect.store.base import ConfigurationStore
from dbconnect.store.crypto import CredentialCipher
from dbconnect.store.factory import create_configuration_store
from dbconnect.store.file import JsonFileConfigurationStore
from dbconnect.store.memory import InMemoryConfigurationStore
from dbconnect.store.sql import SqlConfigurationStore

__all__ = [
    "ConfigurationStore",
    "CredentialCipher",
    "InMemoryConfigurationStore",
    "JsonFileConfigurationStore",
    "SqlConfigurationStore",
    "create_configuration_store",
]
