"""Shared fixtures for dbconnect tests."""

from typing import Any, Dict

import pytest
from cryptography.fernet import Fernet

from dbconnect.store.crypto import CredentialCipher
from dbconnect.store.memory import InMemoryConfigurationStore
from dbconnect.types.config import DatabaseConfig


def make_config_data(**overrides: Any) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "name": "Reporting",
        "description": "Read replica used by dashboards",
        "type": "postgres",
        "host": "db.internal",
        "port": 5432,
        "database": "reporting",
        "username": "reader",
        "password": "s3cret",
        "tags": ["analytics", "replica"],
    }
    data.update(overrides)
    return data


@pytest.fixture
def config_data() -> Dict[str, Any]:
    return make_config_data()


@pytest.fixture
def config(config_data) -> DatabaseConfig:
    return DatabaseConfig.model_validate(config_data)


@pytest.fixture
def memory_store() -> InMemoryConfigurationStore:
    return InMemoryConfigurationStore()


@pytest.fixture
def encryption_key() -> str:
    return Fernet.generate_key().decode()


@pytest.fixture
def cipher(encryption_key) -> CredentialCipher:
    return CredentialCipher(encryption_key)
