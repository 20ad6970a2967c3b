"""Configuration store factory."""

from typing import Optional

from typing_extensions import assert_never

from dbconnect.constants import StoreBackend
from dbconnect.logging import get_logger
from dbconnect.settings import StoreSettings, get_settings
from .base import ConfigurationStore
from .crypto import CredentialCipher
from .file import JsonFileConfigurationStore
from .memory import InMemoryConfigurationStore
from .sql import SqlConfigurationStore

logger = get_logger(__name__)


def create_configuration_store(settings: Optional[StoreSettings] = None) -> ConfigurationStore:
    """Create the store selected by ``settings.backend``.

    Args:
        settings: Store settings; defaults to ``get_settings().store``

    Returns:
        A ready-to-use configuration store
    """
    settings = settings or get_settings().store
    backend = settings.backend
    logger.debug("Creating configuration store", extra={"store": backend.value})

    match backend:
        case StoreBackend.MEMORY:
            return InMemoryConfigurationStore()
        case StoreBackend.FILE:
            return JsonFileConfigurationStore(
                settings.path,
                cipher=CredentialCipher(settings.encryption_key),
            )
        case StoreBackend.SQL:
            return SqlConfigurationStore(
                url=settings.url,
                cipher=CredentialCipher(settings.encryption_key),
                table_name=settings.table_name,
            )
        case _:
            assert_never(backend)
