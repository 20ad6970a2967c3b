"""Settings module providing configuration management for dbconnect.

Settings are organized into domain groups built on pydantic-settings:

    - base.py: ConnectorBaseSettings shared model config
    - store.py: StoreSettings (``DBCONNECT_STORE_*``) selecting the
      configuration store backend and the credential encryption key
    - engine.py: EngineSettings (``DBCONNECT_ENGINE_*``) with pool sizes,
      timeouts and driver options
    - main.py: _Settings aggregating the groups, plus get_settings()

Configuration Sources (precedence order):
    1. Environment Variables (highest priority)
    2. ``.env`` file in the working directory
    3. Default Values in code (lowest priority)

Quick Start:
    >>> from dbconnect.settings import get_settings
    >>> settings = get_settings()
    >>> settings.store.backend
    <StoreBackend.MEMORY: 'memory'>
"""

from .main import _Settings, get_settings, _reload_settings
from .base import ConnectorBaseSettings
from .engine import EngineSettings
from .store import StoreSettings

__all__ = [
    "get_settings",
    "ConnectorBaseSettings",
    "EngineSettings",
    "StoreSettings",
]
