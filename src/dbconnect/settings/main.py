import logging
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from .base import ConnectorBaseSettings
from .engine import EngineSettings
from .store import StoreSettings


class _Settings(ConnectorBaseSettings):

    model_config = SettingsConfigDict(
        env_prefix="DBCONNECT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__"
    )

    app_env: str = Field(
        default="dev",
        description="Deployment environment attached to log records (dev, qa, prod, ...)"
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level used by setup_logging()"
    )
    log_format: Literal["json", "text"] = Field(
        default="json",
        description="Log line rendering: JSON objects or plain text"
    )
    log_driver_level: str = Field(
        default="WARNING",
        description="Level for SQLAlchemy and database driver loggers"
    )
    store: StoreSettings = Field(
        default_factory=StoreSettings,
        description="Configuration store backend"
    )
    engine: EngineSettings = Field(
        default_factory=EngineSettings,
        description="Connection pool and driver options"
    )

    @field_validator("log_level", "log_driver_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level '{v}'")
        return level


# Singleton instance
_settings: Optional[_Settings] = None


def get_settings(force_reload: bool = False) -> _Settings:
    """Get the singleton settings instance for the application.

    Settings are loaded from environment variables (and an optional
    ``.env`` file) on first access.

    Args:
        force_reload: If True, creates a new Settings instance even if
                     one already exists. Useful for testing or when
                     environment variables have changed.

    Returns:
        Settings: The singleton Settings instance

    Example:
        ```python
        settings = get_settings()
        backend = settings.store.backend
        pool_size = settings.engine.pool_size
        ```
    """
    global _settings

    if _settings is None or force_reload:
        _settings = _Settings()

    return _settings


def _reload_settings() -> _Settings:
    """Force reload of settings.

    This is primarily for testing purposes where you need to reset
    the singleton instance.

    Returns:
        A fresh _Settings instance
    """
    global _settings
    _settings = None
    return get_settings(force_reload=True)
