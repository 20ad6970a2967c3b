from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import SettingsConfigDict

from dbconnect.constants import StoreBackend
from .base import ConnectorBaseSettings


class StoreSettings(ConnectorBaseSettings):
    """Configuration store backend selection.

    Environment variables use the ``DBCONNECT_STORE_`` prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="DBCONNECT_STORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    backend: StoreBackend = Field(
        default=StoreBackend.MEMORY,
        description="Backend holding connection profiles: memory, file or sql"
    )
    path: Path = Field(
        default=Path("dbconnect_configurations.json"),
        description="JSON document used by the file backend"
    )
    url: Optional[str] = Field(
        default=None,
        description="SQLAlchemy URL of the database used by the sql backend"
    )
    table_name: str = Field(
        default="external_databases",
        min_length=1,
        description="Table holding connection profiles for the sql backend"
    )
    encryption_key: Optional[SecretStr] = Field(
        default=None,
        description=(
            "Fernet key used to encrypt stored credentials. When unset a "
            "key is generated per process and stored credentials become "
            "unreadable after restart."
        )
    )

    @field_validator("url")
    @classmethod
    def _blank_url_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v
