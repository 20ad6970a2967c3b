from typing import Dict

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from .base import ConnectorBaseSettings


class EngineSettings(ConnectorBaseSettings):
    """Connection pool and driver options shared by every adapter.

    Environment variables use the ``DBCONNECT_ENGINE_`` prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="DBCONNECT_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    pool_size: int = Field(default=5, ge=1, le=100)
    max_overflow: int = Field(default=2, ge=0)
    pool_timeout: int = Field(default=30, ge=1, description="Seconds to wait for a pooled connection")
    pool_recycle: int = Field(default=300, ge=-1, description="Seconds before a pooled connection is recycled")
    connect_timeout: int = Field(default=10, ge=1, description="Driver login timeout in seconds")

    default_schemas: Dict[str, str] = Field(
        default_factory=lambda: {"postgres": "public", "sqlserver": "dbo"},
        description=(
            "Schema used for introspection when a profile has none, keyed by "
            "dialect. MySQL falls back to the database and Oracle to the user."
        )
    )
    sqlserver_odbc_driver: str = Field(
        default="ODBC Driver 18 for SQL Server",
        description="ODBC driver name passed to pyodbc"
    )
    oracle_use_service_name: bool = Field(
        default=True,
        description="Treat the profile's database as an Oracle service name rather than a SID"
    )
