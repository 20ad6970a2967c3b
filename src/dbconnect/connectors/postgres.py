from typing import Any, Dict

from dbconnect.constants import DatabaseType
from .base import BaseConnector


class PostgresConnector(BaseConnector):
    """PostgreSQL adapter (psycopg2 driver)."""

    dialect = DatabaseType.POSTGRES
    driver_name = "postgresql+psycopg2"
    version_query = "SELECT version()"

    def _connect_args(self) -> Dict[str, Any]:
        credentials = self.config.credentials
        args: Dict[str, Any] = {
            "connect_timeout": self.settings.connect_timeout,
            "application_name": "dbconnect",
        }
        if credentials.ssl:
            args["sslmode"] = "verify-full" if credentials.reject_unauthorized else "require"
        args.update(super()._connect_args())
        return args
