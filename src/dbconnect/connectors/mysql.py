from typing import Any, Dict, Optional

from dbconnect.constants import DatabaseType
from .base import BaseConnector


class MySQLConnector(BaseConnector):
    """MySQL / MariaDB adapter (PyMySQL driver)."""

    dialect = DatabaseType.MYSQL
    driver_name = "mysql+pymysql"
    version_query = "SELECT VERSION()"

    def default_schema(self) -> Optional[str]:
        # A MySQL schema is the database itself
        return super().default_schema() or self.config.database

    def _url_query(self) -> Dict[str, str]:
        return {"charset": "utf8mb4"}

    def _connect_args(self) -> Dict[str, Any]:
        credentials = self.config.credentials
        args: Dict[str, Any] = {"connect_timeout": self.settings.connect_timeout}
        if credentials.ssl:
            args["ssl"] = {
                "check_hostname": credentials.reject_unauthorized,
                "verify_mode": credentials.reject_unauthorized,
            }
        args.update(super()._connect_args())
        return args
