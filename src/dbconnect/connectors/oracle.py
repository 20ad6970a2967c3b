from typing import Any, Dict, Optional

from dbconnect.constants import DatabaseType
from .base import BaseConnector


class OracleConnector(BaseConnector):
    """Oracle adapter (python-oracledb driver, thin mode).

    The profile's ``database`` is sent as a service name unless
    ``EngineSettings.oracle_use_service_name`` is off, in which case it is
    used as a SID.
    """

    dialect = DatabaseType.ORACLE
    driver_name = "oracle+oracledb"
    version_query = "SELECT banner FROM v$version WHERE ROWNUM = 1"

    def default_schema(self) -> Optional[str]:
        # Oracle schemas are users
        return super().default_schema() or (self.config.credentials.username or "").upper() or None

    def _url_database(self) -> Optional[str]:
        if self.settings.oracle_use_service_name:
            return None
        return self.config.database

    def _url_query(self) -> Dict[str, str]:
        if self.settings.oracle_use_service_name:
            return {"service_name": self.config.database}
        return {}

    def _connect_args(self) -> Dict[str, Any]:
        credentials = self.config.credentials
        args: Dict[str, Any] = {"tcp_connect_timeout": float(self.settings.connect_timeout)}
        if credentials.ssl:
            args["protocol"] = "tcps"
            args["ssl_server_dn_match"] = credentials.reject_unauthorized
        args.update(super()._connect_args())
        return args
