from typing import Any, Dict, Optional, Tuple

from sqlalchemy.engine import Engine

from dbconnect.constants import DatabaseType
from .base import BRACKETED_POSITIONAL_PLACEHOLDER, BaseConnector


class SQLServerConnector(BaseConnector):
    """Microsoft SQL Server adapter (pyodbc driver).

    Driver options from the profile become ODBC connection keywords.
    Integrated authentication sends ``Trusted_Connection=yes`` and no login.
    """

    dialect = DatabaseType.SQLSERVER
    driver_name = "mssql+pyodbc"
    version_query = "SELECT @@VERSION"
    placeholder_pattern = BRACKETED_POSITIONAL_PLACEHOLDER

    def _login(self) -> Tuple[Optional[str], Optional[str]]:
        if self.config.credentials.integrated_auth:
            return None, None
        return super()._login()

    def _url_query(self) -> Dict[str, str]:
        credentials = self.config.credentials
        query = {
            "driver": self.settings.sqlserver_odbc_driver,
            "Encrypt": "yes" if credentials.ssl else "no",
            "TrustServerCertificate": "no" if credentials.reject_unauthorized else "yes",
        }
        if credentials.integrated_auth:
            query["Trusted_Connection"] = "yes"
        query.update({key: str(value) for key, value in credentials.options.items()})
        return query

    def _connect_args(self) -> Dict[str, Any]:
        return {"timeout": self.settings.connect_timeout}

    def _create_engine(self) -> Engine:
        import pyodbc

        # Disable pyodbc pooling as SQLAlchemy handles it
        pyodbc.pooling = False
        return super()._create_engine()
