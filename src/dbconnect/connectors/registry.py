"""Connector registry and dispatcher.

Overview:
    ``ConnectorRegistry`` maps a profile's dialect to the adapter class that
    speaks it. ``ConnectorDispatcher`` sits on top: it resolves a profile id
    through the configuration store, renders structured queries with the
    dialect's query builder, opens an adapter for the duration of one
    operation and records successful contact on the profile.

Thread Safety:
    Adapters are created per operation and closed afterwards, so no pool is
    shared between concurrent operations on the same profile.
"""

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterator, List, Mapping, Optional, Type, Union

from pydantic import ValidationError
from typing_extensions import assert_never

from dbconnect.common.exceptions import configuration_not_found, from_validation_error, validation_error
from dbconnect.constants import DatabaseType
from dbconnect.logging import get_logger
from dbconnect.query_builder.factory import QueryBuilderFactory
from dbconnect.settings import EngineSettings
from dbconnect.types.config import DatabaseConfig
from dbconnect.types.query import QueryBuilderConfig
from dbconnect.types.result import ConnectionTestResult, QueryResult
from dbconnect.types.schema import TableSchema
from .base import BaseConnector, QueryParams
from .mysql import MySQLConnector
from .oracle import OracleConnector
from .postgres import PostgresConnector
from .sqlserver import SQLServerConnector

if TYPE_CHECKING:
    from dbconnect.store.base import ConfigurationStore


logger = get_logger(__name__)


class ConnectorRegistry:
    """Factory for dialect adapters.

    Example:
        >>> connector = ConnectorRegistry.create(config)
        >>> isinstance(connector, PostgresConnector)
        True
    """

    @staticmethod
    def connector_class(dialect: DatabaseType) -> Type[BaseConnector]:
        """Return the adapter class for ``dialect``."""
        match dialect:
            case DatabaseType.POSTGRES:
                return PostgresConnector
            case DatabaseType.MYSQL:
                return MySQLConnector
            case DatabaseType.SQLSERVER:
                return SQLServerConnector
            case DatabaseType.ORACLE:
                return OracleConnector
            case _:
                assert_never(dialect)

    @classmethod
    def create(cls, config: DatabaseConfig, settings: Optional[EngineSettings] = None) -> BaseConnector:
        """Create an adapter for ``config``.

        Args:
            config: Complete connection profile
            settings: Optional pool and driver options

        Returns:
            Adapter instance; no connection is opened until first use
        """
        connector_cls = cls.connector_class(config.type)
        logger.debug(
            "Creating connector",
            extra={"db.platform": config.type.value, "connection_id": config.id},
        )
        return connector_cls(config, settings)


def create_connector(config: DatabaseConfig, settings: Optional[EngineSettings] = None) -> BaseConnector:
    """Create the adapter for a connection profile."""
    return ConnectorRegistry.create(config, settings)


class ConnectorDispatcher:
    """Route operations on stored profiles to their adapters.

    Every operation that reaches the remote database successfully updates
    the profile's ``last_connected`` timestamp.
    """

    def __init__(self, store: "ConfigurationStore", settings: Optional[EngineSettings] = None):
        self.store = store
        self.settings = settings

    def resolve(self, config_id: str) -> DatabaseConfig:
        """Load a complete profile.

        Raises:
            ConnectorError: CONFIG_NOT_FOUND when no profile has that id
        """
        config = self.store.get(config_id)
        if config is None:
            raise configuration_not_found(config_id)
        return config

    @contextmanager
    def open(self, config: DatabaseConfig) -> Iterator[BaseConnector]:
        """Open an adapter for one operation and release its pool afterwards."""
        connector = ConnectorRegistry.create(config, self.settings)
        try:
            yield connector
        finally:
            connector.close()

    def render(
        self,
        config: DatabaseConfig,
        query: Union[str, QueryBuilderConfig, Mapping[str, Any]],
    ) -> str:
        """Return SQL text for raw SQL or a structured query description."""
        if isinstance(query, str):
            if not query.strip():
                raise validation_error("Query text must not be empty", field="query")
            return query
        if not isinstance(query, QueryBuilderConfig):
            try:
                query = QueryBuilderConfig.model_validate(query)
            except ValidationError as exc:
                raise from_validation_error(exc, "query description") from exc
        return QueryBuilderFactory.create(config.type).build_query(query)

    def test_connection(self, config: Union[str, DatabaseConfig]) -> ConnectionTestResult:
        """Test connectivity of a stored profile by id, or of an unsaved profile.

        Only a successful test of a profile loaded from the store updates
        its last-connected time; an unsaved payload never does, even when it
        carries the id of a stored profile.
        """
        stored = isinstance(config, str)
        if stored:
            config = self.resolve(config)
        with self.open(config) as connector:
            result = connector.test_connection()
        if result.success and stored:
            self._record_contact(config)
        return result

    def execute(
        self,
        config_id: str,
        query: Union[str, QueryBuilderConfig, Mapping[str, Any]],
        params: QueryParams = None,
    ) -> QueryResult:
        config = self.resolve(config_id)
        sql = self.render(config, query)
        with self.open(config) as connector:
            result = connector.execute_query(sql, params)
        self._record_contact(config)
        return result

    def list_tables(self, config_id: str) -> List[str]:
        config = self.resolve(config_id)
        with self.open(config) as connector:
            tables = connector.list_tables()
        self._record_contact(config)
        return tables

    def get_table_schema(self, config_id: str, table_name: str) -> TableSchema:
        config = self.resolve(config_id)
        with self.open(config) as connector:
            schema = connector.get_table_schema(table_name)
        self._record_contact(config)
        return schema

    def _record_contact(self, config: DatabaseConfig) -> None:
        if config.id is None:
            return
        self.store.touch_last_connected(config.id)
