"""Database connector service.

Overview:
    ``DatabaseConnectorService`` is the entry point for callers. It manages
    connection profiles through a configuration store, connection tests and queries
    remote databases through the dialect adapters and post-processes query
    results with the result transformer.

    All operations are synchronous and independent of each other. Log
    records emitted while an operation runs carry the profile id as
    ``connection_id``.

Example:
    >>> service = DatabaseConnectorService()
    >>> saved = service.save_configuration({
    ...     "name": "Reporting",
    ...     "type": "postgres",
    ...     "host": "db.internal",
    ...     "port": 5432,
    ...     "database": "reporting",
    ...     "username": "reader",
    ...     "password": "secret",
    ... })
    >>> result = service.execute_query(
    ...     saved.id,
    ...     {"table": "orders", "limit": 10},
    ...     options={"sort": [{"field": "created_at", "direction": "desc"}]},
    ... )
"""

from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from dbconnect.common.exceptions import (
    ConnectorError,
    configuration_not_found,
    from_validation_error,
)
from dbconnect.connectors.base import QueryParams
from dbconnect.connectors.registry import ConnectorDispatcher
from dbconnect.constants import DatabaseType
from dbconnect.logging import connection_context, get_logger
from dbconnect.query_builder.factory import QueryBuilderFactory
from dbconnect.settings import get_settings
from dbconnect.settings.main import _Settings
from dbconnect.store.base import ConfigurationStore
from dbconnect.store.factory import create_configuration_store
from dbconnect.transform.transformer import ResultTransformer
from dbconnect.types.config import DatabaseConfig, DatabaseConfigSummary
from dbconnect.types.query import QueryBuilderConfig
from dbconnect.types.result import BatchTestResult, ConnectionTestItem, ConnectionTestResult, QueryResult
from dbconnect.types.schema import TableSchema
from dbconnect.types.transform import TransformOptions

logger = get_logger(__name__)

ConfigInput = Union[DatabaseConfig, Mapping[str, Any]]
QueryInput = Union[str, QueryBuilderConfig, Mapping[str, Any]]
OptionsInput = Union[TransformOptions, Mapping[str, Any], None]


class DatabaseConnectorService:
    """Facade over the configuration store, adapters and transformer.

    Args:
        store: Configuration store; built from settings when omitted
        settings: Settings instance; the process settings when omitted
        transformer: Result transformer; a default one when omitted
    """

    def __init__(
        self,
        store: Optional[ConfigurationStore] = None,
        settings: Optional[_Settings] = None,
        transformer: Optional[ResultTransformer] = None,
    ):
        self.settings = settings or get_settings()
        self.store = store if store is not None else create_configuration_store(self.settings.store)
        self.transformer = transformer or ResultTransformer()
        self.dispatcher = ConnectorDispatcher(self.store, self.settings.engine)

    # ------------------------------------------------------------------
    # Configuration management
    # ------------------------------------------------------------------

    def list_configurations(self) -> List[DatabaseConfigSummary]:
        """Return every stored profile without credentials, ordered by name."""
        return [config.public_view() for config in self.store.list()]

    def get_configuration(self, config_id: str) -> DatabaseConfigSummary:
        """Return one profile without credentials.

        Raises:
            ConnectorError: CONFIG_NOT_FOUND for an unknown id
        """
        config = self.store.get(config_id)
        if config is None:
            raise configuration_not_found(config_id)
        return config.public_view()

    def save_configuration(self, config: ConfigInput) -> DatabaseConfigSummary:
        """Create or update a profile.

        A payload without ``id`` creates a profile with a new id. A payload
        whose id is already stored updates that profile; its ``type`` must
        not change.

        Raises:
            ConnectorError: VALIDATION_ERROR for an invalid payload
        """
        config = self._coerce_config(config)
        with connection_context(config.id):
            saved = self.store.save(config)
        return saved.public_view()

    def delete_configuration(self, config_id: str) -> bool:
        """Delete a profile; False when the id was unknown."""
        with connection_context(config_id):
            deleted = self.store.delete(config_id)
            if deleted:
                logger.info("Database configuration deleted", extra={"config_id": config_id})
        return deleted

    # ------------------------------------------------------------------
    # Connectivity
    # ------------------------------------------------------------------

    def test_connection(self, config: Union[str, ConfigInput]) -> ConnectionTestResult:
        """Test connectivity of a stored profile (by id) or an unsaved profile.

        Connectivity failures are reported in the result, not raised.

        Raises:
            ConnectorError: CONFIG_NOT_FOUND for an unknown id,
                VALIDATION_ERROR for an invalid payload
        """
        if isinstance(config, str):
            with connection_context(config):
                return self.dispatcher.test_connection(config)
        config = self._coerce_config(config)
        with connection_context(config.id):
            return self.dispatcher.test_connection(config)

    def test_connections(self, config_ids: Iterable[str]) -> BatchTestResult:
        """Test connectivity of several stored profiles.

        Each id is handled on its own: an unknown id or any other error is
        recorded on that item and the remaining ids are still tested.
        """
        items: List[ConnectionTestItem] = []
        for config_id in config_ids:
            try:
                result = self.test_connection(config_id)
            except ConnectorError as exc:
                items.append(ConnectionTestItem(config_id=config_id, error=exc.to_dict()))
            else:
                items.append(ConnectionTestItem(config_id=config_id, result=result))
        batch = BatchTestResult(items=items)
        logger.info(
            "Batch connection test finished",
            extra={"total": batch.total, "succeeded": batch.succeeded, "failed": batch.failed},
        )
        return batch

    # ------------------------------------------------------------------
    # Introspection and queries
    # ------------------------------------------------------------------

    def list_tables(self, config_id: str) -> List[str]:
        """Names of the tables in the profile's active schema."""
        with connection_context(config_id):
            return self.dispatcher.list_tables(config_id)

    def get_table_schema(self, config_id: str, table_name: str) -> TableSchema:
        """Describe one table of the profile's active schema.

        Raises:
            ConnectorError: TABLE_NOT_FOUND when the table does not exist
        """
        with connection_context(config_id):
            return self.dispatcher.get_table_schema(config_id, table_name)

    def execute_query(
        self,
        config_id: str,
        query: QueryInput,
        options: OptionsInput = None,
        params: QueryParams = None,
    ) -> QueryResult:
        """Run raw SQL or a structured query and optionally transform the rows.

        Args:
            config_id: Stored profile id
            query: SQL text, a ``QueryBuilderConfig`` or its dict form
            options: Transform options applied to the raw result
            params: Bind parameters for SQL text, by name (mapping) or by
                position (sequence, referenced as ``$1``, ``$2``...)

        Returns:
            QueryResult, transformed when ``options`` is given

        Raises:
            ConnectorError: CONFIG_NOT_FOUND, VALIDATION_ERROR,
                CONNECTION_ERROR or QUERY_EXECUTION_ERROR
        """
        with connection_context(config_id):
            result = self.dispatcher.execute(config_id, query, params)
            if options is None:
                return result
            return self.transformer.transform(result, options)

    def build_query(
        self,
        dialect: Union[DatabaseType, str],
        config: Union[QueryBuilderConfig, Mapping[str, Any]],
    ) -> str:
        """Render a structured query for ``dialect`` without executing it."""
        return QueryBuilderFactory.create(dialect).build_query(config)

    @staticmethod
    def _coerce_config(config: ConfigInput) -> DatabaseConfig:
        if isinstance(config, DatabaseConfig):
            return config
        try:
            return DatabaseConfig.model_validate(config)
        except ValidationError as exc:
            raise from_validation_error(exc, "database configuration") from exc
