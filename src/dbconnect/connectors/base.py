import re
import time
from abc import ABC
from contextlib import contextmanager
from typing import Any, ClassVar, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import URL, Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.pool import QueuePool
from sqlalchemy.sql.elements import TextClause

from dbconnect.common.exceptions import (
    ConnectorError,
    ErrorCode,
    connection_error,
    introspection_error,
    query_execution_error,
    table_not_found,
    validation_error,
)
from dbconnect.constants import DatabaseType
from dbconnect.logging import get_logger
from dbconnect.settings import EngineSettings, get_settings
from dbconnect.types.config import DatabaseConfig
from dbconnect.types.result import ConnectionTestResult, QueryMetadata, QueryResult
from dbconnect.types.schema import ColumnSchema, ForeignKeySchema, IndexSchema, TableSchema
from dbconnect.utils.decorators import traced

logger = get_logger(__name__)

QueryParams = Union[Mapping[str, Any], Sequence[Any], None]

# Quoted strings, quoted identifiers and comments; placeholders inside them
# are left alone
_QUOTED_SEGMENTS = (
    r"'(?:[^']|'')*'",
    r'"(?:[^"]|"")*"',
    r"`(?:[^`]|``)*`",
    r"--[^\n]*",
    r"/\*.*?\*/",
)


def _placeholder_pattern(*quoted_segments: str) -> "re.Pattern[str]":
    """Match quoted segments or a ``$n`` placeholder, capturing only ``n``."""
    return re.compile("|".join((*quoted_segments, r"\$(\d+)")), re.DOTALL)


# PostgreSQL-style positional placeholders ($1, $2, ...)
POSITIONAL_PLACEHOLDER = _placeholder_pattern(*_QUOTED_SEGMENTS)
# SQL Server also delimits identifiers with brackets
BRACKETED_POSITIONAL_PLACEHOLDER = _placeholder_pattern(*_QUOTED_SEGMENTS, r"\[[^\]]*\]")

# Lower-cased driver message fragments for failed logins, by dialect family
_AUTH_FAILURE_MARKERS = (
    "password authentication failed",
    "access denied for user",
    "login failed for user",
    "ora-01017",
)
_TIMEOUT_MARKERS = ("timeout expired", "timed out", "ora-12170")


def classify_connect_failure(exc: Exception) -> ErrorCode:
    """Map a driver or pool failure raised while connecting to an error code."""
    if isinstance(exc, PoolTimeoutError):
        return ErrorCode.TIMEOUT_ERROR
    message = str(exc).lower()
    if any(marker in message for marker in _AUTH_FAILURE_MARKERS):
        return ErrorCode.AUTH_ERROR
    if any(marker in message for marker in _TIMEOUT_MARKERS):
        return ErrorCode.TIMEOUT_ERROR
    return ErrorCode.CONNECTION_ERROR


class BaseConnector(ABC):
    """SQLAlchemy-based adapter for one remote database.

    This class provides the full adapter behaviour (connection test, query
    execution and catalog introspection) on top of SQLAlchemy. Dialect
    subclasses only customize how the engine URL and driver arguments are
    built, through hooks.

    Dialect Customization:
        Subclasses can override these hooks:
        - _url_database() / _url_query(): Database and query part of the URL
        - _login(): Username and password placed in the URL
        - _connect_args(): Keyword arguments for the DBAPI ``connect()``
        - _apply_connection_settings(): Per-connection SET commands
        - default_schema(): Schema used when the profile has none

    Each adapter owns its own connection pool, sized from ``EngineSettings``.
    Pools are released by ``close()``; adapters also work as context
    managers.

    Example:
        >>> with PostgresConnector(config) as connector:
        ...     result = connector.execute_query("SELECT * FROM users WHERE id = :id", {"id": 7})
        >>> result.row_count
        1
    """

    dialect: ClassVar[DatabaseType]
    driver_name: ClassVar[str]
    version_query: ClassVar[str] = "SELECT version()"
    placeholder_pattern: ClassVar["re.Pattern[str]"] = POSITIONAL_PLACEHOLDER

    def __init__(self, config: DatabaseConfig, settings: Optional[EngineSettings] = None):
        """Initialize the adapter.

        Args:
            config: Connection profile, credentials included
            settings: Pool and driver options; defaults to ``get_settings().engine``
        """
        self.config = config
        self.settings = settings or get_settings().engine
        self._engine: Optional[Engine] = None
        self._connection_info: Dict[str, Any] = {
            "platform": self.dialect.value,
            "host": config.host,
            "port": config.port,
            "database": config.database,
            "connection_id": config.id,
        }

    def __enter__(self) -> "BaseConnector":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Engine lifecycle
    # ------------------------------------------------------------------

    @property
    def engine(self) -> Engine:
        """Get or create SQLAlchemy engine with lazy initialization.

        Returns:
            Engine: Configured SQLAlchemy engine
        """
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    def build_url(self) -> URL:
        """Build the SQLAlchemy URL for this profile."""
        username, password = self._login()
        return URL.create(
            self.driver_name,
            username=username or None,
            password=password or None,
            host=self.config.host,
            port=self.config.port,
            database=self._url_database(),
            query=self._url_query(),
        )

    def _login(self) -> Tuple[Optional[str], Optional[str]]:
        credentials = self.config.credentials
        return credentials.username, credentials.password.get_secret_value()

    def _url_database(self) -> Optional[str]:
        return self.config.database

    def _url_query(self) -> Dict[str, str]:
        return {}

    def _connect_args(self) -> Dict[str, Any]:
        return {key: value for key, value in self.config.credentials.options.items()}

    def _create_engine(self) -> Engine:
        """Create SQLAlchemy engine with connection pooling.

        Returns:
            Engine: Configured SQLAlchemy engine

        Raises:
            ConnectorError: CONNECTION_ERROR if the driver is unavailable or
                the URL is rejected
        """
        platform = self._connection_info["platform"]
        try:
            engine = create_engine(
                self.build_url(),
                poolclass=QueuePool,
                pool_pre_ping=True,  # Verify connections before use
                pool_size=self.settings.pool_size,
                max_overflow=self.settings.max_overflow,
                pool_timeout=self.settings.pool_timeout,
                pool_recycle=self.settings.pool_recycle,
                connect_args=self._connect_args(),
            )
        except Exception as e:
            raise connection_error(
                f"Failed to create {platform} engine",
                service=platform,
                host=self.config.host,
                cause=e
            ) from e

        logger.info(
            f"Created {platform} engine",
            extra={"db.platform": platform, "host": self.config.host, "database": self.config.database},
        )
        return engine

    @contextmanager
    def _get_connection(self) -> Iterator[Connection]:
        """Get a database connection from the pool.

        Yields:
            Connection: Database connection with dialect-specific settings applied

        Raises:
            ConnectorError: AUTH_ERROR for rejected logins, TIMEOUT_ERROR
                (retryable) when the pool or the server does not answer in
                time, CONNECTION_ERROR otherwise
        """
        platform = self._connection_info["platform"]
        try:
            conn = self.engine.connect()
        except ConnectorError:
            raise
        except Exception as e:
            message = (
                f"Failed to connect to {platform} database '{self.config.database}' "
                f"at {self.config.host}:{self.config.port}"
            )
            code = classify_connect_failure(e)
            if code is ErrorCode.CONNECTION_ERROR:
                raise connection_error(message, service=platform, host=self.config.host, cause=e) from e
            raise ConnectorError.from_error_code(
                code,
                message,
                details={"service": platform, "host": self.config.host},
                cause=e,
            ) from e
        try:
            self._apply_connection_settings(conn)
            yield conn
        finally:
            conn.close()

    def _apply_connection_settings(self, conn: Connection) -> None:
        """Apply dialect-specific connection settings.

        Override this method in subclasses to apply SET commands or other
        per-connection configuration.

        Args:
            conn: SQLAlchemy Connection object
        """
        pass

    def close(self) -> None:
        """Dispose of the connection pool."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    # ------------------------------------------------------------------
    # Schema resolution
    # ------------------------------------------------------------------

    def default_schema(self) -> Optional[str]:
        """Schema used for introspection when the profile names none."""
        return self.settings.default_schemas.get(self.dialect.value)

    @property
    def schema_name(self) -> Optional[str]:
        return self.config.schema_name or self.default_schema()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def _span_attributes(self, query: Optional[str] = None, *, operation: str) -> Dict[str, Any]:
        """Build OpenTelemetry span attributes for SQL operations."""
        attributes: Dict[str, Any] = {
            "db.system": self._connection_info["platform"],
            "db.operation": operation,
            "db.name": self.config.database,
            "server.address": self.config.host,
            "dbconnect.connection_id": self.config.id,
        }
        sanitized_query = (query or "").strip()
        if sanitized_query:
            if len(sanitized_query) > 4096:
                sanitized_query = f"{sanitized_query[:4093]}..."
            attributes["db.statement"] = sanitized_query
        return attributes

    @traced(
        span_name="dbconnect.connector.test_connection",
        attribute_getter=lambda self: self._span_attributes(operation="test_connection"),
        result_attributes=lambda result: {"dbconnect.connection_test.success": result.success},
    )
    def test_connection(self) -> ConnectionTestResult:
        """Check connectivity with a version query.

        Failures are reported in the result rather than raised.

        Returns:
            ConnectionTestResult with latency in milliseconds and the
            server version on success
        """
        platform = self._connection_info["platform"]
        start_time = time.perf_counter()
        try:
            with self._get_connection() as conn:
                version = conn.execute(text(self.version_query)).scalar()
        except Exception as exc:
            reason = exc.message if isinstance(exc, ConnectorError) else str(exc)
            if isinstance(exc, ConnectorError) and exc.cause is not None:
                reason = str(exc.cause).strip().splitlines()[0]
            logger.warning(
                "Connection test failed",
                extra={"db.platform": platform, "host": self.config.host, "error": reason},
            )
            self.close()
            return ConnectionTestResult(success=False, message=f"Connection failed: {reason}")

        latency = round((time.perf_counter() - start_time) * 1000, 2)
        logger.info(
            "Connection test succeeded",
            extra={"db.platform": platform, "host": self.config.host, "latency_ms": latency},
        )
        return ConnectionTestResult(
            success=True,
            message=f"Successfully connected to {platform} database '{self.config.database}'",
            latency=latency,
            server_info={
                "dialect": platform,
                "version": str(version) if version is not None else None,
                "host": self.config.host,
                "database": self.config.database,
            },
        )

    def _prepare_statement(self, sql: str, params: QueryParams) -> Tuple[TextClause, Dict[str, Any]]:
        """Bind parameters for ``text()`` execution.

        Mappings bind by name (``:name``). Sequences bind positionally as
        ``:p1``, ``:p2``, ...; ``$1`` style placeholders are rewritten to
        match.
        """
        if params is None:
            return text(sql), {}
        if isinstance(params, Mapping):
            return text(sql), dict(params)
        if isinstance(params, (str, bytes)):
            raise validation_error("Query parameters must be a mapping or a sequence", field="params")
        sql = self.placeholder_pattern.sub(
            lambda match: f":p{match.group(1)}" if match.group(1) else match.group(0), sql
        )
        return text(sql), {f"p{index}": value for index, value in enumerate(params, start=1)}

    @traced(
        span_name="dbconnect.connector.execute",
        attribute_getter=lambda self, sql, params=None: self._span_attributes(sql, operation="execute"),
        result_attributes=lambda result: {"db.response.returned_rows": result.row_count},
    )
    def execute_query(self, sql: str, params: QueryParams = None) -> QueryResult:
        """Execute SQL text and return the fetched rows.

        Args:
            sql: SQL text. Named parameters use ``:name``.
            params: Optional mapping or positional sequence of parameters

        Returns:
            QueryResult with rows keyed by column name. Statements that
            return no rows report the affected row count.

        Raises:
            ConnectorError: VALIDATION_ERROR for empty SQL, CONNECTION_ERROR
                when no connection can be opened, QUERY_EXECUTION_ERROR when
                the engine rejects the statement
        """
        if not isinstance(sql, str) or not sql.strip():
            raise validation_error("Query text must not be empty", field="query")

        statement, bind = self._prepare_statement(sql, params)
        platform = self._connection_info["platform"]
        payload: Dict[str, Any] = {"db.platform": platform, "connection_id": self.config.id}
        start_time = time.perf_counter()

        with self._get_connection() as conn:
            try:
                result = conn.execute(statement, bind)
                if result.returns_rows:
                    columns = list(result.keys())
                    rows = [dict(row) for row in result.mappings()]
                    row_count = len(rows)
                else:
                    columns, rows = [], []
                    row_count = max(result.rowcount or 0, 0)
                conn.commit()
            except SQLAlchemyError as exc:
                duration = time.perf_counter() - start_time
                logger.error(
                    "SQL query failed",
                    extra={**payload, "duration.seconds": f"{duration:.6f}", "error": str(exc)},
                )
                raise query_execution_error(
                    f"Query execution failed on {platform}: {str(getattr(exc, 'orig', None) or exc).strip()}",
                    query=sql,
                    cause=exc
                ) from exc

        execution_ms = round((time.perf_counter() - start_time) * 1000, 2)
        logger.info(
            "SQL query executed",
            extra={**payload, "duration.ms": execution_ms, "row_count": row_count},
        )
        return QueryResult(
            columns=columns,
            rows=rows,
            row_count=row_count,
            execution_time=execution_ms,
            metadata=QueryMetadata(
                query=sql,
                total_rows=row_count,
                dialect=self.dialect,
                connection_id=self.config.id,
            ),
        )

    @traced(
        span_name="dbconnect.connector.list_tables",
        attribute_getter=lambda self: self._span_attributes(operation="list_tables"),
        result_attributes=lambda tables: {"dbconnect.table_count": len(tables)},
    )
    def list_tables(self) -> List[str]:
        """List base tables in the profile's schema, sorted by name."""
        schema = self.schema_name
        with self._get_connection() as conn:
            try:
                tables = inspect(conn).get_table_names(schema=schema)
            except SQLAlchemyError as exc:
                raise introspection_error(
                    f"Failed to list tables in schema '{schema}'",
                    cause=exc,
                    details={"schema": schema},
                ) from exc
        return sorted(tables)

    @traced(
        span_name="dbconnect.connector.get_table_schema",
        attribute_getter=lambda self, table_name: {
            **self._span_attributes(operation="get_table_schema"),
            "db.sql.table": table_name,
        },
    )
    def get_table_schema(self, table_name: str) -> TableSchema:
        """Describe columns, keys and indexes of ``table_name``.

        Raises:
            ConnectorError: TABLE_NOT_FOUND when the table does not exist,
                INTROSPECTION_ERROR when the catalog cannot be read
        """
        if not isinstance(table_name, str) or not table_name.strip():
            raise validation_error("Table name must not be empty", field="table_name")
        table_name = table_name.strip()
        schema = self.schema_name

        with self._get_connection() as conn:
            try:
                inspector = inspect(conn)
                if not inspector.has_table(table_name, schema=schema):
                    raise table_not_found(table_name, schema)
                raw_columns = inspector.get_columns(table_name, schema=schema)
                primary_key = inspector.get_pk_constraint(table_name, schema=schema) or {}
                foreign_keys = inspector.get_foreign_keys(table_name, schema=schema)
                indexes = inspector.get_indexes(table_name, schema=schema)
                sql_dialect = conn.dialect
            except SQLAlchemyError as exc:
                raise introspection_error(
                    f"Failed to read schema of table '{table_name}'",
                    table_name=table_name,
                    cause=exc,
                ) from exc

        pk_columns = list(primary_key.get("constrained_columns") or [])
        fk_columns = {column for fk in foreign_keys for column in fk.get("constrained_columns") or []}

        return TableSchema(
            table_name=table_name,
            schema_name=schema,
            columns=[
                self._column_schema(column, sql_dialect, pk_columns, fk_columns)
                for column in raw_columns
            ],
            primary_key=pk_columns,
            foreign_keys=[
                ForeignKeySchema(
                    name=fk.get("name"),
                    columns=list(fk.get("constrained_columns") or []),
                    referenced_schema=fk.get("referred_schema"),
                    referenced_table=fk["referred_table"],
                    referenced_columns=list(fk.get("referred_columns") or []),
                )
                for fk in foreign_keys
            ],
            indexes=[
                IndexSchema(
                    name=index.get("name"),
                    columns=[column for column in index.get("column_names") or [] if column],
                    is_unique=bool(index.get("unique")),
                )
                for index in indexes
            ],
        )

    @staticmethod
    def _column_schema(
        column: Dict[str, Any],
        sql_dialect: Any,
        pk_columns: List[str],
        fk_columns: set,
    ) -> ColumnSchema:
        column_type = column["type"]
        try:
            type_name = column_type.compile(dialect=sql_dialect)
        except Exception:  # dialect-specific types without a compiler
            type_name = type(column_type).__name__.upper()

        def _int_attr(name: str) -> Optional[int]:
            value = getattr(column_type, name, None)
            return value if isinstance(value, int) and not isinstance(value, bool) else None

        default = column.get("default")
        return ColumnSchema(
            name=column["name"],
            type=type_name,
            nullable=bool(column.get("nullable", True)),
            max_length=_int_attr("length"),
            precision=_int_attr("precision"),
            scale=_int_attr("scale"),
            default=str(default) if default is not None else None,
            is_primary_key=column["name"] in pk_columns,
            is_foreign_key=column["name"] in fk_columns,
            comment=column.get("comment"),
        )

    def get_connection_info(self) -> Dict[str, Any]:
        """Get connection information for debugging/logging.

        Returns:
            Dictionary with connection details (never credentials)
        """
        return dict(self._connection_info)
