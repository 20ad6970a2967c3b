import json
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    delete,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from dbconnect.common.exceptions import ConnectorError, ErrorCode, configuration_error, store_error
from dbconnect.logging import get_logger
from dbconnect.types.config import DatabaseConfig, DatabaseCredentials
from dbconnect.utils.datetime import to_naive_utc
from .base import ConfigurationStore
from .crypto import CredentialCipher

logger = get_logger(__name__)


def build_config_table(metadata: MetaData, table_name: str = "external_databases") -> Table:
    """Table layout for stored profiles; credentials hold a Fernet token."""
    return Table(
        table_name,
        metadata,
        Column("id", String(64), primary_key=True),
        Column("name", String(255), nullable=False),
        Column("description", Text),
        Column("type", String(20), nullable=False),
        Column("host", String(255), nullable=False),
        Column("port", Integer, nullable=False),
        Column("database", String(255), nullable=False),
        Column("schema", String(255)),
        Column("credentials", Text, nullable=False),
        Column("tags", Text),
        Column("is_active", Boolean, nullable=False, default=True),
        Column("created_by", String(255), nullable=False, default="system"),
        Column("created_at", DateTime, nullable=False),
        Column("updated_at", DateTime, nullable=False),
        Column("last_connected", DateTime),
    )


class SqlConfigurationStore(ConfigurationStore):
    """Profiles persisted in a relational table through SQLAlchemy.

    The table is created on first use. Timestamps are stored as naive UTC.

    Example:
        >>> store = SqlConfigurationStore(url="postgresql+psycopg2://app@localhost/app")
        >>> saved = store.save(config)
    """

    backend_name = "sql"

    def __init__(
        self,
        url: Optional[str] = None,
        engine: Optional[Engine] = None,
        cipher: Optional[CredentialCipher] = None,
        table_name: str = "external_databases",
    ):
        super().__init__()
        if engine is None:
            if not url:
                raise configuration_error(
                    "The sql configuration store needs a database URL",
                    config_key="DBCONNECT_STORE_URL",
                )
            engine = create_engine(url, pool_pre_ping=True)
        self.engine = engine
        self.cipher = cipher or CredentialCipher()
        self.metadata = MetaData()
        self.table = build_config_table(self.metadata, table_name)
        try:
            self.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise store_error(
                f"Failed to prepare configuration table '{table_name}'",
                backend=self.backend_name,
                cause=exc,
            ) from exc

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    def _to_row(self, config: DatabaseConfig) -> Dict[str, Any]:
        return {
            "id": config.id,
            "name": config.name,
            "description": config.description,
            "type": config.type.value,
            "host": config.host,
            "port": config.port,
            "database": config.database,
            "schema": config.schema_name,
            "credentials": self.cipher.encrypt(config.credentials),
            "tags": json.dumps(config.tags),
            "is_active": config.is_active,
            "created_by": config.created_by,
            "created_at": to_naive_utc(config.created_at),
            "updated_at": to_naive_utc(config.updated_at),
            "last_connected": to_naive_utc(config.last_connected) if config.last_connected else None,
        }

    def _from_row(self, row: Dict[str, Any], lenient: bool = False) -> DatabaseConfig:
        data = dict(row)
        token = data.pop("credentials") or ""
        try:
            credentials = self.cipher.decrypt(token, data.get("id"))
        except ConnectorError as exc:
            if not lenient or exc.error_code != ErrorCode.CREDENTIAL_DECRYPT_ERROR:
                raise
            logger.error(
                "Stored credentials unreadable; listing profile without them",
                extra={"connection_id": data.get("id")},
            )
            credentials = DatabaseCredentials.model_construct()
        data["credentials"] = credentials
        data["schema_name"] = data.pop("schema")
        try:
            return DatabaseConfig.model_validate(data)
        except ValidationError as exc:
            raise store_error(
                f"Stored configuration '{data.get('id')}' is invalid",
                backend=self.backend_name,
                cause=exc,
            ) from exc

    def _run(self, action: str, func):
        try:
            return func()
        except SQLAlchemyError as exc:
            raise store_error(
                f"Configuration store {action} failed",
                backend=self.backend_name,
                cause=exc,
            ) from exc

    # ------------------------------------------------------------------
    # Backend primitives
    # ------------------------------------------------------------------

    def _load(self, config_id: str) -> Optional[DatabaseConfig]:
        def _select():
            with self.engine.connect() as conn:
                return conn.execute(select(self.table).where(self.table.c.id == config_id)).mappings().first()

        row = self._run("read", _select)
        return self._from_row(row) if row is not None else None

    def _load_all(self) -> List[DatabaseConfig]:
        def _select_all():
            with self.engine.connect() as conn:
                return conn.execute(select(self.table)).mappings().all()

        return [self._from_row(row, lenient=True) for row in self._run("read", _select_all)]

    def _write(self, config: DatabaseConfig) -> None:
        values = self._to_row(config)

        def _upsert():
            with self.engine.begin() as conn:
                exists = conn.execute(
                    select(self.table.c.id).where(self.table.c.id == config.id)
                ).first()
                if exists is None:
                    conn.execute(insert(self.table).values(**values))
                else:
                    conn.execute(
                        update(self.table).where(self.table.c.id == config.id).values(**values)
                    )

        self._run("write", _upsert)

    def _remove(self, config_id: str) -> bool:
        def _delete():
            with self.engine.begin() as conn:
                return conn.execute(delete(self.table).where(self.table.c.id == config_id)).rowcount

        return bool(self._run("delete", _delete))
