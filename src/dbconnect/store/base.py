"""Configuration store interface.

Overview:
    A configuration store owns the connection profiles. It assigns ids,
    maintains ``created_at``/``updated_at``/``last_connected`` and keeps
    the dialect of a profile fixed for its lifetime. Backends only implement
    four primitives (``_load``, ``_load_all``, ``_write``, ``_remove``); the
    lifecycle rules live here.

Thread Safety:
    Every public operation runs under a re-entrant lock held by the store
    instance.
"""

import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from dbconnect.common.exceptions import validation_error
from dbconnect.logging import get_logger
from dbconnect.types.config import DatabaseConfig
from dbconnect.utils.datetime import get_current_timestamp

logger = get_logger(__name__)


class ConfigurationStore(ABC):
    """Keyed collection of connection profiles.

    Returned profiles are copies; mutating them does not change the store.
    """

    backend_name = "base"

    def __init__(self):
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Backend primitives
    # ------------------------------------------------------------------

    @abstractmethod
    def _load(self, config_id: str) -> Optional[DatabaseConfig]:
        pass

    @abstractmethod
    def _load_all(self) -> List[DatabaseConfig]:
        pass

    @abstractmethod
    def _write(self, config: DatabaseConfig) -> None:
        """Insert or replace the profile keyed by ``config.id``."""
        pass

    @abstractmethod
    def _remove(self, config_id: str) -> bool:
        pass

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def get(self, config_id: str) -> Optional[DatabaseConfig]:
        """Return the complete profile, credentials included, or None."""
        with self._lock:
            config = self._load(config_id)
        return config.model_copy(deep=True) if config is not None else None

    def list(self) -> List[DatabaseConfig]:
        """Return every profile ordered by name."""
        with self._lock:
            configs = self._load_all()
        return sorted(
            (config.model_copy(deep=True) for config in configs),
            key=lambda config: (config.name.lower(), config.id or ""),
        )

    def save(self, config: DatabaseConfig) -> DatabaseConfig:
        """Create or update a profile.

        A profile without an id, or with an id the store does not know, is
        created: an id is assigned when missing, both timestamps are set to
        now and ``last_connected`` starts empty. Otherwise the stored profile
        is replaced, keeping its ``created_at`` and ``last_connected`` and
        refreshing ``updated_at``.

        Raises:
            ConnectorError: VALIDATION_ERROR when an update changes the dialect
        """
        with self._lock:
            now = get_current_timestamp()
            existing = self._load(config.id) if config.id else None
            if existing is None:
                record = config.model_copy(
                    update={
                        "id": config.id or str(uuid.uuid4()),
                        "created_at": now,
                        "updated_at": now,
                        "last_connected": None,
                    },
                    deep=True,
                )
                action = "created"
            else:
                if existing.type != config.type:
                    raise validation_error(
                        f"Database type cannot change from {existing.type.value} to {config.type.value}",
                        field="type",
                        value=config.type.value,
                    )
                record = config.model_copy(
                    update={
                        "created_at": existing.created_at,
                        "updated_at": max(now, existing.updated_at or now),
                        "last_connected": existing.last_connected,
                    },
                    deep=True,
                )
                action = "updated"
            self._write(record)

        logger.info(
            f"Database configuration {action}",
            extra={"connection_id": record.id, "db.platform": record.type.value, "store": self.backend_name},
        )
        return record.model_copy(deep=True)

    def delete(self, config_id: str) -> bool:
        """Remove a profile; False when the id is unknown."""
        with self._lock:
            removed = self._remove(config_id)
        if removed:
            logger.info("Database configuration deleted", extra={"connection_id": config_id})
        return removed

    def touch_last_connected(self, config_id: str, when: Optional[datetime] = None) -> bool:
        """Record a successful contact without touching ``updated_at``."""
        with self._lock:
            existing = self._load(config_id)
            if existing is None:
                return False
            self._write(
                existing.model_copy(update={"last_connected": when or get_current_timestamp()})
            )
        return True
