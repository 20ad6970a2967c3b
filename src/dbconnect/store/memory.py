from typing import Dict, List, Optional

from dbconnect.types.config import DatabaseConfig
from .base import ConfigurationStore


class InMemoryConfigurationStore(ConfigurationStore):
    """Process-local store. Nothing survives a restart."""

    backend_name = "memory"

    def __init__(self):
        super().__init__()
        self._configs: Dict[str, DatabaseConfig] = {}

    def _load(self, config_id: str) -> Optional[DatabaseConfig]:
        return self._configs.get(config_id)

    def _load_all(self) -> List[DatabaseConfig]:
        return list(self._configs.values())

    def _write(self, config: DatabaseConfig) -> None:
        self._configs[config.id] = config.model_copy(deep=True)

    def _remove(self, config_id: str) -> bool:
        return self._configs.pop(config_id, None) is not None
