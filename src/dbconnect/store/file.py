import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from dbconnect.common.exceptions import ConnectorError, ErrorCode, store_error
from dbconnect.logging import get_logger
from dbconnect.types.config import DatabaseConfig, DatabaseCredentials
from .base import ConfigurationStore
from .crypto import CredentialCipher

logger = get_logger(__name__)

FILE_FORMAT_VERSION = 1


class JsonFileConfigurationStore(ConfigurationStore):
    """Profiles persisted in a single JSON document.

    Credentials are written as Fernet tokens; every other field is plain
    JSON. Writes go to a temporary file that atomically replaces the
    document.

    Document layout::

        {"version": 1, "configurations": [{"id": "...", "credentials": "<token>", ...}]}
    """

    backend_name = "file"

    def __init__(self, path: Union[str, Path], cipher: Optional[CredentialCipher] = None):
        super().__init__()
        self.path = Path(path)
        self.cipher = cipher or CredentialCipher()

    # ------------------------------------------------------------------
    # Document I/O
    # ------------------------------------------------------------------

    def _read_records(self) -> Dict[str, Dict[str, Any]]:
        if not self.path.exists():
            return {}
        try:
            document = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as exc:
            raise store_error(
                f"Failed to read configuration file {self.path}",
                backend=self.backend_name,
                cause=exc,
            ) from exc
        return {record["id"]: record for record in document.get("configurations", []) if record.get("id")}

    def _write_records(self, records: Dict[str, Dict[str, Any]]) -> None:
        document = {"version": FILE_FORMAT_VERSION, "configurations": list(records.values())}
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(dir=directory, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(document, handle, indent=2, sort_keys=True)
                os.replace(temp_path, self.path)
            except BaseException:
                Path(temp_path).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise store_error(
                f"Failed to write configuration file {self.path}",
                backend=self.backend_name,
                cause=exc,
            ) from exc

    def _to_record(self, config: DatabaseConfig) -> Dict[str, Any]:
        record = config.model_dump(mode="json", exclude={"credentials"})
        record["credentials"] = self.cipher.encrypt(config.credentials)
        return record

    def _from_record(self, record: Dict[str, Any], lenient: bool = False) -> DatabaseConfig:
        data = dict(record)
        token = data.pop("credentials", "")
        try:
            credentials = self.cipher.decrypt(token, record.get("id"))
        except ConnectorError as exc:
            if not lenient or exc.error_code != ErrorCode.CREDENTIAL_DECRYPT_ERROR:
                raise
            logger.error(
                "Stored credentials unreadable; listing profile without them",
                extra={"connection_id": record.get("id")},
            )
            credentials = DatabaseCredentials.model_construct()
        data["credentials"] = credentials
        try:
            return DatabaseConfig.model_validate(data)
        except ValidationError as exc:
            raise store_error(
                f"Stored configuration '{record.get('id')}' is invalid",
                backend=self.backend_name,
                cause=exc,
            ) from exc

    # ------------------------------------------------------------------
    # Backend primitives
    # ------------------------------------------------------------------

    def _load(self, config_id: str) -> Optional[DatabaseConfig]:
        record = self._read_records().get(config_id)
        return self._from_record(record) if record is not None else None

    def _load_all(self) -> List[DatabaseConfig]:
        return [self._from_record(record, lenient=True) for record in self._read_records().values()]

    def _write(self, config: DatabaseConfig) -> None:
        records = self._read_records()
        records[config.id] = self._to_record(config)
        self._write_records(records)

    def _remove(self, config_id: str) -> bool:
        records = self._read_records()
        if records.pop(config_id, None) is None:
            return False
        self._write_records(records)
        return True
