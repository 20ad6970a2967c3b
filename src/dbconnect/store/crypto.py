"""Fernet encryption of stored credentials."""

import json
from typing import Optional, Union

from cryptography.fernet import Fernet, InvalidToken
from pydantic import SecretStr

from dbconnect.common.exceptions import configuration_error, credential_decrypt_error
from dbconnect.logging import get_logger
from dbconnect.types.config import DatabaseCredentials

logger = get_logger(__name__)

KeyLike = Union[SecretStr, str, bytes, None]


class CredentialCipher:
    """Encrypt and decrypt the credentials block of a profile.

    The whole block (password, flags and driver options) is serialized to
    JSON and encrypted as one URL-safe token.
    """

    def __init__(self, key: KeyLike = None):
        if key is None:
            logger.warning(
                "No credential encryption key configured; generated a per-process key. "
                "Stored credentials will not be readable after restart."
            )
            key = Fernet.generate_key()
        if isinstance(key, SecretStr):
            key = key.get_secret_value()
        if isinstance(key, str):
            key = key.encode()
        try:
            self._fernet = Fernet(key)
        except (ValueError, TypeError) as exc:
            raise configuration_error(
                "Credential encryption key must be 32 url-safe base64-encoded bytes",
                config_key="DBCONNECT_STORE_ENCRYPTION_KEY",
                cause=exc,
            ) from exc

    @staticmethod
    def generate_key() -> str:
        """Return a new key suitable for ``DBCONNECT_STORE_ENCRYPTION_KEY``."""
        return Fernet.generate_key().decode()

    def encrypt(self, credentials: DatabaseCredentials) -> str:
        payload = json.dumps(credentials.to_storage_dict(), sort_keys=True)
        return self._fernet.encrypt(payload.encode()).decode()

    def decrypt(self, token: str, config_id: Optional[str] = None) -> DatabaseCredentials:
        try:
            payload = self._fernet.decrypt(token.encode())
        except InvalidToken as exc:
            raise credential_decrypt_error(config_id, cause=exc) from exc
        return DatabaseCredentials.model_validate(json.loads(payload))
