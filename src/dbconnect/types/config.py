"""Connection profile models.

A connection profile (``DatabaseConfig``) describes one remote relational
database: where it lives, which dialect it speaks and how to authenticate.
Credentials only ever leave the configuration store inside a full
``DatabaseConfig``; listings use ``DatabaseConfigSummary`` which has no
credential fields at all.
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, SecretStr, field_validator, model_validator

from dbconnect.constants import DatabaseType
from dbconnect.utils.datetime import ensure_utc
from .base import ConnectorBaseModel

# Flat payload keys that belong to the credentials block
_CREDENTIAL_KEYS = (
    "username",
    "password",
    "ssl",
    "reject_unauthorized",
    "rejectUnauthorized",
    "integrated_auth",
    "integratedAuth",
)


class DatabaseCredentials(ConnectorBaseModel):
    """Authentication material for a connection profile."""

    username: str = ""
    password: SecretStr = SecretStr("")
    ssl: bool = False
    reject_unauthorized: bool = True
    integrated_auth: bool = False
    options: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _require_login(self) -> "DatabaseCredentials":
        if not self.integrated_auth and not self.username:
            raise ValueError("username is required unless integrated authentication is used")
        return self

    def to_storage_dict(self) -> Dict[str, Any]:
        """Plaintext representation for the store's encryption layer only."""
        data = self.model_dump(mode="json")
        data["password"] = self.password.get_secret_value()
        return data


class _DatabaseConfigFields(ConnectorBaseModel):
    """Fields shared by full profiles and public summaries."""

    id: Optional[str] = Field(default=None, frozen=True)
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    type: DatabaseType = Field(..., frozen=True)
    host: str = Field(..., min_length=1)
    port: int = Field(..., gt=0, le=65535)
    database: str = Field(..., min_length=1)
    schema_name: Optional[str] = Field(default=None, alias="schema")
    tags: List[str] = Field(default_factory=list)
    is_active: bool = True
    created_by: str = "system"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_connected: Optional[datetime] = None

    @field_validator("name", "host", "database", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("schema_name", "description", mode="before")
    @classmethod
    def _blank_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, v: Any) -> List[str]:
        if v is None:
            return []
        if isinstance(v, str):
            text = v.strip()
            if text.startswith("["):
                v = json.loads(text)
            else:
                v = text.split(",")
        tags: List[str] = []
        for tag in v:
            tag = str(tag).strip()
            if tag and tag not in tags:
                tags.append(tag)
        return tags

    @field_validator("created_at", "updated_at", "last_connected")
    @classmethod
    def _utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


class DatabaseConfigSummary(_DatabaseConfigFields):
    """Public view of a connection profile, without credentials."""


class DatabaseConfig(_DatabaseConfigFields):
    """A complete connection profile.

    Accepts the credentials either nested under ``credentials`` (as a dict,
    a model or a JSON string) or as flat ``username``/``password``/``ssl``
    keys next to the other fields.

    Example:
        >>> config = DatabaseConfig(
        ...     name="Reporting",
        ...     type="postgres",
        ...     host="db.internal",
        ...     port=5432,
        ...     database="reporting",
        ...     username="reader",
        ...     password="s3cret",
        ... )
        >>> config.credentials.username
        'reader'
    """

    credentials: DatabaseCredentials

    @model_validator(mode="before")
    @classmethod
    def _lift_flat_credentials(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "credentials" in data:
            return data
        flat = {key: data[key] for key in _CREDENTIAL_KEYS if key in data}
        if not flat:
            return data
        remaining = {key: value for key, value in data.items() if key not in flat}
        remaining["credentials"] = flat
        return remaining

    @field_validator("credentials", mode="before")
    @classmethod
    def _parse_credentials(cls, v: Any) -> Any:
        if isinstance(v, str):
            return json.loads(v)
        return v

    def public_view(self) -> DatabaseConfigSummary:
        """Return this profile with the credentials removed."""
        return DatabaseConfigSummary.model_validate(
            self.model_dump(exclude={"credentials"})
        )
