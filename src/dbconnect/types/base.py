"""Base model classes for all dbconnect models with serialization support."""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ConnectorBaseModel(BaseModel):
    """Base model for all dbconnect models with built-in serialization.

    Provides common functionality for all dbconnect models including:
    - Serialization to a JSON-ready dictionary via to_dict()
    - camelCase aliases so payloads written as ``isActive`` or
      ``rejectUnauthorized`` validate alongside snake_case field names
    """
    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True
    )

    def to_dict(self, by_alias: bool = False) -> Dict[str, Any]:
        """Convert model to dictionary for serialization.

        Enums become their values, datetimes ISO strings and secrets are
        masked.

        Args:
            by_alias: Emit camelCase keys instead of field names

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        return self.model_dump(mode="json", by_alias=by_alias, exclude_none=True)


class ValueModel(ConnectorBaseModel):
    """Immutable value object. Derive modified copies with ``model_copy``."""
    model_config = ConfigDict(frozen=True)
