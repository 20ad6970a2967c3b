"""Query and connection-test result models."""

from typing import Any, Dict, List, Optional

import pandas as pd
from pydantic import Field

from dbconnect.constants import DatabaseType
from .base import ConnectorBaseModel, ValueModel


class QueryMetadata(ValueModel):
    """Provenance of a result set."""

    query: Optional[str] = None
    total_rows: Optional[int] = None
    dialect: Optional[DatabaseType] = None
    connection_id: Optional[str] = None
    extra: Dict[str, Any] = Field(default_factory=dict)


class QueryResult(ValueModel):
    """Tabular result returned by an adapter or the transformer.

    Attributes:
        columns: Column names in output order
        rows: One mapping per row, keyed by column name
        row_count: Number of rows in ``rows`` (affected rows for statements
            that return no result set)
        execution_time: Wall-clock milliseconds spent on the remote call
        metadata: Query text, dialect and connection provenance
    """

    columns: List[str] = Field(default_factory=list)
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    row_count: int = Field(default=0, ge=0)
    execution_time: float = Field(default=0.0, ge=0)
    metadata: QueryMetadata = Field(default_factory=QueryMetadata)

    def to_dataframe(self) -> pd.DataFrame:
        """Return the rows as a pandas DataFrame with ``columns`` order."""
        return pd.DataFrame.from_records(self.rows, columns=self.columns or None)


class ConnectionTestResult(ValueModel):
    """Outcome of a connection test.

    A failed connection test is reported here with ``success=False`` rather than
    raised.
    """

    success: bool
    message: str
    latency: Optional[float] = Field(default=None, description="Round-trip milliseconds")
    server_info: Optional[Dict[str, Any]] = None


class ConnectionTestItem(ConnectorBaseModel):
    config_id: str
    result: Optional[ConnectionTestResult] = None
    error: Optional[Dict[str, Any]] = None

    @property
    def success(self) -> bool:
        return self.result is not None and self.result.success


class BatchTestResult(ConnectorBaseModel):
    """Results of probing several profiles; each item is independent."""

    items: List[ConnectionTestItem] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def succeeded(self) -> int:
        return sum(1 for item in self.items if item.success)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @property
    def success_rate(self) -> float:
        """Calculate success rate as percentage."""
        if not self.items:
            return 0.0
        return (self.succeeded / self.total) * 100
