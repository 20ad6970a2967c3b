"""Table schema models produced by catalog introspection."""

from typing import Any, List, Optional

from pydantic import Field

from .base import ValueModel


class ColumnSchema(ValueModel):
    name: str
    type: str
    nullable: bool = True
    max_length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    default: Optional[Any] = None
    is_primary_key: bool = False
    is_foreign_key: bool = False
    comment: Optional[str] = None


class ForeignKeySchema(ValueModel):
    name: Optional[str] = None
    columns: List[str]
    referenced_schema: Optional[str] = None
    referenced_table: str
    referenced_columns: List[str]


class IndexSchema(ValueModel):
    name: Optional[str] = None
    columns: List[str]
    is_unique: bool = False


class TableSchema(ValueModel):
    """Column, key and index description of one remote table."""

    table_name: str
    schema_name: Optional[str] = Field(default=None, alias="schema")
    columns: List[ColumnSchema] = Field(default_factory=list)
    primary_key: List[str] = Field(default_factory=list)
    foreign_keys: List[ForeignKeySchema] = Field(default_factory=list)
    indexes: List[IndexSchema] = Field(default_factory=list)

    def column(self, name: str) -> Optional[ColumnSchema]:
        for column in self.columns:
            if column.name == name:
                return column
        return None
