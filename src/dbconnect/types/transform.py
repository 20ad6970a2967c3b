"""Result transformation options."""

from typing import Dict, List, Optional

from pydantic import AliasChoices, Field, field_validator

from dbconnect.constants import SortDirection
from .base import ValueModel
from .query import Condition


class ComputedField(ValueModel):
    """Derived column evaluated per row.

    ``formula`` references row values as ``[column]``, for example
    ``round([price] * [qty], 2)``.
    """

    name: str = Field(..., min_length=1)
    formula: str = Field(..., min_length=1)


class FilterCondition(Condition):
    """Row filter. All filters in a transformation must match (AND)."""


class DateFormatOption(ValueModel):
    """Reformat a date column using ``YYYY MM DD HH mm ss`` tokens."""

    field: str = Field(..., min_length=1)
    format: str = Field(default="YYYY-MM-DD", min_length=1)


class NumberFormatOption(ValueModel):
    field: str = Field(..., min_length=1)
    decimals: int = Field(default=2, ge=0, le=20)
    thousands_separator: bool = False


class SortOption(ValueModel):
    field: str = Field(..., min_length=1)
    direction: SortDirection = SortDirection.ASC


class PaginationOption(ValueModel):
    offset: int = Field(default=0, ge=0)
    limit: Optional[int] = Field(default=None, ge=0)


class TransformOptions(ValueModel):
    """In-process post-processing applied to a fetched result.

    Steps run in a fixed order: projection, computed fields, filters,
    date and number formatting, rename, sort, pagination.
    """

    include_columns: List[str] = Field(default_factory=list)
    exclude_columns: List[str] = Field(default_factory=list)
    computed_fields: List[ComputedField] = Field(default_factory=list)
    filters: List[FilterCondition] = Field(
        default_factory=list,
        validation_alias=AliasChoices("filters", "filterConditions", "filter_conditions"),
    )
    date_formats: List[DateFormatOption] = Field(
        default_factory=list,
        validation_alias=AliasChoices("date_formats", "dateFormats", "dateFormatOptions"),
    )
    number_formats: List[NumberFormatOption] = Field(default_factory=list)
    rename: Dict[str, str] = Field(default_factory=dict)
    sort: List[SortOption] = Field(
        default_factory=list,
        validation_alias=AliasChoices("sort", "sortOptions", "sort_options"),
    )
    pagination: Optional[PaginationOption] = None

    @field_validator("sort", mode="before")
    @classmethod
    def _single_sort(cls, v):
        if isinstance(v, dict):
            return [v]
        return v
