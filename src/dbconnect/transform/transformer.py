"""In-process post-processing of query results."""

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError
from typing_extensions import assert_never

from dbconnect.common.exceptions import ConnectorError, ErrorCode, from_validation_error
from dbconnect.constants import SortDirection, WhereOperator
from dbconnect.logging import get_logger
from dbconnect.types.query import Condition
from dbconnect.types.result import QueryResult
from dbconnect.types.transform import (
    DateFormatOption,
    NumberFormatOption,
    SortOption,
    TransformOptions,
)
from dbconnect.utils.datetime import parse_sql_datetime
from .expressions import FormulaEvaluator

logger = get_logger(__name__)

Row = Dict[str, Any]

_DATE_TOKENS = re.compile(r"YYYY|MM|DD|HH|mm|ss")


class ResultTransformer:
    """Apply ``TransformOptions`` to a ``QueryResult``.

    Steps always run in the same order:

    1. projection (include list, else exclude list)
    2. computed fields
    3. filters, all of which must match
    4. date formats, then number formats
    5. rename
    6. stable multi-key sort, nulls last in either direction
    7. pagination

    The input result is never modified. ``row_count`` and
    ``metadata.total_rows`` of the output describe the transformed rows;
    the pre-transformation count is kept in
    ``metadata.extra["source_row_count"]``.
    """

    def __init__(self, evaluator: Optional[FormulaEvaluator] = None):
        self.evaluator = evaluator or FormulaEvaluator()

    def transform(
        self,
        result: QueryResult,
        options: Union[TransformOptions, Mapping[str, Any], None],
    ) -> QueryResult:
        """Return a transformed copy of ``result``.

        Raises:
            ConnectorError: VALIDATION_ERROR when ``options`` is malformed
        """
        options = self._coerce_options(options)
        if options is None:
            return result

        columns = list(result.columns)
        rows: List[Row] = [dict(row) for row in result.rows]

        columns, rows = self._project(columns, rows, options)
        columns, rows = self._compute(columns, rows, options)
        rows = [row for row in rows if all(self.matches(row, condition) for condition in options.filters)]
        rows = self._format_dates(rows, options.date_formats)
        rows = self._format_numbers(rows, options.number_formats)
        columns, rows = self._rename(columns, rows, options.rename)
        rows = self._sort(rows, options.sort)
        if options.pagination is not None:
            start = options.pagination.offset
            end = start + options.pagination.limit if options.pagination.limit is not None else None
            rows = rows[start:end]

        metadata = result.metadata.model_copy(
            update={
                "total_rows": len(rows),
                "extra": {**result.metadata.extra, "source_row_count": result.row_count},
            }
        )
        return result.model_copy(
            update={"columns": columns, "rows": rows, "row_count": len(rows), "metadata": metadata}
        )

    @staticmethod
    def _coerce_options(
        options: Union[TransformOptions, Mapping[str, Any], None],
    ) -> Optional[TransformOptions]:
        if options is None or isinstance(options, TransformOptions):
            return options
        try:
            return TransformOptions.model_validate(options)
        except ValidationError as exc:
            raise from_validation_error(exc, "transform options") from exc

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    @staticmethod
    def _project(columns: List[str], rows: List[Row], options: TransformOptions) -> Tuple[List[str], List[Row]]:
        if options.include_columns:
            keep = [column for column in options.include_columns if column in columns]
        elif options.exclude_columns:
            excluded = set(options.exclude_columns)
            keep = [column for column in columns if column not in excluded]
        else:
            return columns, rows
        return keep, [{column: row.get(column) for column in keep} for row in rows]

    def _compute(self, columns: List[str], rows: List[Row], options: TransformOptions) -> Tuple[List[str], List[Row]]:
        for field in options.computed_fields:
            for row in rows:
                row[field.name] = self._evaluate(field.formula, row)
            if field.name not in columns:
                columns.append(field.name)
        return columns, rows

    def _evaluate(self, formula: str, row: Row) -> Any:
        try:
            return self.evaluator.evaluate(formula, row)
        except ConnectorError as exc:
            if exc.error_code != ErrorCode.TRANSFORM_EVALUATION_ERROR:
                raise
            logger.debug("Computed field evaluated to null", extra={"formula": formula, "error": exc.message})
            return None

    @staticmethod
    def matches(row: Mapping[str, Any], condition: Condition) -> bool:
        """Test one row against one filter.

        A missing or null value only satisfies ``isNull``. Comparisons
        between incompatible types do not match. ``contains``,
        ``startsWith`` and ``endsWith`` ignore case.
        """
        value = row.get(condition.field)
        operator = condition.operator
        if value is None:
            return operator is WhereOperator.IS_NULL

        try:
            match operator:
                case WhereOperator.IS_NULL:
                    return False
                case WhereOperator.IS_NOT_NULL:
                    return True
                case WhereOperator.EQUALS:
                    return value == condition.value
                case WhereOperator.NOT_EQUALS:
                    return value != condition.value
                case WhereOperator.GREATER_THAN:
                    return value > condition.value
                case WhereOperator.LESS_THAN:
                    return value < condition.value
                case WhereOperator.CONTAINS:
                    return str(condition.value).lower() in str(value).lower()
                case WhereOperator.STARTS_WITH:
                    return str(value).lower().startswith(str(condition.value).lower())
                case WhereOperator.ENDS_WITH:
                    return str(value).lower().endswith(str(condition.value).lower())
                case WhereOperator.IN:
                    return value in condition.operands
                case WhereOperator.BETWEEN:
                    low, high = condition.operands
                    return low <= value <= high
                case _:
                    assert_never(operator)
        except TypeError:
            return False

    @staticmethod
    def format_date(value: Any, pattern: str) -> Any:
        """Render a date-like value with ``YYYY MM DD HH mm ss`` tokens.

        Values that are not dates (or ISO date strings) are returned as is.
        """
        parsed = parse_sql_datetime(value)
        if parsed is None:
            return value
        tokens = {
            "YYYY": f"{parsed.year:04d}",
            "MM": f"{parsed.month:02d}",
            "DD": f"{parsed.day:02d}",
            "HH": f"{parsed.hour:02d}",
            "mm": f"{parsed.minute:02d}",
            "ss": f"{parsed.second:02d}",
        }
        return _DATE_TOKENS.sub(lambda match: tokens[match.group(0)], pattern)

    def _format_dates(self, rows: List[Row], formats: List[DateFormatOption]) -> List[Row]:
        for option in formats:
            for row in rows:
                if row.get(option.field) is not None:
                    row[option.field] = self.format_date(row[option.field], option.format)
        return rows

    @staticmethod
    def format_number(value: Any, option: NumberFormatOption) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            return value
        separator = "," if option.thousands_separator else ""
        return format(value, f"{separator}.{option.decimals}f")

    def _format_numbers(self, rows: List[Row], formats: List[NumberFormatOption]) -> List[Row]:
        for option in formats:
            for row in rows:
                if option.field in row:
                    row[option.field] = self.format_number(row[option.field], option)
        return rows

    @staticmethod
    def _rename(columns: List[str], rows: List[Row], mapping: Dict[str, str]) -> Tuple[List[str], List[Row]]:
        if not mapping:
            return columns, rows
        renamed_columns = [mapping.get(column, column) for column in columns]
        renamed_rows = [{mapping.get(key, key): value for key, value in row.items()} for row in rows]
        return renamed_columns, renamed_rows

    @staticmethod
    def _sort(rows: List[Row], sort: List[SortOption]) -> List[Row]:
        # Least significant key first; each pass is stable
        for option in reversed(sort):
            field = option.field
            present = [row for row in rows if row.get(field) is not None]
            missing = [row for row in rows if row.get(field) is None]
            descending = option.direction is SortDirection.DESC
            try:
                present = sorted(present, key=lambda row: row[field], reverse=descending)
            except TypeError:
                present = sorted(present, key=lambda row: _mixed_sort_key(row[field]), reverse=descending)
            rows = present + missing
        return rows


def _mixed_sort_key(value: Any) -> Tuple[int, Any]:
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return (0, float(value))
    if isinstance(value, (datetime, date)):
        return (1, value.isoformat())
    return (2, str(value))


def transform_result(
    result: QueryResult,
    options: Union[TransformOptions, Mapping[str, Any], None],
) -> QueryResult:
    """Apply ``options`` to ``result`` with a default transformer."""
    return ResultTransformer().transform(result, options)
