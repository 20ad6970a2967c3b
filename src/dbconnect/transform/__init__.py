"""Post-processing of query results: projection, computed fields, filters,
formatting, renaming, sorting and pagination."""

from dbconnect.transform.expressions import FUNCTIONS, FormulaEvaluator
from dbconnect.transform.transformer import ResultTransformer, transform_result

__all__ = [
    "FUNCTIONS",
    "FormulaEvaluator",
    "ResultTransformer",
    "transform_result",
]
