from typing import List

from dbconnect.constants import DatabaseType
from dbconnect.types.query import QueryBuilderConfig
from .base import BaseQueryBuilder


class PostgresQueryBuilder(BaseQueryBuilder):
    """PostgreSQL builder: trailing ``LIMIT n OFFSET m``."""

    dialect = DatabaseType.POSTGRES

    def _apply_pagination(self, query: str, config: QueryBuilderConfig) -> str:
        clauses: List[str] = [query]
        if config.limit is not None:
            clauses.append(f"LIMIT {config.limit}")
        if config.offset is not None:
            clauses.append(f"OFFSET {config.offset}")
        return " ".join(clauses)
