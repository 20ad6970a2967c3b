from dbconnect.constants import DatabaseType
from dbconnect.types.query import QueryBuilderConfig
from .base import BaseQueryBuilder


class OracleQueryBuilder(BaseQueryBuilder):
    """Oracle builder using ``ROWNUM`` subqueries.

    A limit alone wraps the query once::

        SELECT * FROM (<query>) WHERE ROWNUM <= n

    An offset numbers the rows in an inner layer, keeps ``rnum <= offset +
    limit`` in a middle layer and ``rnum > offset`` in the outer layer.
    """

    dialect = DatabaseType.ORACLE

    def _apply_pagination(self, query: str, config: QueryBuilderConfig) -> str:
        if config.offset is None:
            if config.limit is None:
                return query
            return f"SELECT * FROM ({query}) WHERE ROWNUM <= {config.limit}"

        numbered = f"SELECT inner_query.*, ROWNUM AS rnum FROM ({query}) inner_query"
        if config.limit is not None:
            numbered = f"SELECT * FROM ({numbered}) WHERE rnum <= {config.offset + config.limit}"
        return f"SELECT * FROM ({numbered}) WHERE rnum > {config.offset}"
