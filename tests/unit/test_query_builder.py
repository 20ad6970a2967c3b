"""Tests for dialect query builders."""

import pytest
import sqlglot

from dbconnect.common.exceptions import ConnectorError, ErrorCode
from dbconnect.constants import DatabaseType
from dbconnect.query_builder import (
    MySQLQueryBuilder,
    OracleQueryBuilder,
    PostgresQueryBuilder,
    QueryBuilderFactory,
    SQLServerQueryBuilder,
    get_query_builder,
)
from dbconnect.types.query import QueryBuilderConfig


def _build(dialect: str, **config) -> str:
    return QueryBuilderFactory.create(dialect).build_query(config)


class TestFactory:
    """Builder lookup."""

    @pytest.mark.parametrize(
        "dialect, builder_cls",
        [
            (DatabaseType.POSTGRES, PostgresQueryBuilder),
            (DatabaseType.MYSQL, MySQLQueryBuilder),
            (DatabaseType.SQLSERVER, SQLServerQueryBuilder),
            (DatabaseType.ORACLE, OracleQueryBuilder),
        ],
    )
    def test_create(self, dialect, builder_cls):
        """Test creating a builder per dialect."""
        assert isinstance(QueryBuilderFactory.create(dialect), builder_cls)

    def test_builders_are_shared(self):
        """Test that builders are cached per dialect."""
        assert get_query_builder("postgres") is get_query_builder(DatabaseType.POSTGRES)

    def test_unsupported_dialect(self):
        """Test an unsupported dialect."""
        with pytest.raises(ConnectorError) as exc_info:
            QueryBuilderFactory.create("sqlite")
        assert exc_info.value.error_code == ErrorCode.DIALECT_NOT_SUPPORTED


class TestClauses:
    """Clause rendering and ordering."""

    def test_select_all(self):
        """Test the minimal SELECT."""
        assert _build("postgres", table="users") == 'SELECT * FROM "users"'

    def test_full_statement_clause_order(self):
        """Test clause order with every option set."""
        sql = _build(
            "postgres",
            table="orders",
            alias="o",
            columns=["o.id", "c.name AS customer", "COUNT(*) AS items"],
            joins=[{"type": "left", "table": "customers", "alias": "c", "on_left": "o.customer_id", "on_right": "c.id"}],
            where=[{"field": "o.status", "value": "open"}],
            group_by=["o.id", "c.name"],
            having=[{"field": "COUNT(*)", "operator": "greaterThan", "value": 1}],
            order_by=[{"column": "o.id", "direction": "desc"}],
            limit=5,
        )
        assert sql == (
            'SELECT "o"."id", "c"."name" AS "customer", COUNT(*) AS "items" '
            'FROM "orders" "o" '
            'LEFT JOIN "customers" "c" ON "o"."customer_id" = "c"."id" '
            "WHERE \"o\".\"status\" = 'open' "
            'GROUP BY "o"."id", "c"."name" '
            "HAVING COUNT(*) > 1 "
            'ORDER BY "o"."id" DESC '
            "LIMIT 5"
        )

    @pytest.mark.parametrize(
        "join_type, keyword",
        [("inner", "INNER JOIN"), ("left", "LEFT JOIN"), ("right", "RIGHT JOIN"), ("full", "FULL OUTER JOIN")],
    )
    def test_join_keywords(self, join_type, keyword):
        """Test join type keywords."""
        sql = _build(
            "sqlserver",
            table="a",
            joins=[{"type": join_type, "table": "b", "onLeft": "a.id", "onRight": "b.a_id"}],
        )
        assert sql == f"SELECT * FROM [a] {keyword} [b] ON [a].[id] = [b].[a_id]"

    def test_where_mapping_shorthand(self):
        """Test the field-to-value WHERE shorthand."""
        sql = _build("postgres", table="users", where={"status": "active", "deleted_at": None, "role": ["a", "b"]})
        assert sql == (
            "SELECT * FROM \"users\" WHERE \"status\" = 'active' "
            "AND \"deleted_at\" IS NULL AND \"role\" IN ('a', 'b')"
        )

    def test_order_by_accepts_bare_columns(self):
        """Test ORDER BY with plain column names."""
        assert _build("mysql", table="users", order_by=["name"]) == "SELECT * FROM `users` ORDER BY `name` ASC"

    def test_distinct(self):
        """Test SELECT DISTINCT."""
        assert _build("postgres", table="users", columns="city", distinct=True) == 'SELECT DISTINCT "city" FROM "users"'

    def test_oracle_identifiers_are_upper_cased(self):
        """Test Oracle identifier folding."""
        assert _build("oracle", table="hr.employees", columns=["name"]) == 'SELECT "NAME" FROM "HR"."EMPLOYEES"'

    def test_invalid_description(self):
        """Test a description without a table."""
        with pytest.raises(ConnectorError) as exc_info:
            _build("postgres", limit=5)
        assert exc_info.value.error_code == ErrorCode.VALIDATION_ERROR
        assert exc_info.value.details["field"] == "table"

    def test_negative_limit_is_rejected(self):
        """Test rejection of a negative limit."""
        with pytest.raises(ConnectorError):
            _build("postgres", table="users", limit=-1)

    def test_accepts_model(self):
        """Test building from a QueryBuilderConfig instance."""
        config = QueryBuilderConfig(table="users", limit=1)
        assert PostgresQueryBuilder().build_query(config) == 'SELECT * FROM "users" LIMIT 1'


class TestPagination:
    """Per-dialect LIMIT/OFFSET strategies."""

    def test_postgres(self):
        """Test PostgreSQL LIMIT and OFFSET."""
        assert _build("postgres", table="users", limit=10, offset=20) == 'SELECT * FROM "users" LIMIT 10 OFFSET 20'
        assert _build("postgres", table="users", offset=20) == 'SELECT * FROM "users" OFFSET 20'

    def test_mysql(self):
        """Test MySQL LIMIT forms."""
        assert _build("mysql", table="users", limit=10, offset=20) == "SELECT * FROM `users` LIMIT 10 OFFSET 20"
        assert _build("mysql", table="users", offset=20) == (
            "SELECT * FROM `users` LIMIT 18446744073709551615 OFFSET 20"
        )

    def test_sqlserver_top(self):
        """Test SQL Server TOP for a plain limit."""
        assert _build("sqlserver", table="users", limit=10) == "SELECT TOP 10 * FROM [users]"
        assert _build("sqlserver", table="users", limit=5, distinct=True, columns=["name"]) == (
            "SELECT DISTINCT TOP 5 [name] FROM [users]"
        )

    def test_sqlserver_offset_without_order_by(self):
        """Test SQL Server OFFSET with a synthetic ORDER BY."""
        sql = _build("sqlserver", table="users", limit=10, offset=20)
        assert sql == "SELECT * FROM [users] ORDER BY (SELECT NULL) OFFSET 20 ROWS FETCH NEXT 10 ROWS ONLY"

    def test_sqlserver_offset_keeps_order_by(self):
        """Test SQL Server OFFSET after an explicit ORDER BY."""
        sql = _build("sqlserver", table="users", order_by=["id"], offset=20)
        assert sql == "SELECT * FROM [users] ORDER BY [id] ASC OFFSET 20 ROWS"

    def test_oracle_limit(self):
        """Test Oracle ROWNUM limit."""
        assert _build("oracle", table="users", limit=10) == 'SELECT * FROM (SELECT * FROM "USERS") WHERE ROWNUM <= 10'

    def test_oracle_limit_and_offset(self):
        """Test Oracle ROWNUM window."""
        sql = _build("oracle", table="users", limit=10, offset=20)
        assert sql == (
            "SELECT * FROM ("
            "SELECT * FROM ("
            'SELECT inner_query.*, ROWNUM AS rnum FROM (SELECT * FROM "USERS") inner_query'
            ") WHERE rnum <= 30"
            ") WHERE rnum > 20"
        )

    def test_oracle_offset_only(self):
        """Test Oracle offset without a limit."""
        sql = _build("oracle", table="users", offset=20)
        assert sql == (
            "SELECT * FROM ("
            'SELECT inner_query.*, ROWNUM AS rnum FROM (SELECT * FROM "USERS") inner_query'
            ") WHERE rnum > 20"
        )

    @pytest.mark.parametrize("dialect", ["postgres", "mysql", "sqlserver", "oracle"])
    def test_no_pagination(self, dialect):
        """Test statements without pagination."""
        sql = _build(dialect, table="t")
        assert "LIMIT" not in sql and "ROWNUM" not in sql and "TOP" not in sql and "OFFSET" not in sql


class TestGeneratedSqlParses:
    """Generated statements are valid for their dialect's parser."""

    @pytest.mark.parametrize(
        "dialect, read",
        [("postgres", "postgres"), ("mysql", "mysql"), ("sqlserver", "tsql")],
    )
    def test_parses(self, dialect, read):
        """Test that generated SQL parses for its dialect."""
        sql = _build(
            dialect,
            table="orders",
            columns=["id", "status", "total"],
            where=[
                {"field": "status", "operator": "in", "values": ["open", "paid"]},
                {"field": "note", "operator": "contains", "value": "rush", "logic": "or"},
                {"field": "total", "operator": "between", "values": [10, 100]},
            ],
            order_by=["id"],
            limit=10,
            offset=20,
        )
        assert sqlglot.parse_one(sql, read=read) is not None


class TestExpressionSafety:
    """Column and condition fields cannot smuggle SQL into a statement."""

    def test_subquery_column_is_rejected(self):
        """Test rejection of a subquery in the column list."""
        with pytest.raises(ConnectorError) as exc_info:
            _build("mysql", table="users", columns=["id", "(SELECT password FROM admins LIMIT 1)"])
        assert exc_info.value.error_code == ErrorCode.INVALID_IDENTIFIER

    def test_tautology_in_where_field_is_rejected(self):
        """Test rejection of boolean logic in a condition field."""
        with pytest.raises(ConnectorError) as exc_info:
            _build(
                "postgres",
                table="users",
                where=[{"field": "lower(name) = lower(name) OR lower(name)", "operator": "equals", "value": "x"}],
            )
        assert exc_info.value.error_code == ErrorCode.INVALID_IDENTIFIER

    def test_function_call_field_is_kept(self):
        """Test a function call as a condition field."""
        sql = _build(
            "postgres",
            table="users",
            where=[{"field": "LOWER(email)", "operator": "equals", "value": "a@b.c"}],
        )
        assert sql == "SELECT * FROM \"users\" WHERE LOWER(email) = 'a@b.c'"
