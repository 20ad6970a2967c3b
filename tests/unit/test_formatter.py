"""Tests for dialect-aware value and identifier formatting."""

import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from dbconnect.common.exceptions import ConnectorError, ErrorCode
from dbconnect.constants import DatabaseType
from dbconnect.dialects import SqlFormatter, get_dialect_rules


class TestStringLiterals:
    """Quote doubling and national prefixes."""

    @pytest.mark.parametrize(
        "dialect, expected",
        [
            ("postgres", "'O''Brien'"),
            ("mysql", "'O''Brien'"),
            ("sqlserver", "N'O''Brien'"),
            ("oracle", "'O''Brien'"),
        ],
    )
    def test_embedded_quote_is_doubled(self, dialect, expected):
        """Test quote doubling in each dialect."""
        assert SqlFormatter(dialect).format_value("O'Brien") == expected

    def test_injection_attempt_stays_inside_literal(self):
        """Test that SQL in a value stays inside the literal."""
        rendered = SqlFormatter("postgres").format_value("x'; DROP TABLE users; --")
        assert rendered == "'x''; DROP TABLE users; --'"

    def test_uuid_is_rendered_as_string(self):
        """Test rendering a UUID."""
        value = uuid.UUID("12345678-1234-5678-1234-567812345678")
        assert SqlFormatter("sqlserver").format_value(value) == "N'12345678-1234-5678-1234-567812345678'"


class TestScalarLiterals:
    """NULL, booleans and numbers."""

    @pytest.mark.parametrize("dialect", ["postgres", "mysql", "sqlserver", "oracle"])
    def test_none_is_null(self, dialect):
        """Test rendering None as NULL."""
        assert SqlFormatter(dialect).format_value(None) == "NULL"

    @pytest.mark.parametrize(
        "dialect, true_literal, false_literal",
        [
            ("postgres", "TRUE", "FALSE"),
            ("mysql", "TRUE", "FALSE"),
            ("sqlserver", "1", "0"),
            ("oracle", "1", "0"),
        ],
    )
    def test_booleans(self, dialect, true_literal, false_literal):
        """Test dialect boolean literals."""
        formatter = SqlFormatter(dialect)
        assert formatter.format_value(True) == true_literal
        assert formatter.format_value(False) == false_literal

    def test_numbers(self):
        """Test integer, float and decimal literals."""
        formatter = SqlFormatter("postgres")
        assert formatter.format_value(42) == "42"
        assert formatter.format_value(-7) == "-7"
        assert formatter.format_value(1.5) == "1.5"
        assert formatter.format_value(Decimal("10.50")) == "10.50"

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), Decimal("NaN")])
    def test_non_finite_numbers_are_rejected(self, value):
        """Test rejection of NaN and infinity."""
        with pytest.raises(ConnectorError) as exc_info:
            SqlFormatter("mysql").format_value(value)
        assert exc_info.value.error_code == ErrorCode.VALIDATION_ERROR

    def test_enum_renders_its_value(self):
        """Test rendering an enum member."""
        assert SqlFormatter("postgres").format_value(DatabaseType.ORACLE) == "'oracle'"


class TestDateLiterals:
    """Dates and datetimes in each dialect's native form."""

    @pytest.mark.parametrize(
        "dialect, expected",
        [
            ("postgres", "'2024-01-15'"),
            ("mysql", "'2024-01-15'"),
            ("sqlserver", "CONVERT(DATE, '2024-01-15', 23)"),
            ("oracle", "TO_DATE('2024-01-15', 'YYYY-MM-DD')"),
        ],
    )
    def test_dates(self, dialect, expected):
        """Test date literals."""
        assert SqlFormatter(dialect).format_value(date(2024, 1, 15)) == expected

    @pytest.mark.parametrize(
        "dialect, expected",
        [
            ("postgres", "'2024-01-15 10:30:00'"),
            ("mysql", "'2024-01-15 10:30:00'"),
            ("sqlserver", "CONVERT(DATETIME2, '2024-01-15T10:30:00', 126)"),
            ("oracle", "TO_DATE('2024-01-15 10:30:00', 'YYYY-MM-DD HH24:MI:SS')"),
        ],
    )
    def test_datetimes(self, dialect, expected):
        """Test datetime literals."""
        assert SqlFormatter(dialect).format_value(datetime(2024, 1, 15, 10, 30)) == expected

    def test_oracle_switches_to_timestamp_for_fractional_seconds(self):
        """Test Oracle TO_TIMESTAMP for fractional seconds."""
        rendered = SqlFormatter("oracle").format_value(datetime(2024, 1, 15, 10, 30, 0, 123456))
        assert rendered == "TO_TIMESTAMP('2024-01-15 10:30:00.123456', 'YYYY-MM-DD HH24:MI:SS.FF6')"

    def test_aware_datetime_is_converted_to_utc(self):
        """Test conversion of aware datetimes to UTC."""
        value = datetime(2024, 1, 15, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        assert SqlFormatter("postgres").format_value(value) == "'2024-01-15 10:00:00'"

    @pytest.mark.parametrize("dialect", ["postgres", "mysql", "sqlserver", "oracle"])
    def test_literal_round_trips_to_same_instant(self, dialect):
        """Test that the rendered literal keeps the instant."""
        value = datetime(2023, 12, 31, 23, 59, 58, 5000, tzinfo=timezone.utc)
        rendered = SqlFormatter(dialect).format_value(value)
        literal = rendered.split("'")[1]
        assert datetime.fromisoformat(literal) == value.replace(tzinfo=None)


class TestStructuredLiterals:
    """Lists and JSON-encoded values."""

    def test_list_is_comma_separated_without_parentheses(self):
        """Test rendering a list."""
        assert SqlFormatter("postgres").format_value([1, 2, 3]) == "1, 2, 3"
        assert SqlFormatter("sqlserver").format_value(["a", "b"]) == "N'a', N'b'"

    def test_dict_is_json_with_quotes_doubled(self):
        """Test rendering a dict as JSON text."""
        rendered = SqlFormatter("postgres").format_value({"a": "it's"})
        assert rendered == """'{"a": "it''s"}'"""


class TestIdentifiers:
    """Identifier quoting."""

    @pytest.mark.parametrize(
        "dialect, expected",
        [
            ("postgres", '"users"'),
            ("mysql", "`users`"),
            ("sqlserver", "[users]"),
            ("oracle", '"USERS"'),
        ],
    )
    def test_quote_characters(self, dialect, expected):
        """Test identifier delimiters per dialect."""
        assert SqlFormatter(dialect).quote_identifier("users") == expected

    def test_dotted_names_are_quoted_per_part(self):
        """Test quoting of schema-qualified names."""
        assert SqlFormatter("sqlserver").quote_identifier("dbo.users") == "[dbo].[users]"
        assert SqlFormatter("postgres").quote_identifier("t.*") == '"t".*'

    def test_quoted_names_pass_through(self):
        """Test that delimited names are kept."""
        assert SqlFormatter("sqlserver").quote_identifier("[Order Details]") == "[Order Details]"
        assert SqlFormatter("postgres").quote_identifier('"MixedCase"') == '"MixedCase"'
        assert SqlFormatter("postgres").quote_identifier("*") == "*"

    def test_closing_quote_is_doubled(self):
        """Test doubling of the closing delimiter."""
        assert SqlFormatter("sqlserver").quote_identifier("we]ird") == "[we]]ird]"
        assert SqlFormatter("mysql").quote_identifier("we`ird") == "`we``ird`"

    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty_identifiers(self, name):
        """Test rejection of empty identifiers."""
        with pytest.raises(ConnectorError) as exc_info:
            SqlFormatter("postgres").quote_identifier(name)
        assert exc_info.value.error_code == ErrorCode.VALIDATION_ERROR

    def test_empty_name_part(self):
        """Test rejection of an empty part in a dotted name."""
        with pytest.raises(ConnectorError) as exc_info:
            SqlFormatter("postgres").quote_identifier("schema..table")
        assert exc_info.value.error_code == ErrorCode.INVALID_IDENTIFIER
        assert exc_info.value.details["identifier"] == "schema..table"


class TestColumns:
    """Column references in select lists and conditions."""

    def test_alias_quotes_both_sides(self):
        """Test quoting of an aliased column."""
        assert SqlFormatter("postgres").format_column("u.name AS n") == '"u"."name" AS "n"'

    def test_function_expression_passes_through(self):
        """Test an aliased aggregate."""
        assert SqlFormatter("postgres").format_column("COUNT(*) AS total") == 'COUNT(*) AS "total"'

    @pytest.mark.parametrize(
        "dialect, expression",
        [
            ("postgres", "LOWER(name)"),
            ("postgres", "COUNT(DISTINCT id)"),
            ("mysql", "COALESCE(nickname, 'n/a')"),
            ("sqlserver", "ROUND(price * 1.2, 2)"),
            ("oracle", "UPPER(o.region)"),
        ],
    )
    def test_function_calls_over_columns_and_literals(self, dialect, expression):
        """Test that single function calls are kept as written."""
        assert SqlFormatter(dialect).format_column(expression) == expression

    def test_statement_separator_is_rejected(self):
        """Test rejection of a statement separator."""
        with pytest.raises(ConnectorError) as exc_info:
            SqlFormatter("postgres").format_column("COUNT(*); DROP TABLE users")
        assert exc_info.value.error_code == ErrorCode.INVALID_IDENTIFIER

    def test_comment_is_rejected(self):
        """Test rejection of a SQL comment."""
        with pytest.raises(ConnectorError) as exc_info:
            SqlFormatter("mysql").format_column("MAX(id) -- trailing")
        assert exc_info.value.error_code == ErrorCode.INVALID_IDENTIFIER

    def test_boolean_expression_is_rejected(self):
        """Test rejection of boolean logic between calls."""
        with pytest.raises(ConnectorError) as exc_info:
            SqlFormatter("postgres").format_column("lower(name) = lower(name) OR lower(name)")
        assert exc_info.value.error_code == ErrorCode.INVALID_IDENTIFIER

    @pytest.mark.parametrize(
        "expression",
        [
            "(SELECT password FROM admins LIMIT 1)",
            "COALESCE((SELECT password FROM admins LIMIT 1), name)",
            "COALESCE(name = 'x', 0)",
        ],
    )
    def test_subqueries_and_comparisons_are_rejected(self, expression):
        """Test rejection of subqueries and comparisons."""
        with pytest.raises(ConnectorError) as exc_info:
            SqlFormatter("mysql").format_column(expression)
        assert exc_info.value.error_code == ErrorCode.INVALID_IDENTIFIER

    def test_unparseable_expression_is_rejected(self):
        """Test rejection of text the parser cannot read."""
        with pytest.raises(ConnectorError) as exc_info:
            SqlFormatter("postgres").format_column("COUNT(")
        assert exc_info.value.error_code == ErrorCode.INVALID_IDENTIFIER


class TestRules:
    """Dialect rules table."""

    def test_concat(self):
        """Test string concatenation per dialect."""
        assert SqlFormatter("sqlserver").concat("a", "b", "c") == "a + b + c"
        assert SqlFormatter("oracle").concat("a", "b") == "a + b"
        assert SqlFormatter("postgres").concat("a", "b") == "CONCAT(a, b)"
        assert SqlFormatter("mysql").concat("a", "b") == "CONCAT(a, b)"

    def test_aliases_resolve(self):
        """Test dialect alias lookup."""
        assert get_dialect_rules("postgresql").dialect is DatabaseType.POSTGRES
        assert get_dialect_rules("MSSQL").dialect is DatabaseType.SQLSERVER

    def test_unknown_dialect(self):
        """Test an unsupported dialect."""
        with pytest.raises(ConnectorError) as exc_info:
            SqlFormatter("sqlite")
        assert exc_info.value.error_code == ErrorCode.DIALECT_NOT_SUPPORTED
