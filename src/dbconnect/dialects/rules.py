"""Per-dialect syntax rules.

One immutable ``DialectRules`` record per supported engine captures every
syntactic difference the formatter and the query builders care about.
Adding a dialect means adding a ``DatabaseType`` member, a rules record
and a branch in ``get_dialect_rules``; the exhaustive ``match`` makes a
missing branch a type-checker error.
"""

from dataclasses import dataclass
from typing import Union

from typing_extensions import assert_never

from dbconnect.common.exceptions import dialect_not_supported
from dbconnect.constants import ConcatStyle, DatabaseType, PaginationStrategy


@dataclass(frozen=True)
class DialectRules:
    """Syntax facts for one dialect.

    Date templates receive the quoted literal as ``{literal}``.
    """

    dialect: DatabaseType
    quote_open: str
    quote_close: str
    true_literal: str
    false_literal: str
    string_prefix: str
    concat_style: ConcatStyle
    pagination: PaginationStrategy
    date_template: str
    datetime_template: str
    timestamp_template: str
    datetime_separator: str
    default_port: int
    sqlglot_dialect: str
    fold_identifiers_upper: bool = False


POSTGRES_RULES = DialectRules(
    dialect=DatabaseType.POSTGRES,
    quote_open='"',
    quote_close='"',
    true_literal="TRUE",
    false_literal="FALSE",
    string_prefix="",
    concat_style=ConcatStyle.FUNCTION,
    pagination=PaginationStrategy.LIMIT_OFFSET,
    date_template="{literal}",
    datetime_template="{literal}",
    timestamp_template="{literal}",
    datetime_separator=" ",
    default_port=5432,
    sqlglot_dialect="postgres",
)

MYSQL_RULES = DialectRules(
    dialect=DatabaseType.MYSQL,
    quote_open="`",
    quote_close="`",
    true_literal="TRUE",
    false_literal="FALSE",
    string_prefix="",
    concat_style=ConcatStyle.FUNCTION,
    pagination=PaginationStrategy.LIMIT_OFFSET,
    date_template="{literal}",
    datetime_template="{literal}",
    timestamp_template="{literal}",
    datetime_separator=" ",
    default_port=3306,
    sqlglot_dialect="mysql",
)

SQLSERVER_RULES = DialectRules(
    dialect=DatabaseType.SQLSERVER,
    quote_open="[",
    quote_close="]",
    true_literal="1",
    false_literal="0",
    string_prefix="N",
    concat_style=ConcatStyle.OPERATOR,
    pagination=PaginationStrategy.TOP_OFFSET_FETCH,
    date_template="CONVERT(DATE, {literal}, 23)",
    datetime_template="CONVERT(DATETIME2, {literal}, 126)",
    timestamp_template="CONVERT(DATETIME2, {literal}, 126)",
    datetime_separator="T",
    default_port=1433,
    sqlglot_dialect="tsql",
)

ORACLE_RULES = DialectRules(
    dialect=DatabaseType.ORACLE,
    quote_open='"',
    quote_close='"',
    true_literal="1",
    false_literal="0",
    string_prefix="",
    concat_style=ConcatStyle.OPERATOR,
    pagination=PaginationStrategy.ROWNUM,
    date_template="TO_DATE({literal}, 'YYYY-MM-DD')",
    datetime_template="TO_DATE({literal}, 'YYYY-MM-DD HH24:MI:SS')",
    timestamp_template="TO_TIMESTAMP({literal}, 'YYYY-MM-DD HH24:MI:SS.FF6')",
    datetime_separator=" ",
    default_port=1521,
    sqlglot_dialect="oracle",
    fold_identifiers_upper=True,
)


def resolve_dialect(dialect: Union[DatabaseType, str]) -> DatabaseType:
    """Coerce a dialect tag to ``DatabaseType``.

    Raises:
        ConnectorError: DIALECT_NOT_SUPPORTED for unknown tags
    """
    if isinstance(dialect, DatabaseType):
        return dialect
    try:
        return DatabaseType(dialect)
    except ValueError:
        raise dialect_not_supported(dialect) from None


def get_dialect_rules(dialect: Union[DatabaseType, str]) -> DialectRules:
    """Return the rules record for ``dialect``."""
    resolved = resolve_dialect(dialect)
    match resolved:
        case DatabaseType.POSTGRES:
            return POSTGRES_RULES
        case DatabaseType.MYSQL:
            return MYSQL_RULES
        case DatabaseType.SQLSERVER:
            return SQLSERVER_RULES
        case DatabaseType.ORACLE:
            return ORACLE_RULES
        case _:
            assert_never(resolved)
