"""
SQL type mapping for dump columns.

For every SqlType this module defines the DDL fragment used in CREATE TABLE and the
parser that turns the dump's attribute text into a value suitable for binding. Binders
combine a parser with a fixed parameter position and are built once per table.
"""

import re

from datetime import datetime
from typing import Any, Callable, Dict

from ..exceptions import ValueParseError
from ..models import Column, SqlType, UNBOUNDED


Binder = Callable[[Any, str], None]

INT_MIN, INT_MAX = -2 ** 31, 2 ** 31 - 1
SMALLINT_MIN, SMALLINT_MAX = -2 ** 15, 2 ** 15 - 1

_INTEGER_PATTERN = re.compile(r'[+-]?[0-9]+')
# Date and time are both required; fractional seconds may have 1 to 9 digits
_TIMESTAMP_PATTERN = re.compile(
    r'(?P<base>[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}(:[0-9]{2})?)(\.(?P<fraction>[0-9]{1,9}))?'
    r'(?P<offset>Z|[+-][0-9]{2}:[0-9]{2})?'
)


def parse_boolean(value: str) -> bool:
    """Parse the dump's boolean text; only exact 'True' and 'False' are accepted."""
    if value == "True":
        return True
    if value == "False":
        return False
    raise ValueParseError(f"Invalid boolean value: {value!r}", source_value=value,
                          target_type=SqlType.BOOLEAN.name)


def _parse_bounded_int(value: str, low: int, high: int, sql_type: SqlType) -> int:
    # int() alone would also accept surrounding whitespace and digit separators
    if not isinstance(value, str) or not _INTEGER_PATTERN.fullmatch(value):
        raise ValueParseError(f"Invalid {sql_type.name.lower()} value: {value!r}", source_value=value,
                              target_type=sql_type.name)
    result = int(value, 10)
    if not low <= result <= high:
        raise ValueParseError(f"{sql_type.name.lower()} value out of range: {value!r}", source_value=value,
                              target_type=sql_type.name)
    return result


def parse_integer(value: str) -> int:
    """Parse a base-10 signed 32-bit integer."""
    return _parse_bounded_int(value, INT_MIN, INT_MAX, SqlType.INTEGER)


def parse_smallint(value: str) -> int:
    """Parse a base-10 signed 16-bit integer."""
    return _parse_bounded_int(value, SMALLINT_MIN, SMALLINT_MAX, SqlType.SMALLINT)


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 local date-time such as '2014-05-13T00:00:00.123'.

    Text carrying a zone offset is rejected, the result is always timezone-naive.
    """
    match = _TIMESTAMP_PATTERN.fullmatch(value) if isinstance(value, str) else None
    if match is None:
        raise ValueParseError(f"Invalid timestamp value: {value!r}", source_value=value,
                              target_type=SqlType.TIMESTAMP.name)
    if match.group('offset'):
        raise ValueParseError(f"Timestamp must not carry a zone offset: {value!r}", source_value=value,
                              target_type=SqlType.TIMESTAMP.name)
    if match.group('fraction') and match.group('base').count(':') != 2:
        raise ValueParseError(f"Invalid timestamp value: {value!r}", source_value=value,
                              target_type=SqlType.TIMESTAMP.name)
    try:
        result = datetime.fromisoformat(match.group('base'))
    except ValueError:
        raise ValueParseError(f"Invalid timestamp value: {value!r}", source_value=value,
                              target_type=SqlType.TIMESTAMP.name)

    fraction = match.group('fraction')
    if fraction:
        # Sub-microsecond digits are truncated
        result = result.replace(microsecond=int(fraction[:6].ljust(6, '0')))
    return result


def parse_varchar(value: str) -> str:
    # Length is enforced by the database column, not here
    return value


_DDL_TYPES: Dict[SqlType, Callable[[Column], str]] = {
    SqlType.BOOLEAN: lambda column: "boolean",
    SqlType.INTEGER: lambda column: "int",
    SqlType.SMALLINT: lambda column: "smallint",
    SqlType.TIMESTAMP: lambda column: "timestamp",
    SqlType.VARCHAR: lambda column: "text" if column.length is UNBOUNDED else f"varchar({column.length})",
}

_PARSERS: Dict[SqlType, Callable[[str], Any]] = {
    SqlType.BOOLEAN: parse_boolean,
    SqlType.INTEGER: parse_integer,
    SqlType.SMALLINT: parse_smallint,
    SqlType.TIMESTAMP: parse_timestamp,
    SqlType.VARCHAR: parse_varchar,
}

for _mapping in (_DDL_TYPES, _PARSERS):
    _missing = set(SqlType) - set(_mapping)
    if _missing:
        raise RuntimeError(f"Type mapping incomplete, missing: {sorted(t.name for t in _missing)}")


def ddl_type(column: Column) -> str:
    """
    Get the DDL type fragment for a column.

    Args:
        column: Column descriptor

    Returns:
        One of 'boolean', 'int', 'smallint', 'timestamp', 'varchar(N)' or 'text'
    """
    return _DDL_TYPES[column.sql_type](column)


def parser_for(sql_type: SqlType) -> Callable[[str], Any]:
    """Get the attribute text parser for a SQL type."""
    return _PARSERS[sql_type]


def make_binder(column: Column, position: int) -> Binder:
    """
    Build a binder that parses attribute text for a column and binds it at a fixed position.

    The returned callable takes ``(statement, raw_value)`` and calls
    ``statement.bind(position, parsed_value)``. Parse failures are raised as
    ValueParseError annotated with the column name.

    Args:
        column: Column descriptor
        position: 1-based parameter position of the column in the insert statement

    Returns:
        Binder closure
    """
    parse = _PARSERS[column.sql_type]
    column_name = column.name

    def binder(statement, raw_value: str) -> None:
        try:
            value = parse(raw_value)
        except ValueParseError as e:
            e.column_name = column_name
            raise
        statement.bind(position, value)

    return binder
