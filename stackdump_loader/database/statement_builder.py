"""
SQL text generation for dump tables.

Both statements are pure functions of a Table descriptor. Column order in the
generated text always follows the table's column order; for the insert statement
that order is the positional binding contract used by the table loader.
"""

from ..mapping.type_mapping import ddl_type
from ..models import Table


def create_statement(table: Table) -> str:
    """
    Build an idempotent CREATE TABLE statement.

    Example:
        create table if not exists post_links (id int not null, ..., link_type_id smallint not null);

    Args:
        table: Table descriptor

    Returns:
        DDL text; nullable columns omit the 'not null' qualifier
    """
    column_defs = ', '.join(
        f"{column.pg_name} {ddl_type(column)}{'' if column.nullable else ' not null'}"
        for column in table.columns
    )
    return f"create table if not exists {table.pg_name} ({column_defs});"


def insert_statement(table: Table) -> str:
    """
    Build a parameterized INSERT statement with one qmark placeholder per column.

    Args:
        table: Table descriptor

    Returns:
        DML text, e.g. 'insert into badges (id, user_id, ...) values (?, ?, ...);'
    """
    column_list = ', '.join(column.pg_name for column in table.columns)
    placeholders = ', '.join('?' * len(table.columns))
    return f"insert into {table.pg_name} ({column_list}) values ({placeholders});"
