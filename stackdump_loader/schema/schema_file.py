"""
Loading of table catalogues from JSON or YAML schema files.

A schema file lists tables in load order, each with its ordered columns:

    {"tables": [{"name": "badges", "columns": [
        {"name": "Id", "sql_type": "INTEGER"},
        {"name": "Name", "sql_type": "VARCHAR", "length": 50},
        {"name": "Body", "sql_type": "VARCHAR", "length": "unbounded", "nullable": true}]}]}
"""

import json
import logging

from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from ..exceptions import SchemaConfigError
from ..models import Column, SqlType, Table, UNBOUNDED


logger = logging.getLogger(__name__)


def load_schema_file(schema_path: Union[str, Path]) -> Tuple[Table, ...]:
    """
    Read a schema file and build its table descriptors.

    Args:
        schema_path: Path to a .json, .yaml or .yml schema file

    Returns:
        Tuple of tables in file order

    Raises:
        SchemaConfigError: If the file is missing, unreadable or describes an invalid schema
    """
    full_path = Path(schema_path)

    if not full_path.exists():
        raise SchemaConfigError(f"Schema file not found: {full_path}")

    try:
        with open(full_path, 'r', encoding='utf-8') as file:
            if full_path.suffix.lower() in ['.yaml', '.yml']:
                import yaml
                try:
                    schema_data = yaml.safe_load(file)
                except yaml.YAMLError as e:
                    raise SchemaConfigError(f"Failed to parse schema file {full_path}: {e}")
            elif full_path.suffix.lower() == '.json':
                schema_data = json.load(file)
            else:
                raise SchemaConfigError(f"Unsupported schema file format: {full_path.suffix}")
    except (json.JSONDecodeError, ImportError) as e:
        raise SchemaConfigError(f"Failed to parse schema file {full_path}: {e}")
    except OSError as e:
        raise SchemaConfigError(f"Failed to read schema file {full_path}: {e}")

    tables = parse_schema_document(schema_data, str(full_path))
    logger.info(f"Loaded {len(tables)} table definitions from {full_path}")
    return tables


def parse_schema_document(schema_data: Dict[str, Any], source: str = "<schema>") -> Tuple[Table, ...]:
    """
    Build table descriptors from a decoded schema document.

    Args:
        schema_data: Decoded JSON/YAML content
        source: Description of the origin, used in error messages

    Returns:
        Tuple of tables in document order

    Raises:
        SchemaConfigError: If the document structure is invalid
    """
    if not isinstance(schema_data, dict) or not isinstance(schema_data.get('tables'), list):
        raise SchemaConfigError(f"Schema {source} must contain a 'tables' list")

    errors: List[str] = []
    tables: List[Table] = []
    table_names = set()

    for i, table_data in enumerate(schema_data['tables']):
        try:
            table = _parse_table(table_data)
        except SchemaConfigError as e:
            errors.append(f"Table {i}: {e}")
            continue

        if table.name in table_names:
            errors.append(f"Table {i}: duplicate table name '{table.name}'")
            continue
        table_names.add(table.name)
        tables.append(table)

    if not tables and not errors:
        errors.append("At least one table is required")

    if errors:
        raise SchemaConfigError(f"Schema validation failed for {source}: {'; '.join(errors)}")

    return tuple(tables)


def _parse_table(table_data: Any) -> Table:
    if not isinstance(table_data, dict):
        raise SchemaConfigError(f"table entry must be an object, got {type(table_data).__name__}")

    table_name = table_data.get('name', '')
    column_entries = table_data.get('columns')
    if not isinstance(column_entries, list):
        raise SchemaConfigError(f"table '{table_name}' must define a 'columns' list", table_name)

    return Table(table_name, tuple(_parse_column(entry, table_name) for entry in column_entries))


def _parse_column(column_data: Any, table_name: str) -> Column:
    if not isinstance(column_data, dict):
        raise SchemaConfigError(f"column entry of table '{table_name}' must be an object", table_name)

    column_name = column_data.get('name', '')
    type_name = str(column_data.get('sql_type', '')).upper()
    try:
        sql_type = SqlType[type_name]
    except KeyError:
        raise SchemaConfigError(f"column '{column_name}' has unknown sql_type '{type_name}'", table_name)

    length = column_data.get('length', 0 if sql_type is not SqlType.VARCHAR else UNBOUNDED)
    if isinstance(length, str) and length.lower() == 'unbounded':
        length = UNBOUNDED

    nullable = column_data.get('nullable', False)
    if not isinstance(nullable, bool):
        raise SchemaConfigError(f"column '{column_name}' nullable must be true or false, got {nullable!r}", table_name)

    return Column(
        name=column_name,
        sql_type=sql_type,
        length=length,
        nullable=nullable,
    )
