"""
SQL statement generation for operation lists.

Each operation becomes one parameterised statement (``%s`` placeholders, as
psycopg2 expects). The same statements can be rendered with literal values
into a script for dry runs and review.
"""

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from ..sequence.models import DEFAULT_FIELDS, FieldMap
from ..sequence.operations import Delete, Insert, Operation, Renumber, count_by_type
from .quoting import format_value, quote_identifier, quote_table

Statement = tuple[str, tuple[Any, ...]]


def _renumber_sql(table: str, op: Renumber, fields: FieldMap) -> Statement:
    query = (
        f"UPDATE {quote_table(table)} SET {quote_identifier(fields.position)} = %s "
        f"WHERE {quote_identifier(fields.identity)} = %s"
    )
    return query, (op.new_position, op.identity)


def _insert_sql(table: str, op: Insert, fields: FieldMap) -> Statement:
    columns = dict(op.attributes)
    columns[fields.description] = op.description
    columns[fields.amount] = op.amount
    columns[fields.position] = op.position

    names = sorted(columns)
    quoted = ", ".join(quote_identifier(name) for name in names)
    placeholders = ", ".join(["%s"] * len(names))
    query = f"INSERT INTO {quote_table(table)} ({quoted}) VALUES ({placeholders})"
    return query, tuple(columns[name] for name in names)


def _delete_sql(table: str, op: Delete, fields: FieldMap) -> Statement:
    query = f"DELETE FROM {quote_table(table)} WHERE {quote_identifier(fields.identity)} = %s"
    return query, (op.identity,)


def build_statements(
    operations: Sequence[Operation],
    table: str,
    fields: FieldMap = DEFAULT_FIELDS,
) -> list[Statement]:
    """
    Translate operations into parameterised statements, preserving order.

    Raises:
        ValueError: On an invalid table/column name or unknown operation
    """
    statements = []
    for op in operations:
        if isinstance(op, Renumber):
            statements.append(_renumber_sql(table, op, fields))
        elif isinstance(op, Insert):
            statements.append(_insert_sql(table, op, fields))
        elif isinstance(op, Delete):
            statements.append(_delete_sql(table, op, fields))
        else:
            raise ValueError(f"Unsupported operation: {op!r}")
    return statements


def render_statement(query: str, params: Sequence[Any]) -> str:
    """Inline parameters as literals; only for display, never for execution."""
    parts = query.split("%s")
    if len(parts) != len(params) + 1:
        raise ValueError(
            f"Statement has {len(parts) - 1} placeholder(s) but {len(params)} parameter(s)"
        )
    rendered = [parts[0]]
    for value, part in zip(params, parts[1:]):
        rendered.append(format_value(value))
        rendered.append(part)
    return "".join(rendered) + ";"


def generate_script(
    operations: Sequence[Operation],
    table: str,
    fields: FieldMap = DEFAULT_FIELDS,
    title: str | None = None,
) -> str:
    """
    Render a complete transactional script for an operation list.

    Args:
        operations: Ordered operations
        table: Target table (``table`` or ``schema.table``)
        fields: Column names
        title: Optional comment line (e.g. the days covered)

    Returns:
        SQL script wrapped in BEGIN/COMMIT
    """
    counts = count_by_type(operations)
    lines = [
        f"-- Sequence update for {table}",
        f"-- Generated: {datetime.now(UTC).isoformat()}",
        f"-- Operations: {len(operations)} "
        f"({counts['INSERT']} insert, {counts['DELETE']} delete, {counts['RENUMBER']} renumber)",
    ]
    if title:
        lines.append(f"-- {title}")
    lines.extend(["", "BEGIN;", ""])

    for query, params in build_statements(operations, table, fields):
        lines.append(render_statement(query, params))

    lines.extend(["", "COMMIT;"])
    return "\n".join(lines)
