"""
Loading one day's stored transactions from PostgreSQL.
"""

import logging
from typing import Any

from opentelemetry import trace

from .emit.quoting import quote_identifier, quote_table
from .sequence.models import DEFAULT_FIELDS, FieldMap
from .utils.tracing import trace_operation

logger = logging.getLogger(__name__)

PROTECTED_ALIAS = "_protected"


def _escape_percent(sql_text: str) -> str:
    # psycopg2 reads % as a placeholder marker once parameters are passed
    return sql_text.replace("%", "%%")


def build_day_query(
    table: str,
    fields: FieldMap = DEFAULT_FIELDS,
    select_filter: str | None = None,
    protected_expression: str | None = None,
) -> str:
    """
    Build the SELECT for one day's rows, ordered by position.

    ``select_filter`` and ``protected_expression`` are trusted SQL fragments
    from the operator's configuration; they are inserted verbatim.
    """
    columns = [
        quote_identifier(name)
        for name in (fields.identity, fields.position, fields.description, fields.amount)
    ]
    if protected_expression:
        columns.append(f'({_escape_percent(protected_expression)}) AS "{PROTECTED_ALIAS}"')

    where = f"{quote_identifier(fields.date)} = %s"
    if select_filter:
        where += f" AND ({_escape_percent(select_filter)})"

    return (
        f"SELECT {', '.join(columns)} FROM {quote_table(table)} "
        f"WHERE {where} ORDER BY {quote_identifier(fields.position)}"
    )


def fetch_day_records(
    cursor: Any,
    table: str,
    day: str,
    fields: FieldMap = DEFAULT_FIELDS,
    select_filter: str | None = None,
    protected_expression: str | None = None,
) -> tuple[list[dict[str, Any]], set[Any]]:
    """
    Fetch the stored rows of ``day`` and the identities that are protected.

    Args:
        cursor: psycopg2 cursor
        table: Transactions table
        day: Date value for the date column
        fields: Column names
        select_filter: Extra WHERE condition
        protected_expression: SQL expression flagging protected rows

    Returns:
        Tuple of (rows ordered by position, protected identities)
    """
    query = build_day_query(table, fields, select_filter, protected_expression)

    with trace_operation("fetch_day_records", kind=trace.SpanKind.CLIENT, table=table, day=day):
        cursor.execute(query, (day,))
        columns = [desc[0] for desc in cursor.description]
        rows = [dict(zip(columns, row)) for row in cursor.fetchall()]

    protected = set()
    for row in rows:
        if row.pop(PROTECTED_ALIAS, False):
            protected.add(row[fields.identity])

    logger.debug(f"Fetched {len(rows)} row(s) for {day} from {table} ({len(protected)} protected)")
    return rows, protected
