"""
Identifier quoting and literal rendering for generated SQL.

Table and column names come from configuration and are spliced into
statement text, so only plain ASCII names are accepted. Values are bound
as parameters when executing; ``format_value`` only serves dry-run scripts.
"""

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any

NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def _is_name(candidate) -> bool:
    return isinstance(candidate, str) and NAME_PATTERN.fullmatch(candidate) is not None


def validate_identifier(identifier: str) -> None:
    """
    Raises:
        ValueError: Unless ``identifier`` is an ASCII letter or underscore
            followed by letters, digits or underscores
    """
    if not _is_name(identifier):
        raise ValueError(
            f"Invalid column name {identifier!r}: use ASCII letters, digits "
            "and underscores, not starting with a digit"
        )


def quote_identifier(identifier: str) -> str:
    validate_identifier(identifier)
    return f'"{identifier}"'


def quote_table(table: str) -> str:
    """
    Quote ``table`` or ``schema.table``, each part checked like a column name.

    Raises:
        ValueError: On any other shape
    """
    parts = table.split(".") if isinstance(table, str) else []
    if not 1 <= len(parts) <= 2 or not all(_is_name(part) for part in parts):
        raise ValueError(f"Invalid table name {table!r}: expected 'table' or 'schema.table'")
    return ".".join(f'"{part}"' for part in parts)


def format_value(value: Any) -> str:
    """Render ``value`` as a PostgreSQL literal."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return str(value).upper()
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    if isinstance(value, (date, datetime)):
        text = value.isoformat()
    else:
        text = str(value)
    return "'" + text.replace("'", "''") + "'"
