"""
Operation emitters.

An emitter applies a reconciler's operation list as one all-or-nothing unit:
``InMemoryEmitter`` replays it against a copy of the rows,
``PostgresEmitter`` runs it in a single database transaction.
"""

from .base import ApplyResult, ApplyStatus, EmitError, OperationEmitter
from .memory import InMemoryEmitter
from .postgres import PostgresEmitter
from .quoting import format_value, quote_identifier, quote_table, validate_identifier
from .sql import build_statements, generate_script, render_statement

__all__ = [
    "OperationEmitter",
    "ApplyResult",
    "ApplyStatus",
    "EmitError",
    "InMemoryEmitter",
    "PostgresEmitter",
    "build_statements",
    "render_statement",
    "generate_script",
    "format_value",
    "quote_identifier",
    "quote_table",
    "validate_identifier",
]
