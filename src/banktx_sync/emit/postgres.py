"""
PostgreSQL emitter: runs an operation list in one transaction.
"""

import logging
from typing import Any

import psycopg2
from opentelemetry import trace

from ..sequence.models import DEFAULT_FIELDS, FieldMap
from ..sequence.operations import Operation
from ..utils.tracing import trace_operation
from .base import ApplyResult, ApplyStatus, EmitError, OperationEmitter
from .sql import build_statements, render_statement

logger = logging.getLogger(__name__)


class PostgresEmitter(OperationEmitter):
    """
    Applies operations to a table through a psycopg2 connection.

    The connection must not be in autocommit mode: all statements run in the
    connection's transaction, committed once at the end and rolled back on
    the first error. In dry-run mode the statements are only rendered.

    Args:
        connection: psycopg2 connection
        table: Target table (``table`` or ``schema.table``)
        fields: Column names
        dry_run: Render statements without executing them
    """

    name = "postgresql"

    def __init__(
        self,
        connection: Any,
        table: str,
        fields: FieldMap | None = None,
        dry_run: bool = False,
    ):
        self.connection = connection
        self.table = table
        self.fields = fields or DEFAULT_FIELDS
        self.dry_run = dry_run

    def _apply_batch(self, operations: list[Operation]) -> ApplyResult:
        try:
            statements = build_statements(operations, self.table, self.fields)
        except ValueError as e:
            raise EmitError(f"Cannot build statements: {e}") from e

        rendered = [render_statement(query, params) for query, params in statements]

        if self.dry_run:
            logger.info(f"Dry run: {len(statements)} statement(s) for {self.table} not executed")
            return ApplyResult(ApplyStatus.DRY_RUN, statements=rendered)

        if self.connection.autocommit is True:
            raise EmitError("Connection is in autocommit mode; refusing a non-atomic apply")

        with trace_operation(
            "postgres_apply", kind=trace.SpanKind.CLIENT, table=self.table,
            statements=len(statements),
        ):
            cursor = self.connection.cursor()
            try:
                for query, params in statements:
                    cursor.execute(query, params)
                self.connection.commit()
            except psycopg2.Error as e:
                self.connection.rollback()
                logger.error(f"Apply to {self.table} failed, rolled back: {e}")
                raise EmitError(f"Failed to apply operations to {self.table}: {e}") from e
            finally:
                cursor.close()

        logger.info(f"Committed {len(statements)} statement(s) to {self.table}")
        return ApplyResult(ApplyStatus.APPLIED, applied=len(statements), statements=rendered)
