"""
Day-by-day synchronisation of a transactions table with bank data.

``update_banktx_db`` takes the bank's current transactions (any number of
days), reconciles each day against the rows stored for it and, only when
every day succeeded, applies the combined operation list in one database
transaction. The result is a status envelope:

    200  OK            operations applied (or rendered in dry-run mode)
    304  Not modified  every day already matched
    400  Bad request   invalid input rows or a day over the size cap
    412  Precondition  a protected row would have been deleted
    500  Internal      reconciliation bug, database error or failed apply
                       (rolled back)

Only the description, amount and date of a bank row are written; other keys
the bank data carries are ignored.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any

import psycopg2

from .config import SyncConfig
from .emit.base import ApplyResult, ApplyStatus, EmitError
from .emit.postgres import PostgresEmitter
from .sequence.guard import identity_set_guard
from .sequence.models import FieldMap
from .sequence.operations import Operation, count_by_type
from .sequence.reconciler import ReconcileResult, SequenceReconciler
from .sequence.validator import validate_targets
from .store import fetch_day_records
from .utils.logging import ContextLogger
from .utils.tracing import add_span_attributes, trace_operation


@dataclass
class SyncResult:
    """Outcome of one ``update_banktx_db`` call."""

    code: int
    message: str
    days: list[ReconcileResult] = field(default_factory=list)
    apply: ApplyResult | None = None

    @property
    def ok(self) -> bool:
        return self.code in (200, 304)

    @property
    def operations(self) -> list[Operation]:
        if not self.ok:
            return []
        return [op for day in self.days for op in day.operations]

    @property
    def statements(self) -> list[str]:
        return list(self.apply.statements) if self.apply else []

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "counts": count_by_type(self.operations),
            "days": [day.to_dict() for day in self.days],
            "apply": self.apply.to_dict() if self.apply else None,
        }


def bank_columns(row: dict[str, Any], fields: FieldMap) -> dict[str, Any]:
    """Project a bank row onto the columns an inserted row may take from it."""
    return {name: row[name] for name in (fields.description, fields.amount, fields.date)}


def partition_by_day(rows: list[dict[str, Any]], date_field: str) -> dict[str, list[dict[str, Any]]]:
    """
    Group rows by their date, keeping each day's rows in input order.

    Days are returned in ascending date order.
    """
    days: dict[str, list[dict[str, Any]]] = defaultdict(list)
    for row in rows:
        days[str(row[date_field])].append(row)
    return dict(sorted(days.items()))


def update_banktx_db(
    connection: Any,
    updated_txs: list[dict[str, Any]],
    config: SyncConfig,
    dry_run: bool = False,
) -> SyncResult:
    """
    Reconcile a table with the bank's current transactions.

    Args:
        connection: psycopg2 connection (autocommit off)
        updated_txs: Bank transactions, each with description, amount and date,
            in the order the bank lists them within a day
        config: Table, columns and matching options
        dry_run: Render the SQL without executing it

    Returns:
        SyncResult; nothing is written unless the code is 200 and not a dry run
    """
    fields = config.fields
    log = ContextLogger(__name__, table=config.table)

    validation = validate_targets(updated_txs, fields, require_date=True)
    if not validation.valid:
        log.warning(f"Rejected update: {validation.message}")
        return SyncResult(400, validation.message)

    days = partition_by_day([bank_columns(row, fields) for row in updated_txs], fields.date)
    results: list[ReconcileResult] = []
    operations: list[Operation] = []

    with trace_operation("update_banktx_db", table=config.table, days=len(days), dry_run=dry_run):
        cursor = connection.cursor()
        try:
            for day, targets in days.items():
                day_log = log.bind(day=day)

                stored, protected = fetch_day_records(
                    cursor,
                    config.table,
                    day,
                    fields,
                    select_filter=config.select_filter,
                    protected_expression=config.protected_expression,
                )

                cap = config.max_records_per_day
                if cap is not None and max(len(stored), len(targets)) > cap:
                    message = (
                        f"{day}: {max(len(stored), len(targets))} records exceed "
                        f"the per-day limit of {cap}"
                    )
                    day_log.warning(message)
                    connection.rollback()
                    return SyncResult(400, message, days=results)

                reconciler = SequenceReconciler(
                    fields=fields,
                    fingerprint=config.fingerprint_func,
                    insert_defaults={**config.insert_extra_columns, fields.date: day},
                )
                result = reconciler.reconcile(
                    stored, targets, protection=identity_set_guard(protected), day=day
                )
                results.append(result)

                if not result.ok:
                    day_log.warning(f"Aborting update: {result.message}", code=result.code)
                    connection.rollback()
                    return SyncResult(result.code, f"{day}: {result.message}", days=results)

                operations.extend(result.operations)
        except psycopg2.Error as e:
            log.error(f"Loading stored rows failed: {e}")
            connection.rollback()
            return SyncResult(500, str(e), days=results)
        finally:
            cursor.close()

        add_span_attributes(operations=len(operations))

        emitter = PostgresEmitter(connection, config.table, fields, dry_run=dry_run)
        try:
            applied = emitter.apply_all(operations)
        except EmitError as e:
            log.error(f"Update failed: {e}")
            return SyncResult(500, str(e), days=results)

    if applied.status == ApplyStatus.NOT_MODIFIED:
        connection.rollback()
        log.info(f"{len(days)} day(s) already up to date")
        return SyncResult(304, "Not modified", days=results, apply=applied)

    if applied.status == ApplyStatus.DRY_RUN:
        connection.rollback()

    log.info(
        f"Update finished: {len(operations)} operation(s) over {len(days)} day(s)",
        status=applied.status,
    )
    return SyncResult(200, "OK", days=results, apply=applied)
