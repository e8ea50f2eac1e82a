"""
Position reconciliation of one day of bank transactions.

Given the rows stored for a day and the day as the bank shows it now, this
module computes the ordered list of renumber/insert/delete operations that
turns the former into the latter. Unchanged rows keep their identity and are
only renumbered when something is inserted or removed ahead of them.

Example: stored ``[Tx1, Tx2, Tx3]`` (ids 1, 2, 3) and bank
``[Tx4 Clearing, Tx1, Tx3]`` produce::

    RENUMBER id=3 -> 4
    RENUMBER id=2 -> 3
    RENUMBER id=1 -> 2
    INSERT   pos=1 "Tx4 Clearing"
    DELETE   id=2
    RENUMBER id=3 -> 3

Insert shifts run from the highest position down and delete shifts run
upwards after the delete, so replaying the list in order never leaves two
rows on the same position.
"""

import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ..utils.metrics import record_reconciliation
from ..utils.tracing import add_span_attributes, add_span_event, trace_operation
from .guard import ProtectedRecordError, ProtectionGuard, as_guard
from .matcher import DELETE, INSERT, Hunk, diff
from .models import (
    DEFAULT_FIELDS,
    FieldMap,
    Fingerprint,
    Record,
    TargetRecord,
    default_fingerprint,
)
from .operations import Delete, Insert, Operation, Renumber, count_by_type
from .validator import PROTECTION, ValidationIssue, validate_day

logger = logging.getLogger(__name__)


class ReconcileStatus:
    """Constants for reconciliation outcomes."""

    SUCCEEDED = "SUCCEEDED"
    REJECTED = "REJECTED"
    VETOED = "VETOED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


STATUS_CODES = {
    ReconcileStatus.REJECTED: 400,
    ReconcileStatus.VETOED: 412,
    ReconcileStatus.INTERNAL_ERROR: 500,
}


class SequenceInternalError(Exception):
    """The position walk reached a state a correct alignment cannot produce."""


@dataclass
class ReconcileResult:
    """
    Outcome of reconciling one day.

    A success with no operations means the stored day already matches.
    Failures always carry an empty operation list.
    """

    status: str
    operations: list[Operation] = field(default_factory=list)
    issue: ValidationIssue | None = None
    protected_identity: Any = None
    message: str = "OK"
    day: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == ReconcileStatus.SUCCEEDED

    @property
    def modified(self) -> bool:
        return self.ok and bool(self.operations)

    @property
    def code(self) -> int:
        """HTTP-style code: 200, 304 (nothing to do), 400, 412 or 500."""
        if self.ok:
            return 200 if self.operations else 304
        return STATUS_CODES.get(self.status, 500)

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day,
            "status": self.status,
            "code": self.code,
            "message": self.message,
            "operations": [op.to_dict() for op in self.operations],
            "counts": count_by_type(self.operations),
            "issue": self.issue.to_dict() if self.issue else None,
            "protected_identity": self.protected_identity,
        }


@dataclass
class _Slot:
    """Working-copy entry; ``old_index`` is None for rows inserted by this walk."""

    identity: Any
    position: int
    old_index: int | None
    key: str


class _PositionWalk:
    """
    Mutable working copy of the stored day.

    ``remap`` maps each stored row's original index to its current index in
    ``working`` (None once deleted). Hunks must be fed left to right, so the
    working prefix always equals the target prefix already processed.
    """

    def __init__(
        self,
        stored: list[Record],
        guard: ProtectionGuard,
        fingerprint: Fingerprint,
        insert_defaults: Mapping[str, Any],
    ):
        self.guard = guard
        self.fingerprint = fingerprint
        self.insert_defaults = insert_defaults
        self.working = [
            _Slot(r.identity, r.position, i, fingerprint(r)) for i, r in enumerate(stored)
        ]
        self.remap: list[int | None] = list(range(len(stored)))
        self.operations: list[Operation] = []

    def insert(self, target_index: int, target: TargetRecord) -> None:
        slot_index = target_index
        if slot_index > len(self.working):
            raise SequenceInternalError(
                f"Insert slot {slot_index} beyond working length {len(self.working)}"
            )

        for slot in reversed(self.working[slot_index:]):
            self._shift(slot, +1)

        attributes = dict(target.attributes)
        for key, value in self.insert_defaults.items():
            if attributes.get(key) is None:
                attributes[key] = value

        position = slot_index + 1
        self.operations.append(
            Insert(position, target.description, target.amount, attributes)
        )
        self.working.insert(
            slot_index, _Slot(None, position, None, self.fingerprint(target))
        )

    def delete(self, old_index: int, record: Record) -> None:
        slot_index = self.remap[old_index]
        if slot_index is None or self.working[slot_index].old_index != old_index:
            raise SequenceInternalError(
                f"Stored row {old_index} (id={record.identity}) is not in the working copy"
            )

        self.guard.check(record.identity)

        del self.working[slot_index]
        self.remap[old_index] = None
        self.operations.append(Delete(record.identity))

        for slot in self.working[slot_index:]:
            self._shift(slot, -1)

    def _shift(self, slot: _Slot, delta: int) -> None:
        if slot.old_index is None:
            raise SequenceInternalError(
                f"Row inserted at position {slot.position} would need renumbering"
            )
        slot.position += delta
        self.remap[slot.old_index] += delta
        self.operations.append(Renumber(slot.identity, slot.position))

    def verify(self, target_keys: list[str]) -> None:
        positions = [slot.position for slot in self.working]
        if positions != list(range(1, len(self.working) + 1)):
            raise SequenceInternalError(f"Positions not contiguous after walk: {positions}")
        if [slot.key for slot in self.working] != target_keys:
            raise SequenceInternalError("Working copy does not match target after walk")


class SequenceReconciler:
    """
    Reconciles stored day sequences against target sequences.

    Args:
        fields: Names of the identity/position/content fields in the rows
        fingerprint: Equality policy for matching stored rows to targets
        insert_defaults: Values for attributes a target does not supply
            (applied to inserted rows only)
        matcher: Alignment function returning hunks (defaults to ``diff``)

    Usage:
        reconciler = SequenceReconciler(insert_defaults={"acc_id": 8})
        result = reconciler.reconcile(stored_rows, bank_rows, protection={1234})
        if result.ok:
            emitter.apply_all(result.operations)
    """

    def __init__(
        self,
        fields: FieldMap | None = None,
        fingerprint: Fingerprint | None = None,
        insert_defaults: Mapping[str, Any] | None = None,
        matcher: Callable[..., list[Hunk]] = diff,
    ):
        self.fields = fields or DEFAULT_FIELDS
        self.fingerprint = fingerprint or default_fingerprint
        self.insert_defaults = dict(insert_defaults or {})
        self.matcher = matcher

    def reconcile(
        self,
        stored_rows: Any,
        target_rows: Any,
        protection: Any = None,
        day: str | None = None,
    ) -> ReconcileResult:
        """
        Compute the operations turning ``stored_rows`` into ``target_rows``.

        Args:
            stored_rows: Stored rows of one day, ordered by position
            target_rows: The day's rows in their desired order
            protection: ProtectionGuard, predicate, or collection of protected ids
            day: Label used in logs, spans and the result

        Returns:
            ReconcileResult; never raises for bad input or protected rows
        """
        start = time.perf_counter()
        with trace_operation("reconcile_day", component="reconciler", day=day or ""):
            result = self._reconcile(stored_rows, target_rows, protection, day)
            result.day = day
            add_span_attributes(
                status=result.status,
                code=result.code,
                operations=len(result.operations),
            )
        record_reconciliation(result.status, result.operations, time.perf_counter() - start)
        return result

    def _reconcile(
        self,
        stored_rows: Any,
        target_rows: Any,
        protection: Any,
        day: str | None,
    ) -> ReconcileResult:
        label = day or "<day>"

        validation = validate_day(stored_rows, target_rows, self.fields)
        if not validation.valid:
            logger.warning(f"Rejected {label}: {validation.message}")
            return ReconcileResult(
                ReconcileStatus.REJECTED,
                issue=validation.issue,
                message=validation.message,
            )

        try:
            guard = as_guard(protection)
        except TypeError as e:
            issue = ValidationIssue(PROTECTION, None, None, f"protection: {e}")
            logger.warning(f"Rejected {label}: {issue.message}")
            return ReconcileResult(ReconcileStatus.REJECTED, issue=issue, message=issue.message)

        stored = [Record.from_row(row, self.fields) for row in stored_rows]
        targets = [TargetRecord.from_row(row, self.fields) for row in target_rows]

        hunks = self.matcher(stored, targets, key=self.fingerprint)
        logger.debug(
            f"Aligned {label}: {len(stored)} stored, {len(targets)} target, {len(hunks)} hunk(s)"
        )

        walk = _PositionWalk(stored, guard, self.fingerprint, self.insert_defaults)
        try:
            for hunk in hunks:
                for item in hunk:
                    if item.sign == INSERT:
                        walk.insert(item.index, item.item)
                    elif item.sign == DELETE:
                        walk.delete(item.index, item.item)
                    else:
                        raise SequenceInternalError(
                            f"Bug: unknown hunk sign '{item.sign}', "
                            f"it should only be either + or -"
                        )
            walk.verify([self.fingerprint(t) for t in targets])
        except ProtectedRecordError as e:
            add_span_event("protection_veto", identity=e.identity)
            return ReconcileResult(
                ReconcileStatus.VETOED,
                protected_identity=e.identity,
                message=str(e),
            )
        except SequenceInternalError as e:
            logger.error(f"Internal error reconciling {label}: {e}")
            return ReconcileResult(ReconcileStatus.INTERNAL_ERROR, message=str(e))

        if not walk.operations:
            logger.info(f"{label}: not modified")
            return ReconcileResult(ReconcileStatus.SUCCEEDED, message="Not modified")

        counts = count_by_type(walk.operations)
        logger.info(
            f"{label}: {len(walk.operations)} operation(s) "
            f"({counts['INSERT']} insert, {counts['DELETE']} delete, "
            f"{counts['RENUMBER']} renumber)"
        )
        return ReconcileResult(ReconcileStatus.SUCCEEDED, operations=walk.operations)


def reconcile_day(
    stored_rows: Any,
    target_rows: Any,
    protection: Any = None,
    insert_defaults: Mapping[str, Any] | None = None,
    fields: FieldMap | None = None,
    fingerprint: Fingerprint | None = None,
    day: str | None = None,
) -> ReconcileResult:
    """Reconcile one day with a throwaway ``SequenceReconciler``."""
    reconciler = SequenceReconciler(
        fields=fields, fingerprint=fingerprint, insert_defaults=insert_defaults
    )
    return reconciler.reconcile(stored_rows, target_rows, protection=protection, day=day)
