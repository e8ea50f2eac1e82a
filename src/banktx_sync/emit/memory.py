"""
In-memory emitter: replays operations against a copy of a day's rows.

Used for offline planning and to check operation lists. Every step is
checked, so a list that would transiently put two rows on one position, touch
an unknown identity, or leave a gap is rejected and the store is left as it
was.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from ..sequence.models import DEFAULT_FIELDS, FieldMap
from ..sequence.operations import Delete, Insert, Operation, Renumber
from .base import ApplyResult, ApplyStatus, EmitError, OperationEmitter

logger = logging.getLogger(__name__)


class InMemoryEmitter(OperationEmitter):
    """
    Simulated table holding one day's rows keyed by position.

    Rows created by Insert operations have ``None`` as identity.
    """

    name = "memory"

    def __init__(self, rows: Sequence[Mapping[str, Any]] = (), fields: FieldMap | None = None):
        self.fields = fields or DEFAULT_FIELDS
        self._by_position: dict[int, dict[str, Any]] = {}
        for row in rows:
            position = row[self.fields.position]
            if position in self._by_position:
                raise ValueError(f"Duplicate position {position} in initial rows")
            self._by_position[position] = dict(row)

    @property
    def rows(self) -> list[dict[str, Any]]:
        """Current rows ordered by position (copies)."""
        return [dict(self._by_position[p]) for p in sorted(self._by_position)]

    def _apply_batch(self, operations: list[Operation]) -> ApplyResult:
        staged = {position: dict(row) for position, row in self._by_position.items()}

        for step, op in enumerate(operations):
            if isinstance(op, Renumber):
                self._renumber(staged, op, step)
            elif isinstance(op, Insert):
                self._insert(staged, op, step)
            elif isinstance(op, Delete):
                current = self._find(staged, op.identity, step)
                del staged[current]
            else:
                raise EmitError(f"Step {step}: unsupported operation {op!r}")

        positions = sorted(staged)
        if positions != list(range(1, len(positions) + 1)):
            raise EmitError(f"Positions not contiguous after apply: {positions}")

        self._by_position = staged
        logger.debug(f"Applied {len(operations)} operation(s) in memory")
        return ApplyResult(ApplyStatus.APPLIED, applied=len(operations))

    def _find(self, staged: dict[int, dict[str, Any]], identity: Any, step: int) -> int:
        for position, row in staged.items():
            if identity is not None and row.get(self.fields.identity) == identity:
                return position
        raise EmitError(f"Step {step}: unknown identity {identity!r}")

    def _renumber(self, staged: dict[int, dict[str, Any]], op: Renumber, step: int) -> None:
        current = self._find(staged, op.identity, step)
        if current == op.new_position:
            return
        if op.new_position in staged:
            raise EmitError(
                f"Step {step}: position {op.new_position} already taken "
                f"(renumbering id={op.identity})"
            )
        row = staged.pop(current)
        row[self.fields.position] = op.new_position
        staged[op.new_position] = row

    def _insert(self, staged: dict[int, dict[str, Any]], op: Insert, step: int) -> None:
        if op.position in staged:
            raise EmitError(f"Step {step}: position {op.position} already taken (insert)")
        row = dict(op.attributes)
        row.update({
            self.fields.identity: None,
            self.fields.position: op.position,
            self.fields.description: op.description,
            self.fields.amount: op.amount,
        })
        staged[op.position] = row
