"""
Emitter contract: apply an operation list as one all-or-nothing unit.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from ..sequence.operations import Operation
from ..utils.metrics import APPLY_TOTAL
from ..utils.tracing import trace_operation

logger = logging.getLogger(__name__)


class ApplyStatus:
    """Constants for emitter outcomes."""

    APPLIED = "APPLIED"
    NOT_MODIFIED = "NOT_MODIFIED"
    DRY_RUN = "DRY_RUN"
    FAILED = "FAILED"


class EmitError(Exception):
    """Raised when an operation list could not be applied; nothing was kept."""


@dataclass
class ApplyResult:
    """Outcome of a successful (or skipped) batch."""

    status: str
    applied: int = 0
    statements: list[str] = field(default_factory=list)

    @property
    def modified(self) -> bool:
        return self.status == ApplyStatus.APPLIED and self.applied > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "applied": self.applied,
            "statements": list(self.statements),
        }


class OperationEmitter(ABC):
    """
    Base class for operation emitters.

    Subclasses implement ``_apply_batch``, which must apply every operation
    in order or none of them, raising EmitError on failure.
    """

    name = "emitter"

    def apply_all(self, operations: Iterable[Operation]) -> ApplyResult:
        """
        Apply the operations in order as a single unit.

        Args:
            operations: Ordered operations from the reconciler

        Returns:
            ApplyResult; NOT_MODIFIED when there was nothing to apply

        Raises:
            EmitError: If the batch failed (and was rolled back)
        """
        operations = list(operations)
        if not operations:
            logger.info(f"{self.name}: no operations, nothing to apply")
            APPLY_TOTAL.labels(emitter=self.name, status=ApplyStatus.NOT_MODIFIED).inc()
            return ApplyResult(ApplyStatus.NOT_MODIFIED)

        with trace_operation("apply_operations", emitter=self.name, operations=len(operations)):
            try:
                result = self._apply_batch(operations)
            except EmitError:
                APPLY_TOTAL.labels(emitter=self.name, status=ApplyStatus.FAILED).inc()
                raise

        APPLY_TOTAL.labels(emitter=self.name, status=result.status).inc()
        return result

    @abstractmethod
    def _apply_batch(self, operations: list[Operation]) -> ApplyResult:
        """Apply a non-empty batch atomically."""
