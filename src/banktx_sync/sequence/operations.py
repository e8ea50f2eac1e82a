"""
Mutation operations produced by the reconciler.

The operation list is ordered: replaying it front to back against the stored
day never puts two rows on the same position.
"""

from dataclasses import dataclass, field
from typing import Any


class OperationType:
    """Constants for operation types."""

    RENUMBER = "RENUMBER"
    INSERT = "INSERT"
    DELETE = "DELETE"


@dataclass(frozen=True)
class Renumber:
    """Move an existing record to a new position."""

    identity: Any
    new_position: int
    op_type: str = field(default=OperationType.RENUMBER, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.op_type,
            "identity": self.identity,
            "new_position": self.new_position,
        }


@dataclass(frozen=True)
class Insert:
    """Create a new record at ``position``."""

    position: int
    description: Any
    amount: Any
    attributes: dict[str, Any] = field(default_factory=dict)
    op_type: str = field(default=OperationType.INSERT, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.op_type,
            "position": self.position,
            "description": self.description,
            "amount": self.amount,
            "attributes": dict(self.attributes),
        }


@dataclass(frozen=True)
class Delete:
    """Remove an existing record."""

    identity: Any
    op_type: str = field(default=OperationType.DELETE, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"operation": self.op_type, "identity": self.identity}


Operation = Renumber | Insert | Delete


def count_by_type(operations: list[Operation]) -> dict[str, int]:
    """Count operations per type, including zero counts."""
    counts = {
        OperationType.RENUMBER: 0,
        OperationType.INSERT: 0,
        OperationType.DELETE: 0,
    }
    for op in operations:
        counts[op.op_type] += 1
    return counts
