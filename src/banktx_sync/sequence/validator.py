"""
Structural checks on stored and target day sequences.

Validation is a pure pass over the input: it never raises, never touches the
rows, and reports the first problem found together with the offending index
and field.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .models import DEFAULT_FIELDS, FieldMap

STORED = "stored"
TARGET = "target"
PROTECTION = "protection"


@dataclass(frozen=True)
class ValidationIssue:
    """First structural problem found in an input sequence."""

    sequence: str  # stored / target / protection
    index: int | None
    field: str | None
    message: str

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        return {
            "sequence": self.sequence,
            "index": self.index,
            "field": self.field,
            "message": self.message,
        }


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    issue: ValidationIssue | None = None

    @property
    def message(self) -> str:
        return self.issue.message if self.issue else "OK"


VALID = ValidationResult(valid=True)


def _fail(sequence: str, index: int | None, field: str | None, message: str) -> ValidationResult:
    return ValidationResult(
        valid=False, issue=ValidationIssue(sequence, index, field, message)
    )


def validate_stored(rows: Any, fields: FieldMap = DEFAULT_FIELDS) -> ValidationResult:
    """
    Check a stored day: contiguous 1-based positions, required fields, unique ids.

    Checks run per row in this order: the row is a mapping, its position is
    truthy, the position is an int (not a bool), it equals the 1-based index,
    description, amount and identity are present, and the identity was not
    seen before.

    Args:
        rows: Stored rows ordered by position
        fields: Field names of the rows

    Returns:
        ValidationResult; ``issue`` names the first offending index and field
    """
    if not isinstance(rows, Sequence) or isinstance(rows, (str, bytes)):
        return _fail(STORED, None, None, "stored rows must be a list")

    seen_ids = set()
    for i, row in enumerate(rows):
        label = f"{STORED}[{i}]"
        if not isinstance(row, Mapping):
            return _fail(STORED, i, None, f"{label} must be a mapping")

        position = row.get(fields.position)
        if not position:
            return _fail(STORED, i, fields.position, f"{label}: {fields.position} is zero or undefined")
        if isinstance(position, bool) or not isinstance(position, int):
            return _fail(STORED, i, fields.position, f"{label}: {fields.position} must be an integer")
        if position != i + 1:
            return _fail(STORED, i, fields.position, f"{label}: {fields.position} must be {i + 1}")

        for name in (fields.description, fields.amount, fields.identity):
            if row.get(name) is None:
                return _fail(STORED, i, name, f"{label}: {name} must be defined")

        identity = row[fields.identity]
        try:
            duplicate = identity in seen_ids
        except TypeError:
            return _fail(STORED, i, fields.identity, f"{label}: {fields.identity} must be hashable")
        if duplicate:
            return _fail(STORED, i, fields.identity, f"{label}: {fields.identity} is not unique")
        seen_ids.add(identity)

    return VALID


def validate_targets(
    rows: Any,
    fields: FieldMap = DEFAULT_FIELDS,
    require_date: bool = False,
) -> ValidationResult:
    """
    Check a target sequence: every row is a mapping with description and amount.

    Args:
        rows: Target rows in their desired order
        fields: Field names of the rows
        require_date: Also require the date field (needed to partition by day)

    Returns:
        ValidationResult
    """
    if not isinstance(rows, Sequence) or isinstance(rows, (str, bytes)):
        return _fail(TARGET, None, None, "target rows must be a list")

    required = list(fields.content_fields)
    if require_date:
        required.append(fields.date)

    for i, row in enumerate(rows):
        label = f"{TARGET}[{i}]"
        if not isinstance(row, Mapping):
            return _fail(TARGET, i, None, f"{label} must be a mapping")
        for name in required:
            if row.get(name) is None:
                return _fail(TARGET, i, name, f"{label}: {name} must be defined")

    return VALID


def validate_day(
    stored: Any,
    targets: Any,
    fields: FieldMap = DEFAULT_FIELDS,
) -> ValidationResult:
    """Validate the stored sequence, then the targets; first failure wins."""
    result = validate_stored(stored, fields)
    if not result.valid:
        return result
    return validate_targets(targets, fields)
