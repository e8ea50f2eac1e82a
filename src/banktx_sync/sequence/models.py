"""
Record types and fingerprint policies for day-sequence reconciliation.

A stored day is a list of ``Record`` (rows already in the table, each with an
identity and a 1-based position); the desired day is a list of
``TargetRecord`` (what the bank statement shows now). Matching between the
two is done on content only, through a fingerprint.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any


@dataclass(frozen=True)
class FieldMap:
    """
    Names of the fields (or table columns) holding each record attribute.

    Rows coming from the database or from JSON files are plain mappings; this
    map tells the reconciler which keys carry identity, position and content.
    """

    identity: str = "id"
    position: str = "seq"
    description: str = "description"
    amount: str = "amount"
    date: str = "date"

    @property
    def content_fields(self) -> tuple[str, str]:
        return (self.description, self.amount)


DEFAULT_FIELDS = FieldMap()


@dataclass
class Record:
    """A persisted transaction. Only ``position`` ever changes."""

    identity: Any
    position: int
    description: Any
    amount: Any
    attributes: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Mapping[str, Any], fields: FieldMap = DEFAULT_FIELDS) -> "Record":
        reserved = {fields.identity, fields.position, fields.description, fields.amount}
        return cls(
            identity=row[fields.identity],
            position=row[fields.position],
            description=row[fields.description],
            amount=row[fields.amount],
            attributes={k: v for k, v in row.items() if k not in reserved},
        )

    def to_row(self, fields: FieldMap = DEFAULT_FIELDS) -> dict[str, Any]:
        row = dict(self.attributes)
        row.update({
            fields.identity: self.identity,
            fields.position: self.position,
            fields.description: self.description,
            fields.amount: self.amount,
        })
        return row


@dataclass(frozen=True)
class TargetRecord:
    """A transaction as the bank currently shows it; no identity, no position."""

    description: Any
    amount: Any
    attributes: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Mapping[str, Any], fields: FieldMap = DEFAULT_FIELDS) -> "TargetRecord":
        return cls(
            description=row[fields.description],
            amount=row[fields.amount],
            attributes={k: v for k, v in row.items() if k not in fields.content_fields},
        )


Fingerprint = Callable[[Record | TargetRecord], str]


def default_fingerprint(item: Record | TargetRecord) -> str:
    """``description|amount`` using the values exactly as given."""
    return f"{item.description}|{item.amount}"


def _normalize_amount(amount: Any) -> str:
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        return str(amount).strip()
    # Decimal("15.20") and Decimal("15.2") must compare equal as text too
    return format(value.normalize(), "f") if value else "0"


def normalized_fingerprint(item: Record | TargetRecord) -> str:
    """
    ``description|amount`` tolerant of formatting noise.

    Whitespace inside descriptions is collapsed and amounts are compared as
    decimals, so a NUMERIC column value ``Decimal('15.20')`` matches a scraped
    ``"15.2"``.
    """
    description = " ".join(str(item.description).split())
    return f"{description}|{_normalize_amount(item.amount)}"


FINGERPRINTS: dict[str, Fingerprint] = {
    "exact": default_fingerprint,
    "normalized": normalized_fingerprint,
}


def get_fingerprint(name: str) -> Fingerprint:
    """
    Look up a fingerprint policy by name.

    Raises:
        ValueError: If the name is unknown
    """
    try:
        return FINGERPRINTS[name]
    except KeyError:
        raise ValueError(
            f"Unknown fingerprint policy {name!r}; expected one of {sorted(FINGERPRINTS)}"
        ) from None
