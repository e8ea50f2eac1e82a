"""
Deletion guard for protected records.

Some stored transactions must never be removed by a reconciliation, for
example those already linked to an invoice. The guard is consulted before
every delete; a single hit vetoes the whole day.
"""

import logging
from collections.abc import Callable, Iterable
from typing import Any

logger = logging.getLogger(__name__)


class ProtectedRecordError(Exception):
    """Raised when a reconciliation would delete a protected record."""

    def __init__(self, identity: Any):
        self.identity = identity
        super().__init__(f"Can't remove protected transaction (id={identity})")


class ProtectionGuard:
    """
    Wraps a caller-supplied ``is_protected(identity) -> bool`` predicate.

    Usage:
        guard = ProtectionGuard(lambda identity: identity in linked_ids)
        guard.check(1234)  # raises ProtectedRecordError if protected
    """

    def __init__(self, predicate: Callable[[Any], bool] | None = None):
        self.predicate = predicate

    def is_protected(self, identity: Any) -> bool:
        if self.predicate is None:
            return False
        return bool(self.predicate(identity))

    def check(self, identity: Any) -> None:
        """
        Veto the deletion of ``identity`` if it is protected.

        Raises:
            ProtectedRecordError: If the predicate returns true
        """
        if self.is_protected(identity):
            logger.warning(f"Refusing to delete protected transaction id={identity}")
            raise ProtectedRecordError(identity)


def identity_set_guard(identities: Iterable[Any]) -> ProtectionGuard:
    """Build a guard protecting exactly the given identities."""
    protected = frozenset(identities)
    return ProtectionGuard(protected.__contains__)


def as_guard(protection: "ProtectionGuard | Callable[[Any], bool] | Iterable[Any] | None") -> ProtectionGuard:
    """
    Coerce the accepted protection forms into a guard.

    Accepts an existing guard, a predicate, a collection of protected
    identities, or None (nothing protected).

    Raises:
        TypeError: If ``protection`` is a string or not a collection of
            hashable identities
    """
    if isinstance(protection, ProtectionGuard):
        return protection
    if protection is None:
        return ProtectionGuard()
    if callable(protection):
        return ProtectionGuard(protection)
    if isinstance(protection, (str, bytes)):
        raise TypeError(f"protected identities must be a collection, not {type(protection).__name__}")
    return identity_set_guard(protection)
