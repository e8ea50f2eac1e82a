"""
Day-sequence reconciliation engine.

Turns the stored rows of one day into the bank's current view of that day
with renumber/insert/delete operations, refusing to delete protected rows.
Pure and synchronous: no I/O happens here.
"""

from .guard import ProtectedRecordError, ProtectionGuard, as_guard, identity_set_guard
from .matcher import Hunk, HunkItem, diff, edit_script, lcs_table
from .models import (
    DEFAULT_FIELDS,
    FieldMap,
    Record,
    TargetRecord,
    default_fingerprint,
    get_fingerprint,
    normalized_fingerprint,
)
from .operations import Delete, Insert, Operation, OperationType, Renumber, count_by_type
from .reconciler import (
    ReconcileResult,
    ReconcileStatus,
    SequenceInternalError,
    SequenceReconciler,
    reconcile_day,
)
from .validator import (
    ValidationIssue,
    ValidationResult,
    validate_day,
    validate_stored,
    validate_targets,
)

__all__ = [
    "FieldMap",
    "DEFAULT_FIELDS",
    "Record",
    "TargetRecord",
    "default_fingerprint",
    "normalized_fingerprint",
    "get_fingerprint",
    "Renumber",
    "Insert",
    "Delete",
    "Operation",
    "OperationType",
    "count_by_type",
    "ValidationIssue",
    "ValidationResult",
    "validate_stored",
    "validate_targets",
    "validate_day",
    "Hunk",
    "HunkItem",
    "diff",
    "edit_script",
    "lcs_table",
    "ProtectionGuard",
    "ProtectedRecordError",
    "identity_set_guard",
    "as_guard",
    "SequenceReconciler",
    "ReconcileResult",
    "ReconcileStatus",
    "SequenceInternalError",
    "reconcile_day",
]
