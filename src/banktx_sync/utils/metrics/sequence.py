"""
Metrics for day-sequence reconciliation and emission.
"""

from prometheus_client import Counter, Histogram

from .registry import get_or_create_metric

RECONCILIATIONS_TOTAL = get_or_create_metric(
    lambda: Counter(
        "banktx_reconciliations_total",
        "Day reconciliations by outcome",
        ["status"],
    ),
    "banktx_reconciliations",
)

OPERATIONS_TOTAL = get_or_create_metric(
    lambda: Counter(
        "banktx_operations_total",
        "Operations emitted by the reconciler",
        ["operation"],
    ),
    "banktx_operations",
)

RECONCILIATION_DURATION = get_or_create_metric(
    lambda: Histogram(
        "banktx_reconciliation_seconds",
        "Time to reconcile one day-partition",
        buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
    ),
    "banktx_reconciliation_seconds",
)

APPLY_TOTAL = get_or_create_metric(
    lambda: Counter(
        "banktx_apply_total",
        "Operation batches handed to an emitter, by outcome",
        ["emitter", "status"],
    ),
    "banktx_apply",
)


def record_reconciliation(status: str, operations: list, duration: float) -> None:
    """
    Record the outcome of one day reconciliation.

    Args:
        status: Result status (SUCCEEDED, REJECTED, VETOED, INTERNAL_ERROR)
        operations: Emitted operations (empty on failure)
        duration: Wall time in seconds
    """
    RECONCILIATIONS_TOTAL.labels(status=status).inc()
    RECONCILIATION_DURATION.observe(duration)
    for op in operations:
        OPERATIONS_TOTAL.labels(operation=op.op_type).inc()
