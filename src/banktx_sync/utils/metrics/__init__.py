"""
Prometheus metrics for banktx-sync

Usage:
    from banktx_sync.utils.metrics import write_metrics_file

    # after a run, for the node-exporter textfile collector
    write_metrics_file("/var/lib/node_exporter/banktx_sync.prom")
"""

from .registry import get_or_create_metric, write_metrics_file
from .sequence import (
    APPLY_TOTAL,
    OPERATIONS_TOTAL,
    RECONCILIATION_DURATION,
    RECONCILIATIONS_TOTAL,
    record_reconciliation,
)

__all__ = [
    "get_or_create_metric",
    "write_metrics_file",
    "record_reconciliation",
    "RECONCILIATIONS_TOTAL",
    "OPERATIONS_TOTAL",
    "RECONCILIATION_DURATION",
    "APPLY_TOTAL",
]
