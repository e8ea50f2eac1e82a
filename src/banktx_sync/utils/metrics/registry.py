"""
Metric registration and textfile export.
"""

import logging
import os
from typing import Callable, TypeVar

from prometheus_client import REGISTRY, CollectorRegistry, write_to_textfile

logger = logging.getLogger(__name__)

M = TypeVar("M")


def get_or_create_metric(
    metric_factory: Callable[[], M],
    metric_name: str,
    registry: CollectorRegistry = REGISTRY,
) -> M:
    """
    Build a metric with ``metric_factory`` unless ``metric_name`` is taken.

    A second registration under the same name (module re-import in tests)
    returns the collector already in ``registry``. Any other duplicate
    error is re-raised.
    """
    try:
        return metric_factory()
    except ValueError:
        registered = registry._names_to_collectors.get(metric_name)
        if registered is None:
            raise
        return registered


def write_metrics_file(path: str, registry: CollectorRegistry = REGISTRY) -> None:
    """
    Dump ``registry`` to ``path`` in the Prometheus text format, for the
    node-exporter textfile collector.
    """
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    write_to_textfile(path, registry)
    logger.info(f"Wrote metrics to {path}")
