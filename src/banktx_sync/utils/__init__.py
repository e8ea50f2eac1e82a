"""
Utility modules for banktx-sync

Provides:
- logging: Console/JSON logging setup and context loggers
- tracing: OpenTelemetry span helpers
- metrics: Prometheus metrics for reconciliation runs
"""

__all__ = ["logging", "tracing", "metrics"]
