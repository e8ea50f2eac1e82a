"""
Unit tests for Prometheus metrics and tracing helpers.
"""

from unittest.mock import MagicMock, patch

import pytest
from prometheus_client import CollectorRegistry, Counter

from banktx_sync.sequence import reconcile_day
from banktx_sync.utils.metrics import (
    OPERATIONS_TOTAL,
    RECONCILIATIONS_TOTAL,
    get_or_create_metric,
    write_metrics_file,
)
from banktx_sync.utils.tracing import add_span_attributes, add_span_event, trace_function, trace_operation


def _value(counter, **labels):
    return counter.labels(**labels)._value.get()


class TestRegistry:
    def test_get_or_create_returns_existing(self):
        registry = CollectorRegistry()

        def factory():
            return Counter("banktx_test_total", "Test counter", registry=registry)

        first = get_or_create_metric(factory, "banktx_test", registry)
        second = get_or_create_metric(factory, "banktx_test", registry)

        assert first is second

    def test_unknown_duplicate_reraises(self):
        registry = CollectorRegistry()
        Counter("banktx_dup_total", "Test counter", registry=registry)

        def factory():
            return Counter("banktx_dup_total", "Test counter", registry=registry)

        with pytest.raises(ValueError):
            get_or_create_metric(factory, "not_registered", registry)

    def test_write_metrics_file(self, tmp_path):
        registry = CollectorRegistry()
        Counter("banktx_written_total", "Test counter", registry=registry).inc()
        path = tmp_path / "textfile" / "banktx.prom"

        write_metrics_file(str(path), registry)

        assert "banktx_written_total 1.0" in path.read_text()


class TestReconciliationMetrics:
    def test_outcomes_and_operations_counted(self, stored_day, bank_day):
        succeeded = _value(RECONCILIATIONS_TOTAL, status="SUCCEEDED")
        vetoed = _value(RECONCILIATIONS_TOTAL, status="VETOED")
        inserts = _value(OPERATIONS_TOTAL, operation="INSERT")

        reconcile_day(stored_day, bank_day)
        reconcile_day(stored_day, bank_day, protection={2})

        assert _value(RECONCILIATIONS_TOTAL, status="SUCCEEDED") == succeeded + 1
        assert _value(RECONCILIATIONS_TOTAL, status="VETOED") == vetoed + 1
        assert _value(OPERATIONS_TOTAL, operation="INSERT") == inserts + 1


class TestTracing:
    @patch("banktx_sync.utils.tracing.context.get_tracer")
    def test_trace_operation_sets_attributes(self, mock_get_tracer):
        span = MagicMock()
        mock_get_tracer.return_value.start_as_current_span.return_value.__enter__.return_value = span

        with trace_operation("fetch_day_records", table="banktx", days=2):
            pass

        span.set_attribute.assert_any_call("table", "banktx")
        span.set_attribute.assert_any_call("days", "2")

    @patch("banktx_sync.utils.tracing.context.get_tracer")
    def test_trace_operation_records_exception(self, mock_get_tracer):
        span = MagicMock()
        mock_get_tracer.return_value.start_as_current_span.return_value.__enter__.return_value = span

        with pytest.raises(RuntimeError):
            with trace_operation("apply_operations"):
                raise RuntimeError("boom")

        span.set_attribute.assert_any_call("error", True)
        span.record_exception.assert_called_once()

    def test_trace_function_returns_value(self):
        @trace_function("test.add", component="test")
        def add(a, b):
            return a + b

        assert add(2, 3) == 5

    def test_span_helpers_outside_span_are_noops(self):
        add_span_attributes(operations=3)
        add_span_event("protection_veto", identity=5)
