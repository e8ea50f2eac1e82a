"""
Span helpers: a context manager for traced blocks and setters for the
current span.
"""

from contextlib import contextmanager

from opentelemetry import trace

from .tracer import get_tracer


def _stringify(attributes: dict) -> dict[str, str]:
    return {key: str(value) for key, value in attributes.items()}


@contextmanager
def trace_operation(
    operation_name: str,
    kind: trace.SpanKind = trace.SpanKind.INTERNAL,
    **attributes
):
    """
    Run the enclosed block inside a new span.

    Attribute values are stored as strings. An exception leaving the block
    is recorded on the span, which is flagged with ``error=True``, and then
    re-raised.

    Example:
        >>> with trace_operation("reconcile_day", day="2017-05-22") as span:
        ...     result = reconciler.reconcile(stored, targets)
        ...     span.set_attribute("operations", len(result.operations))
    """
    with get_tracer().start_as_current_span(operation_name, kind=kind) as span:
        for key, value in _stringify(attributes).items():
            span.set_attribute(key, value)
        try:
            yield span
        except Exception as e:
            span.set_attribute("error", True)
            span.set_attribute("error.type", type(e).__name__)
            span.record_exception(e)
            raise


def add_span_attributes(**attributes) -> None:
    span = trace.get_current_span()
    if span.is_recording():
        span.set_attributes(_stringify(attributes))


def add_span_event(name: str, **attributes) -> None:
    """Attach a named event, e.g. ``protection_veto``, to the current span."""
    span = trace.get_current_span()
    if span.is_recording():
        span.add_event(name, attributes=_stringify(attributes))
