"""
OpenTelemetry tracer setup for banktx-sync.

Spans go to an OTLP/gRPC collector when ``OTLP_ENDPOINT`` is set and to
stdout when ``TRACE_CONSOLE=true``. With neither, spans are created but
never exported.
"""

import logging
import os

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

logger = logging.getLogger(__name__)

DEFAULT_SERVICE = "banktx-sync"

_tracer: trace.Tracer | None = None
_provider: TracerProvider | None = None


def _attach_exporters(provider: TracerProvider, otlp_endpoint: str | None, console: bool) -> list[str]:
    attached = []
    if otlp_endpoint:
        try:
            exporter = OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)
        except Exception as e:
            logger.warning(f"OTLP exporter unavailable for {otlp_endpoint}: {e}")
        else:
            provider.add_span_processor(BatchSpanProcessor(exporter))
            attached.append(f"otlp={otlp_endpoint}")
    if console:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        attached.append("console")
    return attached


def initialize_tracing(
    service_name: str = DEFAULT_SERVICE,
    otlp_endpoint: str | None = None,
    console_export: bool = False,
) -> trace.Tracer:
    """
    Install a TracerProvider for this process and return its tracer.

    Repeated calls return the first tracer unchanged.

    Args:
        service_name: ``service.name`` resource attribute
        otlp_endpoint: Collector address; falls back to $OTLP_ENDPOINT
        console_export: Print spans to stdout even without $TRACE_CONSOLE
    """
    global _tracer, _provider

    if _provider is not None:
        return _tracer

    _provider = TracerProvider(resource=Resource.create({SERVICE_NAME: service_name}))
    attached = _attach_exporters(
        _provider,
        otlp_endpoint or os.getenv("OTLP_ENDPOINT"),
        console_export or os.getenv("TRACE_CONSOLE", "").lower() == "true",
    )
    trace.set_tracer_provider(_provider)
    _tracer = trace.get_tracer(service_name)

    logger.debug(f"Tracing for {service_name} exporting to: {', '.join(attached) or 'nothing'}")
    return _tracer


def get_tracer() -> trace.Tracer:
    """Return the process tracer, setting up tracing with defaults if needed."""
    return _tracer if _tracer is not None else initialize_tracing()


def shutdown_tracing() -> None:
    """
    Flush pending spans before the process exits.

    The provider stays installed; its own exit hook shuts it down.
    """
    if _provider is None:
        return
    try:
        if not _provider.force_flush():
            logger.warning("Timed out flushing spans")
    except Exception as e:
        logger.error(f"Flushing spans failed: {e}")
