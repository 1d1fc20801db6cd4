"""
Tracer initialization and configuration for OpenTelemetry.

Exporters are only attached when explicitly requested; without them the
global no-op provider is used and spans cost next to nothing.
"""

import logging
import os

from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

logger = logging.getLogger(__name__)

INSTRUMENTATION_NAME = "schema-export"

_tracer: trace.Tracer | None = None
_is_initialized = False


def tracing_requested(otlp_endpoint: str | None = None, console_export: bool = False) -> bool:
    """True when an exporter is asked for by argument or by OTLP_ENDPOINT / TRACE_CONSOLE."""
    return bool(otlp_endpoint or os.getenv("OTLP_ENDPOINT")) or _console_requested(console_export)


def _console_requested(console_export: bool) -> bool:
    return console_export or os.getenv("TRACE_CONSOLE", "").lower() == "true"


def initialize_tracing(
    service_name: str = "schema-export",
    otlp_endpoint: str | None = None,
    console_export: bool = False,
) -> trace.Tracer:
    """
    Initialize distributed tracing with OpenTelemetry.

    Args:
        service_name: Name of the service for identification
        otlp_endpoint: OTLP collector endpoint (e.g., "localhost:4317");
            falls back to the OTLP_ENDPOINT environment variable
        console_export: If True, also export spans to the console (debug)

    Returns:
        Configured tracer instance
    """
    global _tracer, _is_initialized

    if _is_initialized:
        logger.warning("Tracing already initialized, returning existing tracer")
        return _tracer

    provider = TracerProvider(resource=Resource(attributes={SERVICE_NAME: service_name}))
    exporters = []

    otlp_endpoint = otlp_endpoint or os.getenv("OTLP_ENDPOINT")
    if otlp_endpoint:
        # Imported lazily: the grpc exporter pulls in grpcio at import time
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
        )
        exporters.append("OTLP")
        logger.info(f"OTLP exporter configured: {otlp_endpoint}")

    if _console_requested(console_export):
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        exporters.append("Console")

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer(service_name)
    _is_initialized = True

    logger.info(f"Tracing initialized: {service_name} (exporters: {', '.join(exporters) or 'none'})")
    return _tracer


def get_tracer() -> trace.Tracer:
    """
    Get the tracer used by trace_operation.

    Returns the configured tracer, or a tracer from the current global
    provider (no-op unless something else configured one).
    """
    if _tracer is not None:
        return _tracer
    return trace.get_tracer(INSTRUMENTATION_NAME)


def shutdown_tracing() -> None:
    """Flush pending spans and shut the provider down."""
    global _is_initialized, _tracer

    if not _is_initialized:
        return

    provider = trace.get_tracer_provider()
    if hasattr(provider, "shutdown"):
        provider.shutdown()
    _is_initialized = False
    _tracer = None
    logger.debug("Tracing shutdown complete")
