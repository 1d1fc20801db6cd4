"""
Distributed tracing using OpenTelemetry.

Instruments:
- The export run as a whole
- Each table export
- Source database queries

Tracing is opt-in: without initialize_tracing() spans go to the no-op provider.
"""

from .context import add_span_attributes, add_span_event, trace_operation
from .decorators import trace_function
from .tracer import get_tracer, initialize_tracing, shutdown_tracing, tracing_requested

__all__ = [
    "initialize_tracing",
    "get_tracer",
    "shutdown_tracing",
    "tracing_requested",
    "trace_operation",
    "trace_function",
    "add_span_attributes",
    "add_span_event",
]
