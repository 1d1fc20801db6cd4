"""
Utility modules for the schema export tool

Provides:
- logging: console / JSON logging setup and context loggers
- metrics: Prometheus metrics for export runs
- tracing: OpenTelemetry spans around runs, tables and source queries
"""

__version__ = "1.0.0"
__all__ = ["logging", "metrics", "tracing"]
