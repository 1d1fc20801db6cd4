"""
Prometheus metrics for schema export runs

Usage:
    from utils.metrics import ExportMetrics, MetricsPublisher

    metrics = ExportMetrics()
    metrics.record_table("CUSTOMERS", row_count=1000, duration=4.2)

    publisher = MetricsPublisher(metrics.registry, textfile="/var/lib/node_exporter/export.prom")
    publisher.write()
"""

from .export import ExportMetrics
from .publisher import MetricsPublisher

__all__ = [
    "ExportMetrics",
    "MetricsPublisher",
]
