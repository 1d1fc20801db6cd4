"""
Metrics for schema export runs.

Tracks exported and skipped tables, rows, large objects and per-table
durations.
"""

import logging

from prometheus_client import CollectorRegistry, Counter, Histogram

logger = logging.getLogger(__name__)


class ExportMetrics:
    """
    Metrics for one export run

    Every instance owns its registry by default so that repeated runs in the
    same process (tests, parallel workers reporting into one instance) never
    collide on metric names.
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry or CollectorRegistry()

        self.tables_total = Counter(
            "schema_export_tables_total",
            "Tables seen by the exporter, by outcome",
            ["status"],  # exported, empty, excluded, overflow
            registry=self.registry,
        )

        self.rows_exported_total = Counter(
            "schema_export_rows_exported_total",
            "Rows written as INSERT statements",
            ["table_name"],
            registry=self.registry,
        )

        self.lobs_exported_total = Counter(
            "schema_export_lobs_exported_total",
            "Large objects externalized to files",
            ["kind"],
            registry=self.registry,
        )

        self.lob_bytes_total = Counter(
            "schema_export_lob_bytes_total",
            "Bytes written to large object files",
            ["kind"],
            registry=self.registry,
        )

        self.table_duration_seconds = Histogram(
            "schema_export_table_duration_seconds",
            "Time to export a single table",
            ["table_name"],
            buckets=(0.1, 0.5, 1, 5, 10, 30, 60, 120, 300, 600, 1800, 3600),
            registry=self.registry,
        )

    def record_skipped_table(self, status: str) -> None:
        self.tables_total.labels(status=status).inc()

    def record_table(
        self,
        table_name: str,
        row_count: int,
        duration: float,
        lob_counts: dict[str, int] | None = None,
        lob_bytes: dict[str, int] | None = None,
    ) -> None:
        """
        Record a finished table export

        Args:
            table_name: Source table name
            row_count: Rows written (0 for empty tables)
            duration: Export duration in seconds
            lob_counts: Large objects written, keyed by kind
            lob_bytes: Large object bytes written, keyed by kind
        """
        self.tables_total.labels(status="exported" if row_count else "empty").inc()
        self.table_duration_seconds.labels(table_name=table_name).observe(duration)

        if row_count:
            self.rows_exported_total.labels(table_name=table_name).inc(row_count)

        for kind, count in (lob_counts or {}).items():
            if count:
                self.lobs_exported_total.labels(kind=kind).inc(count)
        for kind, size in (lob_bytes or {}).items():
            if size:
                self.lob_bytes_total.labels(kind=kind).inc(size)

        logger.debug(
            f"Recorded table export: table={table_name}, rows={row_count}, "
            f"duration={duration:.2f}s"
        )
