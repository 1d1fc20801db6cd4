"""
Parallel table export.

Tables share no mutable state apart from the target directory, so they can
be exported on separate worker threads. Each worker thread opens its own
source connection; checksum accumulators, large object counters, streamers
and sinks stay private to the table being exported.
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Any

from opentelemetry import trace

from utils.tracing import trace_operation

from .table import TableExportResult

logger = logging.getLogger(__name__)


class ParallelTableExporter:
    """
    Runs table exports on a thread pool.

    Fails fast: the first failing table cancels every export that has not
    started yet and its exception is re-raised once the running ones have
    finished. Results come back in the order of the given table list.
    """

    def __init__(self, source_factory: Callable[[], Any], max_workers: int = 4):
        """
        Initialize parallel exporter.

        Args:
            source_factory: Opens a new source connection for a worker thread
            max_workers: Maximum concurrent workers (default: 4)
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.source_factory = source_factory
        self.max_workers = max_workers
        self._local = threading.local()
        self._sources: list[Any] = []
        self._sources_lock = threading.Lock()

        logger.info(f"ParallelTableExporter initialized: max_workers={max_workers}")

    def _worker_source(self):
        source = getattr(self._local, "source", None)
        if source is None:
            source = self.source_factory()
            self._local.source = source
            with self._sources_lock:
                self._sources.append(source)
            logger.debug(f"Opened source connection for {threading.current_thread().name}")
        return source

    def _run(self, export_table: Callable[[Any, str], TableExportResult], table: str) -> TableExportResult:
        with trace_operation("parallel_export_table", kind=trace.SpanKind.INTERNAL, table=table):
            return export_table(self._worker_source(), table)

    def export_tables(
        self,
        tables: list[str],
        export_table: Callable[[Any, str], TableExportResult],
    ) -> list[TableExportResult]:
        """
        Export tables concurrently.

        Args:
            tables: Table names in output order
            export_table: Exports one table given a source and the table name

        Returns:
            One result per table, in the order of ``tables``
        """
        if not tables:
            logger.warning("No tables to export")
            return []

        logger.info(
            f"Starting parallel export of {len(tables)} tables with {self.max_workers} workers"
        )

        try:
            with ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="table-export",
            ) as executor:
                futures = [executor.submit(self._run, export_table, table) for table in tables]
                done, pending = wait(futures, return_when=FIRST_EXCEPTION)

                failed = next((f for f in futures if f in done and f.exception() is not None), None)
                if failed is not None:
                    cancelled = sum(1 for future in pending if future.cancel())
                    table = tables[futures.index(failed)]
                    logger.error(
                        f"Table {table} export failed: {failed.exception()}; "
                        f"cancelled {cancelled} pending table(s)"
                    )
                    raise failed.exception()

                return [future.result() for future in futures]
        finally:
            self._close_sources()

    def _close_sources(self) -> None:
        with self._sources_lock:
            sources, self._sources = self._sources, []
        for source in sources:
            source.close()
        self._local = threading.local()
