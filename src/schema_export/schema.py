"""
Export of a whole schema.

The SchemaExporter enumerates the source tables in lexicographic order,
decides for every table whether it is exported, runs the table exports and
finally writes the truncate, check and master scripts that tie the dump set
together.
"""

import logging
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from enum import Enum
from typing import Any

from utils.metrics import ExportMetrics
from utils.tracing import add_span_attributes, trace_operation

from .lobs import DEFAULT_BYTE_CHUNK_SIZE, DEFAULT_CHAR_CHUNK_SIZE
from .errors import ExportError
from .naming import CHECK_SCRIPT, MAIN_SCRIPT, TRUNCATE_SCRIPT, colliding_table_names
from .parallel import ParallelTableExporter
from .scripts import (
    CHECK_MARKER,
    DEFAULT_IMPORT_DIR,
    TRUNCATE_MARKER,
    render_master,
    truncate_statement,
)
from .sinks import SinkFactory
from .table import TableExporter, TableExportResult

logger = logging.getLogger(__name__)

# Prefix of the overflow segments Oracle creates for index-organized tables
OVERFLOW_TABLE_PREFIX = "SYS_IOT_OVER_"


class TableClassification(Enum):
    OVERFLOW = "overflow"
    EXCLUDED = "excluded"
    INCLUDED = "included"


def classify_table(table_name: str, excluded_tables: Iterable[str] = ()) -> TableClassification:
    """
    Decide whether a table is exported

    Example:
        >>> classify_table("SYS_IOT_OVER_74215")
        <TableClassification.OVERFLOW: 'overflow'>
        >>> classify_table("AUDIT_LOG", {"audit_log"})
        <TableClassification.EXCLUDED: 'excluded'>
    """
    if table_name.startswith(OVERFLOW_TABLE_PREFIX):
        return TableClassification.OVERFLOW
    if table_name.casefold() in {name.casefold() for name in excluded_tables}:
        return TableClassification.EXCLUDED
    return TableClassification.INCLUDED


@dataclass
class SchemaExportResult:
    """Outcome of one export run."""

    tables: list[TableExportResult] = field(default_factory=list)
    skipped: list[dict[str, str]] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def insert_scripts(self) -> list[str]:
        return [result.insert_script for result in self.tables if result.insert_script]

    @property
    def total_rows(self) -> int:
        return sum(result.row_count for result in self.tables)


class SchemaExporter:
    """
    Exports every included table of a schema into a dump set.

    Args:
        source: Source adapter (list_tables, count_rows, open_table, describe)
        sinks: Output container for scripts and large objects
        excluded_tables: Table names to skip (case-insensitive)
        excluded_columns: Column names to skip, keyed by table name (case-insensitive)
        zone: Time zone for timestamp literals (system local if None)
        import_dir: Value of @import_dir in main.sql
        parallel_workers: Export tables on this many threads (1 = sequential)
        source_factory: Opens additional source connections for parallel workers
        metrics: Optional ExportMetrics to record into
    """

    def __init__(
        self,
        source,
        sinks: SinkFactory,
        excluded_tables: Iterable[str] = (),
        excluded_columns: Mapping[str, Iterable[str]] | None = None,
        zone: tzinfo | None = None,
        import_dir: str = DEFAULT_IMPORT_DIR,
        byte_chunk_size: int = DEFAULT_BYTE_CHUNK_SIZE,
        char_chunk_size: int = DEFAULT_CHAR_CHUNK_SIZE,
        parallel_workers: int = 1,
        source_factory: Callable[[], Any] | None = None,
        metrics: ExportMetrics | None = None,
        generator: str = "schema-export",
    ):
        self.source = source
        self.sinks = sinks
        self.excluded_tables = frozenset(name.casefold() for name in excluded_tables)
        self.excluded_columns = {
            table.casefold(): frozenset(columns)
            for table, columns in (excluded_columns or {}).items()
        }
        self.zone = zone
        self.import_dir = import_dir
        self.byte_chunk_size = byte_chunk_size
        self.char_chunk_size = char_chunk_size
        self.parallel_workers = parallel_workers
        self.source_factory = source_factory
        self.metrics = metrics
        self.generator = generator

        if parallel_workers > 1 and source_factory is None:
            raise ValueError("Parallel export needs a source_factory")

    def excluded_columns_for(self, table_name: str) -> frozenset[str]:
        return self.excluded_columns.get(table_name.casefold(), frozenset())

    def export_table(self, source, table_name: str) -> TableExportResult:
        """Export one table through ``source``."""
        exporter = TableExporter(
            source,
            self.sinks,
            table_name,
            excluded_columns=self.excluded_columns_for(table_name),
            zone=self.zone,
            byte_chunk_size=self.byte_chunk_size,
            char_chunk_size=self.char_chunk_size,
            metrics=self.metrics,
        )
        return exporter.export()

    def select_tables(self) -> tuple[list[str], list[dict[str, str]]]:
        """
        Enumerate and classify the source tables

        Returns:
            Included table names in lexicographic order, and the skipped
            tables with their reason

        Raises:
            ExportError: Two included tables would write the same files
        """
        included = []
        skipped = []
        for table_name in sorted(self.source.list_tables()):
            classification = classify_table(table_name, self.excluded_tables)
            if classification is TableClassification.INCLUDED:
                included.append(table_name)
                continue

            logger.debug(f"Skipping {classification.value} table {table_name}")
            skipped.append({"table": table_name, "reason": classification.value})
            if self.metrics is not None:
                self.metrics.record_skipped_table(classification.value)

        collisions = colliding_table_names(included)
        if collisions:
            details = "; ".join(
                f"{', '.join(names)} -> {file_name}" for file_name, names in collisions.items()
            )
            raise ExportError(
                f"Table names differ only in case and would share dump set files: {details}"
            )

        add_span_attributes(tables_included=len(included), tables_skipped=len(skipped))
        return included, skipped

    def run(self) -> SchemaExportResult:
        """
        Export the schema and write the dump set scripts

        Scripts are written after every table export has finished, so
        their order never depends on which table finished first.
        """
        start_time = time.monotonic()
        with trace_operation("export_schema", parallel_workers=self.parallel_workers) as span:
            tables, skipped = self.select_tables()
            logger.info(f"Exporting {len(tables)} table(s), skipping {len(skipped)}")

            if self.parallel_workers > 1 and len(tables) > 1:
                parallel = ParallelTableExporter(self.source_factory, self.parallel_workers)
                results = parallel.export_tables(tables, self.export_table)
            else:
                results = [self.export_table(self.source, table_name) for table_name in tables]

            result = SchemaExportResult(tables=results, skipped=skipped)
            self.write_scripts(result)

            result.duration_seconds = time.monotonic() - start_time
            span.set_attribute("table_count", len(results))
            span.set_attribute("row_count", result.total_rows)

        logger.info(
            f"Export finished successfully: {len(results)} tables, "
            f"{result.total_rows:,} rows"
        )
        logger.info(f"Elapsed time: {result.duration_seconds:,.2f} sec")
        return result

    def write_scripts(self, result: SchemaExportResult) -> None:
        with self.sinks.open_script(TRUNCATE_SCRIPT) as script:
            script.write(TRUNCATE_MARKER + "\n")
            for table in result.tables:
                script.write(truncate_statement(table.table_name) + "\n")

        with self.sinks.open_script(CHECK_SCRIPT) as script:
            script.write(CHECK_MARKER + "\n")
            for table in result.tables:
                for statement in table.checks:
                    script.write(statement + "\n")

        source_id, schema = self.source.describe()
        with self.sinks.open_script(MAIN_SCRIPT) as script:
            script.write(render_master(
                source_id,
                schema,
                datetime.now(self.zone),
                result.insert_scripts,
                import_dir=self.import_dir,
                generator=self.generator,
            ))
        logger.debug(f"Wrote {TRUNCATE_SCRIPT}, {CHECK_SCRIPT} and {MAIN_SCRIPT}")
