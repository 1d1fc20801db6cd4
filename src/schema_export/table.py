"""
Export of a single table.

A TableExporter walks one table through a fixed, forward-only sequence of
states: discover the columns, build the INSERT prefix, stream the rows and
finalize the checksum statements. Tables without rows skip the streaming
state entirely and produce no insert script.
"""

import logging
import time
from contextlib import ExitStack
from dataclasses import dataclass, field, replace
from datetime import tzinfo
from enum import IntEnum
from typing import Any

from utils.logging import ContextLogger
from utils.metrics import ExportMetrics
from utils.tracing import add_span_event, trace_operation

from .cells import classify_cell
from .checksums import ChecksumAccumulator
from .columns import Column
from .encoder import LiteralEncoder
from .identifiers import escape_mysql_name
from .literals import mysql_string
from .lobs import DEFAULT_BYTE_CHUNK_SIZE, DEFAULT_CHAR_CHUNK_SIZE, LargeObjectStreamer, LobStream
from .naming import insert_script_name
from .sinks import SinkFactory

logger = logging.getLogger(__name__)


class TableExportState(IntEnum):
    DISCOVERING_COLUMNS = 1
    BUILDING_PREFIX = 2
    STREAMING_ROWS = 3
    FINALIZING_CHECKSUMS = 4
    CLOSED = 5


@dataclass
class TableExportResult:
    """Outcome of one exported table."""

    table_name: str
    row_count: int
    insert_script: str | None = None
    checks: list[str] = field(default_factory=list)
    lob_counts: dict[str, int] = field(default_factory=dict)
    lob_bytes: dict[str, int] = field(default_factory=dict)
    duration_seconds: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.row_count == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "table": self.table_name,
            "row_count": self.row_count,
            "insert_script": self.insert_script,
            "check_count": len(self.checks),
            "lob_counts": dict(self.lob_counts),
            "lob_bytes": dict(self.lob_bytes),
            "duration_seconds": self.duration_seconds,
        }


def mark_excluded(columns: list[Column], excluded_names) -> list[Column]:
    """Flag the columns named in ``excluded_names`` (case-insensitive)."""
    excluded = {name.casefold() for name in excluded_names}
    return [replace(column, excluded=column.name.casefold() in excluded) for column in columns]


def insert_prefix(table_name: str, columns: list[Column]) -> str:
    names = ", ".join(escape_mysql_name(column.name) for column in columns)
    return f"INSERT INTO {escape_mysql_name(table_name)} ({names}) VALUES ("


def insert_marker(table_name: str) -> str:
    return f"SELECT {mysql_string('INSERT INTO ' + table_name.lower())} AS '';"


class TableExporter:
    """
    Exports one table into its insert script and large object files.

    Every instance owns its checksum accumulator, large object counters and
    streamer. Use one instance per table; instances are not reusable.
    """

    def __init__(
        self,
        source,
        sinks: SinkFactory,
        table_name: str,
        excluded_columns=(),
        zone: tzinfo | None = None,
        byte_chunk_size: int = DEFAULT_BYTE_CHUNK_SIZE,
        char_chunk_size: int = DEFAULT_CHAR_CHUNK_SIZE,
        metrics: ExportMetrics | None = None,
    ):
        self.source = source
        self.sinks = sinks
        self.table_name = table_name
        self.excluded_columns = frozenset(excluded_columns)
        self.zone = zone
        self.metrics = metrics
        self.streamer = LargeObjectStreamer(byte_chunk_size, char_chunk_size)
        self.state = TableExportState.DISCOVERING_COLUMNS
        self.log = ContextLogger(__name__, table_name=table_name)

    def _advance(self, state: TableExportState) -> None:
        if state <= self.state:
            raise RuntimeError(
                f"Illegal table export transition {self.state.name} -> {state.name}"
            )
        self.log.debug(f"{self.state.name} -> {state.name}")
        self.state = state

    def export(self) -> TableExportResult:
        """
        Run the export of the table

        Returns:
            TableExportResult with the row count, the insert script name
            (None for empty tables) and the check statements
        """
        if self.state is not TableExportState.DISCOVERING_COLUMNS:
            raise RuntimeError(f"Table {self.table_name} was already exported")

        start_time = time.monotonic()
        with trace_operation("export_table", table=self.table_name) as span:
            row_count = self.source.count_rows(self.table_name)
            self.log.info(f"Exporting table {self.table_name} ({row_count} rows)")

            if row_count == 0:
                self.log.debug("Empty table, no insert script")
                result = TableExportResult(table_name=self.table_name, row_count=0)
                self._advance(TableExportState.CLOSED)
            else:
                result = self._export_rows(row_count)

            result.duration_seconds = time.monotonic() - start_time
            span.set_attribute("row_count", result.row_count)

        if self.metrics is not None:
            self.metrics.record_table(
                self.table_name,
                result.row_count,
                result.duration_seconds,
                lob_counts=result.lob_counts,
                lob_bytes=result.lob_bytes,
            )

        self.log.info(
            f"Table {self.table_name} done in {result.duration_seconds:.2f}s",
            row_count=result.row_count,
        )
        return result

    def _export_rows(self, row_count: int) -> TableExportResult:
        with self.source.open_table(self.table_name) as reader:
            columns = mark_excluded(reader.columns, self.excluded_columns)
            included = [column for column in columns if not column.excluded]
            checksums = ChecksumAccumulator(columns)

            for column in columns:
                self.log.debug(
                    f"column #{column.position}: {column.name}: {column.type_name} "
                    f"({column.precision} {column.scale})"
                    + (" excluded" if column.excluded else "")
                )
                if not column.excluded and column.lob_kind is not None:
                    checksums.register_lob_column(column)

            self._advance(TableExportState.BUILDING_PREFIX)
            prefix = insert_prefix(self.table_name, included)
            script_name = insert_script_name(self.table_name)

            with ExitStack() as stack:
                lob_store = None
                if checksums.lob_columns:
                    lob_store = stack.enter_context(self.sinks.open_lob_store(self.table_name))
                script = stack.enter_context(self.sinks.open_script(script_name))
                script.write(insert_marker(self.table_name) + "\n")

                encoder = LiteralEncoder(
                    self.table_name, checksums, self.streamer, lob_store, zone=self.zone,
                )

                self._advance(TableExportState.STREAMING_ROWS)
                written = 0
                for row in reader.rows:
                    literals = [
                        encoder.encode(classify_cell(row[column.position - 1], self.zone), column)
                        for column in included
                    ]
                    self._release_excluded(row, columns)
                    script.write(prefix + ", ".join(literals) + ");\n")
                    written += 1

        if written != row_count:
            self.log.warning(
                f"Table {self.table_name} changed during export: "
                f"counted {row_count} rows, wrote {written}"
            )
            add_span_event("row_count_changed", counted=row_count, written=written)

        self._advance(TableExportState.FINALIZING_CHECKSUMS)
        checks = checksums.render_checks(self.table_name, row_count)

        self._advance(TableExportState.CLOSED)
        return TableExportResult(
            table_name=self.table_name,
            row_count=row_count,
            insert_script=script_name,
            checks=checks,
            lob_counts={kind.value: count for kind, count in encoder.lob_counts.items()},
            lob_bytes={kind.value: size for kind, size in encoder.lob_bytes.items()},
        )

    @staticmethod
    def _release_excluded(row, columns: list[Column]) -> None:
        for column in columns:
            value = row[column.position - 1]
            if column.excluded and isinstance(value, LobStream):
                value.close()
