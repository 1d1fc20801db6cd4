"""
Cell to MySQL literal encoding.

Each cell becomes either an inline literal or a reference to an externalized
large object file, and contributes to its column's running checksum.
"""

import logging
from collections.abc import Callable
from contextlib import AbstractContextManager
from datetime import tzinfo
from typing import BinaryIO, Protocol

from .cells import Cell, CellKind
from .checksums import ChecksumAccumulator, ChecksumKind, crc32_of
from .columns import Column
from .errors import UnsupportedCellTypeError
from .literals import (
    IMPORT_ERROR_SENTINEL,
    NULL_LITERAL,
    decimal_text,
    mysql_string,
    mysql_timestamp,
)
from .lobs import LargeObjectStreamer, LobKind, LobStream
from .naming import lob_file_name, lob_reference_path

logger = logging.getLogger(__name__)


class LobStore(Protocol):
    """Destination of the large object files of one table."""

    def open_entry(self, file_name: str) -> AbstractContextManager[BinaryIO]:
        ...


def lob_literal(table_name: str, kind: LobKind, sequence: int) -> str:
    """
    Import-time load expression of an externalized large object

    Falls back to the import error sentinel when the file is missing, so the
    import continues and the check script reports the gap.
    """
    path = mysql_string(lob_reference_path(table_name, kind, sequence))
    return (
        f"IFNULL(LOAD_FILE(CONCAT(@import_dir, {path})), "
        f"{mysql_string(IMPORT_ERROR_SENTINEL)})"
    )


class LiteralEncoder:
    """
    Encodes the cells of one table.

    Holds the per-kind large object sequence counters of the table, so an
    instance must not be shared between tables.
    """

    def __init__(
        self,
        table_name: str,
        checksums: ChecksumAccumulator,
        streamer: LargeObjectStreamer,
        lob_store: LobStore | None = None,
        zone: tzinfo | None = None,
    ):
        self.table_name = table_name
        self.zone = zone
        self._checksums = checksums
        self._streamer = streamer
        self._lob_store = lob_store
        self._sequences = {kind: 0 for kind in LobKind}
        self.lob_bytes = {kind: 0 for kind in LobKind}

        self._handlers: dict[CellKind, Callable[[Cell, Column], str]] = {
            CellKind.NULL: self._encode_null,
            CellKind.DECIMAL: self._encode_decimal,
            CellKind.BINARY: self._encode_lob,
            CellKind.CHARACTER: self._encode_lob,
            CellKind.TEXT: self._encode_text,
            CellKind.INSTANT: self._encode_instant,
            CellKind.UNRECOGNIZED: self._reject,
        }

    @property
    def lob_counts(self) -> dict[LobKind, int]:
        """Number of large objects written so far, by kind."""
        return dict(self._sequences)

    def encode(self, cell: Cell, column: Column) -> str:
        """
        Encode one cell of ``column``

        Raises:
            UnsupportedCellTypeError: The cell's runtime type is not supported
        """
        return self._handlers[cell.kind](cell, column)

    def _accumulate(self, column: Column, kind: ChecksumKind, value: int) -> None:
        if column.checksum_kind is not None:
            self._checksums.update(column.position, kind, value)

    def _encode_null(self, cell: Cell, column: Column) -> str:
        return NULL_LITERAL

    def _encode_decimal(self, cell: Cell, column: Column) -> str:
        text = decimal_text(cell.value)
        if column.is_bit_like:
            self._accumulate(column, ChecksumKind.SUM, int(cell.value))
        else:
            self._accumulate(column, ChecksumKind.CRC32, crc32_of(text.encode("utf-8")))
        return text

    def _encode_text(self, cell: Cell, column: Column) -> str:
        self._accumulate(column, ChecksumKind.CRC32, crc32_of(cell.value.encode("utf-8")))
        return mysql_string(cell.value)

    def _encode_instant(self, cell: Cell, column: Column) -> str:
        return mysql_timestamp(cell.value.to_zone(self.zone))

    def _encode_lob(self, cell: Cell, column: Column) -> str:
        stream: LobStream = cell.value
        if self._lob_store is None:
            stream.close()
            raise RuntimeError(f"No large object store configured for table {self.table_name}")

        kind = stream.kind
        sequence = self._sequences[kind]
        self._sequences[kind] += 1
        file_name = lob_file_name(kind, sequence)

        transfer = self._streamer.stream(stream, lambda: self._lob_store.open_entry(file_name))
        self.lob_bytes[kind] += transfer.bytes_written
        self._accumulate(column, ChecksumKind.CRC32, transfer.crc32)

        logger.debug(
            f"{self.table_name}.{column.name}: {kind.value} object #{sequence} "
            f"({transfer.bytes_written} bytes)"
        )
        return lob_literal(self.table_name, kind, sequence)

    def _reject(self, cell: Cell, column: Column) -> str:
        raise UnsupportedCellTypeError(cell.type_name, self.table_name, column.name)
