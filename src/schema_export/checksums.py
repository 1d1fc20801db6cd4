"""
Per-column checksums and the validation statements built from them.

While rows are exported, every checksum-eligible column keeps a running
value that MySQL can recompute after the import:

- SUM: plain sum of the integer values (NUMBER(1,0) columns)
- CRC32: XOR of the CRC-32 of every value, matching BIT_XOR(CRC32(col))

Both are order independent, like the aggregates that verify them.
"""

import zlib
from enum import Enum
from typing import TYPE_CHECKING

from .identifiers import escape_mysql_name
from .literals import IMPORT_ERROR_SENTINEL, mysql_string

if TYPE_CHECKING:
    from .columns import Column


class ChecksumKind(Enum):
    SUM = "sum"
    CRC32 = "crc32"


def crc32_of(data: bytes) -> int:
    return zlib.crc32(data) & 0xFFFFFFFF


def _check_statement(expected, aggregate: str, label: str, table: str, where: str = "") -> str:
    return (
        f"SELECT IF({expected} = {aggregate}, 'ok', 'FAILED') AS Result,"
        f" {mysql_string(label)} AS Test"
        f" FROM {table}{where};"
    )


def row_count_check(table_name: str, row_count: int) -> str:
    table = escape_mysql_name(table_name)
    return _check_statement(row_count, "COUNT(*)", f"{table} COUNT {row_count}", table)


def missing_lob_check(table_name: str, column_name: str) -> str:
    """Assert that no row of the column holds the import error sentinel."""
    table = escape_mysql_name(table_name)
    column = escape_mysql_name(column_name)
    return _check_statement(
        0,
        "COUNT(*)",
        f"{table}.{column} LOAD_FILE()",
        table,
        where=f" WHERE {column} = {mysql_string(IMPORT_ERROR_SENTINEL)}",
    )


class ChecksumAccumulator:
    """
    Running checksums of one table, one value per column position.
    """

    def __init__(self, columns: list["Column"]):
        self._columns = [column for column in columns if not column.excluded]
        self._values = {column.position: 0 for column in self._columns}
        self._lob_columns: list["Column"] = []

    def register_lob_column(self, column: "Column") -> None:
        """Pre-register the "no missing file" check of a large object column."""
        self._lob_columns.append(column)

    def update(self, position: int, kind: ChecksumKind, value: int) -> None:
        if kind is ChecksumKind.SUM:
            self._values[position] += value
        else:
            self._values[position] ^= value

    def value(self, position: int) -> int:
        return self._values[position]

    @property
    def lob_columns(self) -> list["Column"]:
        return list(self._lob_columns)

    def render_checks(self, table_name: str, row_count: int) -> list[str]:
        """
        Validation statements for the table

        Row count first, then the large object file checks, then one
        statement per checksum-eligible column in column order.
        """
        table = escape_mysql_name(table_name)
        statements = [row_count_check(table_name, row_count)]
        statements.extend(missing_lob_check(table_name, column.name) for column in self._lob_columns)

        for column in self._columns:
            kind = column.checksum_kind
            if kind is None:
                continue
            name = escape_mysql_name(column.name)
            expected = self._values[column.position]
            if kind is ChecksumKind.SUM:
                statements.append(_check_statement(
                    expected, f"IFNULL(SUM({name}), 0)", f"{table}.{name} SUM {expected}", table,
                ))
            else:
                statements.append(_check_statement(
                    expected, f"BIT_XOR(CRC32({name}))", f"{table}.{name} checksum", table,
                ))
        return statements
