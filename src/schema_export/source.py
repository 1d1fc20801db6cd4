"""
Oracle source adapter.

Reads the tables of the connected user's schema through ``oracledb``.
NUMBER values are fetched as ``decimal.Decimal`` and LOB locators are wrapped
into LobStream objects, so the exporters never touch driver types.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import oracledb

from utils.tracing import trace_function

from .columns import Column
from .identifiers import quote_oracle_identifier
from .lobs import BinaryLobStream, CharacterLobStream, LobStream

logger = logging.getLogger(__name__)

SELECT_TABLE_NAMES = "SELECT TABLE_NAME FROM USER_TABLES ORDER BY TABLE_NAME"

CHARACTER_LOB_TYPES = (oracledb.DB_TYPE_CLOB, oracledb.DB_TYPE_NCLOB)

# Driver type names whose Oracle spelling differs from the name after DB_TYPE_
ORACLE_TYPE_NAMES = {
    "DB_TYPE_VARCHAR": "VARCHAR2",
    "DB_TYPE_NVARCHAR": "NVARCHAR2",
    "DB_TYPE_TIMESTAMP_TZ": "TIMESTAMP WITH TIME ZONE",
    "DB_TYPE_TIMESTAMP_LTZ": "TIMESTAMP WITH LOCAL TIME ZONE",
    "DB_TYPE_INTERVAL_DS": "INTERVAL DAY TO SECOND",
    "DB_TYPE_INTERVAL_YM": "INTERVAL YEAR TO MONTH",
    "DB_TYPE_LONG_RAW": "LONG RAW",
}


def oracle_type_name(type_code) -> str:
    """
    Oracle type name of a driver type

    Example:
        >>> oracle_type_name(oracledb.DB_TYPE_VARCHAR)
        'VARCHAR2'
        >>> oracle_type_name(oracledb.DB_TYPE_CLOB)
        'CLOB'
    """
    name = type_code.name
    return ORACLE_TYPE_NAMES.get(name, name.removeprefix("DB_TYPE_"))


def columns_from_description(description) -> list[Column]:
    """Column metadata from ``cursor.description``, positions starting at 1."""
    return [
        Column(
            position=position,
            name=info[0],
            type_name=oracle_type_name(info[1]),
            precision=info[4] or 0,
            scale=info[5] or 0,
        )
        for position, info in enumerate(description, start=1)
    ]


def decimal_output_handler(cursor, metadata):
    """Fetch NUMBER columns as Decimal instead of int/float."""
    if metadata.type_code == oracledb.DB_TYPE_NUMBER:
        return cursor.var(Decimal, arraysize=cursor.arraysize)
    return None


class OracleLobReader:
    """
    Sequential reader over a LOB locator.

    ``LOB.read()`` takes a 1-based offset, counted in bytes for BLOBs and in
    UCS-2 code units for CLOBs and NCLOBs.
    """

    def __init__(self, lob):
        self._lob = lob
        self._offset = 1
        self._character = lob.type in CHARACTER_LOB_TYPES

    def read(self, size: int):
        data = self._lob.read(self._offset, size)
        if self._character:
            self._offset += len(data.encode("utf-16-le")) // 2
        else:
            self._offset += len(data)
        return data

    def close(self) -> None:
        if self._lob.isopen():
            self._lob.close()


def wrap_lob(lob) -> LobStream | Any:
    """
    Wrap a BLOB, CLOB or NCLOB locator into a LobStream

    Other locators (BFILE) are returned as they are and rejected by the
    encoder as an unsupported type.
    """
    if lob.type == oracledb.DB_TYPE_BLOB:
        return BinaryLobStream(OracleLobReader(lob))
    if lob.type in CHARACTER_LOB_TYPES:
        return CharacterLobStream(OracleLobReader(lob))
    return lob


def wrap_row(row: tuple) -> tuple:
    return tuple(wrap_lob(value) if isinstance(value, oracledb.LOB) else value for value in row)


@dataclass
class TableReader:
    """Columns of a table and its rows in cursor order."""

    columns: list[Column]
    rows: Iterator[tuple]


class OracleSource:
    """
    Source adapter over one oracledb connection.

    Not thread-safe; parallel exports open one OracleSource per worker.
    """

    def __init__(self, connection, dsn: str = "", user: str = "", arraysize: int = 500):
        self.connection = connection
        self.dsn = dsn
        self.user = user
        self.arraysize = arraysize
        self.connection.outputtypehandler = decimal_output_handler

    @classmethod
    def connect(cls, dsn: str, user: str, password: str, **kwargs) -> "OracleSource":
        """Open a connection and wrap it."""
        logger.info(f"Connecting to Oracle {dsn} as {user}")
        connection = oracledb.connect(user=user, password=password, dsn=dsn)
        return cls(connection, dsn=dsn, user=user, **kwargs)

    def describe(self) -> tuple[str, str]:
        """Connection identifier and schema for the dump set header."""
        return self.dsn, self.user

    @trace_function("oracle.list_tables", component="source")
    def list_tables(self) -> list[str]:
        logger.debug(f"SQL query: {SELECT_TABLE_NAMES}")
        with self.connection.cursor() as cursor:
            cursor.execute(SELECT_TABLE_NAMES)
            return [row[0] for row in cursor]

    @trace_function("oracle.count_rows", component="source")
    def count_rows(self, table_name: str) -> int:
        sql = f"SELECT COUNT(*) FROM {quote_oracle_identifier(table_name)}"
        logger.debug(f"SQL query: {sql}")
        with self.connection.cursor() as cursor:
            cursor.execute(sql)
            (count,) = cursor.fetchone()
        return int(count)

    @contextmanager
    def open_table(self, table_name: str) -> Iterator[TableReader]:
        """
        Open a cursor over all rows of a table

        Yields:
            TableReader whose rows are consumed while the context is open
        """
        sql = f"SELECT * FROM {quote_oracle_identifier(table_name)}"
        logger.debug(f"SQL query: {sql}")
        with self.connection.cursor() as cursor:
            cursor.arraysize = self.arraysize
            cursor.execute(sql)
            columns = columns_from_description(cursor.description)
            yield TableReader(columns=columns, rows=(wrap_row(row) for row in cursor))

    def close(self) -> None:
        self.connection.close()

    def __enter__(self) -> "OracleSource":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
