"""
Pytest configuration and fixtures for schema export tests.
Provides an in-memory source standing in for an Oracle connection.
"""

from contextlib import contextmanager
from pathlib import Path

import pytest

from schema_export.columns import Column
from schema_export.sinks import PlainFileSinks, ZipSinks
from schema_export.source import TableReader


class FakeSource:
    """
    In-memory source with the OracleSource interface.

    Tables map to ``(columns, rows)``; rows are lists of tuples whose values
    may be zero-argument callables producing fresh values (LOB streams can
    only be read once).
    """

    def __init__(self, tables=None, dsn="fakehost:1521/FAKE", user="APP"):
        self.tables = dict(tables or {})
        self.dsn = dsn
        self.user = user
        self.closed = False
        self.opened_tables = []

    def add_table(self, name, columns, rows=()):
        self.tables[name] = (list(columns), list(rows))

    def describe(self):
        return self.dsn, self.user

    def list_tables(self):
        return list(self.tables)

    def count_rows(self, table_name):
        return len(self.tables[table_name][1])

    @contextmanager
    def open_table(self, table_name):
        self.opened_tables.append(table_name)
        columns, rows = self.tables[table_name]
        materialized = (
            tuple(value() if callable(value) else value for value in row) for row in rows
        )
        yield TableReader(columns=list(columns), rows=materialized)

    def close(self):
        self.closed = True


@pytest.fixture
def fake_source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def fake_source_class():
    return FakeSource


@pytest.fixture
def target_dir(tmp_path: Path) -> Path:
    target = tmp_path / "dump"
    target.mkdir()
    return target


@pytest.fixture
def plain_sinks(target_dir: Path) -> PlainFileSinks:
    return PlainFileSinks(target_dir)


@pytest.fixture
def zip_sinks(target_dir: Path) -> ZipSinks:
    return ZipSinks(target_dir)


@pytest.fixture
def text_column():
    def make(position=1, name="NAME", type_name="VARCHAR2", **kwargs):
        return Column(position=position, name=name, type_name=type_name, **kwargs)
    return make
