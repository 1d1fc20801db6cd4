"""
Oracle to MySQL schema export.

Dumps the tables of an Oracle schema into a set of MySQL scripts:
- insert_into_<table>.sql with one INSERT statement per row
- lobs_<table>/ with BLOB and CLOB contents as separate files
- truncate_all.sql and checks.sql (row counts and column checksums)
- main.sql sourcing all of them in order
"""

__version__ = "1.0.0"

from .checksums import ChecksumAccumulator, ChecksumKind
from .columns import Column
from .encoder import LiteralEncoder
from .errors import (
    ConfigurationError,
    ExportError,
    PreconditionError,
    UnsupportedCellTypeError,
)
from .identifiers import escape_mysql_name
from .lobs import LargeObjectStreamer, LobKind
from .schema import SchemaExporter, SchemaExportResult
from .table import TableExporter, TableExportResult

__all__ = [
    "__version__",
    "Column",
    "ChecksumAccumulator",
    "ChecksumKind",
    "LiteralEncoder",
    "LargeObjectStreamer",
    "LobKind",
    "TableExporter",
    "TableExportResult",
    "SchemaExporter",
    "SchemaExportResult",
    "escape_mysql_name",
    "ExportError",
    "PreconditionError",
    "ConfigurationError",
    "UnsupportedCellTypeError",
]
