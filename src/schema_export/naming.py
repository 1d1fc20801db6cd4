"""
File names of the generated dump set.
"""

from collections import defaultdict
from collections.abc import Iterable

from .lobs import LobKind

MAIN_SCRIPT = "main.sql"
TRUNCATE_SCRIPT = "truncate_all.sql"
CHECK_SCRIPT = "checks.sql"

# Entry holding all large objects of one table in zip mode
LOB_ARCHIVE = "lobs.zip"


def insert_script_name(table_name: str) -> str:
    return f"insert_into_{table_name.lower()}.sql"


def lob_dir_name(table_name: str) -> str:
    return f"lobs_{table_name.lower()}"


def lob_file_name(kind: LobKind, sequence: int) -> str:
    return f"{sequence}.{kind.extension}"


def lob_reference_path(table_name: str, kind: LobKind, sequence: int) -> str:
    """Path of a large object file relative to the import directory (always '/')."""
    return f"{lob_dir_name(table_name)}/{lob_file_name(kind, sequence)}"


def zip_name(file_name: str) -> str:
    return f"{file_name}.zip"


def colliding_table_names(table_names: Iterable[str]) -> dict[str, list[str]]:
    """
    Tables whose file names coincide, keyed by the shared insert script name

    Quoted Oracle identifiers may differ only in case ("Foo" and FOO), while
    the dump set file names are lower case.
    """
    by_file: dict[str, list[str]] = defaultdict(list)
    for table_name in table_names:
        by_file[insert_script_name(table_name)].append(table_name)
    return {file_name: names for file_name, names in by_file.items() if len(names) > 1}
