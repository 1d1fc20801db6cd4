"""
Output sinks: plain files or zip archives.

Scripts are text streams (UTF-8, ``\\n`` line endings); large objects are
binary entries of a per-table store. The exporters only see the context
managers returned here and never know which container is in use.
"""

import io
import logging
import zipfile
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, TextIO

from .errors import PreconditionError
from .naming import LOB_ARCHIVE, lob_dir_name, zip_name

logger = logging.getLogger(__name__)


def check_target_directory(path: str | Path) -> Path:
    """
    Verify the output location before anything is written

    Raises:
        PreconditionError: Path is missing, not a directory or not empty
    """
    target = Path(path)
    if not target.exists():
        raise PreconditionError(f"Target directory {target} does not exist")
    if not target.is_dir():
        raise PreconditionError(f"Target path {target} is not a directory")
    if any(target.iterdir()):
        raise PreconditionError(f"Target directory {target} is not empty")
    return target


class DirectoryLobStore:
    """Large objects of one table as plain files in its own directory."""

    def __init__(self, directory: Path):
        self.directory = directory

    def open_entry(self, file_name: str) -> BinaryIO:
        return open(self.directory / file_name, "wb")


class ZipLobStore:
    """Large objects of one table as entries of a single archive."""

    def __init__(self, archive: zipfile.ZipFile):
        self.archive = archive

    def open_entry(self, file_name: str) -> BinaryIO:
        # Entry sizes are unknown up front
        return self.archive.open(file_name, mode="w", force_zip64=True)


class SinkFactory(ABC):
    """Opens the sinks of one export run below the target directory."""

    def __init__(self, target_dir: str | Path):
        self.target_dir = Path(target_dir)

    @abstractmethod
    def open_script(self, name: str) -> Iterator[TextIO]:
        """Open the script ``name`` for writing."""

    @abstractmethod
    def open_lob_store(self, table_name: str) -> Iterator[DirectoryLobStore | ZipLobStore]:
        """Open the large object store of a table."""

    def _lob_dir(self, table_name: str) -> Path:
        directory = self.target_dir / lob_dir_name(table_name)
        directory.mkdir()
        return directory


class PlainFileSinks(SinkFactory):
    """One plain file per script and per large object."""

    @contextmanager
    def open_script(self, name: str) -> Iterator[TextIO]:
        with open(self.target_dir / name, "w", encoding="utf-8", newline="\n") as script:
            yield script

    @contextmanager
    def open_lob_store(self, table_name: str) -> Iterator[DirectoryLobStore]:
        yield DirectoryLobStore(self._lob_dir(table_name))


class ZipSinks(SinkFactory):
    """
    Every script ``X.sql`` in its own ``X.sql.zip``; all large objects of a
    table in ``lobs_<table>/lobs.zip``.
    """

    @contextmanager
    def open_script(self, name: str) -> Iterator[TextIO]:
        path = self.target_dir / zip_name(name)
        with zipfile.ZipFile(path, mode="w", compression=zipfile.ZIP_DEFLATED) as archive:
            raw = archive.open(name, mode="w", force_zip64=True)
            with io.TextIOWrapper(raw, encoding="utf-8", newline="\n") as script:
                yield script

    @contextmanager
    def open_lob_store(self, table_name: str) -> Iterator[ZipLobStore]:
        path = self._lob_dir(table_name) / LOB_ARCHIVE
        with zipfile.ZipFile(path, mode="w", compression=zipfile.ZIP_DEFLATED) as archive:
            yield ZipLobStore(archive)


def create_sinks(target_dir: str | Path, zip_output: bool = False) -> SinkFactory:
    """Sink factory for the container mode of the run."""
    if zip_output:
        logger.debug("Writing zip archives")
        return ZipSinks(target_dir)
    return PlainFileSinks(target_dir)
