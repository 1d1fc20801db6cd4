"""
Unit tests for output sinks and the target directory precondition.
"""

import zipfile

import pytest

from schema_export.errors import PreconditionError
from schema_export.sinks import (
    DirectoryLobStore,
    PlainFileSinks,
    ZipLobStore,
    ZipSinks,
    check_target_directory,
    create_sinks,
)


class TestCheckTargetDirectory:
    """Tests for check_target_directory"""

    def test_missing(self, tmp_path):
        with pytest.raises(PreconditionError, match="does not exist"):
            check_target_directory(tmp_path / "missing")

    def test_not_a_directory(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_text("x")
        with pytest.raises(PreconditionError, match="not a directory"):
            check_target_directory(path)

    def test_not_empty(self, target_dir):
        (target_dir / "leftover.sql").write_text("")
        with pytest.raises(PreconditionError, match="not empty"):
            check_target_directory(target_dir)

    def test_empty_directory(self, target_dir):
        assert check_target_directory(str(target_dir)) == target_dir


class TestPlainFileSinks:
    """Tests for PlainFileSinks"""

    def test_script_is_utf8_with_unix_newlines(self, plain_sinks, target_dir):
        with plain_sinks.open_script("checks.sql") as script:
            script.write("SELECT 'Zoë';\nSELECT 2;\n")

        assert (target_dir / "checks.sql").read_bytes() == "SELECT 'Zoë';\nSELECT 2;\n".encode("utf-8")

    def test_lob_store_writes_files(self, plain_sinks, target_dir):
        with plain_sinks.open_lob_store("DOCS") as store:
            assert isinstance(store, DirectoryLobStore)
            with store.open_entry("0.blob") as entry:
                entry.write(b"\x00\x01")

        assert (target_dir / "lobs_docs" / "0.blob").read_bytes() == b"\x00\x01"


class TestZipSinks:
    """Tests for ZipSinks"""

    def test_script_in_its_own_archive(self, zip_sinks, target_dir):
        with zip_sinks.open_script("main.sql") as script:
            script.write("source checks.sql\n")

        with zipfile.ZipFile(target_dir / "main.sql.zip") as archive:
            assert archive.namelist() == ["main.sql"]
            assert archive.read("main.sql") == b"source checks.sql\n"

    def test_lobs_in_one_archive_per_table(self, zip_sinks, target_dir):
        with zip_sinks.open_lob_store("DOCS") as store:
            assert isinstance(store, ZipLobStore)
            with store.open_entry("0.blob") as entry:
                entry.write(b"abc")
            with store.open_entry("0.clob") as entry:
                entry.write("☃".encode("utf-8"))

        with zipfile.ZipFile(target_dir / "lobs_docs" / "lobs.zip") as archive:
            assert sorted(archive.namelist()) == ["0.blob", "0.clob"]
            assert archive.read("0.blob") == b"abc"
            assert archive.read("0.clob").decode("utf-8") == "☃"


class TestCreateSinks:
    def test_plain(self, target_dir):
        assert isinstance(create_sinks(target_dir), PlainFileSinks)

    def test_zip(self, target_dir):
        sinks = create_sinks(target_dir, zip_output=True)
        assert isinstance(sinks, ZipSinks)
        assert sinks.target_dir == target_dir
