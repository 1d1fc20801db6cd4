"""
Unit tests for settings resolution.
"""

from argparse import Namespace

import pytest

from schema_export.config import (
    ExportSettings,
    load_settings,
    parse_bool,
    parse_column_exclusion,
    parse_positive_int,
    read_properties,
    split_names,
)
from schema_export.errors import ConfigurationError

REQUIRED_ENV = {
    "ORACLE_DSN": "envhost:1521/ENV",
    "ORACLE_USER": "ENV_USER",
    "ORACLE_PASSWORD": "env-secret",
    "EXPORT_TARGET_PATH": "/env/target",
}


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every test where no default properties file exists."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


def write_properties(directory, text, name="export.properties"):
    path = directory / name
    path.write_text(text, encoding="utf-8")
    return path


class TestParsers:
    """Tests for the value parsers"""

    @pytest.mark.parametrize("value,expected", [
        ("true", True), ("YES", True), ("1", True), (" on ", True),
        ("false", False), ("no", False), ("0", False), ("", False), (True, True),
    ])
    def test_parse_bool(self, value, expected):
        assert parse_bool(value, "zip") is expected

    def test_parse_bool_rejects_garbage(self):
        with pytest.raises(ConfigurationError, match="zip"):
            parse_bool("maybe", "zip")

    def test_parse_positive_int(self):
        assert parse_positive_int("16", "n") == 16
        with pytest.raises(ConfigurationError):
            parse_positive_int("0", "n")
        with pytest.raises(ConfigurationError):
            parse_positive_int("many", "n")

    def test_split_names(self):
        assert split_names(" A, B ,,C ") == ["A", "B", "C"]
        assert split_names(None) == []

    def test_parse_column_exclusion(self):
        assert parse_column_exclusion("USERS:NOTES, AVATAR") == ("USERS", ["NOTES", "AVATAR"])
        with pytest.raises(ConfigurationError):
            parse_column_exclusion("USERS")


class TestReadProperties:
    """Tests for read_properties"""

    def test_comments_and_delimiters(self, tmp_path):
        path = write_properties(tmp_path, (
            "# comment\n"
            "! another comment\n"
            "url=db:1521/ORCL\n"
            "user : APP\n"
            "password=p%ss=word\n"
            "exclude_columns.Users=NOTES\n"
        ), name="custom.properties")

        properties = read_properties(path)

        assert properties == {
            "url": "db:1521/ORCL",
            "user": "APP",
            "password": "p%ss=word",
            "exclude_columns.Users": "NOTES",
        }

    def test_unparseable_file(self, tmp_path):
        path = write_properties(tmp_path, "url=a\nurl=b\n", name="dup.properties")
        with pytest.raises(ConfigurationError, match="Cannot parse"):
            read_properties(path)


class TestLoadSettings:
    """Tests for load_settings"""

    def test_from_environment(self):
        settings = load_settings(environ=REQUIRED_ENV)

        assert settings.dsn == "envhost:1521/ENV"
        assert settings.user == "ENV_USER"
        assert settings.password == "env-secret"
        assert settings.target_path == "/env/target"
        assert settings.zip_output is False
        assert settings.import_dir == "/tmp/import/"
        assert settings.parallel_workers == 1
        assert settings.zone is None

    def test_cli_overrides_environment(self):
        args = Namespace(dsn="cli:1521/CLI", zip=True, exclude_tables="A,B", parallel_workers=4)

        settings = load_settings(args, environ=REQUIRED_ENV)

        assert settings.dsn == "cli:1521/CLI"
        assert settings.user == "ENV_USER"
        assert settings.zip_output is True
        assert settings.exclude_tables == frozenset({"A", "B"})
        assert settings.parallel_workers == 4

    def test_environment_overrides_properties(self, isolated_cwd):
        write_properties(isolated_cwd, (
            "url=props:1521/P\n"
            "user=PROPS\n"
            "password=props-secret\n"
            "target_path=/props/target\n"
            "zip=true\n"
            "lob_chunk_size=1024\n"
        ))

        settings = load_settings(environ={"ORACLE_USER": "ENV_USER"})

        assert settings.dsn == "props:1521/P"
        assert settings.user == "ENV_USER"
        assert settings.zip_output is True
        assert settings.lob_chunk_size == 1024
        assert settings.char_chunk_size == 512

    def test_column_exclusions_are_merged(self, tmp_path):
        path = write_properties(tmp_path, (
            "exclude_columns.users=NOTES,AVATAR\n"
            "exclude_columns.ORDERS=COMMENT\n"
        ), name="custom.properties")
        args = Namespace(exclude_columns=["Users:PASSWORD_HASH"])

        settings = load_settings(args, environ=REQUIRED_ENV, properties_path=path)

        assert settings.exclude_columns == {
            "USERS": frozenset({"NOTES", "AVATAR", "PASSWORD_HASH"}),
            "ORDERS": frozenset({"COMMENT"}),
        }

    def test_missing_required(self):
        with pytest.raises(ConfigurationError) as excinfo:
            load_settings(environ={"ORACLE_DSN": "db"})

        assert "user, password, target_path" in str(excinfo.value)

    def test_explicit_properties_file_must_exist(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_settings(environ=REQUIRED_ENV, properties_path=tmp_path / "missing.properties")

    def test_unknown_timezone(self):
        with pytest.raises(ConfigurationError, match="Mars/Olympus_Mons"):
            load_settings(environ={**REQUIRED_ENV, "EXPORT_TIMEZONE": "Mars/Olympus_Mons"})

    def test_invalid_worker_count(self):
        with pytest.raises(ConfigurationError, match="parallel_workers"):
            load_settings(Namespace(parallel_workers=0), environ=REQUIRED_ENV)


class TestExportSettings:
    def test_password_is_hidden(self):
        settings = ExportSettings(dsn="db", user="APP", password="hunter2", target_path="/t")

        assert "hunter2" not in repr(settings)
        assert settings.safe_dict()["password"] == "***"
