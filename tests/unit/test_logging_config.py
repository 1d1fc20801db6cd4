"""
Unit tests for src/utils/logging

Covers how logging options are resolved from the environment and the
command line, the run id stamped on every record, the two output formats,
and the table-scoped context logger.
"""

import json
import logging
import re
import sys
from unittest.mock import patch

import pytest

from utils.logging import (
    ConsoleFormatter,
    ContextLogger,
    JSONFormatter,
    LoggingSettings,
    RunContextFilter,
    setup_logging,
    shutdown_logging,
)


def table_record(msg="Exported table ORDERS", level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="schema_export.table",
        level=level,
        pathname="/srv/export/schema_export/table.py",
        lineno=120,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def root_logger():
    """Root logger, restored to its handlers and level after the test"""
    logger = logging.getLogger()
    saved_handlers, saved_level = logger.handlers[:], logger.level
    yield logger
    shutdown_logging()
    logger.handlers[:] = saved_handlers
    logger.setLevel(saved_level)


class TestLoggingSettings:
    """Test LoggingSettings resolution"""

    def test_defaults_without_variables(self):
        assert LoggingSettings.from_env({}) == LoggingSettings(
            level="INFO", log_file=None, json_format=False, console_output=True,
        )

    def test_from_variables(self):
        settings = LoggingSettings.from_env({
            "LOG_LEVEL": "debug",
            "LOG_FILE": "/var/log/export/export.log",
            "LOG_JSON": "Yes",
            "LOG_CONSOLE": "0",
        })

        assert settings == LoggingSettings(
            level="debug",
            log_file="/var/log/export/export.log",
            json_format=True,
            console_output=False,
        )

    def test_blank_variables_keep_defaults(self):
        settings = LoggingSettings.from_env({"LOG_LEVEL": "", "LOG_FILE": "", "LOG_CONSOLE": ""})

        assert settings.level == "INFO"
        assert settings.log_file is None
        assert settings.console_output is True

    def test_options_override_one_at_a_time(self):
        # Arrange
        from_env = LoggingSettings(level="WARNING", log_file="/var/log/export.log")

        # Act
        settings = from_env.with_options(level="DEBUG")

        # Assert
        assert settings.level == "DEBUG"
        assert settings.log_file == "/var/log/export.log"
        assert settings.json_format is False

    def test_unset_options_change_nothing(self):
        from_env = LoggingSettings(level="ERROR", json_format=True)
        assert from_env.with_options() == from_env

    @pytest.mark.parametrize("level,expected", [
        ("debug", logging.DEBUG),
        ("WARNING", logging.WARNING),
        ("CHATTY", logging.INFO),
    ])
    def test_numeric_level(self, level, expected):
        assert LoggingSettings(level=level).numeric_level == expected


class TestSetupLogging:
    """Test setup_logging function"""

    def test_returns_generated_run_id(self, root_logger):
        run_id = setup_logging()

        assert re.fullmatch(r"[0-9a-f]{12}", run_id)
        assert root_logger.level == logging.INFO
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, ConsoleFormatter)

    def test_keeps_given_run_id(self, root_logger):
        assert setup_logging(run_id="nightly-42") == "nightly-42"

    def test_replaces_existing_handlers(self, root_logger):
        stale = logging.NullHandler()
        root_logger.addHandler(stale)

        setup_logging()

        assert stale not in root_logger.handlers

    def test_json_file_records_carry_run_id(self, root_logger, tmp_path):
        # Arrange
        log_file = tmp_path / "logs" / "export.log"
        settings = LoggingSettings(log_file=str(log_file), json_format=True, console_output=False)

        # Act
        run_id = setup_logging(settings)
        logging.getLogger("schema_export.table").info(
            "Exported table ORDERS", extra={"table_name": "ORDERS", "row_count": 3},
        )
        shutdown_logging()

        # Assert
        data = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
        assert data["run_id"] == run_id
        assert data["message"] == "Exported table ORDERS"
        assert data["context"] == {"table_name": "ORDERS", "row_count": 3}

    def test_plain_file_lines_carry_run_id(self, root_logger, tmp_path):
        log_file = tmp_path / "export.log"
        setup_logging(LoggingSettings(log_file=str(log_file), console_output=False), run_id="r1")

        logging.getLogger("schema_export.schema").warning("Table ORDERS changed during export")
        shutdown_logging()

        line = log_file.read_text(encoding="utf-8").splitlines()[-1]
        assert "[WARNING] run=r1 schema_export.schema: Table ORDERS changed" in line

    @pytest.mark.parametrize("level,expected", [
        ("DEBUG", logging.WARNING),
        ("INFO", logging.WARNING),
        ("ERROR", logging.ERROR),
    ])
    def test_driver_and_exporter_loggers_stay_quiet(self, root_logger, level, expected):
        setup_logging(LoggingSettings(level=level))

        for name in ("oracledb", "opentelemetry", "grpc"):
            assert logging.getLogger(name).level == expected

    def test_shutdown_closes_file_handler(self, root_logger, tmp_path):
        setup_logging(LoggingSettings(log_file=str(tmp_path / "export.log"), console_output=False))
        (file_handler,) = root_logger.handlers

        shutdown_logging()

        assert root_logger.handlers == []
        assert file_handler.stream is None


class TestRunContextFilter:
    def test_stamps_record(self):
        record = table_record()

        assert RunContextFilter("r7").filter(record) is True
        assert record.run_id == "r7"


class TestJSONFormatter:
    """Test JSONFormatter class"""

    def test_standard_fields(self):
        formatter = JSONFormatter(include_hostname=False)

        data = json.loads(formatter.format(table_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "schema_export.table"
        assert data["app"] == "schema-export"
        assert data["source"]["line"] == 120
        assert "timestamp" in data
        assert "hostname" not in data
        assert "run_id" not in data

    def test_run_id_is_top_level_not_context(self):
        data = json.loads(JSONFormatter().format(table_record(run_id="r1", table_name="ORDERS")))

        assert data["run_id"] == "r1"
        assert data["context"] == {"table_name": "ORDERS"}

    def test_private_fields_are_dropped(self):
        data = json.loads(JSONFormatter().format(table_record(_internal="x")))
        assert "context" not in data

    def test_exception(self):
        try:
            raise ValueError("Unknown column type")
        except ValueError:
            record = table_record(level=logging.ERROR)
            record.exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(record))

        assert data["exception"]["type"] == "ValueError"
        assert data["exception"]["message"] == "Unknown column type"


class TestConsoleFormatter:
    """Test ConsoleFormatter class"""

    def test_context_appended_without_run_id(self):
        formatter = ConsoleFormatter(use_colors=False)

        line = formatter.format(table_record(run_id="r1", table_name="ORDERS", row_count=3))

        assert "[INFO] schema_export.table: Exported table ORDERS" in line
        assert line.endswith("[table_name=ORDERS, row_count=3]")
        assert "r1" not in line

    def test_colors_only_on_a_terminal(self):
        with patch.object(sys.stderr, "isatty", return_value=False):
            assert ConsoleFormatter(use_colors=True).use_colors is False

    def test_colored_level_leaves_record_unchanged(self):
        with patch.object(sys.stderr, "isatty", return_value=True):
            formatter = ConsoleFormatter(use_colors=True)
        record = table_record(level=logging.WARNING)

        line = formatter.format(record)

        assert "\033[33mWARNING\033[0m" in line
        assert record.levelname == "WARNING"


class TestContextLogger:
    """Test ContextLogger class"""

    def test_table_context_is_merged(self):
        logger = ContextLogger("schema_export.table", table_name="ORDERS")

        with patch.object(logger.logger, "log") as mock_log:
            logger.info("Table done", row_count=3)

        mock_log.assert_called_once_with(
            logging.INFO, "Table done", exc_info=None,
            extra={"table_name": "ORDERS", "row_count": 3},
        )

    def test_update_context_returns_copies(self):
        logger = ContextLogger("schema_export.table", table_name="ORDERS")

        logger.update_context(worker="table-export_1")
        context = logger.get_context()
        context["table_name"] = "CHANGED"

        assert logger.context == {"table_name": "ORDERS", "worker": "table-export_1"}
