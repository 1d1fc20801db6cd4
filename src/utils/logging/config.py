"""
Logging configuration for the schema export tool.

Settings are resolved option by option: a command-line option wins over its
LOG_* environment variable, which wins over the default. Every record of a
run carries the run id, so the lines of one export can be picked out of a
log file shared by several runs.
"""

import logging
import logging.handlers
import os
import sys
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, replace

from .formatters import ConsoleFormatter, JSONFormatter

TRUE_VALUES = ("true", "1", "yes")

# Oracle driver and OTLP exporter stack; never more verbose than WARNING
THIRD_PARTY_LOGGERS = ("oracledb", "opentelemetry", "grpc")

FILE_FORMAT = "%(asctime)s [%(levelname)s] run=%(run_id)s %(name)s: %(message)s"


def _flag(value: str | None, default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in TRUE_VALUES


def new_run_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class LoggingSettings:
    """Resolved logging options of one run."""

    level: str = "INFO"
    log_file: str | None = None
    json_format: bool = False
    console_output: bool = True

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "LoggingSettings":
        """
        Settings from LOG_LEVEL, LOG_FILE, LOG_JSON and LOG_CONSOLE

        Unset variables keep the defaults.
        """
        environ = os.environ if environ is None else environ
        return cls(
            level=environ.get("LOG_LEVEL") or cls.level,
            log_file=environ.get("LOG_FILE") or None,
            json_format=_flag(environ.get("LOG_JSON"), cls.json_format),
            console_output=_flag(environ.get("LOG_CONSOLE"), cls.console_output),
        )

    def with_options(
        self,
        level: str | None = None,
        log_file: str | None = None,
        json_format: bool = False,
    ) -> "LoggingSettings":
        """Apply the options given on the command line."""
        return replace(
            self,
            level=level or self.level,
            log_file=log_file or self.log_file,
            json_format=json_format or self.json_format,
        )

    @property
    def numeric_level(self) -> int:
        """Numeric level; unknown names fall back to INFO."""
        level = logging.getLevelName(self.level.upper())
        return level if isinstance(level, int) else logging.INFO


class RunContextFilter(logging.Filter):
    """Stamps the run id on every record passing a handler."""

    def __init__(self, run_id: str):
        super().__init__()
        self.run_id = run_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = self.run_id
        return True


def _file_handler(path: str, max_bytes: int, backup_count: int) -> logging.Handler:
    log_dir = os.path.dirname(path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    return logging.handlers.RotatingFileHandler(
        filename=path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8",
    )


def setup_logging(
    settings: LoggingSettings | None = None,
    run_id: str | None = None,
    app_name: str = "schema-export",
    max_bytes: int = 50 * 1024 * 1024,
    backup_count: int = 5,
) -> str:
    """
    Configure the root logger for one export run

    Args:
        settings: Resolved options (defaults when None)
        run_id: Id stamped on every record (generated when None)
        app_name: Application name of JSON records
        max_bytes: Log file size before rotation
        backup_count: Number of rotated log files to keep

    Returns:
        The run id
    """
    settings = settings or LoggingSettings()
    run_id = run_id or new_run_id()
    level = settings.numeric_level

    handlers: list[logging.Handler] = []
    if settings.console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(
            JSONFormatter(app_name=app_name) if settings.json_format else ConsoleFormatter()
        )
        handlers.append(console_handler)

    if settings.log_file:
        file_handler = _file_handler(settings.log_file, max_bytes, backup_count)
        file_handler.setFormatter(
            JSONFormatter(app_name=app_name)
            if settings.json_format
            else logging.Formatter(fmt=FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        )
        handlers.append(file_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    run_filter = RunContextFilter(run_id)
    for handler in handlers:
        handler.setLevel(level)
        handler.addFilter(run_filter)
        root_logger.addHandler(handler)

    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logging.getLogger(__name__).debug(
        f"Logging initialized: run={run_id}, level={logging.getLevelName(level)}, "
        f"file={settings.log_file or 'none'}, json={settings.json_format}"
    )
    return run_id


def shutdown_logging() -> None:
    """
    Flush and close all handlers of the root logger.

    Call at the end of a run so the rotating file handler releases its file.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        handler.flush()
        handler.close()
        root_logger.removeHandler(handler)
