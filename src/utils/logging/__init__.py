"""
Structured logging configuration for the schema export tool

Provides console or JSON-formatted logging, stamped with the id of the run.

Usage:
    import logging
    from utils.logging import LoggingSettings, setup_logging

    settings = LoggingSettings.from_env().with_options(level="DEBUG")
    run_id = setup_logging(settings)

    logger = logging.getLogger(__name__)
    logger.info("Table exported", extra={"table_name": "CUSTOMERS", "row_count": 12345})
"""

from .config import LoggingSettings, RunContextFilter, setup_logging, shutdown_logging
from .formatters import ConsoleFormatter, JSONFormatter
from .handlers import ContextLogger

__all__ = [
    "LoggingSettings",
    "RunContextFilter",
    "setup_logging",
    "shutdown_logging",
    "JSONFormatter",
    "ConsoleFormatter",
    "ContextLogger",
]
