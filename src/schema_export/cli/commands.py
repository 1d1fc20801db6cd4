"""
CLI command implementations.

This module contains the implementation of the CLI commands:
- export: Export the schema into a dump set
- report: Report rendering from previous runs
"""

import argparse
import functools
import json
import logging
import sys
from pathlib import Path
from typing import Any

from utils.metrics import ExportMetrics, MetricsPublisher
from utils.tracing import initialize_tracing, shutdown_tracing, tracing_requested

from .. import __version__
from ..config import ExportSettings, load_settings
from ..errors import ExportError
from ..report import (
    export_report_csv,
    export_report_json,
    format_report_console,
    generate_export_report,
)
from ..schema import SchemaExporter
from ..sinks import check_target_directory, create_sinks
from ..source import OracleSource

logger = logging.getLogger(__name__)


def write_report(report: dict[str, Any], output: str | None, report_format: str) -> None:
    """
    Write or print a report

    Args:
        report: Report dictionary
        output: Output file path (console format prints when None)
        report_format: console, json or csv
    """
    if report_format == "console":
        text = format_report_console(report)
        if output:
            Path(output).write_text(text + "\n", encoding="utf-8")
            logger.info(f"Report saved to {output}")
        else:
            print(text)
        return

    if not output:
        raise ExportError(f"Output file required for {report_format.upper()} format")

    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if report_format == "json":
        export_report_json(report, str(output_path))
    else:
        export_report_csv(report, str(output_path))
    logger.info(f"Report saved to {output_path}")


def build_exporter(settings: ExportSettings, metrics: ExportMetrics | None = None) -> SchemaExporter:
    """Connect to the source and wire up a SchemaExporter for ``settings``."""
    connect = functools.partial(
        OracleSource.connect, settings.dsn, settings.user, settings.password,
    )
    return SchemaExporter(
        connect(),
        create_sinks(settings.target_path, settings.zip_output),
        excluded_tables=settings.exclude_tables,
        excluded_columns=settings.exclude_columns,
        zone=settings.zone,
        import_dir=settings.import_dir,
        byte_chunk_size=settings.lob_chunk_size,
        char_chunk_size=settings.char_chunk_size,
        parallel_workers=settings.parallel_workers,
        source_factory=connect if settings.parallel_workers > 1 else None,
        metrics=metrics,
        generator=f"schema-export {__version__}",
    )


def cmd_export(args: argparse.Namespace, run_id: str | None = None) -> None:
    """
    Run the export

    Args:
        args: Parsed command-line arguments
        run_id: Id of the run, recorded in the report
    """
    logger.info(f"Starting schema export (run {run_id})" if run_id else "Starting schema export")

    metrics = ExportMetrics()
    publisher = MetricsPublisher(
        metrics.registry,
        port=getattr(args, "metrics_port", None),
        textfile=getattr(args, "metrics_file", None),
    )
    if tracing_requested(args.otlp_endpoint, args.trace_console):
        initialize_tracing(otlp_endpoint=args.otlp_endpoint, console_export=args.trace_console)

    try:
        settings = load_settings(args, properties_path=args.config)
        check_target_directory(settings.target_path)
        publisher.start()

        exporter = build_exporter(settings, metrics)
        try:
            result = exporter.run()
        finally:
            exporter.source.close()

        report = generate_export_report(
            result.tables, result.skipped, result.duration_seconds, run_id=run_id,
        )
        if args.report or args.report_format == "console":
            write_report(report, args.report, args.report_format)

    except Exception as e:
        logger.error(f"Export failed: {e}")
        logger.debug("Export failure details", exc_info=True)
        sys.exit(1)
    finally:
        publisher.write()
        shutdown_tracing()

    logger.info("Export completed successfully")


def cmd_report(args: argparse.Namespace) -> None:
    """
    Render a report from a previous export JSON file

    Args:
        args: Parsed command-line arguments
    """
    logger.info(f"Loading export report from {args.input}")

    try:
        with open(args.input, encoding="utf-8") as f:
            report = json.load(f)
        write_report(report, args.output, args.format)

    except Exception as e:
        logger.error(f"Failed to process report: {e}")
        sys.exit(1)
