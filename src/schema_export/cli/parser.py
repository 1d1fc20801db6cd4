"""
Command-line argument parser configuration.

This module sets up the argument parser for the schema-export CLI tool,
defining all commands and their options.
"""

import argparse

from .. import __version__


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="schema-export",
        description="Export an Oracle schema into MySQL load scripts with generated integrity checks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Export using export.properties from the working directory
  schema-export export

  # Export with settings on the command line (password from ORACLE_PASSWORD)
  schema-export export --dsn dbhost:1521/ORCLPDB1 --user APP --target-path /var/tmp/dump

  # Write zip archives and skip tables and columns
  schema-export export --zip --exclude-tables AUDIT_LOG,TMP_IMPORT \\
      --exclude-columns CUSTOMERS:PASSWORD_HASH,NOTES

  # Export four tables at a time and keep a JSON report
  schema-export export --parallel-workers 4 --report export-report.json --report-format json

  # Show a saved report on the console
  schema-export report --input export-report.json --format console

Import on the MySQL side with the mysql command line client:
  cd /tmp/import && mysql -u app -p appdb < main.sql
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: LOG_LEVEL or INFO)'
    )
    parser.add_argument(
        '--log-file',
        help='Also write logs to this file (rotated)'
    )
    parser.add_argument(
        '--log-json',
        action='store_true',
        help='Log in JSON format'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # ========== Export command ==========
    export_parser = subparsers.add_parser('export', help='Export the schema into a dump set')
    export_parser.add_argument(
        '--config',
        help='Properties file (default: export.properties in the working directory, if present)'
    )
    # Source database options
    export_parser.add_argument('--dsn', help='Oracle connect string, e.g. host:1521/service')
    export_parser.add_argument('--user', help='Oracle user (schema to export)')
    export_parser.add_argument('--password', help='Oracle password (prefer ORACLE_PASSWORD)')
    # Output options
    export_parser.add_argument(
        '--target-path',
        help='Existing, empty output directory'
    )
    export_parser.add_argument(
        '--zip',
        action='store_true',
        default=None,
        help='Write zip archives instead of plain files'
    )
    export_parser.add_argument(
        '--import-dir',
        help='Directory the dump set is imported from on the MySQL host (default: /tmp/import/)'
    )
    export_parser.add_argument(
        '--exclude-tables',
        help='Comma-separated list of tables to skip'
    )
    export_parser.add_argument(
        '--exclude-columns',
        action='append',
        metavar='TABLE:COL1,COL2',
        help='Columns of a table to skip (repeatable)'
    )
    export_parser.add_argument(
        '--timezone',
        help='Time zone for timestamp literals, e.g. Europe/Berlin (default: system local)'
    )
    export_parser.add_argument(
        '--lob-chunk-size',
        type=int,
        help='Bytes per large object read (default: 8192)'
    )
    export_parser.add_argument(
        '--parallel-workers',
        type=int,
        help='Number of tables exported at a time (default: 1)'
    )
    # Report and observability options
    export_parser.add_argument(
        '--report',
        help='Output file path for the export report'
    )
    export_parser.add_argument(
        '--report-format',
        choices=['console', 'json', 'csv'],
        default='console',
        help='Report format (default: console)'
    )
    export_parser.add_argument(
        '--metrics-file',
        help='Write Prometheus metrics to this .prom file when done'
    )
    export_parser.add_argument(
        '--metrics-port',
        type=int,
        help='Serve Prometheus metrics on this port while exporting'
    )
    export_parser.add_argument(
        '--otlp-endpoint',
        help='Send traces to this OTLP collector (default: OTLP_ENDPOINT)'
    )
    export_parser.add_argument(
        '--trace-console',
        action='store_true',
        help='Print trace spans to the console'
    )

    # ========== Report command ==========
    report_parser = subparsers.add_parser('report', help='Render a report from a previous run')
    report_parser.add_argument(
        '--input',
        required=True,
        help='Input JSON report file'
    )
    report_parser.add_argument(
        '--format',
        choices=['console', 'json', 'csv'],
        default='console',
        help='Output format (default: console)'
    )
    report_parser.add_argument(
        '--output',
        help='Output file path (required for json and csv formats)'
    )

    return parser
