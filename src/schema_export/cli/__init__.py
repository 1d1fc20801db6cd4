"""
Command-line interface for the schema export.

Available commands:
- export: Export an Oracle schema into MySQL load scripts
- report: Render a report from a previous run
"""

import sys

from utils.logging import LoggingSettings, setup_logging, shutdown_logging

from .commands import build_exporter, cmd_export, cmd_report, write_report
from .parser import create_parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the schema-export CLI"""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Each --log-* option wins over its LOG_* variable
    settings = LoggingSettings.from_env().with_options(
        level=args.log_level,
        log_file=args.log_file,
        json_format=args.log_json,
    )
    run_id = setup_logging(settings)

    try:
        if args.command == 'export':
            cmd_export(args, run_id=run_id)
        elif args.command == 'report':
            cmd_report(args)
        else:
            parser.print_help()
            sys.exit(1)
    finally:
        shutdown_logging()


__all__ = [
    'main',
    'cmd_export',
    'cmd_report',
    'build_exporter',
    'write_report',
    'create_parser',
]


if __name__ == '__main__':
    main()
