"""
Export run report generation and formatting.

This submodule builds a summary report from the table export results, with
support for multiple output formats.
"""

from .formatters import export_report_csv, export_report_json, format_report_console
from .generator import ReportStatus, generate_export_report

__all__ = [
    'generate_export_report',
    'ReportStatus',
    'export_report_json',
    'export_report_csv',
    'format_report_console',
]
