"""
Report formatting and export utilities.

This module provides functions to write export run reports
in various formats: JSON, CSV, and console/terminal output.
"""

import csv
import json
from typing import Any


def export_report_json(report: dict[str, Any], output_path: str) -> None:
    """
    Export report to JSON file

    Args:
        report: Report dictionary
        output_path: Path to output file
    """
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(report, f, indent=2)


def export_report_csv(report: dict[str, Any], output_path: str) -> None:
    """
    Export report to CSV file, one row per table

    Args:
        report: Report dictionary
        output_path: Path to output file
    """
    with open(output_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)

        writer.writerow([
            "Table",
            "Status",
            "Rows",
            "Insert Script",
            "Checks",
            "Binary LOBs",
            "Character LOBs",
            "LOB Bytes",
            "Duration (s)",
        ])

        for table in report.get("tables", []):
            lob_counts = table.get("lob_counts", {})
            writer.writerow([
                table.get("table", ""),
                table.get("status", ""),
                table.get("row_count", 0),
                table.get("insert_script") or "",
                table.get("check_count", 0),
                lob_counts.get("binary", 0),
                lob_counts.get("character", 0),
                sum(table.get("lob_bytes", {}).values()),
                f"{table.get('duration_seconds', 0.0):.3f}",
            ])

        for table in report.get("skipped", []):
            writer.writerow([
                table.get("table", ""),
                table.get("reason", ""),
                "", "", "", "", "", "", "",
            ])


def format_report_console(report: dict[str, Any]) -> str:
    """
    Format report for console output

    Args:
        report: Report dictionary

    Returns:
        Formatted string for console display
    """
    lines = []

    lines.append("=" * 80)
    lines.append("EXPORT REPORT")
    lines.append("=" * 80)
    lines.append(f"Status: {report['status']}")
    if report.get('run_id'):
        lines.append(f"Run: {report['run_id']}")
    lines.append(f"Timestamp: {report['timestamp']}")
    lines.append(f"Duration: {report['duration_seconds']:.2f}s")
    lines.append(f"Total Tables: {report['total_tables']}")
    lines.append(f"Tables Exported: {report['tables_exported']}")
    lines.append(f"Empty Tables: {report['tables_empty']}")
    lines.append(f"Skipped Tables: {report['tables_skipped']}")
    lines.append(f"Total Rows: {report['total_rows']:,}")
    lines.append(f"Check Statements: {report['check_count']}")
    for kind, count in sorted(report.get('lob_counts', {}).items()):
        size = report.get('lob_bytes', {}).get(kind, 0)
        lines.append(f"LOBs ({kind}): {count:,} ({size:,} bytes)")
    lines.append("")

    lines.append("SUMMARY")
    lines.append("-" * 80)
    lines.append(report['summary'])
    lines.append("")

    if report['tables']:
        lines.append("TABLES")
        lines.append("-" * 80)
        for table in report['tables']:
            lines.append(
                f"{table['table']:<40} {table['status']:<10} "
                f"{table['row_count']:>12,} rows  {table['duration_seconds']:.2f}s"
            )
        lines.append("")

    if report['skipped']:
        lines.append("SKIPPED")
        lines.append("-" * 80)
        for table in report['skipped']:
            lines.append(f"{table['table']:<40} {table['reason']}")
        lines.append("")

    lines.append("=" * 80)

    return "\n".join(lines)
