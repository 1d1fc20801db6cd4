"""
Summary report of an export run.

The report lists what was written per table and which tables were skipped.
Data-integrity verdicts are not part of it: those only exist once checks.sql
has been run against the imported database.
"""

from datetime import UTC, datetime
from typing import Any

from ..table import TableExportResult


class ReportStatus:
    """Constants for report status values."""

    SUCCESS = "SUCCESS"
    NO_DATA = "NO_DATA"


def _sum_by_kind(results: list[TableExportResult], attribute: str) -> dict[str, int]:
    totals: dict[str, int] = {}
    for result in results:
        for kind, value in getattr(result, attribute).items():
            totals[kind] = totals.get(kind, 0) + value
    return totals


def _table_entry(result: TableExportResult) -> dict[str, Any]:
    entry = result.to_dict()
    entry["status"] = "empty" if result.is_empty else "exported"
    return entry


def generate_export_report(
    results: list[TableExportResult],
    skipped: list[dict[str, str]] | None = None,
    duration_seconds: float = 0.0,
    run_id: str | None = None,
) -> dict[str, Any]:
    """
    Generate the summary report of an export run

    Args:
        results: One result per exported table, in export order
        skipped: Skipped tables as ``{"table": ..., "reason": ...}``
        duration_seconds: Wall-clock duration of the run
        run_id: Id of the run, as stamped on its log records

    Returns:
        Dictionary containing:
        - status: SUCCESS, or NO_DATA when no table was exported
        - total_tables: Number of tables seen (exported and skipped)
        - tables_exported: Tables with rows
        - tables_empty: Included tables without rows
        - tables_skipped: Overflow and excluded tables
        - total_rows: Rows written
        - lob_counts / lob_bytes: Large objects written, by kind
        - check_count: Statements written to checks.sql
        - tables: Per-table entries
        - skipped: Skipped tables with reason
        - summary: Human-readable summary
        - run_id, duration_seconds, timestamp
    """
    skipped = list(skipped or [])
    exported = [result for result in results if not result.is_empty]
    empty = [result for result in results if result.is_empty]
    total_rows = sum(result.row_count for result in results)

    if results:
        status = ReportStatus.SUCCESS
        summary = (
            f"Exported {total_rows:,} rows from {len(exported)} table(s); "
            f"{len(empty)} empty, {len(skipped)} skipped."
        )
    else:
        status = ReportStatus.NO_DATA
        summary = "No table was exported."

    return {
        "status": status,
        "total_tables": len(results) + len(skipped),
        "tables_exported": len(exported),
        "tables_empty": len(empty),
        "tables_skipped": len(skipped),
        "total_rows": total_rows,
        "lob_counts": _sum_by_kind(results, "lob_counts"),
        "lob_bytes": _sum_by_kind(results, "lob_bytes"),
        "check_count": sum(len(result.checks) for result in results),
        "tables": [_table_entry(result) for result in results],
        "skipped": skipped,
        "summary": summary,
        "run_id": run_id,
        "duration_seconds": duration_seconds,
        "timestamp": datetime.now(UTC).isoformat(),
    }
