"""
Unit tests for export reports and their formatters.
"""

import csv
import json

from schema_export.report import (
    export_report_csv,
    export_report_json,
    format_report_console,
    generate_export_report,
)
from schema_export.report.generator import ReportStatus
from schema_export.table import TableExportResult


def sample_results():
    return [
        TableExportResult(
            "DOCS", 2, "insert_into_docs.sql", ["a", "b", "c"],
            lob_counts={"binary": 2, "character": 1},
            lob_bytes={"binary": 100, "character": 20},
            duration_seconds=0.5,
        ),
        TableExportResult("EMPTY", 0),
        TableExportResult(
            "ORDERS", 1000, "insert_into_orders.sql", ["x"],
            lob_counts={"binary": 0, "character": 0},
            lob_bytes={"binary": 0, "character": 0},
        ),
    ]


class TestGenerateExportReport:
    """Tests for generate_export_report"""

    def test_totals(self):
        report = generate_export_report(
            sample_results(), [{"table": "SYS_IOT_OVER_1", "reason": "overflow"}], 3.25,
        )

        assert report["status"] == ReportStatus.SUCCESS
        assert report["total_tables"] == 4
        assert report["tables_exported"] == 2
        assert report["tables_empty"] == 1
        assert report["tables_skipped"] == 1
        assert report["total_rows"] == 1002
        assert report["check_count"] == 4
        assert report["lob_counts"] == {"binary": 2, "character": 1}
        assert report["lob_bytes"] == {"binary": 100, "character": 20}
        assert [t["status"] for t in report["tables"]] == ["exported", "empty", "exported"]
        assert report["duration_seconds"] == 3.25
        assert "1,002 rows" in report["summary"]

    def test_no_tables(self):
        report = generate_export_report([])

        assert report["status"] == ReportStatus.NO_DATA
        assert report["total_tables"] == 0
        assert report["tables"] == []


class TestFormatters:
    """Tests for the report formatters"""

    def test_json_round_trip(self, tmp_path):
        report = generate_export_report(sample_results())
        path = tmp_path / "report.json"

        export_report_json(report, str(path))

        assert json.loads(path.read_text(encoding="utf-8")) == report

    def test_csv_rows(self, tmp_path):
        report = generate_export_report(
            sample_results(), [{"table": "AUDIT_LOG", "reason": "excluded"}],
        )
        path = tmp_path / "report.csv"

        export_report_csv(report, str(path))

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows[0][0] == "Table"
        assert rows[1][:8] == ["DOCS", "exported", "2", "insert_into_docs.sql", "3", "2", "1", "120"]
        assert rows[2][:4] == ["EMPTY", "empty", "0", ""]
        assert rows[4][:2] == ["AUDIT_LOG", "excluded"]

    def test_console(self):
        report = generate_export_report(
            sample_results(), [{"table": "AUDIT_LOG", "reason": "excluded"}],
        )

        text = format_report_console(report)

        assert "EXPORT REPORT" in text
        assert "Status: SUCCESS" in text
        assert "Total Rows: 1,002" in text
        assert "LOBs (binary): 2 (100 bytes)" in text
        assert "SKIPPED" in text
        assert "AUDIT_LOG" in text

    def test_console_without_tables(self):
        text = format_report_console(generate_export_report([]))

        assert "TABLES" not in text
        assert "No table was exported." in text
