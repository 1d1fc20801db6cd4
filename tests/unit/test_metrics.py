"""
Unit tests for export metrics and their publisher.
"""

from unittest.mock import patch

from prometheus_client import CollectorRegistry

from utils.metrics import ExportMetrics, MetricsPublisher


class TestExportMetrics:
    """Tests for ExportMetrics"""

    def test_own_registry_per_instance(self):
        first = ExportMetrics()
        second = ExportMetrics()
        assert first.registry is not second.registry

    def test_record_table(self):
        registry = CollectorRegistry()
        metrics = ExportMetrics(registry=registry)

        metrics.record_table(
            "DOCS", 10, 1.5,
            lob_counts={"binary": 3, "character": 0},
            lob_bytes={"binary": 4096, "character": 0},
        )

        assert registry.get_sample_value("schema_export_tables_total", {"status": "exported"}) == 1
        assert registry.get_sample_value(
            "schema_export_rows_exported_total", {"table_name": "DOCS"}
        ) == 10
        assert registry.get_sample_value("schema_export_lobs_exported_total", {"kind": "binary"}) == 3
        assert registry.get_sample_value("schema_export_lobs_exported_total", {"kind": "character"}) is None
        assert registry.get_sample_value("schema_export_lob_bytes_total", {"kind": "binary"}) == 4096
        assert registry.get_sample_value(
            "schema_export_table_duration_seconds_count", {"table_name": "DOCS"}
        ) == 1

    def test_record_empty_table(self):
        registry = CollectorRegistry()
        metrics = ExportMetrics(registry=registry)

        metrics.record_table("EMPTY", 0, 0.01)

        assert registry.get_sample_value("schema_export_tables_total", {"status": "empty"}) == 1
        assert registry.get_sample_value(
            "schema_export_rows_exported_total", {"table_name": "EMPTY"}
        ) is None

    def test_record_skipped_table(self):
        registry = CollectorRegistry()
        metrics = ExportMetrics(registry=registry)

        metrics.record_skipped_table("overflow")
        metrics.record_skipped_table("overflow")

        assert registry.get_sample_value("schema_export_tables_total", {"status": "overflow"}) == 2


class TestMetricsPublisher:
    """Tests for MetricsPublisher"""

    def test_start_without_port_is_noop(self):
        with patch("utils.metrics.publisher.start_http_server") as mock_server:
            MetricsPublisher(CollectorRegistry()).start()

        mock_server.assert_not_called()

    def test_start_once(self):
        registry = CollectorRegistry()
        publisher = MetricsPublisher(registry, port=9108)

        with patch("utils.metrics.publisher.start_http_server") as mock_server:
            publisher.start()
            publisher.start()

        mock_server.assert_called_once_with(9108, registry=registry)

    def test_write_textfile(self, tmp_path):
        metrics = ExportMetrics()
        metrics.record_table("T", 5, 0.2)
        textfile = tmp_path / "collector" / "export.prom"

        MetricsPublisher(metrics.registry, textfile=str(textfile)).write()

        content = textfile.read_text(encoding="utf-8")
        assert 'schema_export_rows_exported_total{table_name="T"} 5.0' in content

    def test_write_without_textfile(self):
        with patch("utils.metrics.publisher.write_to_textfile") as mock_write:
            MetricsPublisher(CollectorRegistry()).write()

        mock_write.assert_not_called()
