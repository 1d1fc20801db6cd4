"""
Metrics publishing for Prometheus.

An export is a batch job, so metrics are primarily written to a file for the
node exporter textfile collector; an HTTP endpoint can be started as well for
scraping while a long export is running.
"""

import logging
import os

from prometheus_client import CollectorRegistry, start_http_server, write_to_textfile

logger = logging.getLogger(__name__)


class MetricsPublisher:
    """Publishes one registry over HTTP and/or to a textfile."""

    def __init__(
        self,
        registry: CollectorRegistry,
        port: int | None = None,
        textfile: str | None = None,
    ):
        """
        Args:
            registry: Registry holding the metrics to publish
            port: Port for the /metrics HTTP endpoint (None disables it)
            textfile: Path of the .prom file written by write() (None disables it)
        """
        self.registry = registry
        self.port = port
        self.textfile = textfile
        self._server_started = False

    def start(self) -> None:
        """Start the metrics HTTP server if a port was configured"""
        if self.port is None:
            return
        if self._server_started:
            logger.warning(f"Metrics server already running on port {self.port}")
            return

        start_http_server(self.port, registry=self.registry)
        self._server_started = True
        logger.info(f"Metrics server started on port {self.port}")

    def write(self) -> None:
        """Write the registry to the configured textfile"""
        if not self.textfile:
            return

        directory = os.path.dirname(self.textfile)
        if directory:
            os.makedirs(directory, exist_ok=True)
        write_to_textfile(self.textfile, self.registry)
        logger.info(f"Metrics written to {self.textfile}")
