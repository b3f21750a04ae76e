"""
Simple Prometheus metrics exporter for the Fedora benchmark.
"""

import logging
from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, start_http_server

logger = logging.getLogger(__name__)


class PrometheusExporter:
    """Exports per-action metrics of a running benchmark."""

    def __init__(self, port: int = 9100, registry: CollectorRegistry = None):
        self.port = port
        self.server_started = False
        self.registry = registry or CollectorRegistry()

        # Define metrics
        self.actions_total = Counter('fcrepo_bench_actions_total', 'Total benchmark actions',
                                     ['action', 'status'], registry=self.registry)
        self.action_duration = Histogram('fcrepo_bench_action_duration_seconds',
                                         'Duration of a single benchmark action', ['action'],
                                         registry=self.registry)
        self.bytes_total = Counter('fcrepo_bench_bytes_total', 'Total payload bytes',
                                   ['action'], registry=self.registry)
        self.threads = Gauge('fcrepo_bench_threads', 'Worker pool size', registry=self.registry)

    def start_server(self):
        """Start the Prometheus HTTP server."""
        if not self.server_started:
            try:
                start_http_server(self.port, registry=self.registry)
                self.server_started = True
                logger.info(f"Prometheus server started on port {self.port}")
            except OSError as e:
                logger.error(f"Failed to start Prometheus server: {e}")

    def record_action(self, action: str, duration_ms: int, size: int):
        """Record a successful action."""
        self.actions_total.labels(action=action, status="success").inc()
        self.action_duration.labels(action=action).observe(duration_ms / 1000.0)
        self.bytes_total.labels(action=action).inc(size)

    def record_failure(self, action: str):
        """Record a failed action."""
        self.actions_total.labels(action=action, status="failure").inc()

    def update_threads(self, num_threads: int):
        """Update worker pool size metric."""
        self.threads.set(num_threads)
