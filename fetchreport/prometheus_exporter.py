import logging
import threading
from prometheus_client import CollectorRegistry, Counter, Gauge, start_http_server

from .metrics import Metrics


logger = logging.getLogger(__name__)


class PrometheusExporter:
    def __init__(self, metrics: Metrics, port: int = 8000, registry: CollectorRegistry | None = None) -> None:
        self.metrics = metrics
        self.port = port
        self.registry = registry or CollectorRegistry()
        self._server_thread: threading.Thread | None = None
        self._stop_event = threading.Event()

        self.requests_total = Counter(
            'fetchreport_requests_total', 'Total number of fetches attempted', registry=self.registry
        )
        self.bytes_total = Counter(
            'fetchreport_bytes_total', 'Total number of body bytes downloaded', registry=self.registry
        )
        self.failures_total = Counter(
            'fetchreport_failures_total', 'Failed fetches by kind', ['kind'], registry=self.registry
        )
        self.avg_fetch_duration_seconds = Gauge(
            'fetchreport_avg_fetch_duration_seconds', 'Average fetch duration in seconds', registry=self.registry
        )

        self._last = {"requests": 0, "bytes": 0, "transport": 0, "status": 0, "parse": 0}

    def start(self) -> None:
        start_http_server(self.port, registry=self.registry)
        logger.info("Prometheus metrics server started on port %d", self.port)

        self._server_thread = threading.Thread(
            target=self._update_metrics_loop,
            name="prometheus-updater",
            daemon=True
        )
        self._server_thread.start()

    def _update_metrics_loop(self) -> None:
        while not self._stop_event.is_set():
            self.update()
            self._stop_event.wait(5.0)

    def update(self) -> None:
        totals, _elapsed = self.metrics.snapshot()
        current = {
            "requests": totals.requests,
            "bytes": totals.bytes,
            "transport": totals.transport_errors,
            "status": totals.status_errors,
            "parse": totals.parse_errors,
        }
        deltas = {key: current[key] - self._last[key] for key in current}

        if deltas["requests"] > 0:
            self.requests_total.inc(deltas["requests"])
        if deltas["bytes"] > 0:
            self.bytes_total.inc(deltas["bytes"])
        for kind in ("transport", "status", "parse"):
            if deltas[kind] > 0:
                self.failures_total.labels(kind=kind).inc(deltas[kind])

        if totals.requests > 0:
            self.avg_fetch_duration_seconds.set(totals.fetch_ms_sum / totals.requests / 1000.0)

        self._last = current

    def stop(self) -> None:
        self._stop_event.set()
        if self._server_thread:
            self._server_thread.join(timeout=2.0)
        # final flush so short runs are not lost between polls
        self.update()
