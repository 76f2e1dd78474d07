"""
Shared metrics configuration for the mdlabels web proxy.
"""

from prometheus_client import Counter, Histogram, Info, CollectorRegistry, generate_latest
from typing import Dict, Any, Optional


class MetricsCollector:
    """Centralized metrics collector for services.

    Each collector owns its registry so several applications can live in one
    process (tests build a fresh app per case).
    """

    def __init__(self, service_name: str, version: str = "dev", registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.version = version
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

        self._metrics["service_info"] = Info(
            "service",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": self.version
        })

        # HTTP metrics
        self._metrics["http_requests_total"] = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self.registry
        )

        self._metrics["http_request_duration_seconds"] = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=self.registry
        )

        # Upstream metrics
        self._metrics["upstream_requests_total"] = Counter(
            "upstream_requests_total",
            "Total requests sent to upstream APIs",
            ["upstream", "status"],
            registry=self.registry
        )

        self._metrics["rate_gate_wait_seconds"] = Histogram(
            "rate_gate_wait_seconds",
            "Time spent waiting on the outbound rate gate",
            ["upstream"],
            buckets=(0.0, 0.005, 0.01, 0.02, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Record HTTP request metrics."""
        self._metrics["http_requests_total"].labels(
            method=method,
            endpoint=endpoint,
            status_code=str(status_code)
        ).inc()

        self._metrics["http_request_duration_seconds"].labels(
            method=method,
            endpoint=endpoint
        ).observe(duration)

    def record_upstream_request(self, upstream: str, status: str):
        """Record an outbound call; status is the HTTP code or 'error'."""
        self._metrics["upstream_requests_total"].labels(upstream=upstream, status=status).inc()

    def record_rate_gate_wait(self, upstream: str, waited: float):
        self._metrics["rate_gate_wait_seconds"].labels(upstream=upstream).observe(waited)

    def export(self) -> bytes:
        """Render the registry in Prometheus text format."""
        return generate_latest(self.registry)


def get_metrics_collector(service_name: str, version: str = "dev",
                          registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, version, registry)
