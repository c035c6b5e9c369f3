"""
Shared metrics configuration for the Proxy Gateway.
"""

from typing import Any, Dict, Optional, Tuple

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, Info, generate_latest


class MetricsCollector:
    """Centralized metrics collector for services.

    Each collector owns its registry so several service instances (tests,
    embedded apps) can coexist in one process.
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

        self._metrics["service_info"] = Info(
            "service_info",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        # HTTP metrics
        self._metrics["http_requests_total"] = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "status_code"],
            registry=self.registry
        )

        self._metrics["http_request_duration_seconds"] = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method"],
            registry=self.registry
        )

        # Health check metrics
        self._metrics["health_check_total"] = Counter(
            "health_check_total",
            "Total health check requests",
            ["status"],
            registry=self.registry
        )

        self._setup_proxy_metrics()

    def _setup_proxy_metrics(self):
        """Set up forwarding metrics."""
        self._metrics["upstream_requests_total"] = Counter(
            "upstream_requests_total",
            "Total forwarded requests",
            ["service", "method", "outcome"],
            registry=self.registry
        )

        self._metrics["upstream_request_duration_seconds"] = Histogram(
            "upstream_request_duration_seconds",
            "Forwarded request duration in seconds",
            ["service"],
            registry=self.registry
        )

        self._metrics["proxy_errors_total"] = Counter(
            "proxy_errors_total",
            "Total classified proxy errors",
            ["kind", "service"],
            registry=self.registry
        )

        self._metrics["backend_probes_total"] = Counter(
            "backend_probes_total",
            "Total backend health probes",
            ["service", "healthy"],
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def record_http_request(self, method: str, status_code: int, duration: float):
        """Record inbound HTTP request metrics."""
        self._metrics["http_requests_total"].labels(
            method=method,
            status_code=str(status_code)
        ).inc()

        self._metrics["http_request_duration_seconds"].labels(method=method).observe(duration)

    def record_health_check(self, status: str):
        """Record health check metrics."""
        self._metrics["health_check_total"].labels(status=status).inc()

    def record_upstream_request(self, service: str, method: str, outcome: str, duration: float):
        """Record one forwarded request."""
        self._metrics["upstream_requests_total"].labels(
            service=service,
            method=method,
            outcome=outcome
        ).inc()
        self._metrics["upstream_request_duration_seconds"].labels(service=service).observe(duration)

    def record_proxy_error(self, kind: str, service: str):
        """Record a classified proxy error."""
        self._metrics["proxy_errors_total"].labels(kind=kind, service=service).inc()

    def record_probe(self, service: str, healthy: bool):
        """Record a backend health probe."""
        self._metrics["backend_probes_total"].labels(
            service=service,
            healthy=str(healthy).lower()
        ).inc()

    def render(self) -> Tuple[bytes, str]:
        """Render the registry in Prometheus exposition format."""
        return generate_latest(self.registry), CONTENT_TYPE_LATEST


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
