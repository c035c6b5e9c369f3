"""
Backend liveness probing.
"""

import asyncio
from typing import Dict, Optional

import httpx

from shared.logging import get_logger
from shared.metrics import MetricsCollector

from .registry import ServiceRegistry

HEALTH_PATH = "/health"
DEFAULT_PROBE_TIMEOUT_SECONDS = 5.0


class HealthProber:
    """Advisory health checks against registered backends. Never raises."""

    def __init__(
        self,
        registry: ServiceRegistry,
        client: httpx.AsyncClient,
        timeout: float = DEFAULT_PROBE_TIMEOUT_SECONDS,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.registry = registry
        self.client = client
        self.timeout = timeout
        self.metrics = metrics
        self.logger = get_logger("gateway.health_prober")

    async def probe(self, service_id: str) -> bool:
        """True only if ``GET /health`` on the backend answers exactly 200."""
        base_url = self.registry.get(service_id)
        if base_url is None:
            self.logger.warning("Probe for unknown service", service=service_id)
            return False

        try:
            response = await self.client.get(f"{base_url}{HEALTH_PATH}", timeout=self.timeout)
            healthy = response.status_code == 200
            if not healthy:
                self.logger.warning("Backend unhealthy", service=service_id, status_code=response.status_code)
        except httpx.HTTPError as e:
            self.logger.warning("Backend probe failed", service=service_id, error=str(e))
            healthy = False
        except Exception as e:
            self.logger.error("Backend probe error", service=service_id, error=str(e))
            healthy = False

        if self.metrics:
            self.metrics.record_probe(service_id, healthy)
        return healthy

    async def probe_all(self) -> Dict[str, str]:
        """Probe every backend concurrently."""
        services = list(self.registry)
        results = await asyncio.gather(*(self.probe(service) for service in services))
        return {
            service: "ok" if healthy else "unavailable"
            for service, healthy in zip(services, results)
        }
