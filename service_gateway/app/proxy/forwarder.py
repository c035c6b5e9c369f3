"""
Request forwarding: resolve the backend, sanitize headers, relay the call.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Dict, Optional

import httpx

from shared.errors import ProxyError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from .classifier import ErrorClassifier
from .headers import HeaderInput, HeaderSanitizer
from .registry import ServiceRegistry
from .routing import RouteResolver

ALLOWED_METHODS = frozenset({"GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"})
FALLBACK_METHOD = "GET"

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_MAX_CONCURRENCY = 100


@dataclass(frozen=True)
class ForwardResponse:
    """A backend answer relayed as-is (any status below 500)."""

    service: str
    status_code: int
    content: bytes
    content_type: Optional[str] = None


class Forwarder:
    """Forward one inbound request to its backend, exactly once.

    Failures are raised as ``ProxyError``; nothing is retried.
    """

    def __init__(
        self,
        registry: ServiceRegistry,
        client: httpx.AsyncClient,
        resolver: Optional[RouteResolver] = None,
        sanitizer: Optional[HeaderSanitizer] = None,
        classifier: Optional[ErrorClassifier] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.registry = registry
        self.client = client
        self.resolver = resolver or RouteResolver()
        self.sanitizer = sanitizer or HeaderSanitizer()
        self.classifier = classifier or ErrorClassifier()
        self.timeout = timeout
        self.metrics = metrics
        self.logger = get_logger("gateway.forwarder")
        self._slots: Dict[str, asyncio.Semaphore] = {
            service: asyncio.Semaphore(max_concurrency) for service in registry
        }

    def resolve(self, path: str) -> str:
        return self.resolver.resolve(path)

    def sanitize(self, headers: HeaderInput, service: str) -> Dict[str, str]:
        host = self.registry.host_for(service)
        if host is None:
            raise self.classifier.not_found(service)
        return self.sanitizer.sanitize(headers, host)

    def normalize_method(self, method: str) -> str:
        """Upper-case ``method``; verbs outside the allow-list become GET.

        Unknown verbs are treated as a client data-entry slip rather than an
        error, so the call still goes out.
        """
        normalized = (method or "").strip().upper()
        if normalized in ALLOWED_METHODS:
            return normalized
        self.logger.warning(
            "Unsupported HTTP method, falling back",
            method=method,
            fallback=FALLBACK_METHOD,
        )
        return FALLBACK_METHOD

    def build_url(self, service: str, original_path: str) -> str:
        """Base URL of ``service`` followed by the original path and query, verbatim."""
        base_url = self.registry.get(service)
        if base_url is None:
            raise self.classifier.not_found(service)
        return f"{base_url}{original_path}"

    async def forward(self, original_path: str, method: str, body: Optional[bytes], headers: HeaderInput) -> ForwardResponse:
        """Resolve the backend from the path alone, then ``send``."""
        path = original_path.split("?", 1)[0]
        return await self.send(self.resolve(path), original_path, method, body, headers)

    async def send(
        self,
        service_id: str,
        original_path: str,
        method: str,
        body: Optional[bytes],
        headers: HeaderInput,
    ) -> ForwardResponse:
        if service_id not in self.registry:
            error = self.classifier.not_found(service_id)
            self._record_error(error, service_id)
            raise error

        url = self.build_url(service_id, original_path)
        verb = self.normalize_method(method)
        upstream_headers = self.sanitize(headers, service_id)

        start_time = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._request(service_id, verb, url, body, upstream_headers),
                timeout=self.timeout,
            )
            if response.status_code >= 500:
                raise httpx.HTTPStatusError(
                    f"Upstream {service_id} responded with {response.status_code}",
                    request=response.request,
                    response=response,
                )
        except Exception as exc:
            duration = time.monotonic() - start_time
            error = self.classifier.classify(exc, service=service_id)
            self._record_error(error, service_id, method=verb, duration=duration)
            self.logger.error(
                "Forwarding failed",
                service=service_id,
                method=verb,
                url=url,
                kind=error.kind.value,
                status_code=error.http_status,
                error=str(exc),
                duration_ms=round(duration * 1000, 2),
            )
            raise error from exc

        duration = time.monotonic() - start_time
        if self.metrics:
            self.metrics.record_upstream_request(service_id, verb, "success", duration)
        self.logger.info(
            "Request forwarded",
            service=service_id,
            method=verb,
            url=url,
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 2),
        )
        return ForwardResponse(
            service=service_id,
            status_code=response.status_code,
            content=response.content,
            content_type=response.headers.get("content-type"),
        )

    async def _request(self, service_id: str, verb: str, url: str, body: Optional[bytes],
                       headers: Dict[str, str]) -> httpx.Response:
        # Waiting for a slot counts against the same deadline as the call.
        async with self._slots[service_id]:
            return await self.client.request(
                verb,
                url,
                content=body or None,
                headers=headers,
                timeout=self.timeout,
            )

    def _record_error(self, error: ProxyError, service: str, method: Optional[str] = None,
                      duration: Optional[float] = None):
        if not self.metrics:
            return
        self.metrics.record_proxy_error(error.kind.value, service)
        if method is not None and duration is not None:
            self.metrics.record_upstream_request(service, method, "error", duration)
