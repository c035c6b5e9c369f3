"""
Proxy Gateway service: the dispatch layer in front of the forwarding core.
"""

from typing import Dict, Optional

import httpx
from fastapi import Request, Response
from fastapi.middleware.cors import CORSMiddleware

from shared.base_service import BaseService
from shared.config import GatewayConfig
from shared.errors import GatewayException

from service_gateway.app.proxy import (
    ErrorClassifier,
    Forwarder,
    HeaderSanitizer,
    HealthProber,
    RouteResolver,
    ServiceRegistry,
)

CORS_ALLOW_METHODS = ["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE", "OPTIONS"]
CORS_ALLOW_HEADERS = ["Content-Type", "Authorization", "Accept", "Origin", "X-Requested-With"]
CORS_MAX_AGE = 86400


class NotHandledByProxy(GatewayException):
    """Request path belongs to a locally handled sub-service."""

    def __init__(self, path: str):
        super().__init__("NOT_HANDLED", "Not handled by proxy", data={"path": path}, status_code=404)


class GatewayService(BaseService):
    """Proxy Gateway service implementation."""

    def __init__(self, config: Optional[GatewayConfig] = None, http_client: Optional[httpx.AsyncClient] = None):
        super().__init__("gateway", config)

        self._owns_http_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(follow_redirects=False)
        self.registry = ServiceRegistry.from_config(self.config)
        self.resolver = RouteResolver()
        self.forwarder = Forwarder(
            self.registry,
            self.http_client,
            resolver=self.resolver,
            sanitizer=HeaderSanitizer(),
            classifier=ErrorClassifier(),
            timeout=self.config.proxy_timeout_seconds,
            max_concurrency=self.config.proxy_max_concurrency_per_service,
            metrics=self.metrics,
        )
        self.health_prober = HealthProber(
            self.registry,
            self.http_client,
            timeout=self.config.health_timeout_seconds,
            metrics=self.metrics,
        )
        self.local_prefixes = tuple(self.config.local_prefixes)

        missing = [service for service in self.resolver.services() if service not in self.registry]
        if missing:
            self.logger.warning("Routed services missing from registry", services=missing)

        self._setup_cors()
        self._setup_proxy_route()

        self.app.state.gateway_service = self

    def _setup_cors(self):
        """Static CORS policy; preflight requests are answered here."""
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=[self.config.cors_allow_origin],
            allow_credentials=True,
            allow_methods=CORS_ALLOW_METHODS,
            allow_headers=CORS_ALLOW_HEADERS,
            max_age=CORS_MAX_AGE,
        )

    def _setup_proxy_route(self):
        # Registered last so gateway-owned routes match first. No method
        # restriction: unknown verbs reach the forwarder's fallback.
        self.app.router.add_route("/{full_path:path}", self.handle_proxy, include_in_schema=False)

    def is_local_path(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.local_prefixes)

    async def handle_proxy(self, request: Request) -> Response:
        """Dispatch one inbound request to the forwarding core."""
        if request.method == "OPTIONS":
            return Response(status_code=200)

        path = request.url.path
        if self.is_local_path(path):
            raise NotHandledByProxy(path)

        result = await self.forwarder.forward(
            _original_path(request),
            request.method,
            await request.body(),
            request.headers.items(),
        )

        status_code = result.status_code if self.config.proxy_preserve_upstream_status else 200
        return Response(
            content=result.content,
            status_code=status_code,
            media_type=result.content_type,
        )

    async def _check_dependencies(self) -> Dict[str, str]:
        return await self.health_prober.probe_all()

    async def _on_shutdown(self):
        if self._owns_http_client:
            await self.http_client.aclose()
        await super()._on_shutdown()


def _original_path(request: Request) -> str:
    """Raw path and query string exactly as received."""
    raw_path = request.scope.get("raw_path")
    if raw_path:
        path = raw_path.split(b"?", 1)[0].decode("latin-1")
    else:
        path = request.url.path
    query = request.scope.get("query_string", b"").decode("latin-1")
    return f"{path}?{query}" if query else path


def create_app(config: Optional[GatewayConfig] = None, http_client: Optional[httpx.AsyncClient] = None):
    """Create FastAPI application."""
    service = GatewayService(config=config, http_client=http_client)
    return service.app


def main():
    """Console entry point."""
    service = GatewayService()
    service.run()


if __name__ == "__main__":
    main()
