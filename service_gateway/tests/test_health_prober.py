"""
Unit tests for the health prober.
"""

import asyncio

import httpx
import pytest

from service_gateway.app.proxy.health import HealthProber
from service_gateway.app.proxy.registry import ServiceRegistry

REGISTRY = ServiceRegistry({"auth": "http://auth.local:3001", "users": "http://users.local:3005"})


def _prober(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HealthProber(REGISTRY, client)


class TestHealthProber:
    """Test cases for HealthProber."""

    @pytest.mark.asyncio
    async def test_healthy_backend(self):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, json={"status": "ok"})

        assert await _prober(handler).probe("auth") is True
        assert seen == ["http://auth.local:3001/health"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [201, 204, 301, 404, 500, 503])
    async def test_non_200_is_unhealthy(self, status_code):
        assert await _prober(lambda request: httpx.Response(status_code)).probe("auth") is False

    @pytest.mark.asyncio
    async def test_connection_failure_is_unhealthy(self):
        def refuse(request):
            raise httpx.ConnectError("Connection refused", request=request)

        assert await _prober(refuse).probe("auth") is False

    @pytest.mark.asyncio
    async def test_timeout_is_unhealthy(self):
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        assert await _prober(slow).probe("users") is False

    @pytest.mark.asyncio
    async def test_unexpected_error_is_unhealthy(self):
        def broken(request):
            raise RuntimeError("boom")

        assert await _prober(broken).probe("users") is False

    @pytest.mark.asyncio
    async def test_unknown_service_is_unhealthy(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200)

        assert await _prober(handler).probe("billing") is False
        assert calls == []

    @pytest.mark.asyncio
    async def test_probe_all(self):
        def handler(request):
            return httpx.Response(200 if request.url.host == "auth.local" else 500)

        assert await _prober(handler).probe_all() == {"auth": "ok", "users": "unavailable"}

    @pytest.mark.asyncio
    async def test_probe_all_runs_concurrently(self):
        started = []
        all_started = asyncio.Event()

        async def handler(request):
            started.append(request.url.host)
            if len(started) == len(REGISTRY):
                all_started.set()
            # Completes only if every probe is in flight at once.
            await all_started.wait()
            return httpx.Response(200)

        result = await asyncio.wait_for(_prober(handler).probe_all(), timeout=1.0)

        assert result == {"auth": "ok", "users": "ok"}
