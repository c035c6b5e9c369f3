"""
Maps raw forwarding failures onto the gateway's proxy error taxonomy.
"""

import asyncio
import json
from typing import Any, Optional

import httpx

from shared.errors import INTERNAL_ERROR_MESSAGE, ProxyError, ProxyErrorKind
from shared.logging import get_logger


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, default=str)


def extract_message(body: Any, fallback: str) -> str:
    """Pick the most specific diagnostic available in an upstream error body.

    Order: ``message`` field, ``error`` field, the whole body re-serialized,
    then ``fallback``.
    """
    if isinstance(body, dict):
        for field in ("message", "error"):
            value = body.get(field)
            if value not in (None, "", [], {}):
                return _as_text(value)
        if body:
            return _as_text(body)
    elif body not in (None, "", []):
        return _as_text(body)
    return fallback


def response_body(response: httpx.Response) -> Any:
    """Parsed JSON body of ``response``, its text if not JSON, or None if empty."""
    try:
        content = response.content
    except httpx.ResponseNotRead:
        return None
    if not content:
        return None
    try:
        return json.loads(content)
    except ValueError:
        return response.text


class ErrorClassifier:
    """Classify exceptions raised while forwarding a request."""

    def __init__(self):
        self.logger = get_logger("gateway.error_classifier")

    def not_found(self, service: str) -> ProxyError:
        return ProxyError(
            ProxyErrorKind.NOT_FOUND,
            404,
            f"Service {service} not found",
        )

    def classify(self, exc: BaseException, service: Optional[str] = None) -> ProxyError:
        """Return the ``ProxyError`` for ``exc``. Never raises."""
        label = service or "upstream"

        if isinstance(exc, ProxyError):
            return exc

        if isinstance(exc, (httpx.ConnectError, ConnectionError)):
            return ProxyError(
                ProxyErrorKind.SERVICE_UNAVAILABLE,
                503,
                f"Service {label} is unavailable",
                cause=exc,
            )

        if isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError)):
            return ProxyError(
                ProxyErrorKind.TIMEOUT,
                504,
                f"Service {label} did not respond in time",
                cause=exc,
            )

        if isinstance(exc, httpx.HTTPStatusError):
            body = response_body(exc.response)
            return ProxyError(
                ProxyErrorKind.BAD_GATEWAY,
                exc.response.status_code,
                extract_message(body, str(exc)),
                data=body,
                cause=exc,
            )

        self.logger.error(
            "Unclassified forwarding failure",
            service=label,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return ProxyError(
            ProxyErrorKind.INTERNAL,
            500,
            INTERNAL_ERROR_MESSAGE,
            cause=exc,
        )
