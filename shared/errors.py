"""
Shared error handling for the Proxy Gateway.

Every failure the gateway reports is a ``GatewayException``. Forwarding
failures are always a ``ProxyError``, whose ``kind`` is one of a fixed set of
``ProxyErrorKind`` values.
"""

from enum import Enum
from typing import Any, Optional

from opentelemetry import trace
from pydantic import BaseModel

INTERNAL_ERROR_MESSAGE = "Internal server error"


class ErrorResponse(BaseModel):
    """Standard error response format."""

    trace_id: Optional[str] = None
    code: str
    message: str
    data: Optional[Any] = None


def safe_status(status: Any) -> int:
    """Return ``status`` if it is a usable error status, otherwise 500."""
    if isinstance(status, int) and not isinstance(status, bool) and 400 <= status <= 599:
        return status
    return 500


def _current_trace_id() -> Optional[str]:
    current_span = trace.get_current_span()
    if current_span and current_span.is_recording():
        span_context = current_span.get_span_context()
        if span_context.trace_id != 0:
            return f"{span_context.trace_id:032x}"
    return None


class GatewayException(Exception):
    """Base exception for gateway errors."""

    def __init__(self, code: str, message: str, data: Optional[Any] = None, status_code: int = 500):
        self.code = code
        self.message = message
        self.data = data
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            trace_id=_current_trace_id(),
            code=self.code,
            message=self.message,
            data=self.data
        )


class ProxyErrorKind(str, Enum):
    """Classification of a failed forward."""
    NOT_FOUND = "NOT_FOUND"                      # Unknown service identifier
    BAD_GATEWAY = "BAD_GATEWAY"                  # Backend answered with a failure status
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"  # Backend unreachable
    TIMEOUT = "TIMEOUT"                          # Backend too slow
    INTERNAL = "INTERNAL"                        # Anything unanticipated


class ProxyError(GatewayException):
    """A classified forwarding failure.

    ``cause`` keeps the raw exception for logging only; it is never part of
    the rendered response.
    """

    def __init__(
        self,
        kind: ProxyErrorKind,
        http_status: int,
        message: str,
        data: Optional[Any] = None,
        cause: Optional[BaseException] = None,
    ):
        self.kind = kind
        self.http_status = http_status
        self.cause = cause
        super().__init__(kind.value, message, data=data, status_code=http_status)

    def to_response(self) -> ErrorResponse:
        if self.kind is ProxyErrorKind.INTERNAL:
            return ErrorResponse(
                trace_id=_current_trace_id(),
                code=self.code,
                message=INTERNAL_ERROR_MESSAGE,
            )
        return super().to_response()

    def __repr__(self) -> str:
        return f"ProxyError(kind={self.kind.value}, http_status={self.http_status}, message={self.message!r})"
