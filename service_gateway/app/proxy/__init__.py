"""
Routing-and-forwarding core of the gateway.

- registry: immutable service identifier to base URL mapping
- routing: ordered path-prefix rules
- headers: upstream header sanitization
- classifier: failure to ``ProxyError`` mapping
- forwarder: one-shot request relay
- health: backend liveness probes
"""

from .classifier import ErrorClassifier
from .forwarder import ForwardResponse, Forwarder
from .headers import HeaderSanitizer
from .health import HealthProber
from .registry import ServiceRegistry
from .routing import DEFAULT_RULES, RouteResolver, RouteRule

__all__ = [
    "DEFAULT_RULES",
    "ErrorClassifier",
    "ForwardResponse",
    "Forwarder",
    "HeaderSanitizer",
    "HealthProber",
    "RouteResolver",
    "RouteRule",
    "ServiceRegistry",
]
