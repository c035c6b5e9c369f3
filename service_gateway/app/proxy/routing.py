"""
Path-prefix routing to backend services.
"""

from dataclasses import dataclass
from typing import Iterable, Tuple

DEFAULT_SERVICE = "auth"


@dataclass(frozen=True)
class RouteRule:
    """Route every path starting with ``prefix`` to ``service``."""

    prefix: str
    service: str

    def matches(self, path: str) -> bool:
        return path.startswith(self.prefix)


# Evaluated top to bottom, first match wins.
DEFAULT_RULES: Tuple[RouteRule, ...] = (
    RouteRule("/api/auth", "auth"),
    RouteRule("/api/training", "training"),
    RouteRule("/user-profiles", "training"),
    RouteRule("/workouts", "training"),
    RouteRule("/api/users", "users"),
    RouteRule("/auth/validate", "guards"),
)


class RouteResolver:
    """Resolve a request path to a service identifier.

    ``resolve`` is total: paths matching no rule go to the default service.
    Locally handled prefixes are filtered by the dispatch layer and have no
    rule here.
    """

    def __init__(self, rules: Iterable[RouteRule] = DEFAULT_RULES, default_service: str = DEFAULT_SERVICE):
        self.rules: Tuple[RouteRule, ...] = tuple(rules)
        self.default_service = default_service

    def resolve(self, path: str) -> str:
        for rule in self.rules:
            if rule.matches(path):
                return rule.service
        return self.default_service

    def services(self) -> Tuple[str, ...]:
        """Every identifier ``resolve`` can return, in first-seen order."""
        seen = []
        for service in [rule.service for rule in self.rules] + [self.default_service]:
            if service not in seen:
                seen.append(service)
        return tuple(seen)
