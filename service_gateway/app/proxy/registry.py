"""
Service registry: backend identifier to base URL.
"""

from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional
from urllib.parse import urlsplit

from shared.config import GatewayConfig


class ServiceRegistry:
    """Immutable mapping of service identifiers to backend base URLs.

    Built once at startup and shared read-only by every request.
    """

    __slots__ = ("_urls",)

    def __init__(self, urls: Mapping[str, str]):
        normalized: Dict[str, str] = {}
        for service, url in urls.items():
            if not url:
                raise ValueError(f"Empty base URL for service {service!r}")
            normalized[service] = url.rstrip("/")
        self._urls = MappingProxyType(normalized)

    @classmethod
    def from_config(cls, config: GatewayConfig) -> "ServiceRegistry":
        return cls(config.service_urls())

    def get(self, service: str) -> Optional[str]:
        return self._urls.get(service)

    def host_for(self, service: str) -> Optional[str]:
        """Host (and port, if any) of the service's base URL."""
        url = self._urls.get(service)
        if url is None:
            return None
        return urlsplit(url).netloc

    def as_dict(self) -> Dict[str, str]:
        return dict(self._urls)

    def __contains__(self, service: object) -> bool:
        return service in self._urls

    def __iter__(self) -> Iterator[str]:
        return iter(self._urls)

    def __len__(self) -> int:
        return len(self._urls)

    def __repr__(self) -> str:
        return f"ServiceRegistry({dict(self._urls)!r})"
