"""
Shared configuration management for the Proxy Gateway.
"""

from typing import Dict, List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")


class GatewayConfig(BaseConfig):
    """Gateway configuration, read once at startup."""

    host: str = "0.0.0.0"
    port: int = 8000

    # Backend services
    auth_service_url: str = Field(default="http://localhost:3001")
    training_service_url: str = Field(default="http://localhost:3002")
    guards_service_url: str = Field(default="http://localhost:3004")
    users_service_url: str = Field(default="http://localhost:3005")

    # Forwarding
    proxy_timeout_seconds: float = Field(default=10.0, gt=0)
    health_timeout_seconds: float = Field(default=5.0, gt=0)
    proxy_max_concurrency_per_service: int = Field(default=100, ge=1)
    proxy_preserve_upstream_status: bool = Field(default=False)

    # Paths served locally, never proxied
    local_prefixes: List[str] = Field(default_factory=lambda: ["/cookie"])

    # CORS
    cors_allow_origin: str = Field(default="http://localhost:3000")

    def service_urls(self) -> Dict[str, str]:
        """Base URLs of every proxied backend, keyed by service identifier."""
        return {
            "auth": self.auth_service_url,
            "training": self.training_service_url,
            "guards": self.guards_service_url,
            "users": self.users_service_url,
        }


def get_config(**overrides) -> GatewayConfig:
    """Get gateway configuration."""
    return GatewayConfig(**overrides)
