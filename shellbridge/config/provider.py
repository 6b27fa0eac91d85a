"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import Optional, Protocol

GITHUB_TOKEN_ENDPOINT = "https://github.com/login/oauth/access_token"
DEFAULT_TOKEN_LIFETIME = 8 * 60 * 60
DEFAULT_REFRESH_WINDOW = 5 * 60


@dataclass
class CredentialConfig:
    """Upstream credential configuration."""
    client_id: Optional[str]
    client_secret: Optional[str]
    access_token: str
    refresh_token: str
    token_endpoint: str = GITHUB_TOKEN_ENDPOINT
    refresh_window: float = DEFAULT_REFRESH_WINDOW
    default_lifetime: int = DEFAULT_TOKEN_LIFETIME
    initial_expires_in: int = DEFAULT_TOKEN_LIFETIME

    @property
    def can_refresh(self) -> bool:
        """Check if a refresh token is available."""
        return bool(self.refresh_token)


@dataclass
class GateConfig:
    """Access gate configuration."""
    secret_token: Optional[str]
    redis_enabled: bool
    redis_key_prefix: str = "mcp:secret:"
    health_path: str = "/health"

    @property
    def is_open(self) -> bool:
        """True when no secret source is configured and every path is allowed."""
        return not self.secret_token and not self.redis_enabled


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_credential_config(self) -> CredentialConfig:
        """Get credential configuration."""
        ...

    def get_gate_config(self) -> GateConfig:
        """Get access gate configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_credential_config(self) -> CredentialConfig:
        """Get credential configuration from environment variables."""
        return CredentialConfig(
            client_id=os.getenv("GITHUB_CLIENT_ID"),
            client_secret=os.getenv("GITHUB_CLIENT_SECRET"),
            access_token=os.getenv("GITHUB_ACCESS_TOKEN", ""),
            refresh_token=os.getenv("GITHUB_REFRESH_TOKEN", ""),
            token_endpoint=os.getenv("GITHUB_TOKEN_ENDPOINT", GITHUB_TOKEN_ENDPOINT),
            refresh_window=float(os.getenv("TOKEN_REFRESH_WINDOW", str(DEFAULT_REFRESH_WINDOW))),
            default_lifetime=int(os.getenv("TOKEN_DEFAULT_LIFETIME", str(DEFAULT_TOKEN_LIFETIME))),
            initial_expires_in=int(
                os.getenv("GITHUB_TOKEN_EXPIRES_IN", str(DEFAULT_TOKEN_LIFETIME))
            ),
        )

    def get_gate_config(self) -> GateConfig:
        """Get access gate configuration from environment variables."""
        return GateConfig(
            secret_token=os.getenv("SECRET_TOKEN") or None,
            redis_enabled=bool(os.getenv("REDIS_URL")),
            redis_key_prefix=os.getenv("SECRET_KEY_PREFIX", "mcp:secret:"),
        )
