"""Secret validators following Black Box Design principles."""

import logging
import secrets
from typing import Any, List, Protocol

logger = logging.getLogger(__name__)


class SecretValidator(Protocol):
    """Protocol for URL secret validation - allows swappable implementations."""

    async def is_authorized(self, token: str) -> bool:
        """
        Check whether a URL secret authorizes a streaming session.

        Args:
            token: Opaque secret taken from the request path

        Returns:
            True if the secret is currently valid
        """
        ...


class StaticSecretValidator:
    """A single secret issued out of band through the environment."""

    def __init__(self, secret: str):
        if not secret:
            raise ValueError("Static secret must not be empty")
        self._secret = secret

    async def is_authorized(self, token: str) -> bool:
        if not token:
            return False
        # Use constant-time comparison for security
        return secrets.compare_digest(token.encode("utf-8"), self._secret.encode("utf-8"))


class RedisSecretValidator:
    """
    Secrets issued by the dashboard and stored in Redis.

    A secret is valid while `{prefix}{token}` exists and has not been
    marked revoked.
    """

    REVOKED = "revoked"

    def __init__(self, redis_client: Any, key_prefix: str = "mcp:secret:"):
        self.redis = redis_client
        self.key_prefix = key_prefix

    async def is_authorized(self, token: str) -> bool:
        if not token:
            return False
        try:
            value = await self.redis.get(f"{self.key_prefix}{token}")
        except Exception as e:
            logger.error(f"Secret lookup failed, denying access: {e}")
            return False

        if value is None:
            return False
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value != self.REVOKED


class CompositeSecretValidator:
    """Accepts a secret if any of its validators does."""

    def __init__(self, validators: List[SecretValidator]):
        self.validators = list(validators)

    async def is_authorized(self, token: str) -> bool:
        for validator in self.validators:
            if await validator.is_authorized(token):
                return True
        return False
