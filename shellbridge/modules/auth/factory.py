"""
Authentication Factory following Black Box Design principles.

This factory:
- Constructs the secret validators based on configuration
- Wires dependencies together
- Returns only the gate (hiding implementation)
"""

import logging
from typing import Any, List, Optional

from ...config.provider import ConfigProvider
from .gate import AccessGate
from .validators import (
    CompositeSecretValidator,
    RedisSecretValidator,
    SecretValidator,
    StaticSecretValidator,
)

logger = logging.getLogger(__name__)


class AuthFactory:
    """
    Factory for building the access gate.

    This is the composition root that:
    - Creates all validators
    - Wires them together via dependency injection
    - Returns only the public interface
    """

    @staticmethod
    def build(
        config_provider: ConfigProvider,
        redis_client: Optional[Any] = None
    ) -> AccessGate:
        """
        Build the access gate.

        Args:
            config_provider: Configuration provider
            redis_client: Optional Redis client holding issued secrets

        Returns:
            AccessGate (hides all validator details)
        """
        gate_config = config_provider.get_gate_config()
        validators: List[SecretValidator] = []

        if gate_config.secret_token:
            validators.append(StaticSecretValidator(gate_config.secret_token))
            logger.info("Access gate accepts the static SECRET_TOKEN")

        if gate_config.redis_enabled and redis_client is not None:
            validators.append(RedisSecretValidator(redis_client, gate_config.redis_key_prefix))
            logger.info(f"Access gate accepts secrets stored under {gate_config.redis_key_prefix}*")

        if not validators:
            logger.warning("No secret configured - every path is authorized")
            return AccessGate(None, health_path=gate_config.health_path)

        validator: SecretValidator = (
            validators[0] if len(validators) == 1 else CompositeSecretValidator(validators)
        )
        return AccessGate(validator, health_path=gate_config.health_path)
