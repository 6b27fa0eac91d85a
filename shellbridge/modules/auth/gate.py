"""
Path-secret access gate.

The secret itself is the capability: whoever holds `/{secret}` may open
a session and drive it. The leading path segment must equal a valid
secret exactly; `/{secret}/<suffix>` is allowed, `/{secret}<more>` is not.
"""

import logging
from enum import Enum
from typing import Optional

from .validators import SecretValidator

logger = logging.getLogger(__name__)


class GateDecision(str, Enum):
    """Outcome of a gate check."""

    HEALTH = "health"
    ALLOW = "allow"
    DENY = "deny"


def leading_segment(path: str) -> str:
    """Text between the first and second slash; empty segments are not skipped."""
    parts = path.split("/")
    return parts[1] if len(parts) > 1 else ""


class AccessGate:
    """Decides whether a request path may reach the session endpoints."""

    def __init__(self, validator: Optional[SecretValidator], health_path: str = "/health"):
        """
        Initialize access gate.

        Args:
            validator: Secret validator, or None to leave every path open
            health_path: Liveness check path that bypasses authorization
        """
        self.validator = validator
        self.health_path = health_path

    @property
    def is_open(self) -> bool:
        return self.validator is None

    async def check(self, path: str) -> GateDecision:
        if path == self.health_path:
            return GateDecision.HEALTH

        if self.validator is None:
            return GateDecision.ALLOW

        if await self.validator.is_authorized(leading_segment(path)):
            return GateDecision.ALLOW

        logger.debug("Rejected request with unknown path secret")
        return GateDecision.DENY
