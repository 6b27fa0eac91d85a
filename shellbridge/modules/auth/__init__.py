"""
Authentication Module - Black Box Interface

Purpose: Decide which request paths carry a valid URL secret
Interface: AccessGate.check(), AuthFactory.build(), SecretValidator
Hidden: Secret storage, comparison logic, revocation

This module can be completely replaced with any other auth implementation
(OAuth, JWT, external service) without affecting other modules.
"""

from .factory import AuthFactory
from .gate import AccessGate, GateDecision, leading_segment
from .validators import (
    CompositeSecretValidator,
    RedisSecretValidator,
    SecretValidator,
    StaticSecretValidator,
)

__all__ = [
    "AccessGate",
    "AuthFactory",
    "GateDecision",
    "leading_segment",
    "SecretValidator",
    "StaticSecretValidator",
    "RedisSecretValidator",
    "CompositeSecretValidator",
]
