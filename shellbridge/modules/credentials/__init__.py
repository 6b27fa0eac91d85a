"""
Credentials Module - Black Box Interface

Purpose: Keep the upstream Git host credential valid
Interface: get_valid_token(), refresh(), close()
Hidden: Token endpoint protocol, expiry arithmetic, refresh serialization

Replaceable with any token source (vault, workload identity, static token).
"""

from .credentials import (
    CredentialError,
    CredentialModule,
    CredentialRecord,
    CredentialRefreshFailed,
    CredentialUnavailable,
)

__all__ = [
    "CredentialModule",
    "CredentialRecord",
    "CredentialError",
    "CredentialUnavailable",
    "CredentialRefreshFailed",
]
