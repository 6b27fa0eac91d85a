"""
Credential lifecycle for the upstream Git host.

This module holds the single access/refresh token pair the gateway uses
on behalf of every session and refreshes it against the identity
provider before it expires.

Design Principles:
- Refresh-ahead: a token within the refresh window is renewed before use
- Single writer: refreshes run in one critical section and are coalesced
- Atomic swap: the record is immutable and replaced as a whole
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from ...config.provider import CredentialConfig

logger = logging.getLogger(__name__)


class CredentialError(Exception):
    """Base class for credential failures."""


class CredentialUnavailable(CredentialError):
    """No refresh token is configured and the current token has expired."""


class CredentialRefreshFailed(CredentialError):
    """The identity provider rejected (or never answered) a refresh request."""

    def __init__(self, error: str, description: Optional[str] = None):
        self.error = error
        self.description = description
        message = f"Token refresh failed: {error}"
        if description:
            message += f" ({description})"
        super().__init__(message)


@dataclass(frozen=True)
class CredentialRecord:
    """Access/refresh token pair with its absolute expiry (epoch seconds)."""

    access_token: str
    refresh_token: str
    expires_at: float

    def expires_in(self, now: float) -> float:
        return self.expires_at - now

    def is_expired(self, now: float) -> bool:
        return self.expires_at <= now


class CredentialModule:
    """
    Owns the process-wide credential record.

    Readers go through get_valid_token(); the record itself is only ever
    replaced by refresh(), under the refresh lock.
    """

    def __init__(
        self,
        config: CredentialConfig,
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize credential module.

        Args:
            config: Client credentials, initial tokens and refresh policy
            http_client: Optional httpx client (one is created and owned otherwise)
            clock: Time source returning epoch seconds
        """
        self.config = config
        self._clock = clock
        self._http = http_client
        self._owns_http = http_client is None
        self._lock = asyncio.Lock()
        self._record = CredentialRecord(
            access_token=config.access_token,
            refresh_token=config.refresh_token,
            expires_at=clock() + config.initial_expires_in,
        )

    @property
    def record(self) -> CredentialRecord:
        """Current credential record (immutable snapshot)."""
        return self._record

    def _needs_refresh(self, record: CredentialRecord) -> bool:
        return record.expires_in(self._clock()) < self.config.refresh_window

    async def get_valid_token(self) -> str:
        """
        Return an access token that is not about to expire.

        Returns:
            Access token string

        Raises:
            CredentialUnavailable: No refresh token and the token has expired
            CredentialRefreshFailed: The provider rejected the refresh
        """
        record = self._record
        if not self._needs_refresh(record):
            return record.access_token

        async with self._lock:
            # Another caller may have refreshed while we waited
            record = self._record
            if not self._needs_refresh(record):
                return record.access_token

            if not record.refresh_token:
                if record.is_expired(self._clock()):
                    raise CredentialUnavailable(
                        "Access token has expired and no refresh token is configured"
                    )
                logger.warning("No refresh token available, using current access token")
                return record.access_token

            record = await self._refresh_locked(record)
            return record.access_token

    async def refresh(self) -> CredentialRecord:
        """
        Force a refresh regardless of the current expiry.

        Returns:
            The new credential record
        """
        async with self._lock:
            if not self._record.refresh_token:
                raise CredentialUnavailable("No refresh token is configured")
            return await self._refresh_locked(self._record)

    async def _refresh_locked(self, current: CredentialRecord) -> CredentialRecord:
        """Exchange the refresh token. Caller must hold the lock."""
        payload = {
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "grant_type": "refresh_token",
            "refresh_token": current.refresh_token,
        }

        try:
            response = await self._client().post(
                self.config.token_endpoint,
                json=payload,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.error(f"Failed to refresh token: {e}")
            raise CredentialRefreshFailed("request_failed", str(e)) from e

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Token endpoint returned non-JSON body (HTTP {response.status_code})")
            raise CredentialRefreshFailed(
                "invalid_response", f"HTTP {response.status_code}"
            ) from e

        if not isinstance(data, dict):
            raise CredentialRefreshFailed("invalid_response", "expected a JSON object")

        if data.get("error"):
            logger.error(f"Token refresh error: {data['error']}")
            raise CredentialRefreshFailed(data["error"], data.get("error_description"))

        if response.status_code >= 400 or not data.get("access_token"):
            logger.error(f"Token refresh returned no access token (HTTP {response.status_code})")
            raise CredentialRefreshFailed(
                "invalid_response", f"HTTP {response.status_code}, no access_token"
            )

        expires_in = data.get("expires_in") or self.config.default_lifetime
        record = CredentialRecord(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token") or current.refresh_token,
            expires_at=self._clock() + int(expires_in),
        )
        self._record = record

        logger.info(f"Token refreshed successfully (expires in {int(expires_in)}s)")
        return record

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=30.0)
        return self._http

    async def close(self) -> None:
        """Close the owned HTTP client."""
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None
