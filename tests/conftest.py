"""
Shared pytest fixtures for Shellbridge tests.

This module provides common fixtures including:
- FakeClock: Controllable time source for credential expiry tests
- TokenEndpoint: In-process identity provider served through httpx.MockTransport
- Redis mocks for the secret store
"""

import asyncio
import json
import os
import sys
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock

import httpx
import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from shellbridge.config.provider import CredentialConfig, GateConfig


# =============================================================================
# Credential Infrastructure
# =============================================================================

class FakeClock:
    """Epoch-seconds clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TokenEndpoint:
    """
    Mock token endpoint.

    Records every request body and answers with the configured response.
    A small delay makes concurrent callers overlap inside the refresh.

    Usage:
        endpoint = TokenEndpoint(body={"access_token": "new"})
        client = endpoint.client()
    """

    def __init__(
        self,
        body: Any = None,
        status_code: int = 200,
        delay: float = 0.01,
        raw: Optional[bytes] = None,
        error: Optional[Exception] = None,
    ):
        self.body = body if body is not None else {
            "access_token": "ghu_refreshed",
            "refresh_token": "ghr_rotated",
            "expires_in": 28800,
        }
        self.status_code = status_code
        self.delay = delay
        self.raw = raw
        self.error = error
        self.requests: List[Dict[str, Any]] = []

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.raw is not None:
            return httpx.Response(self.status_code, content=self.raw)
        return httpx.Response(self.status_code, json=self.body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    @property
    def call_count(self) -> int:
        return len(self.requests)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def token_endpoint():
    return TokenEndpoint()


def make_credential_config(
    access_token: str = "ghu_initial",
    refresh_token: str = "ghr_initial",
    expires_in: int = 28800,
) -> CredentialConfig:
    return CredentialConfig(
        client_id="Iv1.client",
        client_secret="client-secret",
        access_token=access_token,
        refresh_token=refresh_token,
        token_endpoint="https://github.test/login/oauth/access_token",
        initial_expires_in=expires_in,
    )


class StubConfigProvider:
    """ConfigProvider returning fixed values."""

    def __init__(
        self,
        secret_token: Optional[str] = "s3cret",
        redis_enabled: bool = False,
        credential_config: Optional[CredentialConfig] = None,
    ):
        self.gate_config = GateConfig(secret_token=secret_token, redis_enabled=redis_enabled)
        self.credential_config = credential_config or make_credential_config()

    def get_credential_config(self) -> CredentialConfig:
        return self.credential_config

    def get_gate_config(self) -> GateConfig:
        return self.gate_config


# =============================================================================
# Redis Mocking Infrastructure
# =============================================================================

@pytest.fixture
def mock_redis_with_data():
    """
    Redis mock with in-memory data storage for more realistic tests.

    This allows testing code that reads back what it writes.
    """
    storage = {}

    redis = AsyncMock()

    async def mock_set(key, value, *args, **kwargs):
        storage[key] = value
        return True

    async def mock_get(key):
        return storage.get(key)

    async def mock_delete(*keys):
        count = 0
        for key in keys:
            if key in storage:
                del storage[key]
                count += 1
        return count

    redis.set = mock_set
    redis.get = mock_get
    redis.delete = mock_delete
    redis._storage = storage  # Expose for test assertions

    return redis


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "subprocess: Tests that spawn a real shell"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take a long time to run"
    )
