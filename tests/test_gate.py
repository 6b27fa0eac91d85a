"""
Tests for the path-secret access gate.

Tests cover:
- Leading segment extraction
- Static, Redis-backed and composite validators
- Gate decisions for health, allowed and denied paths
- AuthFactory wiring from configuration
"""

from unittest.mock import AsyncMock, patch

import pytest

from conftest import StubConfigProvider
from shellbridge.modules.auth import (
    AccessGate,
    AuthFactory,
    CompositeSecretValidator,
    GateDecision,
    RedisSecretValidator,
    StaticSecretValidator,
    leading_segment,
)
from shellbridge.modules.storage import StorageModule


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/s3cret", "s3cret"),
        ("/s3cret/", "s3cret"),
        ("/s3cret/messages", "s3cret"),
        ("//s3cret", ""),
        ("///s3cret/x", ""),
        ("/", ""),
        ("", ""),
    ],
)
def test_leading_segment(path, expected):
    assert leading_segment(path) == expected


# =============================================================================
# Validators
# =============================================================================

@pytest.mark.asyncio
async def test_static_validator_exact_match():
    validator = StaticSecretValidator("s3cret")

    assert await validator.is_authorized("s3cret") is True
    assert await validator.is_authorized("s3cretX") is False
    assert await validator.is_authorized("s3cre") is False
    assert await validator.is_authorized("") is False


def test_static_validator_rejects_empty_secret():
    with pytest.raises(ValueError):
        StaticSecretValidator("")


@pytest.mark.asyncio
async def test_redis_validator(mock_redis_with_data):
    await mock_redis_with_data.set("mcp:secret:issued", "active")
    await mock_redis_with_data.set("mcp:secret:old", "revoked")
    validator = RedisSecretValidator(mock_redis_with_data)

    assert await validator.is_authorized("issued") is True
    assert await validator.is_authorized("old") is False
    assert await validator.is_authorized("unknown") is False
    assert await validator.is_authorized("") is False


@pytest.mark.asyncio
async def test_redis_validator_decodes_bytes():
    redis = AsyncMock()
    redis.get = AsyncMock(side_effect=[b"active", b"revoked"])
    validator = RedisSecretValidator(redis, key_prefix="custom:")

    assert await validator.is_authorized("a") is True
    assert await validator.is_authorized("b") is False
    redis.get.assert_any_await("custom:a")


@pytest.mark.asyncio
async def test_redis_validator_denies_on_error():
    redis = AsyncMock()
    redis.get = AsyncMock(side_effect=ConnectionError("redis down"))
    validator = RedisSecretValidator(redis)

    assert await validator.is_authorized("issued") is False


@pytest.mark.asyncio
async def test_composite_validator(mock_redis_with_data):
    await mock_redis_with_data.set("mcp:secret:issued", "active")
    validator = CompositeSecretValidator(
        [StaticSecretValidator("s3cret"), RedisSecretValidator(mock_redis_with_data)]
    )

    assert await validator.is_authorized("s3cret") is True
    assert await validator.is_authorized("issued") is True
    assert await validator.is_authorized("other") is False


# =============================================================================
# Gate
# =============================================================================

@pytest.fixture
def gate():
    return AccessGate(StaticSecretValidator("s3cret"))


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path,decision",
    [
        ("/health", GateDecision.HEALTH),
        ("/s3cret", GateDecision.ALLOW),
        ("/s3cret/", GateDecision.ALLOW),
        ("/s3cret/messages", GateDecision.ALLOW),
        ("/s3cretX", GateDecision.DENY),
        ("/wrong", GateDecision.DENY),
        ("/", GateDecision.DENY),
        ("/health/s3cret", GateDecision.DENY),
        ("//s3cret", GateDecision.DENY),
        ("///s3cret/x", GateDecision.DENY),
    ],
)
async def test_gate_decisions(gate, path, decision):
    assert await gate.check(path) == decision


@pytest.mark.asyncio
async def test_open_gate_allows_everything():
    gate = AccessGate(None)

    assert gate.is_open
    assert await gate.check("/anything") == GateDecision.ALLOW
    assert await gate.check("/health") == GateDecision.HEALTH


# =============================================================================
# Factory
# =============================================================================

def test_factory_static_secret():
    gate = AuthFactory.build(StubConfigProvider(secret_token="s3cret"))

    assert isinstance(gate.validator, StaticSecretValidator)


def test_factory_without_secret_is_open():
    gate = AuthFactory.build(StubConfigProvider(secret_token=None))

    assert gate.is_open


def test_factory_redis_requires_client():
    gate = AuthFactory.build(StubConfigProvider(secret_token=None, redis_enabled=True))

    assert gate.is_open


def test_factory_combines_sources(mock_redis_with_data):
    provider = StubConfigProvider(secret_token="s3cret", redis_enabled=True)

    gate = AuthFactory.build(provider, mock_redis_with_data)

    assert isinstance(gate.validator, CompositeSecretValidator)
    assert len(gate.validator.validators) == 2


def test_factory_redis_only(mock_redis_with_data):
    provider = StubConfigProvider(secret_token=None, redis_enabled=True)

    gate = AuthFactory.build(provider, mock_redis_with_data)

    assert isinstance(gate.validator, RedisSecretValidator)


@pytest.mark.asyncio
async def test_storage_connect_and_disconnect():
    client = AsyncMock()
    with patch("shellbridge.modules.storage.redis.from_url", return_value=client) as from_url:
        storage = StorageModule("redis://cache:6379/1")

        assert await storage.connect() is client
        assert await storage.connect() is client
        await storage.disconnect()

    from_url.assert_called_once_with("redis://cache:6379/1", decode_responses=True)
    client.aclose.assert_awaited_once()
