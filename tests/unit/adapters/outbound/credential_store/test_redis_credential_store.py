"""Unit tests for credential store adapters."""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest

from lead_dispatch.adapters.outbound.credential_store import (
    InMemoryCredentialStore,
    RedisCredentialStore,
)
from lead_dispatch.domain.entities.credential import Credential

FROM_URL = (
    "lead_dispatch.adapters.outbound.credential_store.redis_credential_store.aioredis.from_url"
)


@pytest.fixture
def mock_redis_client():
    """Create a mock Redis client."""
    client = AsyncMock()
    client.get = AsyncMock(return_value=None)
    client.setex = AsyncMock()
    client.close = AsyncMock()
    return client


@pytest.fixture
def redis_store():
    """Create Redis credential store with test URL."""
    return RedisCredentialStore("redis://localhost:6379/0")


@pytest.mark.asyncio
async def test_in_memory_store_round_trip():
    """Test in-memory store replaces the single entry wholesale."""
    store = InMemoryCredentialStore()
    first = Credential("a", datetime.now(timezone.utc) + timedelta(hours=1))
    second = Credential("b", datetime.now(timezone.utc) + timedelta(hours=1))

    assert await store.load() is None
    await store.save(first)
    await store.save(second)
    assert await store.load() == second


@pytest.mark.asyncio
async def test_redis_load_returns_none_when_missing(redis_store, mock_redis_client):
    """Test load returns None when nothing is cached."""
    with patch(FROM_URL, new_callable=AsyncMock) as mock_from_url:
        mock_from_url.return_value = mock_redis_client

        assert await redis_store.load() is None
        mock_redis_client.get.assert_called_once_with("zoho:credential")


@pytest.mark.asyncio
async def test_redis_save_uses_remaining_lifetime_as_ttl(redis_store, mock_redis_client):
    """Test save stores JSON with a TTL matching the credential lifetime."""
    expires_at = datetime.now(timezone.utc) + timedelta(seconds=3600)
    credential = Credential("shared-token", expires_at)

    with patch(FROM_URL, new_callable=AsyncMock) as mock_from_url:
        mock_from_url.return_value = mock_redis_client

        await redis_store.save(credential)

    key, ttl, payload = mock_redis_client.setex.call_args.args
    assert key == "zoho:credential"
    assert 3590 <= ttl <= 3600
    assert json.loads(payload) == {
        "token": "shared-token",
        "expires_at": expires_at.isoformat(),
    }


@pytest.mark.asyncio
async def test_redis_load_parses_stored_credential(redis_store, mock_redis_client):
    """Test load rebuilds the credential from stored JSON."""
    expires_at = datetime(2026, 3, 10, 13, 0, tzinfo=timezone.utc)
    mock_redis_client.get.return_value = json.dumps(
        {"token": "shared-token", "expires_at": expires_at.isoformat()}
    )

    with patch(FROM_URL, new_callable=AsyncMock) as mock_from_url:
        mock_from_url.return_value = mock_redis_client

        credential = await redis_store.load()

    assert credential == Credential("shared-token", expires_at)


@pytest.mark.asyncio
async def test_redis_load_ignores_corrupt_entry(redis_store, mock_redis_client):
    """Test an unreadable entry is treated as missing."""
    mock_redis_client.get.return_value = "not-json"
    redis_store._client = mock_redis_client

    assert await redis_store.load() is None


@pytest.mark.asyncio
async def test_redis_save_skips_expired_credential(redis_store, mock_redis_client):
    """Test an already expired credential is not written."""
    redis_store._client = mock_redis_client
    expired = Credential("old", datetime.now(timezone.utc) - timedelta(minutes=1))

    await redis_store.save(expired)

    mock_redis_client.setex.assert_not_called()


@pytest.mark.asyncio
async def test_redis_close(redis_store, mock_redis_client):
    """Test close releases the connection."""
    redis_store._client = mock_redis_client

    await redis_store.close()

    mock_redis_client.close.assert_called_once()
    assert redis_store._client is None
