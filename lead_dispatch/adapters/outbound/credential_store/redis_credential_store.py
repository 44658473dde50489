"""Redis credential store adapter."""

import json
from datetime import datetime
from typing import Optional

from redis import asyncio as aioredis

from lead_dispatch.application.ports.credential_store import CredentialStore
from lead_dispatch.domain.entities.credential import Credential


class RedisCredentialStore(CredentialStore):
    """Redis adapter sharing one access token between worker processes."""

    KEY = "zoho:credential"

    def __init__(self, redis_url: str) -> None:
        """
        Initialize Redis credential store.

        Args:
            redis_url: Redis connection URL
        """
        self._redis_url = redis_url
        self._client: Optional[aioredis.Redis] = None

    async def _get_client(self) -> aioredis.Redis:
        """
        Get or create Redis client.

        Returns:
            Redis client instance
        """
        if self._client is None:
            self._client = await aioredis.from_url(
                self._redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    async def load(self) -> Optional[Credential]:
        """
        Load the shared credential.

        Returns:
            Credential, or None if missing or unreadable
        """
        client = await self._get_client()
        raw = await client.get(self.KEY)
        if not raw:
            return None
        try:
            data = json.loads(raw)
            return Credential(
                token=data["token"],
                expires_at=datetime.fromisoformat(data["expires_at"]),
            )
        except (ValueError, KeyError, TypeError):
            # Unreadable entry, next refresh overwrites it
            return None

    async def save(self, credential: Credential) -> None:
        """
        Store the credential until it expires.

        Args:
            credential: Credential to store
        """
        remaining = credential.remaining_seconds()
        if remaining <= 0:
            return
        client = await self._get_client()
        payload = json.dumps(
            {"token": credential.token, "expires_at": credential.expires_at.isoformat()}
        )
        await client.setex(self.KEY, remaining, payload)

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.close()
            self._client = None
