"""Credential store adapters."""

from lead_dispatch.adapters.outbound.credential_store.in_memory_credential_store import (
    InMemoryCredentialStore,
)
from lead_dispatch.adapters.outbound.credential_store.redis_credential_store import (
    RedisCredentialStore,
)

__all__ = [
    "InMemoryCredentialStore",
    "RedisCredentialStore",
]
