"""Credential store port."""

from abc import ABC, abstractmethod
from typing import Optional

from lead_dispatch.domain.entities.credential import Credential


class CredentialStore(ABC):
    """Port interface for where the current access token lives."""

    @abstractmethod
    async def load(self) -> Optional[Credential]:
        """
        Load the cached credential.

        Returns:
            Credential, or None if nothing is cached
        """
        pass

    @abstractmethod
    async def save(self, credential: Credential) -> None:
        """
        Replace the cached credential.

        Args:
            credential: Credential to store
        """
        pass

    async def close(self) -> None:
        """Release connections held by the store (nothing to release by default)."""
        return None
