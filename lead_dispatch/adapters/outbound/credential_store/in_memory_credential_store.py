"""In-memory credential store adapter."""

from typing import Optional

from lead_dispatch.application.ports.credential_store import CredentialStore
from lead_dispatch.domain.entities.credential import Credential


class InMemoryCredentialStore(CredentialStore):
    """Process-wide single-entry credential cache."""

    def __init__(self, credential: Optional[Credential] = None) -> None:
        """
        Initialize in-memory store.

        Args:
            credential: Optional credential to start with
        """
        self._credential = credential

    async def load(self) -> Optional[Credential]:
        """
        Load the cached credential.

        Returns:
            Credential, or None if nothing is cached
        """
        return self._credential

    async def save(self, credential: Credential) -> None:
        """
        Replace the cached credential.

        Args:
            credential: Credential to store
        """
        self._credential = credential
