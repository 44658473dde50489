"""Token provider port."""

from abc import ABC, abstractmethod


class TokenProvider(ABC):
    """Port interface for the CRM access token cache."""

    @abstractmethod
    async def get(self, force: bool = False) -> str:
        """
        Get a usable access token.

        Args:
            force: Refresh even if the cached token still looks valid

        Returns:
            Access token string

        Raises:
            AuthError: If a refresh was needed and failed
        """
        pass

    async def force_refresh(self) -> str:
        """
        Discard the cached token and fetch a new one.

        Returns:
            Fresh access token string
        """
        return await self.get(force=True)
