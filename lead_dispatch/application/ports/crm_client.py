"""CRM client port."""

from abc import ABC, abstractmethod
from typing import Any, Optional


class CrmClient(ABC):
    """Port interface for authenticated CRM REST calls."""

    @abstractmethod
    async def request(
        self,
        path: str,
        method: str = "GET",
        body: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> Optional[dict[str, Any]]:
        """
        Send a signed request to the CRM.

        Args:
            path: Path relative to the CRM base URL (e.g., 'Leads/search')
            method: HTTP method
            body: Optional JSON body
            params: Optional query parameters

        Returns:
            Parsed JSON body, or None if the CRM answered without content

        Raises:
            UpstreamError: If the CRM answered with a non-2xx status
            AuthError: If the access token could not be refreshed
        """
        pass
