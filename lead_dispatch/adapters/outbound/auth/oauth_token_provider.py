"""OAuth refresh-token provider adapter."""

from datetime import datetime, timezone
from typing import Any, Callable, Optional

import httpx

from lead_dispatch.application.ports.credential_store import CredentialStore
from lead_dispatch.application.ports.token_provider import TokenProvider
from lead_dispatch.domain.entities.credential import Credential
from lead_dispatch.domain.errors import AuthError
from lead_dispatch.infrastructure.logging.logger import logger

DEFAULT_EXPIRES_IN = 3600


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OAuthTokenProvider(TokenProvider):
    """
    Exchanges a long-lived refresh token for short-lived access tokens.

    Refreshes are not serialized. Two requests that both see an expiring token
    each fetch a new one and the last write wins; any valid token is equally
    usable, so the only cost is an extra token call.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        token_url: str,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        store: CredentialStore,
        skew_seconds: int = 60,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        Initialize OAuth token provider.

        Args:
            http_client: Shared HTTP client
            token_url: OAuth token endpoint URL
            client_id: OAuth client id
            client_secret: OAuth client secret
            refresh_token: Long-lived refresh token
            store: Where the current credential is cached
            skew_seconds: Refresh this many seconds before the real expiry
            clock: Optional callable returning the current aware datetime
        """
        self._http_client = http_client
        self._token_url = token_url
        self._client_id = client_id
        self._client_secret = client_secret
        self._refresh_token = refresh_token
        self._store = store
        self._skew_seconds = skew_seconds
        self._clock = clock or _utc_now

    async def get(self, force: bool = False) -> str:
        """
        Get a usable access token, refreshing when forced or expiring.

        Args:
            force: Refresh even if the cached token still looks valid

        Returns:
            Access token string
        """
        if not force:
            credential = await self._store.load()
            if credential is not None and credential.is_valid(self._clock(), self._skew_seconds):
                return credential.token

        credential = await self.refresh()
        return credential.token

    async def refresh(self) -> Credential:
        """
        Exchange the refresh token for a new credential and cache it.

        Returns:
            New credential

        Raises:
            AuthError: If OAuth is not configured or the token endpoint rejects the exchange
        """
        if not (self._client_id and self._client_secret and self._refresh_token):
            raise AuthError("Zoho OAuth client id, secret and refresh token must be configured")

        try:
            response = await self._http_client.post(
                self._token_url,
                data={
                    "grant_type": "refresh_token",
                    "refresh_token": self._refresh_token,
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                },
            )
        except httpx.HTTPError as err:
            raise AuthError(f"Zoho token endpoint unreachable: {err}") from err
        body = _parse_body(response)

        token = body.get("access_token") if isinstance(body, dict) else None
        if response.status_code != 200 or not token:
            logger.error(
                f"component='auth' | token_refresh='failed' | status={response.status_code}"
            )
            raise AuthError(
                "Failed to refresh Zoho access token",
                status=response.status_code,
                body=body,
            )

        expires_in = _as_int(body.get("expires_in"), DEFAULT_EXPIRES_IN)
        credential = Credential.issued(token, expires_in, now=self._clock())
        await self._store.save(credential)

        logger.info(f"component='auth' | token_refresh='ok' | expires_in={expires_in}")
        return credential


def _parse_body(response: httpx.Response) -> Any:
    """Parse JSON body, falling back to raw text."""
    try:
        return response.json()
    except ValueError:
        return response.text


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
