"""Zoho CRM REST client adapter."""

from typing import Any, Optional

import httpx

from lead_dispatch.application.ports.crm_client import CrmClient
from lead_dispatch.application.ports.token_provider import TokenProvider
from lead_dispatch.domain.errors import UpstreamError
from lead_dispatch.infrastructure.logging.logger import logger

INVALID_TOKEN_CODES = {"INVALID_TOKEN", "AUTHENTICATION_FAILURE"}


class ZohoCrmClient(CrmClient):
    """Zoho CRM client that signs requests and retries once on a stale token."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        token_provider: TokenProvider,
    ) -> None:
        """
        Initialize Zoho CRM client.

        Args:
            http_client: Shared HTTP client (carries the request timeout)
            base_url: CRM API base URL (e.g., 'https://www.zohoapis.in/crm/v2')
            token_provider: Source of access tokens
        """
        self._http_client = http_client
        self._base_url = base_url.rstrip("/")
        self._token_provider = token_provider

    async def request(
        self,
        path: str,
        method: str = "GET",
        body: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> Optional[dict[str, Any]]:
        """
        Send a signed request, refreshing the token and retrying at most once.

        Args:
            path: Path relative to the CRM base URL
            method: HTTP method
            body: Optional JSON body
            params: Optional query parameters

        Returns:
            Parsed JSON body, or None for an empty answer

        Raises:
            UpstreamError: If the CRM answered with a non-2xx status
        """
        token = await self._token_provider.get()
        response = await self._send(path, method, body, params, token)
        payload = _parse_body(response)

        if _is_invalid_token(response.status_code, payload):
            logger.warning(
                f"component='crm' | path={path!r} | status={response.status_code} "
                "| token_rejected=True | action='refresh_and_retry'"
            )
            token = await self._token_provider.force_refresh()
            response = await self._send(path, method, body, params, token)
            payload = _parse_body(response)

        if not response.is_success:
            logger.warning(
                f"component='crm' | method={method!r} | path={path!r} "
                f"| status={response.status_code}"
            )
            raise UpstreamError(response.status_code, payload)

        if isinstance(payload, str):
            return None if not payload.strip() else {"raw": payload}
        return payload

    async def _send(
        self,
        path: str,
        method: str,
        body: Optional[dict[str, Any]],
        params: Optional[dict[str, Any]],
        token: str,
    ) -> httpx.Response:
        url = f"{self._base_url}/{path.lstrip('/')}"
        try:
            return await self._http_client.request(
                method,
                url,
                json=body,
                params=params,
                headers={"Authorization": f"Zoho-oauthtoken {token}"},
            )
        except httpx.TimeoutException as err:
            raise UpstreamError(504, message=f"CRM request to {path} timed out") from err
        except httpx.HTTPError as err:
            raise UpstreamError(502, message=f"CRM request to {path} failed: {err}") from err


def _parse_body(response: httpx.Response) -> Any:
    """Parse JSON body; empty bodies become '' and non-JSON bodies stay text."""
    if response.status_code == 204 or not response.content:
        return ""
    try:
        return response.json()
    except ValueError:
        return response.text


def _is_invalid_token(status_code: int, payload: Any) -> bool:
    """
    Check whether a response says the access token is expired or invalid.

    Args:
        status_code: HTTP status
        payload: Parsed response body

    Returns:
        True for HTTP 401 or an invalid-token error body
    """
    if status_code == 401:
        return True
    if not isinstance(payload, dict):
        return False
    if payload.get("code") in INVALID_TOKEN_CODES:
        return True
    message = str(payload.get("message") or "").lower()
    return "invalid oauth token" in message
