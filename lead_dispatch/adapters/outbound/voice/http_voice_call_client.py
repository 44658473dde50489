"""Voice-agent provider HTTP adapter."""

from typing import Any, Optional

import httpx

from lead_dispatch.application.ports.voice_call_client import VoiceCallClient
from lead_dispatch.domain.errors import VoiceCallError
from lead_dispatch.infrastructure.logging.logger import logger


class HttpVoiceCallClient(VoiceCallClient):
    """Places outbound calls through a voice-agent REST API."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        path: str,
        api_key: str,
        agent_id: str,
    ) -> None:
        """
        Initialize voice call client.

        Args:
            http_client: Shared HTTP client
            base_url: Provider base URL
            path: Call dispatch path appended to the base URL
            api_key: Provider API key (sent as a bearer token)
            agent_id: Voice agent that places the call
        """
        if not api_key or not agent_id:
            raise ValueError("Voice provider API key and agent id are required")

        self._http_client = http_client
        self._url = f"{base_url.rstrip('/')}/{path.lstrip('/')}"
        self._api_key = api_key
        self._agent_id = agent_id

    @property
    def is_configured(self) -> bool:
        return True

    async def start_call(
        self,
        to_number: str,
        lead_id: Optional[str] = None,
        task_id: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Optional[dict[str, Any]]:
        """
        Ask the voice agent to call a number.

        Args:
            to_number: Number to dial
            lead_id: CRM lead id for call metadata
            task_id: CRM task id for call metadata
            name: Contact name for call metadata

        Returns:
            Provider call handle

        Raises:
            VoiceCallError: If the provider answered with a non-2xx status
        """
        payload = {
            "agent_id": self._agent_id,
            "to": to_number,
            "metadata": {"lead_id": lead_id, "task_id": task_id, "name": name},
        }
        try:
            response = await self._http_client.post(
                self._url,
                json=payload,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        except httpx.TimeoutException as err:
            raise VoiceCallError(504, "Voice provider timed out") from err
        except httpx.HTTPError as err:
            raise VoiceCallError(502, f"Voice provider unreachable: {err}") from err

        try:
            body: Any = response.json()
        except ValueError:
            body = response.text

        if not response.is_success:
            logger.warning(f"component='voice' | status={response.status_code}")
            raise VoiceCallError(response.status_code, body)

        logger.info(f"component='voice' | status={response.status_code} | lead_id={lead_id!r}")
        return body if isinstance(body, dict) else {"raw": body}
