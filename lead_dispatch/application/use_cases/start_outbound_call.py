"""Start outbound call use case (voice provider only, no CRM records)."""

from typing import Any, Callable, Optional

from lead_dispatch.application.dtos.dispatch import CallNowRequest, CallNowResult
from lead_dispatch.application.ports.voice_call_client import VoiceCallClient
from lead_dispatch.domain.errors import VoiceNotConfiguredError
from lead_dispatch.domain.value_objects.phone_number import PhoneNumber


class StartOutboundCall:
    """Use case placing a call straight away, bypassing the CRM."""

    def __init__(
        self,
        voice_client: VoiceCallClient,
        default_country_code: str = "",
        logger: Optional[Callable[..., Any]] = None,
    ) -> None:
        self._voice_client = voice_client
        self._default_country_code = default_country_code
        self._logger = logger

    async def execute(self, request: CallNowRequest, request_id: str = "unknown") -> CallNowResult:
        """
        Place the call.

        Raises:
            ValidationError: If the phone number is missing
            VoiceNotConfiguredError: If no voice provider is configured
            VoiceCallError: If the provider rejected the call
        """
        phone = str(PhoneNumber.parse(request.phone, self._default_country_code))
        if not self._voice_client.is_configured:
            raise VoiceNotConfiguredError("Voice provider is not configured")

        call_result = await self._voice_client.start_call(phone, name=request.name)
        if self._logger:
            self._logger(request_id, "voice", call_placed=True)
        return CallNowResult(phone=phone, call_result=call_result)
