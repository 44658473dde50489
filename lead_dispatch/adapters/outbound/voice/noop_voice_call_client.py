"""No-op voice call client adapter for when no provider is configured."""

from typing import Any, Optional

from lead_dispatch.application.ports.voice_call_client import VoiceCallClient


class NoOpVoiceCallClient(VoiceCallClient):
    """No-op adapter that never places a call."""

    @property
    def is_configured(self) -> bool:
        return False

    async def start_call(
        self,
        to_number: str,
        lead_id: Optional[str] = None,
        task_id: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Optional[dict[str, Any]]:
        """
        Always return None (no call placed).

        Args:
            to_number: Number to dial (ignored)
            lead_id: CRM lead id (ignored)
            task_id: CRM task id (ignored)
            name: Contact name (ignored)

        Returns:
            Always None
        """
        return None
