"""Voice call client port."""

from abc import ABC, abstractmethod
from typing import Any, Optional


class VoiceCallClient(ABC):
    """Port interface for the outbound voice-agent provider."""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True if calls will actually be placed."""
        pass

    @abstractmethod
    async def start_call(
        self,
        to_number: str,
        lead_id: Optional[str] = None,
        task_id: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Optional[dict[str, Any]]:
        """
        Ask the provider to call a number.

        Args:
            to_number: Number to dial
            lead_id: CRM lead id passed through as call metadata
            task_id: CRM task id passed through as call metadata
            name: Contact name passed through as call metadata

        Returns:
            Provider call handle, or None if no provider is configured

        Raises:
            VoiceCallError: If the provider rejected the call
        """
        pass
