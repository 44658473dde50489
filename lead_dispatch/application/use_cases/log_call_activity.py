"""Log call activity use case."""

from datetime import datetime
from typing import Any, Callable, Optional

from lead_dispatch.application.ports.crm_client import CrmClient
from lead_dispatch.application.use_cases.linked_record_writer import LinkedRecordWriter
from lead_dispatch.domain.errors import CallLogCreateError
from lead_dispatch.domain.value_objects.crm_datetime import format_call_start

CALLS_MODULE = "Calls"


class LogCallActivity:
    """Use case writing an outbound call record linked to a lead."""

    def __init__(
        self,
        crm_client: CrmClient,
        clock: Optional[Callable[[], datetime]] = None,
        logger: Optional[Callable[..., None]] = None,
    ) -> None:
        """
        Initialize log call activity use case.

        Args:
            crm_client: CRM client port
            clock: Optional callable returning the current local datetime
            logger: Optional logger function (request_id, component, **kwargs)
        """
        self._clock = clock or (lambda: datetime.now().astimezone())
        self._logger = logger
        self._writer = LinkedRecordWriter(
            crm_client, CALLS_MODULE, CallLogCreateError, logger=logger
        )

    def build_record(
        self,
        phone: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> dict[str, Any]:
        """Build the call record without any relationship field."""
        who = name.strip() if name and name.strip() else phone
        return {
            "Subject": f"Outbound call to {who} ({phone})",
            "Call_Type": "Outbound",
            "Call_Start_Time": format_call_start(self._clock()),
            "Call_Duration": "00:00",
            "Description": description or f"Outbound call scheduled for {phone}.",
        }

    async def execute(
        self,
        lead_id: str,
        phone: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        request_id: str = "unknown",
    ) -> str:
        """
        Create the call record.

        Returns:
            CRM call id

        Raises:
            CallLogCreateError: If every linkage strategy failed
        """
        record = self.build_record(phone, name=name, description=description)
        call_id = await self._writer.create(record, lead_id, request_id=request_id)
        if self._logger:
            self._logger(request_id, "call_log", call_id=call_id)
        return call_id
