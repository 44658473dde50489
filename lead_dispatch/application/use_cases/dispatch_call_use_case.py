"""Dispatch call use case orchestrating lead, task, call log and outbound call."""

import logging
from typing import Any, Callable, Optional

from lead_dispatch.application.dtos.dispatch import DispatchRequest, DispatchResult
from lead_dispatch.application.ports.voice_call_client import VoiceCallClient
from lead_dispatch.application.use_cases.create_follow_up_task import CreateFollowUpTask
from lead_dispatch.application.use_cases.find_or_create_lead import FindOrCreateLead
from lead_dispatch.application.use_cases.log_call_activity import LogCallActivity
from lead_dispatch.domain.errors import DispatchError
from lead_dispatch.domain.value_objects.phone_number import PhoneNumber

WEBSITE_SOURCE = "Website"
INCOMING_CALL_SOURCE = "Incoming Call"


class DispatchCallUseCase:
    """
    Use case for one dispatch request.

    Stages: validate -> resolve_lead -> link_task -> log_call -> trigger_call.
    The first three are required and abort the request on failure. The last
    two are best-effort: their errors are reported on an otherwise successful
    result.
    """

    def __init__(
        self,
        lead_resolver: FindOrCreateLead,
        task_linker: CreateFollowUpTask,
        voice_client: VoiceCallClient,
        call_logger: Optional[LogCallActivity] = None,
        call_on_create: bool = False,
        default_country_code: str = "",
        logger: Optional[Callable[..., None]] = None,
    ) -> None:
        """
        Initialize dispatch call use case.

        Args:
            lead_resolver: Find-or-create lead use case
            task_linker: Follow-up task use case
            voice_client: Outbound voice provider port
            call_logger: Optional call activity use case (None disables call logging)
            call_on_create: Place an outbound call after the CRM records exist
            default_country_code: Country code for local 10-digit numbers
            logger: Optional logger function (request_id, component, **kwargs)
        """
        self._lead_resolver = lead_resolver
        self._task_linker = task_linker
        self._voice_client = voice_client
        self._call_logger = call_logger
        self._call_on_create = call_on_create
        self._default_country_code = default_country_code
        self._logger = logger

    def _log(self, request_id: str, **kwargs: Any) -> None:
        if self._logger:
            self._logger(request_id, "dispatch", **kwargs)

    def _stage(self, request_id: str, before: Optional[str], after: str) -> str:
        self._log(request_id, stage_before=before, stage_after=after)
        return after

    async def execute(
        self,
        request: DispatchRequest,
        request_id: str = "unknown",
        source: str = WEBSITE_SOURCE,
        optional_stages: bool = True,
    ) -> DispatchResult:
        """
        Execute the dispatch workflow.

        Args:
            request: Dispatch request DTO
            request_id: Request identifier for logging
            source: Lead source tag for new leads
            optional_stages: Run call logging and the outbound call trigger

        Returns:
            Dispatch result DTO

        Raises:
            ValidationError: If the phone number is missing
            DispatchError: If lead resolution or task linking fails
        """
        stage = self._stage(request_id, None, "validate")
        phone = str(PhoneNumber.parse(request.phone, self._default_country_code))

        stage = self._stage(request_id, stage, "resolve_lead")
        lead_id = await self._lead_resolver.execute(
            phone,
            name=request.name,
            product_line=request.product_line,
            email=request.email,
            message=request.message,
            source_url=request.source_url,
            utm=request.utm,
            source=source,
            request_id=request_id,
        )

        stage = self._stage(request_id, stage, "link_task")
        task_id = await self._task_linker.execute(
            lead_id,
            phone,
            name=request.name,
            product_line=request.product_line,
            request_id=request_id,
        )

        result: dict[str, Any] = {"lead_id": lead_id, "task_id": task_id}

        if optional_stages and self._call_logger is not None:
            stage = self._stage(request_id, stage, "log_call")
            try:
                result["call_id"] = await self._call_logger.execute(
                    lead_id, phone, name=request.name, request_id=request_id
                )
            except DispatchError as err:
                self._log(request_id, level=logging.WARNING, call_log_error=err.message)
                result["call_log_error"] = err.message

        if optional_stages and self._call_on_create and self._voice_client.is_configured:
            stage = self._stage(request_id, stage, "trigger_call")
            try:
                result["call_result"] = await self._voice_client.start_call(
                    phone, lead_id=lead_id, task_id=task_id, name=request.name
                )
            except DispatchError as err:
                self._log(request_id, level=logging.WARNING, call_error=err.message)
                result["call_error"] = err.message

        self._stage(request_id, stage, "respond")
        return DispatchResult(**result)
