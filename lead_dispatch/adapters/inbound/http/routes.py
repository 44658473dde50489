"""HTTP routes."""

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse

from lead_dispatch.adapters.inbound.http.schemas import IncomingCallWebhook
from lead_dispatch.application.dtos.dispatch import (
    CallNowRequest,
    CallNowResult,
    DispatchRequest,
    DispatchResult,
)
from lead_dispatch.application.use_cases.dispatch_call_use_case import (
    INCOMING_CALL_SOURCE,
    DispatchCallUseCase,
)
from lead_dispatch.application.use_cases.start_outbound_call import StartOutboundCall
from lead_dispatch.infrastructure.logging.logger import log_event
from lead_dispatch.infrastructure.wiring.dependencies import (
    get_dispatch_call_use_case,
    get_start_outbound_call,
)

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    """Liveness text."""
    return "Lead dispatch service is running"


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> dict[str, Any]:
    """
    Health check endpoint for liveness/readiness.

    Returns:
        Health status with the current server time
    """
    return {"ok": True, "time": datetime.now(timezone.utc).isoformat()}


@router.post(
    "/api/dispatch-call",
    status_code=status.HTTP_200_OK,
    response_model=DispatchResult,
    response_model_exclude_none=True,
)
async def dispatch_call(
    request: DispatchRequest,
    use_case: DispatchCallUseCase = Depends(get_dispatch_call_use_case),
) -> DispatchResult:
    """
    Find or create the lead, its follow-up task and optional call records.

    Args:
        request: Dispatch request with phone and optional web-form context

    Returns:
        Identifiers of the CRM records plus optional call outcome
    """
    # Generate request_id for log correlation
    request_id = str(uuid4())

    log_event(
        request_id=request_id,
        component="http",
        endpoint="dispatch-call",
        has_name=bool(request.name),
        has_product_line=bool(request.product_line),
    )

    result = await use_case.execute(request, request_id=request_id)

    log_event(
        request_id=request_id,
        component="http",
        lead_id=result.lead_id,
        task_id=result.task_id,
        call_id=result.call_id,
    )

    return result


@router.post(
    "/api/call-now",
    status_code=status.HTTP_200_OK,
    response_model=CallNowResult,
    response_model_exclude_none=True,
)
async def call_now(
    request: CallNowRequest,
    use_case: StartOutboundCall = Depends(get_start_outbound_call),
) -> CallNowResult:
    """
    Place an outbound voice-agent call without touching the CRM.

    Args:
        request: Phone number and optional name

    Returns:
        Provider call handle
    """
    request_id = str(uuid4())
    log_event(request_id=request_id, component="http", endpoint="call-now")
    return await use_case.execute(request, request_id=request_id)


@router.post(
    "/incoming-call",
    status_code=status.HTTP_200_OK,
    response_model=DispatchResult,
    response_model_exclude_none=True,
)
async def incoming_call(
    webhook: IncomingCallWebhook,
    use_case: DispatchCallUseCase = Depends(get_dispatch_call_use_case),
) -> DispatchResult:
    """
    Handle inbound-call provider webhooks: lead and task only.

    Args:
        webhook: Webhook payload carrying the caller's number

    Returns:
        Lead and task identifiers
    """
    request_id = str(uuid4())
    log_event(request_id=request_id, component="incoming_call_webhook")

    return await use_case.execute(
        DispatchRequest(phone=webhook.callerNumber),
        request_id=request_id,
        source=INCOMING_CALL_SOURCE,
        optional_stages=False,
    )
