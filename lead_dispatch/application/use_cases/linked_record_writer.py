"""Create CRM activity records linked to a lead, degrading across linkage fields."""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from lead_dispatch.application.ports.crm_client import CrmClient
from lead_dispatch.domain.errors import RecordCreateError, UpstreamError
from lead_dispatch.domain.value_objects.record_outcome import RecordOutcome

LEADS_MODULE = "Leads"


@dataclass(frozen=True)
class LinkField:
    """Relationship field on an activity record."""

    api_name: str
    label: str


WHO_FIELD = LinkField(api_name="Who_Id", label="Contact Name")
WHAT_FIELD = LinkField(api_name="What_Id", label="Related To")


@dataclass(frozen=True)
class LinkStrategy:
    """
    One way of attaching a lead to an activity record.

    ``build`` is a pure function ``(base_record, lead_id) -> payload``.
    ``field`` is the relationship field whose rejection moves on to the next
    strategy; None marks the unlinked fallback.
    """

    name: str
    build: Callable[[dict[str, Any], str], dict[str, Any]]
    field: Optional[LinkField] = None


def link_via_who(base_record: dict[str, Any], lead_id: str) -> dict[str, Any]:
    return {**base_record, WHO_FIELD.api_name: {"id": lead_id}}


def link_via_what(base_record: dict[str, Any], lead_id: str) -> dict[str, Any]:
    return {**base_record, WHAT_FIELD.api_name: {"id": lead_id}}


def link_via_what_with_module(base_record: dict[str, Any], lead_id: str) -> dict[str, Any]:
    return {**base_record, WHAT_FIELD.api_name: {"id": lead_id}, "$se_module": LEADS_MODULE}


def unlinked_with_lead_reference(base_record: dict[str, Any], lead_id: str) -> dict[str, Any]:
    """Drop every relationship field and keep the lead id as description text."""
    description = base_record.get("Description")
    reference = f"Lead ID: {lead_id}"
    payload = {
        key: value
        for key, value in base_record.items()
        if key not in (WHO_FIELD.api_name, WHAT_FIELD.api_name, "$se_module")
    }
    payload["Description"] = f"{description}\n{reference}" if description else reference
    return payload


STRUCTURED_LINK_STRATEGIES: tuple[LinkStrategy, ...] = (
    LinkStrategy(name="who", build=link_via_who, field=WHO_FIELD),
    LinkStrategy(name="what", build=link_via_what, field=WHAT_FIELD),
    LinkStrategy(name="what_with_module", build=link_via_what_with_module, field=WHAT_FIELD),
)
UNLINKED_STRATEGY = LinkStrategy(name="unlinked", build=unlinked_with_lead_reference)


def is_field_rejected(outcome: RecordOutcome, field: LinkField) -> bool:
    """
    Check whether a failed write blames the given relationship field.

    The CRM reports field errors inconsistently across modules: sometimes as
    ``details.api_name``, sometimes only inside the message text.

    Args:
        outcome: Parsed write outcome
        field: Relationship field that was attempted

    Returns:
        True if the field is named in the error details or message
    """
    if outcome.succeeded:
        return False
    if outcome.details.get("api_name") == field.api_name:
        return True
    message = outcome.message.lower()
    return field.api_name.lower() in message or field.label.lower() in message


def _is_record_envelope(body: Any) -> bool:
    return isinstance(body, dict) and isinstance(body.get("data"), list) and bool(body["data"])


class LinkedRecordWriter:
    """Tries each linkage strategy in order until the CRM accepts the record."""

    def __init__(
        self,
        crm_client: CrmClient,
        module: str,
        error_class: type[RecordCreateError],
        strategies: tuple[LinkStrategy, ...] = STRUCTURED_LINK_STRATEGIES,
        fallback: LinkStrategy = UNLINKED_STRATEGY,
        logger: Optional[Callable[..., None]] = None,
    ) -> None:
        """
        Initialize linked record writer.

        Args:
            crm_client: CRM client port
            module: CRM module to write to (e.g., 'Tasks', 'Calls')
            error_class: Error raised when the fallback also fails
            strategies: Structured linkage strategies, in preference order
            fallback: Final strategy whose failure is fatal
            logger: Optional logger function (request_id, component, **kwargs)
        """
        self._crm_client = crm_client
        self._module = module
        self._error_class = error_class
        self._strategies = strategies
        self._fallback = fallback
        self._logger = logger

    def _log(self, request_id: str, strategy: str, outcome: str, **kwargs: Any) -> None:
        if self._logger:
            level = logging.INFO if outcome == "created" else logging.WARNING
            self._logger(
                request_id,
                "link",
                level=level,
                crm_module=self._module,
                link_strategy=strategy,
                link_outcome=outcome,
                **kwargs,
            )

    async def _attempt(
        self, strategy: LinkStrategy, base_record: dict[str, Any], lead_id: str
    ) -> RecordOutcome:
        payload = strategy.build(base_record, lead_id)
        try:
            body = await self._crm_client.request(
                self._module, method="POST", body={"data": [payload]}
            )
        except UpstreamError as err:
            # Field errors come back as 4xx with the same per-record envelope.
            # Outages and transport errors are not record failures.
            if err.status >= 500 or not _is_record_envelope(err.body):
                raise
            body = err.body
        return RecordOutcome.from_response(body)

    async def create(
        self, base_record: dict[str, Any], lead_id: str, request_id: str = "unknown"
    ) -> str:
        """
        Create a record linked to the lead, degrading to an unlinked record.

        A structured attempt whose error names its own relationship field moves
        on to the next structured strategy. Any other failure skips straight to
        the unlinked fallback.

        Args:
            base_record: Record fields without any relationship field
            lead_id: CRM id of the lead to link
            request_id: Request identifier for logging

        Returns:
            CRM id of the created record

        Raises:
            RecordCreateError: If the unlinked fallback fails too
            UpstreamError: If the CRM is unavailable or the request did not complete
        """
        responses: list[Any] = []

        for strategy in self._strategies:
            outcome = await self._attempt(strategy, base_record, lead_id)
            responses.append(outcome.raw)

            if outcome.succeeded:
                self._log(request_id, strategy.name, "created", record_id=outcome.record_id)
                return outcome.record_id

            if strategy.field is None or not is_field_rejected(outcome, strategy.field):
                self._log(request_id, strategy.name, "failed", code=outcome.code)
                break

            self._log(request_id, strategy.name, "field_rejected", code=outcome.code)

        outcome = await self._attempt(self._fallback, base_record, lead_id)
        responses.append(outcome.raw)

        if outcome.succeeded:
            self._log(request_id, self._fallback.name, "created", record_id=outcome.record_id)
            return outcome.record_id

        self._log(request_id, self._fallback.name, "failed", code=outcome.code)
        raise self._error_class(first_response=responses[0], final_response=outcome.raw)
