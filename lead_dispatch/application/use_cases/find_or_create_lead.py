"""Find or create lead use case."""

import logging
from typing import Any, Callable, Optional

from lead_dispatch.application.ports.crm_client import CrmClient
from lead_dispatch.domain.errors import DispatchError, LeadCreateError
from lead_dispatch.domain.value_objects.record_outcome import RecordOutcome

LEADS_MODULE = "Leads"
DEFAULT_LAST_NAME = "Incoming Lead"
DEFAULT_COMPANY = "Unknown"

_UTM_LABELS = {
    "utm_source": "UTM Source",
    "utm_medium": "UTM Medium",
    "utm_campaign": "UTM Campaign",
}


def build_lead_description(
    message: Optional[str] = None,
    source_url: Optional[str] = None,
    utm: Optional[dict[str, str]] = None,
) -> Optional[str]:
    """
    Combine web-form context into a lead description.

    Args:
        message: Free-text message from the visitor
        source_url: Page the form was submitted from
        utm: UTM parameters keyed by their query-string names

    Returns:
        Multi-line description, or None if there is nothing to say
    """
    lines = []
    if message:
        lines.append(f"Message: {message}")
    if source_url:
        lines.append(f"Source URL: {source_url}")
    for key, value in (utm or {}).items():
        if value:
            lines.append(f"{_UTM_LABELS.get(key, key)}: {value}")
    return "\n".join(lines) if lines else None


class FindOrCreateLead:
    """Use case resolving a phone number to a CRM lead id."""

    def __init__(
        self,
        crm_client: CrmClient,
        product_line_field: str = "Product_Line",
        logger: Optional[Callable[..., None]] = None,
    ) -> None:
        """
        Initialize find or create lead use case.

        Args:
            crm_client: CRM client port
            product_line_field: Custom field API name that stores the product line
            logger: Optional logger function (request_id, component, **kwargs)
        """
        self._crm_client = crm_client
        self._product_line_field = product_line_field
        self._logger = logger

    def _log(self, request_id: str, **kwargs: Any) -> None:
        if self._logger:
            self._logger(request_id, "lead", **kwargs)

    async def find(self, phone: str, request_id: str = "unknown") -> Optional[str]:
        """
        Search for a lead by exact phone number.

        Search failures count as "no match": a missed match creates a duplicate
        lead instead of failing the request.

        Args:
            phone: Normalized phone number
            request_id: Request identifier for logging

        Returns:
            Lead id, or None if no lead matched or the search failed
        """
        try:
            body = await self._crm_client.request(
                f"{LEADS_MODULE}/search", method="GET", params={"phone": phone}
            )
        except DispatchError as err:
            self._log(
                request_id,
                level=logging.WARNING,
                lead_search="failed",
                error=type(err).__name__,
            )
            return None

        records = body.get("data") if isinstance(body, dict) else None
        if not isinstance(records, list) or not records or not isinstance(records[0], dict):
            return None
        lead_id = records[0].get("id")
        return str(lead_id) if lead_id is not None else None

    def build_payload(
        self,
        phone: str,
        name: Optional[str] = None,
        product_line: Optional[str] = None,
        email: Optional[str] = None,
        description: Optional[str] = None,
        source: str = "Website",
    ) -> dict[str, Any]:
        """
        Build the lead creation record.

        Args:
            phone: Normalized phone number
            name: Contact name (defaults to a placeholder last name)
            product_line: Product line of interest
            email: Contact email
            description: Free-text description
            source: Lead source tag (e.g., 'Website', 'Incoming Call')

        Returns:
            CRM record dictionary
        """
        record: dict[str, Any] = {
            "Last_Name": (name or "").strip() or DEFAULT_LAST_NAME,
            "Phone": phone,
            "Company": DEFAULT_COMPANY,
            "Lead_Source": source,
        }
        if product_line:
            record[self._product_line_field] = product_line
        if email:
            record["Email"] = email
        if description:
            record["Description"] = description
        return record

    async def execute(
        self,
        phone: str,
        name: Optional[str] = None,
        product_line: Optional[str] = None,
        email: Optional[str] = None,
        message: Optional[str] = None,
        source_url: Optional[str] = None,
        utm: Optional[dict[str, str]] = None,
        source: str = "Website",
        request_id: str = "unknown",
    ) -> str:
        """
        Return the id of the lead for this phone number, creating it if needed.

        Args:
            phone: Normalized phone number
            name: Contact name
            product_line: Product line of interest
            email: Contact email
            message: Visitor message
            source_url: Page the request came from
            utm: UTM parameters
            source: Lead source tag
            request_id: Request identifier for logging

        Returns:
            CRM lead id

        Raises:
            LeadCreateError: If the CRM rejected the new lead record
        """
        lead_id = await self.find(phone, request_id=request_id)
        if lead_id:
            self._log(request_id, lead_id=lead_id, lead_action="found")
            return lead_id

        record = self.build_payload(
            phone,
            name=name,
            product_line=product_line,
            email=email,
            description=build_lead_description(message, source_url, utm),
            source=source,
        )
        body = await self._crm_client.request(LEADS_MODULE, method="POST", body={"data": [record]})
        outcome = RecordOutcome.from_response(body)

        if outcome.succeeded:
            self._log(request_id, lead_id=outcome.record_id, lead_action="created")
            return outcome.record_id

        if outcome.is_duplicate:
            # Duplicate check caught what the search missed
            self._log(request_id, lead_id=outcome.record_id, lead_action="duplicate")
            return outcome.record_id

        self._log(request_id, level=logging.WARNING, lead_action="create_failed", code=outcome.code)
        raise LeadCreateError(first_response=body, final_response=body)
