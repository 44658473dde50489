"""Create follow-up task use case."""

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from lead_dispatch.application.ports.crm_client import CrmClient
from lead_dispatch.application.use_cases.linked_record_writer import (
    WHAT_FIELD,
    WHO_FIELD,
    LinkedRecordWriter,
)
from lead_dispatch.domain.errors import DispatchError, TaskCreateError
from lead_dispatch.domain.value_objects.crm_datetime import due_date

TASKS_MODULE = "Tasks"
OPEN_TASK_STATUSES = ("Not Started", "In Progress")


class CreateFollowUpTask:
    """Use case finding or creating the follow-up task for a lead."""

    def __init__(
        self,
        crm_client: CrmClient,
        due_hours: int = 24,
        dedupe: bool = True,
        clock: Optional[Callable[[], datetime]] = None,
        logger: Optional[Callable[..., None]] = None,
    ) -> None:
        """
        Initialize create follow-up task use case.

        Args:
            crm_client: CRM client port
            due_hours: Hours from now until the task is due
            dedupe: Reuse an open task already linked to the lead
            clock: Optional callable returning the current local datetime
            logger: Optional logger function (request_id, component, **kwargs)
        """
        self._crm_client = crm_client
        self._due_hours = due_hours
        self._dedupe = dedupe
        self._clock = clock or (lambda: datetime.now().astimezone())
        self._logger = logger
        self._writer = LinkedRecordWriter(crm_client, TASKS_MODULE, TaskCreateError, logger=logger)

    def _log(self, request_id: str, **kwargs: Any) -> None:
        if self._logger:
            self._logger(request_id, "task", **kwargs)

    async def find_open_task(self, lead_id: str, request_id: str = "unknown") -> Optional[str]:
        """
        Find an open task already linked to the lead.

        Args:
            lead_id: CRM lead id
            request_id: Request identifier for logging

        Returns:
            Task id, or None if there is none or the search failed
        """
        criteria = (
            f"(({WHO_FIELD.api_name}:equals:{lead_id})or({WHAT_FIELD.api_name}:equals:{lead_id}))"
        )
        try:
            body = await self._crm_client.request(
                f"{TASKS_MODULE}/search", method="GET", params={"criteria": criteria}
            )
        except DispatchError as err:
            self._log(
                request_id,
                level=logging.WARNING,
                task_search="failed",
                error=type(err).__name__,
            )
            return None

        records = body.get("data") if isinstance(body, dict) else None
        if not isinstance(records, list):
            return None
        for record in records:
            if not isinstance(record, dict):
                continue
            if record.get("Status") in OPEN_TASK_STATUSES and record.get("id") is not None:
                return str(record["id"])
        return None

    def build_record(
        self,
        phone: str,
        name: Optional[str] = None,
        product_line: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Build the task record without any relationship field.

        Args:
            phone: Normalized phone number (kept in the subject)
            name: Contact name
            product_line: Product line of interest

        Returns:
            CRM record dictionary
        """
        who = name.strip() if name and name.strip() else "Lead"
        description = f"Call back {who} at {phone}."
        if product_line:
            description += f" Interested in: {product_line}."
        return {
            "Subject": f"Follow up: {who} ({phone})",
            "Status": "Not Started",
            "Due_Date": due_date(self._clock(), self._due_hours).isoformat(),
            "Description": description,
        }

    async def execute(
        self,
        lead_id: str,
        phone: str,
        name: Optional[str] = None,
        product_line: Optional[str] = None,
        request_id: str = "unknown",
    ) -> str:
        """
        Return the id of an open follow-up task for the lead, creating one if needed.

        Args:
            lead_id: CRM lead id
            phone: Normalized phone number
            name: Contact name
            product_line: Product line of interest
            request_id: Request identifier for logging

        Returns:
            CRM task id

        Raises:
            TaskCreateError: If every linkage strategy failed
        """
        if self._dedupe:
            task_id = await self.find_open_task(lead_id, request_id=request_id)
            if task_id:
                self._log(request_id, task_id=task_id, task_action="found")
                return task_id

        record = self.build_record(phone, name=name, product_line=product_line)
        task_id = await self._writer.create(record, lead_id, request_id=request_id)
        self._log(request_id, task_id=task_id, task_action="created")
        return task_id
