"""Dispatch DTOs."""

from typing import Any, Optional

from pydantic import ConfigDict

from lead_dispatch.application.dtos.base import DTO, CamelDTO


class DispatchRequest(DTO):
    """Inbound dispatch request from a web form or call webhook."""

    phone: Optional[str] = None
    name: Optional[str] = None
    product_line: Optional[str] = None
    email: Optional[str] = None
    message: Optional[str] = None
    source_url: Optional[str] = None
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "name": "Asha Rao",
                "phone": "9876543210",
                "product_line": "Solar Inverters",
                "email": "asha@example.com",
                "message": "Please call me back about pricing",
                "source_url": "https://example.com/inverters",
                "utm_source": "google",
                "utm_medium": "cpc",
                "utm_campaign": "spring_sale",
            }
        },
    )

    @property
    def utm(self) -> dict[str, str]:
        """UTM parameters that were actually supplied."""
        values = {
            "utm_source": self.utm_source,
            "utm_medium": self.utm_medium,
            "utm_campaign": self.utm_campaign,
        }
        return {key: value for key, value in values.items() if value}


class DispatchResult(CamelDTO):
    """Identifiers of every CRM record created or found for one dispatch."""

    success: bool = True
    lead_id: str
    task_id: str
    call_id: Optional[str] = None
    call_result: Optional[Any] = None
    call_error: Optional[str] = None
    call_log_error: Optional[str] = None


class CallNowRequest(DTO):
    """Request to place an outbound call without touching the CRM."""

    phone: Optional[str] = None
    name: Optional[str] = None


class CallNowResult(CamelDTO):
    """Provider answer for a direct outbound call."""

    success: bool = True
    phone: str
    call_result: Optional[Any] = None
