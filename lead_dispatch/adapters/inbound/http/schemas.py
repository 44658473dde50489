"""HTTP adapter schemas for external integrations."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class IncomingCallWebhook(BaseModel):
    """Inbound-call provider webhook payload schema."""

    callerNumber: Optional[str] = None  # Number that called in

    model_config = ConfigDict(
        coerce_numbers_to_str=True,
        json_schema_extra={
            "example": {
                "callerNumber": "+919876543210",
            }
        }
    )
