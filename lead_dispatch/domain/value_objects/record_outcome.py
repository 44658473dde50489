"""Per-record outcome parsed from a CRM write response."""

from dataclasses import dataclass, field
from typing import Any, Optional

SUCCESS_CODE = "SUCCESS"
DUPLICATE_CODE = "DUPLICATE_DATA"


@dataclass(frozen=True)
class RecordOutcome:
    """
    Outcome of a single record inside a ``{"data": [...]}`` envelope.

    The CRM answers 2xx even when an individual record fails, so success is
    read from the embedded ``code`` rather than the HTTP status.
    """

    code: Optional[str] = None
    record_id: Optional[str] = None
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)
    raw: Any = None

    @classmethod
    def from_response(cls, body: Any) -> "RecordOutcome":
        """
        Parse the first record of a write response.

        Args:
            body: Parsed JSON body (or whatever the CRM returned)

        Returns:
            RecordOutcome; unknown shapes yield an outcome with no code
        """
        entry: Any = body
        if isinstance(body, dict) and isinstance(body.get("data"), list):
            entry = body["data"][0] if body["data"] else {}
        if not isinstance(entry, dict):
            return cls(raw=body)

        details = entry.get("details") if isinstance(entry.get("details"), dict) else {}
        record_id = details.get("id")
        duplicate = details.get("duplicate_record")
        if record_id is None and isinstance(duplicate, dict):
            record_id = duplicate.get("id")
        return cls(
            code=entry.get("code"),
            record_id=str(record_id) if record_id is not None else None,
            message=str(entry.get("message") or ""),
            details=details,
            raw=body,
        )

    @property
    def succeeded(self) -> bool:
        """True if the record was created and has an id."""
        return self.code == SUCCESS_CODE and self.record_id is not None

    @property
    def is_duplicate(self) -> bool:
        """True if the CRM refused the record as a duplicate of an existing one."""
        return self.code == DUPLICATE_CODE and self.record_id is not None
