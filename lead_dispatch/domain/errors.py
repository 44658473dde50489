"""Error taxonomy for the dispatch workflow."""

from typing import Any, Optional


class DispatchError(Exception):
    """Base class for errors surfaced by the dispatch workflow."""

    status_code: int = 500

    def __init__(self, message: str, body: Any = None) -> None:
        """
        Initialize dispatch error.

        Args:
            message: Human-readable error message
            body: Optional upstream payload kept for diagnostics
        """
        super().__init__(message)
        self.message = message
        self.body = body


class ValidationError(DispatchError):
    """Inbound request is missing a required field."""

    status_code = 400


class AuthError(DispatchError):
    """OAuth token refresh failed."""

    def __init__(self, message: str, status: Optional[int] = None, body: Any = None) -> None:
        super().__init__(message, body)
        self.status = status


class UpstreamError(DispatchError):
    """CRM answered with a non-2xx status."""

    def __init__(self, status: int, body: Any = None, message: Optional[str] = None) -> None:
        super().__init__(message or f"CRM request failed with status {status}", body)
        self.status = status
        # Statuses below 400 here are redirects or odd 1xx answers
        self.status_code = status if status >= 400 else 502


class RecordCreateError(DispatchError):
    """CRM accepted the request but rejected the record itself."""

    status_code = 422
    record_type = "record"

    def __init__(
        self,
        message: Optional[str] = None,
        first_response: Any = None,
        final_response: Any = None,
    ) -> None:
        """
        Initialize record create error.

        Args:
            message: Optional error message (defaults to a per-record-type message)
            first_response: Raw response of the first attempt
            final_response: Raw response of the last attempt
        """
        body = {"first_response": first_response, "final_response": final_response}
        super().__init__(message or f"Failed to create {self.record_type}", body)
        self.first_response = first_response
        self.final_response = final_response


class LeadCreateError(RecordCreateError):
    """Lead creation returned a non-success record status."""

    record_type = "lead"


class TaskCreateError(RecordCreateError):
    """Every task linkage strategy failed, including the unlinked fallback."""

    record_type = "task"


class CallLogCreateError(RecordCreateError):
    """Every call log linkage strategy failed, including the unlinked fallback."""

    record_type = "call log"


class VoiceCallError(DispatchError):
    """Voice-agent provider rejected the outbound call."""

    status_code = 502

    def __init__(self, status: int, body: Any = None) -> None:
        super().__init__(f"Voice provider request failed with status {status}", body)
        self.status = status


class VoiceNotConfiguredError(DispatchError):
    """Voice-agent provider credentials are not configured."""

    status_code = 503
