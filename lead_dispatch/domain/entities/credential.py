"""OAuth credential entity."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional


@dataclass(frozen=True)
class Credential:
    """Bearer token and the moment it stops being accepted."""

    token: str
    expires_at: datetime

    @classmethod
    def issued(cls, token: str, expires_in: int, now: Optional[datetime] = None) -> "Credential":
        """
        Build a credential from a token endpoint answer.

        Args:
            token: Access token
            expires_in: Lifetime in seconds
            now: Issue time (defaults to current UTC time)

        Returns:
            Credential instance
        """
        now = now or datetime.now(timezone.utc)
        return cls(token=token, expires_at=now + timedelta(seconds=expires_in))

    def is_valid(self, now: Optional[datetime] = None, skew_seconds: int = 60) -> bool:
        """
        Check whether the token can still be used.

        Args:
            now: Reference time (defaults to current UTC time)
            skew_seconds: Safety margin before the real expiry

        Returns:
            True if a token is present and does not expire within the skew window
        """
        if not self.token:
            return False
        now = now or datetime.now(timezone.utc)
        return now < self.expires_at - timedelta(seconds=skew_seconds)

    def remaining_seconds(self, now: Optional[datetime] = None) -> int:
        """Seconds left before expiry (never negative)."""
        now = now or datetime.now(timezone.utc)
        return max(0, int((self.expires_at - now).total_seconds()))
