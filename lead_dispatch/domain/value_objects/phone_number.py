"""Phone number value object."""

import re
from dataclasses import dataclass
from typing import Optional

from lead_dispatch.domain.errors import ValidationError

_NON_DIGITS = re.compile(r"\D")


@dataclass(frozen=True)
class PhoneNumber:
    """Phone number normalized for CRM lookups."""

    value: str

    @classmethod
    def parse(cls, raw: Optional[str], default_country_code: str = "") -> "PhoneNumber":
        """
        Normalize a user-supplied phone number.

        Local 10-digit numbers get the deployment's country code. A leading
        trunk zero on an 11-digit local number is dropped first. Numbers that
        carry the country code without the plus sign get it added. Numbers that
        already start with '+' keep their country code.

        Args:
            raw: Phone number as received
            default_country_code: Country code without '+' (e.g., '91'); empty disables

        Returns:
            PhoneNumber instance

        Raises:
            ValidationError: If the number is missing or has no digits
        """
        if raw is None or not str(raw).strip():
            raise ValidationError("Phone number is required")

        text = str(raw).strip()
        digits = _NON_DIGITS.sub("", text)
        if not digits:
            raise ValidationError("Phone number must contain digits")

        if text.startswith("+"):
            return cls(f"+{digits}")

        if default_country_code:
            if len(digits) == 11 and digits.startswith("0"):
                digits = digits[1:]
            if len(digits) == 10:
                return cls(f"+{default_country_code}{digits}")
            if len(digits) == 10 + len(default_country_code) and digits.startswith(
                default_country_code
            ):
                return cls(f"+{digits}")

        return cls(digits)

    def __str__(self) -> str:
        return self.value
