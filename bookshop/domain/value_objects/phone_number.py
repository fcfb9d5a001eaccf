"""
Phone Number value object

Represents a validated Indian mobile number.
"""

import re
from dataclasses import dataclass
from typing import ClassVar

from bookshop.infrastructure.utilities.constants import ValidationSettings
from bookshop.infrastructure.utilities.exceptions import ValidationError
from bookshop.infrastructure.utilities.helpers import sanitize_phone_number


@dataclass(frozen=True)
class PhoneNumber:
    """
    Ten-digit mobile number starting with 6-9
    """

    value: str

    MOBILE_PATTERN: ClassVar[str] = ValidationSettings.PHONE_PATTERN

    def __post_init__(self):
        """Validate phone number on creation"""
        if not self.value:
            raise ValidationError("Phone number is required", field="phone")

        normalized = sanitize_phone_number(self.value)
        if not re.match(self.MOBILE_PATTERN, normalized):
            raise ValidationError("Enter valid 10-digit phone", field="phone")

        # Use object.__setattr__ because the class is frozen
        object.__setattr__(self, "value", normalized)

    def display_format(self) -> str:
        """Return phone number in display format: +91 98765 43210"""
        return f"+91 {self.value[:5]} {self.value[5:]}"

    def __str__(self) -> str:
        return self.value
