"""Zip Code (pincode) value object"""

import re
from dataclasses import dataclass

from bookshop.infrastructure.utilities.constants import ValidationSettings
from bookshop.infrastructure.utilities.exceptions import ValidationError


@dataclass(frozen=True)
class ZipCode:
    """Six-digit Indian postal pincode"""

    value: str

    def __post_init__(self):
        cleaned = (self.value or "").strip()
        if not re.match(ValidationSettings.ZIP_CODE_PATTERN, cleaned):
            raise ValidationError("Enter valid 6-digit pincode", field="zip_code")
        object.__setattr__(self, "value", cleaned)

    def __str__(self) -> str:
        return self.value
