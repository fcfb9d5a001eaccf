"""
Delivery Address value object

A complete shipping address. Field problems are collected together so the
address step can show every error at once.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from bookshop.domain.value_objects.phone_number import PhoneNumber
from bookshop.domain.value_objects.zip_code import ZipCode
from bookshop.infrastructure.utilities.constants import ValidationSettings
from bookshop.infrastructure.utilities.exceptions import (
    AddressValidationError,
    ValidationError,
)

# zip code -> (city, state) or None when unknown
PincodeLookup = Callable[[str], Optional[Tuple[str, str]]]


class AddressType(str, Enum):
    """Kind of address"""

    HOME = "home"
    WORK = "work"
    OTHER = "other"


@dataclass(frozen=True)
class Address:
    """Immutable delivery address"""

    full_name: str
    phone: str
    street: str
    city: str
    state: str
    zip_code: str
    landmark: str = ""
    address_type: AddressType = AddressType.HOME
    country: str = "India"

    def __post_init__(self):
        errors = self.validate_fields(
            full_name=self.full_name,
            phone=self.phone,
            street=self.street,
            city=self.city,
            state=self.state,
            zip_code=self.zip_code,
            address_type=self.address_type,
        )
        if errors:
            raise AddressValidationError(errors)

        object.__setattr__(self, "full_name", self.full_name.strip())
        object.__setattr__(self, "phone", PhoneNumber(self.phone).value)
        object.__setattr__(self, "street", self.street.strip())
        object.__setattr__(self, "city", self.city.strip())
        object.__setattr__(self, "state", self.state.strip())
        object.__setattr__(self, "zip_code", ZipCode(self.zip_code).value)
        object.__setattr__(self, "landmark", (self.landmark or "").strip())
        object.__setattr__(self, "address_type", AddressType(self.address_type))
        object.__setattr__(self, "country", "India")

    @staticmethod
    def validate_fields(**fields) -> Dict[str, str]:
        """Return a {field: message} mapping for every invalid field"""
        errors: Dict[str, str] = {}

        full_name = (fields.get("full_name") or "").strip()
        if not full_name:
            errors["full_name"] = "Name is required"
        elif len(full_name) > ValidationSettings.MAX_NAME_LENGTH:
            errors["full_name"] = "Name is too long"

        try:
            PhoneNumber(fields.get("phone") or "")
        except ValidationError as exc:
            errors["phone"] = str(exc)

        street = (fields.get("street") or "").strip()
        if not street:
            errors["street"] = "Address is required"
        elif len(street) > ValidationSettings.MAX_STREET_LENGTH:
            errors["street"] = "Address is too long"

        if not (fields.get("city") or "").strip():
            errors["city"] = "City is required"
        if not (fields.get("state") or "").strip():
            errors["state"] = "State is required"

        try:
            ZipCode(fields.get("zip_code") or "")
        except ValidationError as exc:
            errors["zip_code"] = str(exc)

        address_type = fields.get("address_type") or AddressType.HOME
        try:
            AddressType(address_type)
        except ValueError:
            errors["address_type"] = "Choose home, work or other"

        return errors

    @classmethod
    def create(
        cls,
        *,
        full_name: str,
        phone: str,
        street: str,
        zip_code: str,
        city: str = "",
        state: str = "",
        landmark: str = "",
        address_type: str = AddressType.HOME.value,
        lookup: Optional[PincodeLookup] = None,
    ) -> "Address":
        """Build an address, filling blank city and state from the pincode table"""
        zip_clean = (zip_code or "").strip()
        if lookup is not None and (not (city or "").strip() or not (state or "").strip()):
            found = lookup(zip_clean)
            if found:
                city = (city or "").strip() or found[0]
                state = (state or "").strip() or found[1]

        return cls(
            full_name=full_name,
            phone=phone,
            street=street,
            city=city,
            state=state,
            zip_code=zip_clean,
            landmark=landmark,
            address_type=address_type,
        )

    def single_line(self) -> str:
        """Address as one display line"""
        parts = [self.street]
        if self.landmark:
            parts.append(f"near {self.landmark}")
        parts.append(f"{self.city}, {self.state} {self.zip_code}")
        return ", ".join(parts)

    def to_dict(self) -> Dict[str, str]:
        """Serialize for the order API"""
        return {
            "fullName": self.full_name,
            "phone": self.phone,
            "street": self.street,
            "landmark": self.landmark,
            "city": self.city,
            "state": self.state,
            "zipCode": self.zip_code,
            "country": self.country,
            "addressType": self.address_type.value,
        }

    def __str__(self) -> str:
        return f"{self.full_name}, {self.single_line()}"
