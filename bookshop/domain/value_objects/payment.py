"""
Payment selection value object

The chosen payment method plus the details the payment step collected.
Card details are reduced to the last four digits and expiry on creation.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from bookshop.infrastructure.utilities.constants import (
    PaymentSettings,
    ValidationSettings,
)
from bookshop.infrastructure.utilities.exceptions import ValidationError
from bookshop.infrastructure.utilities.helpers import digits_only, luhn_valid


class PaymentMethod(str, Enum):
    """Supported payment methods"""

    UPI = "upi"
    CARD = "card"
    NETBANKING = "netbanking"
    WALLET = "wallet"
    COD = "cod"

    @property
    def label(self) -> str:
        return {
            PaymentMethod.UPI: "UPI",
            PaymentMethod.CARD: "Credit / Debit Card",
            PaymentMethod.NETBANKING: "Net Banking",
            PaymentMethod.WALLET: "Wallet",
            PaymentMethod.COD: "Cash on Delivery",
        }[self]


def _parse_expiry(expiry: str, today: date) -> str:
    match = re.match(r"^\s*(\d{2})\s*/\s*(\d{2})\s*$", expiry or "")
    if not match:
        raise ValidationError("Expiry must be MM/YY", field="expiry")
    month, year = int(match.group(1)), 2000 + int(match.group(2))
    if not 1 <= month <= 12:
        raise ValidationError("Expiry must be MM/YY", field="expiry")
    if (year, month) < (today.year, today.month):
        raise ValidationError("Card has expired", field="expiry")
    return f"{month:02d}/{year % 100:02d}"


@dataclass(frozen=True)
class PaymentSelection:
    """A payment method with validated, non-sensitive details"""

    method: PaymentMethod
    details: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "method", PaymentMethod(self.method))
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    @classmethod
    def create(
        cls,
        method: str,
        details: Optional[Mapping[str, Any]] = None,
        today: Optional[date] = None,
    ) -> "PaymentSelection":
        """Validate raw payment step input and build a selection"""
        try:
            payment_method = PaymentMethod(method)
        except ValueError as exc:
            raise ValidationError(f"Unknown payment method: {method}", field="method") from exc

        details = dict(details or {})
        today = today or date.today()

        if payment_method == PaymentMethod.UPI:
            vpa = (details.get("vpa") or "").strip()
            if not re.match(ValidationSettings.UPI_PATTERN, vpa):
                raise ValidationError("Enter a valid UPI ID like name@bank", field="vpa")
            clean = {"vpa": vpa.lower()}

        elif payment_method == PaymentMethod.CARD:
            number = digits_only(details.get("number", ""))
            if not (
                ValidationSettings.MIN_CARD_DIGITS
                <= len(number)
                <= ValidationSettings.MAX_CARD_DIGITS
            ) or not luhn_valid(number):
                raise ValidationError("Enter a valid card number", field="number")
            clean = {
                "last4": number[-4:],
                "expiry": _parse_expiry(details.get("expiry", ""), today),
            }

        elif payment_method == PaymentMethod.NETBANKING:
            bank = (details.get("bank") or "").lower()
            if bank not in PaymentSettings.NETBANKING_BANKS:
                raise ValidationError("Choose a supported bank", field="bank")
            clean = {"bank": bank}

        elif payment_method == PaymentMethod.WALLET:
            provider = (details.get("provider") or "").lower()
            if provider not in PaymentSettings.WALLETS:
                raise ValidationError("Choose a supported wallet", field="provider")
            clean = {"provider": provider}

        else:
            clean = {}

        return cls(payment_method, clean)

    @property
    def is_cod(self) -> bool:
        return self.method == PaymentMethod.COD

    def describe(self) -> str:
        """Short human readable description"""
        if self.method == PaymentMethod.UPI:
            return f"UPI ({self.details['vpa']})"
        if self.method == PaymentMethod.CARD:
            return f"Card •••• {self.details['last4']} (exp {self.details['expiry']})"
        if self.method == PaymentMethod.NETBANKING:
            return f"Net Banking ({PaymentSettings.NETBANKING_BANKS[self.details['bank']]})"
        if self.method == PaymentMethod.WALLET:
            return f"Wallet ({PaymentSettings.WALLETS[self.details['provider']]})"
        return self.method.label
