"""
Utility functions for the bookshop checkout
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from bookshop.infrastructure.utilities.constants import PricingSettings


def format_price(amount: int, symbol: str = PricingSettings.CURRENCY_SYMBOL) -> str:
    """Format an amount in minor units for display, e.g. 35050 -> '₹350.50'"""
    sign = "-" if amount < 0 else ""
    rupees, paise = divmod(abs(amount), 100)
    return f"{sign}{symbol}{rupees:,}.{paise:02d}"


def round_half_up(value: Decimal) -> int:
    """Round a Decimal to the nearest integer, halves away from zero"""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def digits_only(value: str) -> str:
    """Strip every non-digit character"""
    return "".join(filter(str.isdigit, value or ""))


def sanitize_phone_number(phone: str) -> str:
    """Normalize an Indian mobile number to its 10 local digits"""
    digits = digits_only(phone)

    if len(digits) == 12 and digits.startswith("91"):
        return digits[2:]
    if len(digits) == 11 and digits.startswith("0"):
        return digits[1:]
    return digits


def mask_card_number(number: str) -> str:
    """Keep only the last four digits of a card number"""
    digits = digits_only(number)
    return f"•••• {digits[-4:]}" if len(digits) >= 4 else "••••"


def luhn_valid(number: str) -> bool:
    """Validate a card number with the Luhn checksum"""
    digits = [int(d) for d in digits_only(number)]
    if not digits:
        return False
    checksum = 0
    for index, digit in enumerate(reversed(digits)):
        if index % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        checksum += digit
    return checksum % 10 == 0


def format_delivery_date(value: date) -> str:
    """Format a delivery date like 'Tue, 21 Oct'"""
    return value.strftime("%a, %d %b")
