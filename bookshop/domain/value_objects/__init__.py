"""
Domain value objects
"""

from .address import Address, AddressType
from .customer_id import CustomerId
from .payment import PaymentMethod, PaymentSelection
from .phone_number import PhoneNumber
from .zip_code import ZipCode

__all__ = [
    "Address",
    "AddressType",
    "CustomerId",
    "PaymentMethod",
    "PaymentSelection",
    "PhoneNumber",
    "ZipCode",
]
