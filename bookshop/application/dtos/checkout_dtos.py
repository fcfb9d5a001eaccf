"""
Checkout DTOs

Requests and responses for the checkout flow.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from bookshop.domain.entities.checkout_session import CheckoutSession
from bookshop.domain.services.delivery import DeliveryEstimate
from bookshop.domain.services.pricing import PriceBreakdown


@dataclass
class AddressRequest:
    """Raw address form input"""
    full_name: str
    phone: str
    street: str
    zip_code: str
    city: str = ""
    state: str = ""
    landmark: str = ""
    address_type: str = "home"


@dataclass
class PaymentRequest:
    """Raw payment step input"""
    method: str
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class CheckoutResponse:
    """
    Result of a checkout operation

    ``redirect_to_cart`` means the flow has been exited because the cart is
    empty; the caller shows the cart view instead of an error.
    """
    success: bool
    session: Optional[CheckoutSession] = None
    error_message: Optional[str] = None
    field_errors: Dict[str, str] = field(default_factory=dict)
    redirect_to_cart: bool = False


@dataclass
class OrderSummary:
    """Everything the review step shows"""
    session: CheckoutSession
    pricing: PriceBreakdown
    delivery: Optional[DeliveryEstimate] = None
