"""
Order DTOs

Data Transfer Objects for order submission.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class OrderConfirmation:
    """Returned after the order API accepted an order"""
    order_id: str
    estimated_delivery_date: date
    total: int


@dataclass
class PlaceOrderResponse:
    """Response for order placement"""
    success: bool
    confirmation: Optional[OrderConfirmation] = None
    error_message: Optional[str] = None
    retryable: bool = False
    redirect_to_cart: bool = False
    # The total changed since the review step was shown
    repriced: bool = False
