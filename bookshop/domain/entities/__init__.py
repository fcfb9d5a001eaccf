"""
Domain entities
"""

from .cart_entity import Cart, CartItem
from .checkout_session import CheckoutSession, CheckoutStep, SubmissionState
from .identity_entity import Identity

__all__ = [
    "Cart",
    "CartItem",
    "CheckoutSession",
    "CheckoutStep",
    "Identity",
    "SubmissionState",
]
