"""
Domain repository interfaces
"""

from .book_repository import BookListing, BookRepository
from .cart_repository import CartRepository
from .coupon_repository import CouponRepository
from .identity_provider import IdentityProvider
from .order_repository import OrderRepository

__all__ = [
    "BookListing",
    "BookRepository",
    "CartRepository",
    "CouponRepository",
    "IdentityProvider",
    "OrderRepository",
]
