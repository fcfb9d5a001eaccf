"""
Repository implementations
"""

from .http_order_repository import HttpOrderRepository
from .in_memory_cart_repository import InMemoryCartRepository
from .in_memory_coupon_repository import InMemoryCouponRepository
from .in_memory_identity_provider import InMemoryIdentityProvider
from .in_memory_order_repository import InMemoryOrderRepository
from .sqlalchemy_book_repository import SQLAlchemyBookRepository
from .sqlalchemy_cart_repository import SQLAlchemyCartRepository

__all__ = [
    "HttpOrderRepository",
    "InMemoryCartRepository",
    "InMemoryCouponRepository",
    "InMemoryIdentityProvider",
    "InMemoryOrderRepository",
    "SQLAlchemyBookRepository",
    "SQLAlchemyCartRepository",
]
