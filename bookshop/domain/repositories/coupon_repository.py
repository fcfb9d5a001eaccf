"""Coupon repository interface"""

from abc import ABC, abstractmethod


class CouponRepository(ABC):
    """Coupon validation"""

    @abstractmethod
    async def validate(self, code: str, subtotal: int) -> int:
        """Return the discount in minor units or raise CouponError"""
