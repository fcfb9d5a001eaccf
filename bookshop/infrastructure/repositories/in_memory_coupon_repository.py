"""
In-memory coupon repository

Coupons come from the configured table: ``percent`` coupons take a share of
the subtotal, ``flat`` coupons a fixed amount. Both may require a minimum
subtotal.
"""

import logging
from decimal import Decimal
from typing import Mapping

from bookshop.domain.repositories.coupon_repository import CouponRepository
from bookshop.infrastructure.configuration.config import CouponRule
from bookshop.infrastructure.utilities.exceptions import CouponError
from bookshop.infrastructure.utilities.helpers import format_price, round_half_up


class InMemoryCouponRepository(CouponRepository):
    """Coupon validation against a fixed table"""

    def __init__(self, coupons: Mapping[str, CouponRule]):
        self._coupons = {code.upper(): rule for code, rule in coupons.items()}
        self._logger = logging.getLogger(self.__class__.__name__)

    async def validate(self, code: str, subtotal: int) -> int:
        normalized = (code or "").strip().upper()
        if not normalized:
            raise CouponError(normalized, "Please enter a coupon code.")

        rule = self._coupons.get(normalized)
        if rule is None:
            raise CouponError(normalized, "This coupon code is not valid.")

        if subtotal < rule.min_subtotal:
            raise CouponError(
                normalized,
                f"Add books worth {format_price(rule.min_subtotal - subtotal)} more to use this coupon.",
            )

        if rule.kind == "percent":
            discount = round_half_up(Decimal(subtotal) * Decimal(rule.value) / Decimal(100))
        else:
            discount = rule.value
        return min(discount, subtotal)
