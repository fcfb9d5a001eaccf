"""
Pricing calculator

Pure computation of the price breakdown shown on the cart, the order summary
and the review step. All amounts are integer minor units.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from bookshop.domain.value_objects.payment import PaymentMethod
from bookshop.infrastructure.utilities.constants import PricingSettings
from bookshop.infrastructure.utilities.helpers import round_half_up


@dataclass(frozen=True)
class PricingPolicy:
    """Shipping, surcharge and tax rules"""

    free_shipping_threshold: int = PricingSettings.FREE_SHIPPING_THRESHOLD
    shipping_charge: int = PricingSettings.SHIPPING_CHARGE
    cod_surcharge: int = PricingSettings.COD_SURCHARGE
    tax_rate: Decimal = Decimal(PricingSettings.TAX_RATE)

    @classmethod
    def from_settings(cls, settings) -> "PricingPolicy":
        return cls(
            free_shipping_threshold=settings.free_shipping_threshold,
            shipping_charge=settings.shipping_charge,
            cod_surcharge=settings.cod_surcharge,
            tax_rate=Decimal(str(settings.tax_rate)),
        )


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: int
    discount: int
    shipping_cost: int
    cod_surcharge: int
    tax_amount: int
    total: int
    amount_for_free_shipping: int

    @property
    def has_free_shipping(self) -> bool:
        return self.shipping_cost == 0

    def to_payload(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "shippingCost": self.shipping_cost,
            "codCharge": self.cod_surcharge,
            "taxAmount": self.tax_amount,
            "discount": self.discount,
            "total": self.total,
        }


DEFAULT_POLICY = PricingPolicy()


def calculate_pricing(
    subtotal: int,
    payment_method: Optional[Union[PaymentMethod, str]] = None,
    discount: int = 0,
    policy: PricingPolicy = DEFAULT_POLICY,
) -> PriceBreakdown:
    """
    Compute the price breakdown for a cart subtotal

    Tax is charged on the subtotal before any discount. The discount is
    clamped to [0, subtotal] and the total never goes below zero.
    """
    subtotal = max(0, int(subtotal))
    below_threshold = subtotal < policy.free_shipping_threshold

    shipping_cost = policy.shipping_charge if below_threshold else 0
    is_cod = payment_method is not None and PaymentMethod(payment_method) == PaymentMethod.COD
    cod_surcharge = policy.cod_surcharge if is_cod and below_threshold else 0
    tax_amount = round_half_up(Decimal(subtotal) * policy.tax_rate)
    effective_discount = min(max(0, int(discount)), subtotal)

    total = subtotal - effective_discount + shipping_cost + tax_amount + cod_surcharge

    return PriceBreakdown(
        subtotal=subtotal,
        discount=effective_discount,
        shipping_cost=shipping_cost,
        cod_surcharge=cod_surcharge,
        tax_amount=tax_amount,
        total=max(0, total),
        amount_for_free_shipping=max(0, policy.free_shipping_threshold - subtotal),
    )
