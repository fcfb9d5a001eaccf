"""
Tests for the pricing calculator
"""

from decimal import Decimal

import pytest

from bookshop.domain.services.pricing import PricingPolicy, calculate_pricing
from bookshop.domain.value_objects.payment import PaymentMethod


class TestShipping:
    """Shipping is charged only below the free shipping threshold"""

    @pytest.mark.parametrize(
        "subtotal, expected_shipping",
        [(0, 4000), (100, 4000), (49999, 4000), (50000, 0), (50001, 0), (120000, 0)],
    )
    def test_shipping_threshold(self, subtotal, expected_shipping):
        assert calculate_pricing(subtotal).shipping_cost == expected_shipping

    def test_amount_for_free_shipping(self):
        assert calculate_pricing(35000).amount_for_free_shipping == 15000
        assert calculate_pricing(50000).amount_for_free_shipping == 0
        assert calculate_pricing(80000).amount_for_free_shipping == 0

    def test_has_free_shipping(self):
        assert calculate_pricing(50000).has_free_shipping
        assert not calculate_pricing(49999).has_free_shipping


class TestCashOnDeliverySurcharge:
    """The COD surcharge applies only to COD orders below the threshold"""

    def test_cod_below_threshold(self):
        assert calculate_pricing(40000, "cod").cod_surcharge == 4000

    def test_cod_at_threshold(self):
        assert calculate_pricing(50000, PaymentMethod.COD).cod_surcharge == 0

    @pytest.mark.parametrize("method", ["upi", "card", "netbanking", "wallet", None])
    def test_other_methods_have_no_surcharge(self, method):
        assert calculate_pricing(40000, method).cod_surcharge == 0

    def test_unknown_method_is_rejected(self):
        with pytest.raises(ValueError):
            calculate_pricing(40000, "cheque")


class TestTax:
    def test_tax_is_five_percent_of_subtotal(self):
        assert calculate_pricing(35000).tax_amount == 1750

    @pytest.mark.parametrize("subtotal, expected_tax", [(10, 1), (30, 2), (29, 1), (9, 0)])
    def test_tax_rounds_half_up(self, subtotal, expected_tax):
        assert calculate_pricing(subtotal).tax_amount == expected_tax

    def test_tax_ignores_discount(self):
        assert calculate_pricing(35000, discount=5000).tax_amount == 1750


class TestTotals:
    """Full breakdowns"""

    def test_cod_order_below_threshold(self):
        pricing = calculate_pricing(15000 + 20000, "cod")
        assert pricing.subtotal == 35000
        assert pricing.shipping_cost == 4000
        assert pricing.cod_surcharge == 4000
        assert pricing.tax_amount == 1750
        assert pricing.total == 44750

    def test_prepaid_order_above_threshold(self):
        pricing = calculate_pricing(60000, "upi")
        assert pricing.shipping_cost == 0
        assert pricing.cod_surcharge == 0
        assert pricing.total == 63000

    def test_total_is_sum_of_parts(self):
        pricing = calculate_pricing(42000, "cod", discount=3000)
        assert pricing.total == (
            pricing.subtotal
            - pricing.discount
            + pricing.shipping_cost
            + pricing.tax_amount
            + pricing.cod_surcharge
        )

    def test_discount_is_clamped_to_subtotal(self):
        pricing = calculate_pricing(50000, discount=100000)
        assert pricing.discount == 50000
        assert pricing.shipping_cost == 0
        assert pricing.total == 2500

    def test_negative_discount_is_ignored(self):
        assert calculate_pricing(35000, discount=-500).discount == 0

    def test_total_is_never_negative(self):
        pricing = calculate_pricing(0, discount=500)
        assert pricing.discount == 0
        assert pricing.total >= 0

    def test_payload(self):
        payload = calculate_pricing(35000, "cod").to_payload()
        assert payload == {
            "subtotal": 35000,
            "shippingCost": 4000,
            "codCharge": 4000,
            "taxAmount": 1750,
            "discount": 0,
            "total": 44750,
        }


GST_POLICY = PricingPolicy(
    free_shipping_threshold=100000,
    shipping_charge=5000,
    cod_surcharge=2500,
    tax_rate=Decimal("0.18"),
)


class TestDeterminism:
    """Same inputs always give the same breakdown"""

    @pytest.mark.parametrize(
        "subtotal, method, discount, policy",
        [
            (35000, "cod", 0, None),
            (49999, PaymentMethod.UPI, 2500, None),
            (50000, None, 100000, None),
            (0, "cod", 0, None),
            (60000, "cod", 3333, GST_POLICY),
            (125050, PaymentMethod.CARD, 0, GST_POLICY),
        ],
    )
    def test_repeated_calls_agree(self, subtotal, method, discount, policy):
        kwargs = {"policy": policy} if policy else {}
        first = calculate_pricing(subtotal, method, discount, **kwargs)
        second = calculate_pricing(subtotal, method, discount, **kwargs)

        assert first == second
        assert first.to_payload() == second.to_payload()


class TestPricingPolicy:
    def test_custom_policy(self):
        policy = PricingPolicy(
            free_shipping_threshold=100000,
            shipping_charge=5000,
            cod_surcharge=2500,
            tax_rate=Decimal("0.18"),
        )
        pricing = calculate_pricing(60000, "cod", policy=policy)
        assert pricing.shipping_cost == 5000
        assert pricing.cod_surcharge == 2500
        assert pricing.tax_amount == 10800
        assert pricing.amount_for_free_shipping == 40000

    def test_policy_from_settings(self, test_config):
        policy = PricingPolicy.from_settings(test_config)
        assert policy.free_shipping_threshold == 50000
        assert policy.shipping_charge == 4000
        assert policy.cod_surcharge == 4000
        assert policy.tax_rate == Decimal("0.05")
