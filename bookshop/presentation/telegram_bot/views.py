"""
Message text for the cart and checkout screens

Every screen that shows money renders a fresh PriceBreakdown.
"""

import html
from typing import Dict, List

from bookshop.application.dtos.cart_dtos import CartSummary
from bookshop.application.dtos.checkout_dtos import OrderSummary
from bookshop.application.dtos.order_dtos import OrderConfirmation
from bookshop.domain.entities.checkout_session import CheckoutSession, CheckoutStep
from bookshop.domain.services.delivery import DeliveryEstimate
from bookshop.domain.services.pricing import PriceBreakdown, PricingPolicy
from bookshop.domain.value_objects.address import Address
from bookshop.infrastructure.utilities.helpers import format_delivery_date, format_price
from bookshop.infrastructure.utilities.i18n import tr


def render_breakdown(pricing: PriceBreakdown, lang: str | None = None) -> str:
    lines = [f"{tr('PRICE_SUBTOTAL', lang)}: {format_price(pricing.subtotal)}"]
    if pricing.discount:
        lines.append(f"{tr('PRICE_DISCOUNT', lang)}: -{format_price(pricing.discount)}")
    shipping = (
        tr("PRICE_SHIPPING_FREE", lang)
        if pricing.has_free_shipping
        else format_price(pricing.shipping_cost)
    )
    lines.append(f"{tr('PRICE_SHIPPING', lang)}: {shipping}")
    if pricing.cod_surcharge:
        lines.append(f"{tr('PRICE_COD', lang)}: {format_price(pricing.cod_surcharge)}")
    lines.append(f"{tr('PRICE_TAX', lang)}: {format_price(pricing.tax_amount)}")
    lines.append(f"<b>{tr('PRICE_TOTAL', lang)}: {format_price(pricing.total)}</b>")
    if pricing.amount_for_free_shipping:
        lines.append(
            tr("FREE_SHIPPING_HINT", lang).format(
                amount=format_price(pricing.amount_for_free_shipping)
            )
        )
    else:
        lines.append(tr("FREE_SHIPPING_REACHED", lang))
    return "\n".join(lines)


def render_cart(summary: CartSummary, lang: str | None = None) -> str:
    if summary.is_empty:
        return tr("CART_EMPTY", lang)
    lines = [tr("CART_TITLE", lang), ""]
    for item in summary.items:
        lines.append(
            f"• <b>{html.escape(item.title)}</b> by {html.escape(item.author)}\n"
            f"  {item.quantity} × {format_price(item.unit_price)} = {format_price(item.total_price)}"
        )
    lines.append("")
    lines.append(render_breakdown(summary.pricing, lang))
    return "\n".join(lines)


def render_step_indicator(session: CheckoutSession, lang: str | None = None) -> str:
    parts = []
    for step in CheckoutStep:
        label = tr(f"STEP_{step.name}", lang)
        if step < session.current_step:
            parts.append(f"✅ {label}")
        elif step == session.current_step:
            parts.append(f"<b>{step.value}. {label}</b>")
        else:
            parts.append(f"{step.value}. {label}")
    return " › ".join(parts)


def render_address(address: Address) -> str:
    lines = [
        f"{html.escape(address.full_name)} ({address.address_type.value})",
        html.escape(address.street),
    ]
    if address.landmark:
        lines.append(f"Near {html.escape(address.landmark)}")
    lines.append(f"{html.escape(address.city)}, {html.escape(address.state)} {address.zip_code}")
    lines.append(f"{address.country} · 📞 {address.phone}")
    return "\n".join(lines)


def render_field_errors(field_errors: Dict[str, str], lang: str | None = None) -> str:
    errors = "\n".join(
        f"• {name.replace('_', ' ').title()}: {html.escape(message)}"
        for name, message in field_errors.items()
    )
    return tr("ADDRESS_ERRORS", lang).format(errors=errors)


def render_review(summary: OrderSummary, lang: str | None = None) -> str:
    session = summary.session
    lines: List[str] = [tr("REVIEW_TITLE", lang), ""]
    for item in session.items:
        lines.append(
            f"• {html.escape(item.title)} × {item.quantity} = {format_price(item.line_total)}"
        )
    lines.append("")
    if session.address:
        lines.append(tr("REVIEW_DELIVER_TO", lang))
        lines.append(render_address(session.address))
        lines.append("")
    if session.payment:
        lines.append(f"{tr('REVIEW_PAYMENT', lang)} {html.escape(session.payment.describe())}")
        lines.append("")
    if session.coupon_code:
        lines.append(tr("REVIEW_COUPON", lang).format(code=html.escape(session.coupon_code)))
    lines.append(render_breakdown(summary.pricing, lang))
    if summary.delivery:
        lines.append(
            tr("REVIEW_DELIVERY_ESTIMATE", lang).format(
                date=format_delivery_date(summary.delivery.delivery_date),
                days=summary.delivery.delivery_days,
            )
        )
    return "\n".join(lines)


def render_cod_note(policy: PricingPolicy, lang: str | None = None) -> str:
    return tr("COD_NOTE", lang).format(
        amount=format_price(policy.cod_surcharge),
        threshold=format_price(policy.free_shipping_threshold),
    )


def render_confirmation(confirmation: OrderConfirmation, lang: str | None = None) -> str:
    return tr("ORDER_CONFIRMED", lang).format(
        order_id=html.escape(confirmation.order_id),
        total=format_price(confirmation.total),
        date=format_delivery_date(confirmation.estimated_delivery_date),
    )


def render_delivery_estimate(estimate: DeliveryEstimate, lang: str | None = None) -> str:
    lines = [
        tr("DELIVERY_ESTIMATE", lang).format(
            location=html.escape(estimate.location),
            zip_code=estimate.zip_code,
            date=format_delivery_date(estimate.delivery_date),
            days=estimate.delivery_days,
        )
    ]
    if estimate.express_available:
        lines.append(tr("DELIVERY_EXPRESS", lang))
    if estimate.cod_available:
        lines.append(tr("DELIVERY_COD", lang))
    return "\n".join(lines)
