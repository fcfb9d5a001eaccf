"""
Order Submission Use Case

Places the order for a checkout session that has reached the review step.
"""

import logging
from datetime import date
from typing import Any, Dict, Optional

from bookshop.application.dtos.order_dtos import OrderConfirmation, PlaceOrderResponse
from bookshop.domain.entities.checkout_session import CheckoutSession, CheckoutStep
from bookshop.domain.repositories.cart_repository import CartRepository
from bookshop.domain.repositories.coupon_repository import CouponRepository
from bookshop.domain.repositories.order_repository import OrderRepository
from bookshop.domain.services.delivery import DeliveryEstimator
from bookshop.domain.services.pricing import (
    DEFAULT_POLICY,
    PriceBreakdown,
    PricingPolicy,
    calculate_pricing,
)
from bookshop.infrastructure.logging.logging_config import PerformanceLogger, get_structured_logger
from bookshop.infrastructure.utilities.exceptions import (
    BookshopError,
    BusinessLogicError,
    CouponError,
    EmptyCartError,
    SubmissionError,
)


class OrderSubmissionUseCase:
    """
    Use case for placing orders

    A session has at most one submission in flight. The session's
    idempotency key goes with every attempt, so retrying after a failure
    cannot create a second order. Nothing is retried automatically.
    """

    def __init__(
        self,
        cart_repository: CartRepository,
        order_repository: OrderRepository,
        coupon_repository: CouponRepository,
        delivery_estimator: DeliveryEstimator,
        pricing_policy: PricingPolicy = DEFAULT_POLICY,
    ):
        self._cart_repository = cart_repository
        self._order_repository = order_repository
        self._coupon_repository = coupon_repository
        self._delivery_estimator = delivery_estimator
        self._pricing_policy = pricing_policy
        self._logger = logging.getLogger(self.__class__.__name__)
        self._events = get_structured_logger("orders")

        self._logger.info("🏗️ ORDER SUBMISSION USE CASE INITIALIZED")
        self._logger.info("  📋 Order Repository: %s", type(self._order_repository).__name__)

    async def place_order(
        self, session: CheckoutSession, customer_id: int, today: Optional[date] = None
    ) -> PlaceOrderResponse:
        """Submit the session's order to the order API"""
        self._logger.info("📝 ===== ORDER SUBMISSION STARTED =====")
        self._logger.info("📝 ORDER SUBMISSION: User %s", customer_id)

        try:
            self._check_preconditions(session)
            session.mark_pending()
        except BusinessLogicError as e:
            self._logger.warning("⚠️ ORDER SUBMISSION REFUSED: %s", e)
            return PlaceOrderResponse(success=False, error_message=e.user_message)

        try:
            cart = await self._cart_repository.get_cart(customer_id)
            if cart.is_empty():
                raise EmptyCartError()
            session.refresh_items(cart.items)
            await self._recheck_coupon(session)

            pricing = calculate_pricing(
                session.subtotal, session.payment.method, session.discount, self._pricing_policy
            )
            payload = self.build_payload(session, pricing)

            with PerformanceLogger("order_submission", self._logger, {"customer_id": customer_id}):
                result = await self._order_repository.create_order(
                    payload, session.idempotency_key
                )

        except EmptyCartError:
            self._logger.info("🛒 EMPTY CART AT SUBMISSION: redirecting to cart")
            return PlaceOrderResponse(success=False, redirect_to_cart=True)
        except CouponError as e:
            self._logger.info("🏷️ COUPON CHANGED AT SUBMISSION: %s", e)
            return PlaceOrderResponse(success=False, error_message=e.user_message, repriced=True)
        except SubmissionError as e:
            self._logger.error("💥 ORDER API ERROR: %s", e)
            return PlaceOrderResponse(
                success=False, error_message=e.user_message, retryable=e.retryable
            )
        except BookshopError as e:
            self._logger.error("💥 ORDER SUBMISSION ERROR: %s", e)
            return PlaceOrderResponse(success=False, error_message=e.user_message, retryable=True)
        finally:
            session.mark_idle()

        await self._clear_cart(customer_id)

        confirmation = OrderConfirmation(
            order_id=str(result["orderId"]),
            estimated_delivery_date=self._delivery_date(result, session, today),
            total=pricing.total,
        )
        self._logger.info(
            "🎉 ===== ORDER PLACED: %s, total %s =====", confirmation.order_id, pricing.total
        )
        self._events.info(
            "order_placed",
            order_id=confirmation.order_id,
            customer_id=customer_id,
            total=pricing.total,
            payment_method=session.payment.method.value,
            coupon_code=session.coupon_code or None,
        )
        return PlaceOrderResponse(success=True, confirmation=confirmation)

    @staticmethod
    def _check_preconditions(session: CheckoutSession) -> None:
        if session.current_step != CheckoutStep.REVIEW:
            raise BusinessLogicError(
                f"Order placed from step {session.current_step.name}",
                "Please complete all checkout steps first.",
            )
        session.require_address()
        session.require_payment()

    async def _recheck_coupon(self, session: CheckoutSession) -> None:
        """
        Re-price the coupon against the live cart.

        Raises:
            CouponError: when the coupon no longer applies (it is dropped) or
                its discount changed (the new one is kept). Either way the
                shopper has to confirm the new total first.
        """
        if not session.coupon_code:
            return
        code = session.coupon_code
        try:
            discount = await self._coupon_repository.validate(code, session.subtotal)
        except CouponError:
            session.remove_coupon()
            raise
        if discount != session.discount:
            session.apply_discount(code, discount)
            raise CouponError(code, "Your coupon discount changed with your cart.")

    @staticmethod
    def build_payload(session: CheckoutSession, pricing: PriceBreakdown) -> Dict[str, Any]:
        """Order API request body"""
        payload: Dict[str, Any] = {
            "items": [item.to_dict() for item in session.items],
            "address": session.address.to_dict(),
            "paymentMethod": session.payment.method.value,
            "couponCode": session.coupon_code,
        }
        payload.update(pricing.to_payload())
        return payload

    async def _clear_cart(self, customer_id: int) -> None:
        """Empty the cart once the order exists; a failure here must not undo the order"""
        try:
            await self._cart_repository.clear_cart(customer_id)
        except BookshopError as e:
            self._logger.error("💥 CART CLEAR AFTER ORDER FAILED for user %s: %s", customer_id, e)

    def _delivery_date(
        self, result: Dict[str, Any], session: CheckoutSession, today: Optional[date]
    ) -> date:
        raw = result.get("estimatedDelivery")
        if raw:
            try:
                return date.fromisoformat(str(raw)[:10])
            except ValueError:
                self._logger.warning("⚠️ Unparseable delivery date from order API: %r", raw)
        return self._delivery_estimator.estimate(session.address.zip_code, today).delivery_date
