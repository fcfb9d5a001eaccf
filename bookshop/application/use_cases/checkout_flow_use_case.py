"""
Checkout flow use case

Drives a CheckoutSession through Login -> Address -> Payment -> Review,
collecting each step's data from the collaborators.
"""

import logging
from datetime import date
from typing import Dict, List, Optional, Tuple

from bookshop.application.dtos.checkout_dtos import (
    AddressRequest,
    CheckoutResponse,
    OrderSummary,
    PaymentRequest,
)
from bookshop.domain.entities.checkout_session import CheckoutSession
from bookshop.domain.repositories.cart_repository import CartRepository
from bookshop.domain.repositories.coupon_repository import CouponRepository
from bookshop.domain.repositories.identity_provider import IdentityProvider
from bookshop.domain.services.delivery import DeliveryEstimator, PincodeDirectory
from bookshop.domain.services.pricing import DEFAULT_POLICY, PricingPolicy, calculate_pricing
from bookshop.domain.value_objects.address import Address
from bookshop.domain.value_objects.payment import PaymentSelection
from bookshop.infrastructure.utilities.constants import ValidationSettings
from bookshop.infrastructure.utilities.exceptions import (
    AddressValidationError,
    BookshopError,
    CouponError,
    EmptyCartError,
    ValidationError,
)


class CheckoutFlowUseCase:
    """
    Use case for the guided checkout

    Handles:
    1. Entering checkout (with the empty-cart redirect)
    2. Sign in or continue as guest
    3. Choosing or entering a delivery address
    4. Choosing a payment method
    5. Coupons and the review summary
    6. Backward navigation between steps
    """

    def __init__(
        self,
        cart_repository: CartRepository,
        identity_provider: IdentityProvider,
        coupon_repository: CouponRepository,
        pincode_directory: PincodeDirectory,
        pricing_policy: PricingPolicy = DEFAULT_POLICY,
    ):
        self._cart_repository = cart_repository
        self._identity_provider = identity_provider
        self._coupon_repository = coupon_repository
        self._pincode_directory = pincode_directory
        self._delivery_estimator = DeliveryEstimator(pincode_directory)
        self._pricing_policy = pricing_policy
        # Addresses entered in earlier checkouts, per customer
        self._address_book: Dict[int, List[Address]] = {}
        self._logger = logging.getLogger(self.__class__.__name__)

    # -- entering and staying in checkout ----------------------------------

    async def start_checkout(self, customer_id: int) -> CheckoutResponse:
        """Open a checkout session, or redirect to the cart when it is empty"""
        self._logger.info("🧾 START CHECKOUT: User %s", customer_id)
        try:
            cart = await self._cart_repository.get_cart(customer_id)
            if cart.is_empty():
                raise EmptyCartError()

            identity = await self._identity_provider.get_identity(customer_id)
            session = CheckoutSession.start(customer_id, cart.items, identity)
            for address in self._address_book.get(customer_id, []):
                if address not in session.saved_addresses:
                    session.saved_addresses.append(address)
            self._logger.info(
                "✅ CHECKOUT STARTED: User %s at step %s", customer_id, session.current_step.name
            )
            return CheckoutResponse(success=True, session=session)

        except EmptyCartError:
            self._logger.info("🛒 EMPTY CART: redirecting user %s to cart", customer_id)
            return CheckoutResponse(success=False, redirect_to_cart=True)
        except BookshopError as e:
            self._logger.error("💥 START CHECKOUT ERROR: %s", e)
            return CheckoutResponse(success=False, error_message=e.user_message)

    async def refresh_session(self, session: CheckoutSession) -> CheckoutResponse:
        """Re-read the cart; an emptied cart ends the checkout"""
        cart = await self._cart_repository.get_cart(session.customer_id)
        if cart.is_empty():
            self._logger.info(
                "🛒 CART EMPTIED DURING CHECKOUT: user %s", session.customer_id
            )
            return CheckoutResponse(success=False, redirect_to_cart=True)
        session.refresh_items(cart.items)
        return CheckoutResponse(success=True, session=session)

    # -- login step --------------------------------------------------------

    async def sign_in(
        self, session: CheckoutSession, name: str, email: Optional[str] = None
    ) -> CheckoutResponse:
        identity = await self._identity_provider.sign_in(session.customer_id, name, email)
        session.establish_identity(identity)
        session.advance()
        self._logger.info("🔐 SIGNED IN: user %s", session.customer_id)
        return CheckoutResponse(success=True, session=session)

    async def continue_as_guest(self, session: CheckoutSession) -> CheckoutResponse:
        identity = await self._identity_provider.continue_as_guest(session.customer_id)
        session.establish_identity(identity)
        session.advance()
        self._logger.info("👤 GUEST CHECKOUT: user %s", session.customer_id)
        return CheckoutResponse(success=True, session=session)

    # -- address step ------------------------------------------------------

    def lookup_pincode(self, zip_code: str) -> Optional[Tuple[str, str]]:
        """City and state for a known pincode"""
        return self._pincode_directory.lookup(zip_code)

    def submit_address(self, session: CheckoutSession, request: AddressRequest) -> CheckoutResponse:
        """Validate a new address, select it and move on to payment"""
        try:
            address = Address.create(
                full_name=request.full_name,
                phone=request.phone,
                street=request.street,
                zip_code=request.zip_code,
                city=request.city,
                state=request.state,
                landmark=request.landmark,
                address_type=request.address_type,
                lookup=self._pincode_directory.lookup,
            )
        except AddressValidationError as e:
            self._logger.info("📍 ADDRESS REJECTED: %s", sorted(e.field_errors))
            return CheckoutResponse(
                success=False,
                session=session,
                error_message=e.user_message,
                field_errors=e.field_errors,
            )

        session.select_address(address)
        saved = self._address_book.setdefault(session.customer_id, [])
        if address in saved:
            saved.remove(address)
        saved.append(address)
        # Only the most recent addresses are remembered
        del saved[:-ValidationSettings.MAX_SAVED_ADDRESSES]
        session.advance()
        return CheckoutResponse(success=True, session=session)

    def use_saved_address(self, session: CheckoutSession, index: int) -> CheckoutResponse:
        if not session.select_saved_address(index):
            return CheckoutResponse(
                success=False, session=session, error_message="Address not found"
            )
        session.advance()
        return CheckoutResponse(success=True, session=session)

    # -- payment step ------------------------------------------------------

    def select_payment(
        self, session: CheckoutSession, request: PaymentRequest, today: Optional[date] = None
    ) -> CheckoutResponse:
        """Validate the payment details, select them and move on to review"""
        try:
            payment = PaymentSelection.create(request.method, request.details, today)
        except ValidationError as e:
            return CheckoutResponse(
                success=False,
                session=session,
                error_message=e.user_message,
                field_errors={e.field or "method": e.user_message},
            )
        session.select_payment(payment)
        session.advance()
        self._logger.info("💳 PAYMENT SELECTED: %s", payment.method.value)
        return CheckoutResponse(success=True, session=session)

    # -- navigation --------------------------------------------------------

    def advance(self, session: CheckoutSession) -> CheckoutResponse:
        """Forward action; refused while the step's data is missing"""
        if not session.advance():
            return CheckoutResponse(success=False, session=session)
        return CheckoutResponse(success=True, session=session)

    def go_to_step(self, session: CheckoutSession, step: int) -> CheckoutResponse:
        """Return to a completed step, keeping everything entered so far"""
        moved = session.go_to_step(step)
        return CheckoutResponse(success=moved, session=session)

    # -- coupons and summary -----------------------------------------------

    async def apply_coupon(self, session: CheckoutSession, code: str) -> CheckoutResponse:
        code = (code or "").strip().upper()
        try:
            discount = await self._coupon_repository.validate(code, session.subtotal)
        except CouponError as e:
            self._logger.info("🏷️ COUPON REJECTED: %s", code)
            return CheckoutResponse(success=False, session=session, error_message=e.user_message)
        session.apply_discount(code, discount)
        self._logger.info("🏷️ COUPON APPLIED: %s (-%s)", code, discount)
        return CheckoutResponse(success=True, session=session)

    def remove_coupon(self, session: CheckoutSession) -> CheckoutResponse:
        session.remove_coupon()
        return CheckoutResponse(success=True, session=session)

    async def get_summary(
        self, session: CheckoutSession, today: Optional[date] = None
    ) -> OrderSummary:
        """Price breakdown and delivery estimate for the review step"""
        if session.coupon_code:
            # The cart may have changed since the coupon was applied
            try:
                discount = await self._coupon_repository.validate(
                    session.coupon_code, session.subtotal
                )
                session.apply_discount(session.coupon_code, discount)
            except CouponError:
                self._logger.info("🏷️ COUPON NO LONGER APPLIES: %s", session.coupon_code)
                session.remove_coupon()

        pricing = calculate_pricing(
            session.subtotal,
            session.payment.method if session.payment else None,
            session.discount,
            self._pricing_policy,
        )
        delivery = (
            self._delivery_estimator.estimate(session.address.zip_code, today)
            if session.address
            else None
        )
        return OrderSummary(session=session, pricing=pricing, delivery=delivery)
