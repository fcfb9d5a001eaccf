"""
Tests for the application use cases
"""

import asyncio
from datetime import date
from unittest.mock import AsyncMock, patch

import pytest

from bookshop.application.dtos.cart_dtos import AddToCartRequest
from bookshop.application.dtos.checkout_dtos import AddressRequest, PaymentRequest
from bookshop.application.use_cases.cart_management_use_case import CartManagementUseCase
from bookshop.application.use_cases.checkout_flow_use_case import CheckoutFlowUseCase
from bookshop.application.use_cases.order_submission_use_case import OrderSubmissionUseCase
from bookshop.domain.entities.cart_entity import CartItem
from bookshop.domain.entities.checkout_session import CheckoutStep
from bookshop.infrastructure.repositories.in_memory_coupon_repository import (
    InMemoryCouponRepository,
)
from bookshop.infrastructure.repositories.in_memory_identity_provider import (
    InMemoryIdentityProvider,
)
from bookshop.infrastructure.repositories.in_memory_order_repository import (
    InMemoryOrderRepository,
)
from bookshop.infrastructure.repositories.sqlalchemy_book_repository import (
    SQLAlchemyBookRepository,
)
from bookshop.infrastructure.utilities.constants import ErrorCodes
from bookshop.infrastructure.utilities.exceptions import DatabaseError, SubmissionError

TODAY = date(2025, 1, 15)


def _address_request(**overrides):
    fields = {
        "full_name": "Asha Rao",
        "phone": "9876543210",
        "street": "12 Temple Road",
        "zip_code": "751001",
    }
    fields.update(overrides)
    return AddressRequest(**fields)


@pytest.fixture
def checkout_use_case(filled_cart_repository, test_config, pincode_directory):
    return CheckoutFlowUseCase(
        cart_repository=filled_cart_repository,
        identity_provider=InMemoryIdentityProvider(),
        coupon_repository=InMemoryCouponRepository(test_config.coupons),
        pincode_directory=pincode_directory,
    )


@pytest.fixture
def order_repository():
    return InMemoryOrderRepository()


@pytest.fixture
def coupon_repository(test_config):
    return InMemoryCouponRepository(test_config.coupons)


@pytest.fixture
def order_use_case(filled_cart_repository, order_repository, coupon_repository, delivery_estimator):
    return OrderSubmissionUseCase(
        cart_repository=filled_cart_repository,
        order_repository=order_repository,
        coupon_repository=coupon_repository,
        delivery_estimator=delivery_estimator,
    )


class TestCartManagementUseCase:
    """Test cart management use case"""

    @pytest.fixture
    def use_case(self, cart_repository, db_manager):
        return CartManagementUseCase(cart_repository, SQLAlchemyBookRepository(db_manager))

    @pytest.mark.asyncio
    async def test_list_books(self, use_case):
        response = await use_case.list_books()
        assert response.success
        assert len(response.books) == 7

    @pytest.mark.asyncio
    async def test_add_to_cart(self, use_case):
        response = await use_case.add_to_cart(AddToCartRequest(42, "bk-001"))

        assert response.success
        summary = response.cart_summary
        assert summary.item_count == 1
        assert summary.items[0].title
        assert summary.pricing.subtotal == 39900
        assert summary.pricing.shipping_cost == 4000
        assert summary.pricing.amount_for_free_shipping == 10100

    @pytest.mark.asyncio
    async def test_add_unknown_book(self, use_case):
        response = await use_case.add_to_cart(AddToCartRequest(42, "bk-999"))
        assert not response.success
        assert response.error_message == "Book not found"

    @pytest.mark.asyncio
    async def test_add_with_invalid_quantity(self, use_case):
        response = await use_case.add_to_cart(AddToCartRequest(42, "bk-001", quantity=0))
        assert not response.success

    @pytest.mark.asyncio
    async def test_change_quantity(self, use_case):
        await use_case.add_to_cart(AddToCartRequest(42, "bk-002"))

        response = await use_case.change_quantity(42, "bk-002", 1)
        assert response.cart_summary.items[0].quantity == 2
        assert response.cart_summary.pricing.subtotal == 50000
        assert response.cart_summary.pricing.has_free_shipping

        await use_case.change_quantity(42, "bk-002", -1)
        response = await use_case.change_quantity(42, "bk-002", -1)
        assert response.cart_summary.is_empty

    @pytest.mark.asyncio
    async def test_change_quantity_of_missing_line(self, use_case):
        response = await use_case.change_quantity(42, "bk-002", 1)
        assert not response.success
        assert response.error_message == "Item not in cart"

    @pytest.mark.asyncio
    async def test_remove_and_clear(self, use_case):
        await use_case.add_to_cart(AddToCartRequest(42, "bk-001"))
        await use_case.add_to_cart(AddToCartRequest(42, "bk-002"))

        response = await use_case.remove_item(42, "bk-001")
        assert [item.book_id for item in response.cart_summary.items] == ["bk-002"]

        assert (await use_case.clear_cart(42)).success
        assert (await use_case.get_cart(42)).cart_summary.is_empty

    @pytest.mark.asyncio
    async def test_cart_store_failure(self, use_case, cart_repository):
        with patch.object(
            cart_repository, "get_cart", AsyncMock(side_effect=DatabaseError("locked"))
        ):
            response = await use_case.get_cart(42)
        assert not response.success
        assert response.error_message == ErrorCodes.DATABASE_ERROR_MESSAGE


class TestCheckoutEntry:
    """Entering checkout"""

    @pytest.mark.asyncio
    async def test_empty_cart_redirects_to_cart(self, checkout_use_case):
        response = await checkout_use_case.start_checkout(7)
        assert not response.success
        assert response.redirect_to_cart
        assert response.session is None

    @pytest.mark.asyncio
    async def test_new_shopper_starts_at_login(self, checkout_use_case):
        response = await checkout_use_case.start_checkout(42)
        assert response.success
        assert response.session.current_step == CheckoutStep.LOGIN
        assert response.session.subtotal == 35000

    @pytest.mark.asyncio
    async def test_returning_shopper_starts_at_address(self, checkout_use_case):
        first = (await checkout_use_case.start_checkout(42)).session
        await checkout_use_case.sign_in(first, "Asha Rao")

        second = (await checkout_use_case.start_checkout(42)).session
        assert second.current_step == CheckoutStep.ADDRESS
        assert second.identity.name == "Asha Rao"

    @pytest.mark.asyncio
    async def test_refresh_after_cart_emptied(self, checkout_use_case, filled_cart_repository):
        session = (await checkout_use_case.start_checkout(42)).session
        await filled_cart_repository.clear_cart(42)

        response = await checkout_use_case.refresh_session(session)
        assert response.redirect_to_cart

    @pytest.mark.asyncio
    async def test_refresh_picks_up_cart_changes(self, checkout_use_case, filled_cart_repository):
        session = (await checkout_use_case.start_checkout(42)).session
        await filled_cart_repository.update_quantity(42, "bk-006", 3)

        response = await checkout_use_case.refresh_session(session)
        assert response.success
        assert session.subtotal == 65000


class TestCheckoutSteps:
    """Collecting data step by step"""

    @pytest.fixture
    async def session(self, checkout_use_case):
        return (await checkout_use_case.start_checkout(42)).session

    @pytest.mark.asyncio
    async def test_guest_checkout(self, checkout_use_case, session):
        response = await checkout_use_case.continue_as_guest(session)
        assert response.success
        assert session.identity.is_guest
        assert session.current_step == CheckoutStep.ADDRESS

    @pytest.mark.asyncio
    async def test_address_with_pincode_autofill(self, checkout_use_case, session):
        await checkout_use_case.continue_as_guest(session)

        response = checkout_use_case.submit_address(session, _address_request())
        assert response.success
        assert session.current_step == CheckoutStep.PAYMENT
        assert (session.address.city, session.address.state) == ("Bhubaneswar", "Odisha")

    @pytest.mark.asyncio
    async def test_invalid_address_reports_each_field(self, checkout_use_case, session):
        await checkout_use_case.continue_as_guest(session)

        response = checkout_use_case.submit_address(
            session, _address_request(phone="12345", zip_code="7510")
        )
        assert not response.success
        assert response.field_errors["phone"] == "Enter valid 10-digit phone"
        assert response.field_errors["zip_code"] == "Enter valid 6-digit pincode"
        assert session.address is None
        assert session.current_step == CheckoutStep.ADDRESS

    @pytest.mark.asyncio
    async def test_saved_address(self, checkout_use_case, session, sample_address):
        await checkout_use_case.continue_as_guest(session)
        session.saved_addresses.append(sample_address)

        assert not checkout_use_case.use_saved_address(session, 5).success
        assert checkout_use_case.use_saved_address(session, 0).success
        assert session.address == sample_address
        assert session.current_step == CheckoutStep.PAYMENT

    @pytest.mark.asyncio
    async def test_entered_address_offered_next_time(self, checkout_use_case, session):
        await checkout_use_case.continue_as_guest(session)
        checkout_use_case.submit_address(session, _address_request())

        next_session = (await checkout_use_case.start_checkout(42)).session
        assert next_session.saved_addresses == [session.address]
        assert next_session.address is None

    @pytest.mark.asyncio
    async def test_only_recent_addresses_are_remembered(self, checkout_use_case, session):
        await checkout_use_case.continue_as_guest(session)
        for number in range(1, 8):
            checkout_use_case.submit_address(session, _address_request(street=f"{number} Temple Road"))
            session.go_to_step(CheckoutStep.ADDRESS)
        checkout_use_case.submit_address(session, _address_request(street="3 Temple Road"))

        next_session = (await checkout_use_case.start_checkout(42)).session
        assert [address.street for address in next_session.saved_addresses] == [
            "4 Temple Road",
            "5 Temple Road",
            "6 Temple Road",
            "7 Temple Road",
            "3 Temple Road",
        ]

    @pytest.mark.asyncio
    async def test_invalid_payment_details(self, checkout_use_case, session):
        await checkout_use_case.continue_as_guest(session)
        checkout_use_case.submit_address(session, _address_request())

        response = checkout_use_case.select_payment(
            session, PaymentRequest("upi", {"vpa": "asha"}), TODAY
        )
        assert not response.success
        assert "vpa" in response.field_errors
        assert session.payment is None
        assert session.current_step == CheckoutStep.PAYMENT

    @pytest.mark.asyncio
    async def test_card_payment_reaches_review(self, checkout_use_case, session):
        await checkout_use_case.continue_as_guest(session)
        checkout_use_case.submit_address(session, _address_request())

        response = checkout_use_case.select_payment(
            session,
            PaymentRequest("card", {"number": "4111111111111111", "expiry": "08/27"}),
            TODAY,
        )
        assert response.success
        assert session.current_step == CheckoutStep.REVIEW
        assert session.payment.details["last4"] == "1111"

    @pytest.mark.asyncio
    async def test_advance_refused_without_data(self, checkout_use_case, session):
        await checkout_use_case.continue_as_guest(session)
        response = checkout_use_case.advance(session)
        assert not response.success
        assert session.current_step == CheckoutStep.ADDRESS

    @pytest.mark.asyncio
    async def test_go_back_keeps_data(self, checkout_use_case, session):
        await checkout_use_case.continue_as_guest(session)
        checkout_use_case.submit_address(session, _address_request())
        checkout_use_case.select_payment(session, PaymentRequest("cod"))

        assert checkout_use_case.go_to_step(session, CheckoutStep.LOGIN).success
        assert session.address is not None
        assert session.payment.is_cod
        assert not checkout_use_case.go_to_step(session, CheckoutStep.REVIEW).success


class TestCoupons:
    @pytest.mark.asyncio
    async def test_apply_coupon(self, checkout_use_case, review_session):
        response = await checkout_use_case.apply_coupon(review_session, " first10 ")
        assert response.success
        assert review_session.coupon_code == "FIRST10"
        assert review_session.discount == 3500

    @pytest.mark.asyncio
    async def test_rejected_coupon_leaves_session_unchanged(
        self, checkout_use_case, review_session
    ):
        response = await checkout_use_case.apply_coupon(review_session, "NOPE")
        assert not response.success
        assert response.error_message == "This coupon code is not valid."
        assert review_session.coupon_code == ""
        assert review_session.discount == 0

    @pytest.mark.asyncio
    async def test_remove_coupon(self, checkout_use_case, review_session):
        await checkout_use_case.apply_coupon(review_session, "FIRST10")
        checkout_use_case.remove_coupon(review_session)
        assert review_session.discount == 0


class TestReviewSummary:
    @pytest.mark.asyncio
    async def test_summary(self, checkout_use_case, review_session):
        summary = await checkout_use_case.get_summary(review_session, TODAY)

        assert summary.pricing.total == 44750
        assert summary.pricing.cod_surcharge == 4000
        assert summary.delivery.delivery_days == 2
        assert summary.delivery.delivery_date == date(2025, 1, 17)

    @pytest.mark.asyncio
    async def test_coupon_revalidated_against_current_cart(
        self, checkout_use_case, review_session, sample_items
    ):
        await checkout_use_case.apply_coupon(review_session, "READ50")
        assert review_session.discount == 5000

        review_session.refresh_items(sample_items[:1])
        summary = await checkout_use_case.get_summary(review_session, TODAY)

        assert review_session.coupon_code == ""
        assert summary.pricing.discount == 0
        assert summary.pricing.subtotal == 15000

    @pytest.mark.asyncio
    async def test_percent_coupon_follows_subtotal(
        self, checkout_use_case, review_session, sample_items
    ):
        await checkout_use_case.apply_coupon(review_session, "FIRST10")
        review_session.refresh_items(sample_items[:1])

        summary = await checkout_use_case.get_summary(review_session, TODAY)
        assert summary.pricing.discount == 1500


class TestOrderSubmission:
    """Placing the order"""

    @pytest.mark.asyncio
    async def test_successful_order(
        self, order_use_case, review_session, order_repository, filled_cart_repository
    ):
        response = await order_use_case.place_order(review_session, 42, TODAY)

        assert response.success
        assert response.confirmation.order_id.startswith("ORD-")
        assert response.confirmation.total == 44750
        assert response.confirmation.estimated_delivery_date == date(2025, 1, 17)
        assert (await filled_cart_repository.get_cart(42)).is_empty()
        assert not review_session.is_pending

        payload = order_repository.orders[0]
        assert payload["paymentMethod"] == "cod"
        assert payload["address"]["zipCode"] == "751001"
        assert [item["id"] for item in payload["items"]] == ["bk-006", "bk-002"]
        assert payload["total"] == 44750
        assert payload["codCharge"] == 4000

    @pytest.mark.asyncio
    async def test_payload_carries_coupon(self, order_use_case, review_session, order_repository):
        review_session.apply_discount("FIRST10", 3500)
        await order_use_case.place_order(review_session, 42, TODAY)

        payload = order_repository.orders[0]
        assert payload["couponCode"] == "FIRST10"
        assert payload["discount"] == 3500
        assert payload["total"] == 41250

    @pytest.mark.asyncio
    async def test_coupon_below_minimum_is_dropped_before_submitting(
        self, order_use_case, review_session, order_repository, filled_cart_repository
    ):
        review_session.apply_discount("READ50", 5000)
        await filled_cart_repository.remove_item(42, "bk-002")

        response = await order_use_case.place_order(review_session, 42, TODAY)

        assert not response.success
        assert response.repriced
        assert "more to use this coupon" in response.error_message
        assert order_repository.orders == []
        assert review_session.coupon_code == ""
        assert review_session.discount == 0
        assert not review_session.is_pending

        confirmed = await order_use_case.place_order(review_session, 42, TODAY)
        payload = order_repository.orders[0]
        assert confirmed.success
        assert payload["subtotal"] == 15000
        assert payload["discount"] == 0
        assert payload["couponCode"] == ""

    @pytest.mark.asyncio
    async def test_percent_coupon_change_needs_confirmation(
        self, order_use_case, review_session, order_repository, filled_cart_repository
    ):
        review_session.apply_discount("FIRST10", 3500)
        await filled_cart_repository.remove_item(42, "bk-002")

        response = await order_use_case.place_order(review_session, 42, TODAY)

        assert response.repriced
        assert order_repository.orders == []
        assert review_session.coupon_code == "FIRST10"
        assert review_session.discount == 1500

        assert (await order_use_case.place_order(review_session, 42, TODAY)).success
        assert order_repository.orders[0]["discount"] == 1500

    @pytest.mark.asyncio
    async def test_order_uses_live_cart(
        self, order_use_case, review_session, order_repository, filled_cart_repository
    ):
        await filled_cart_repository.add_item(
            42, CartItem(id="bk-001", title="Gitanjali", author="Tagore", unit_price=39900)
        )
        response = await order_use_case.place_order(review_session, 42, TODAY)

        assert order_repository.orders[0]["subtotal"] == 74900
        assert response.confirmation.total == 74900 + 3745

    @pytest.mark.asyncio
    async def test_failure_leaves_checkout_unchanged(
        self, filled_cart_repository, coupon_repository, delivery_estimator, review_session
    ):
        failing = InMemoryOrderRepository()
        failing.create_order = AsyncMock(side_effect=SubmissionError("order API returned 503", 503))
        use_case = OrderSubmissionUseCase(
            filled_cart_repository, failing, coupon_repository, delivery_estimator
        )
        before = (review_session.current_step, review_session.address, review_session.payment)

        response = await use_case.place_order(review_session, 42, TODAY)

        assert not response.success
        assert response.retryable
        assert response.error_message == ErrorCodes.SUBMISSION_ERROR_MESSAGE
        assert (review_session.current_step, review_session.address, review_session.payment) == before
        assert not review_session.is_pending
        assert len((await filled_cart_repository.get_cart(42)).items) == 2

    @pytest.mark.asyncio
    async def test_retry_reuses_idempotency_key(
        self, filled_cart_repository, coupon_repository, delivery_estimator, review_session
    ):
        orders = InMemoryOrderRepository()
        orders.create_order = AsyncMock(
            side_effect=[SubmissionError("timeout"), {"orderId": "ORD-7"}]
        )
        use_case = OrderSubmissionUseCase(
            filled_cart_repository, orders, coupon_repository, delivery_estimator
        )

        assert not (await use_case.place_order(review_session, 42, TODAY)).success
        retry = await use_case.place_order(review_session, 42, TODAY)

        assert retry.success
        assert retry.confirmation.order_id == "ORD-7"
        keys = [call.args[1] for call in orders.create_order.call_args_list]
        assert keys == [review_session.idempotency_key] * 2

    @pytest.mark.asyncio
    async def test_concurrent_submission_is_refused(
        self, filled_cart_repository, coupon_repository, delivery_estimator, review_session
    ):
        release = asyncio.Event()

        async def slow_order(payload, idempotency_key):
            await release.wait()
            return {"orderId": "ORD-1"}

        orders = InMemoryOrderRepository()
        orders.create_order = AsyncMock(side_effect=slow_order)
        use_case = OrderSubmissionUseCase(
            filled_cart_repository, orders, coupon_repository, delivery_estimator
        )

        first = asyncio.create_task(use_case.place_order(review_session, 42, TODAY))
        await asyncio.sleep(0)
        assert review_session.is_pending

        second = await use_case.place_order(review_session, 42, TODAY)
        assert not second.success
        assert second.error_message == "Your order is being placed. Please wait."

        release.set()
        assert (await first).success
        assert orders.create_order.await_count == 1

    @pytest.mark.asyncio
    async def test_refused_before_review(self, order_use_case, review_session, order_repository):
        review_session.go_to_step(CheckoutStep.PAYMENT)

        response = await order_use_case.place_order(review_session, 42, TODAY)
        assert not response.success
        assert response.error_message == "Please complete all checkout steps first."
        assert order_repository.orders == []
        assert not review_session.is_pending

    @pytest.mark.asyncio
    async def test_emptied_cart_redirects(
        self, order_use_case, review_session, order_repository, filled_cart_repository
    ):
        await filled_cart_repository.clear_cart(42)

        response = await order_use_case.place_order(review_session, 42, TODAY)
        assert response.redirect_to_cart
        assert order_repository.orders == []
        assert not review_session.is_pending

    @pytest.mark.asyncio
    async def test_delivery_date_from_order_api(
        self, filled_cart_repository, coupon_repository, delivery_estimator, review_session
    ):
        orders = InMemoryOrderRepository()
        orders.create_order = AsyncMock(
            return_value={"orderId": "ORD-9", "estimatedDelivery": "2025-02-01T10:00:00Z"}
        )
        use_case = OrderSubmissionUseCase(
            filled_cart_repository, orders, coupon_repository, delivery_estimator
        )

        response = await use_case.place_order(review_session, 42, TODAY)
        assert response.confirmation.estimated_delivery_date == date(2025, 2, 1)

    @pytest.mark.asyncio
    async def test_cart_clear_failure_keeps_order(
        self, order_use_case, review_session, filled_cart_repository
    ):
        with patch.object(
            filled_cart_repository, "clear_cart", AsyncMock(side_effect=DatabaseError("locked"))
        ):
            response = await order_use_case.place_order(review_session, 42, TODAY)
        assert response.success
