"""
Tests for the Telegram handlers, keyboards and views
"""

from unittest.mock import patch

import pytest

from bookshop.domain.entities.checkout_session import CheckoutSession, CheckoutStep
from bookshop.domain.entities.identity_entity import Identity
from bookshop.domain.services.pricing import calculate_pricing
from bookshop.infrastructure.container.dependency_injection import DependencyContainer
from bookshop.infrastructure.repositories.sqlalchemy_book_repository import (
    SQLAlchemyBookRepository,
)
from bookshop.infrastructure.utilities.i18n import tr
from bookshop.presentation.telegram_bot.handlers.cart_handler import CartHandler
from bookshop.presentation.telegram_bot.handlers.checkout_handler import CheckoutHandler
from bookshop.presentation.telegram_bot.handlers.start_handler import StartHandler
from bookshop.presentation.telegram_bot.keyboards.checkout import (
    get_checkout_keyboard,
    get_review_keyboard,
)
from bookshop.presentation.telegram_bot.states import AWAITING_INPUT, CHECKOUT_SESSION
from bookshop.presentation.telegram_bot.views import render_breakdown, render_step_indicator


def _callbacks(markup):
    return [button.callback_data for row in markup.inline_keyboard for button in row]


def _last_markup(mock):
    return mock.await_args.kwargs["reply_markup"]


@pytest.fixture
def container(test_config, filled_cart_repository, db_manager):
    """Real container with an in-memory cart holding the sample items"""
    container = DependencyContainer(
        config=test_config,
        overrides={
            "cart_repository": filled_cart_repository,
            "book_repository": SQLAlchemyBookRepository(db_manager),
        },
    )
    handler_modules = [
        "bookshop.presentation.telegram_bot.handlers.start_handler",
        "bookshop.presentation.telegram_bot.handlers.cart_handler",
        "bookshop.presentation.telegram_bot.handlers.checkout_handler",
    ]
    patches = [patch(f"{module}.get_container", return_value=container) for module in handler_modules]
    for p in patches:
        p.start()
    yield container
    for p in patches:
        p.stop()


@pytest.fixture
def checkout_handler(container):
    return CheckoutHandler()


class TestCheckoutKeyboards:
    """Keyboards follow the session's guards"""

    def test_continue_hidden_until_step_is_complete(self, sample_items, sample_address):
        session = CheckoutSession.start(42, sample_items, Identity.guest())
        assert "co_next" not in _callbacks(get_checkout_keyboard(session))

        session.select_address(sample_address)
        assert "co_next" in _callbacks(get_checkout_keyboard(session))

    def test_completed_steps_are_clickable(self, review_session):
        callbacks = _callbacks(get_checkout_keyboard(review_session))
        assert {"co_step_1", "co_step_2", "co_step_3"} <= set(callbacks)
        assert "co_step_4" not in callbacks

    def test_place_order_hidden_while_pending(self, review_session):
        assert "co_place" in _callbacks(get_review_keyboard(review_session))
        review_session.mark_pending()
        assert "co_place" not in _callbacks(get_review_keyboard(review_session))

    def test_coupon_button_toggles(self, review_session):
        assert "co_coupon" in _callbacks(get_review_keyboard(review_session))
        review_session.apply_discount("FIRST10", 3500)
        assert "co_coupon_remove" in _callbacks(get_review_keyboard(review_session))


class TestViews:
    def test_breakdown_below_threshold(self):
        text = render_breakdown(calculate_pricing(35000, "cod"))
        assert "₹350.00" in text
        assert "₹40.00" in text
        assert "₹447.50" in text
        assert "₹150.00" in text

    def test_step_indicator(self, review_session):
        review_session.go_to_step(CheckoutStep.PAYMENT)
        text = render_step_indicator(review_session)
        assert text.count("✅") == 2
        assert "<b>3." in text


class TestStartHandler:
    @pytest.mark.asyncio
    async def test_books_listing(self, container, make_text_update, mock_context):
        update = make_text_update("/books")
        await StartHandler().books_command(update, mock_context)

        markup = _last_markup(update.message.reply_text)
        assert "add_bk-001" in _callbacks(markup)


class TestCartHandler:
    """Test cart handler"""

    @pytest.mark.asyncio
    async def test_add_to_cart(self, container, make_callback_update, mock_context):
        update = make_callback_update("add_bk-001", user_id=7)
        await CartHandler().handle_add_to_cart(update, mock_context)

        text = update.callback_query.edit_message_text.await_args.args[0]
        assert "added to your cart" in text
        cart = await container.get_cart_repository().get_cart(7)
        assert [item.id for item in cart.items] == ["bk-001"]

    @pytest.mark.asyncio
    async def test_view_cart_ends_checkout(self, container, make_callback_update, mock_context):
        mock_context.user_data[CHECKOUT_SESSION] = object()
        update = make_callback_update("cart_view")
        await CartHandler().handle_view_cart(update, mock_context)

        assert CHECKOUT_SESSION not in mock_context.user_data
        callbacks = _callbacks(_last_markup(update.callback_query.edit_message_text))
        assert "checkout_start" in callbacks
        assert "cart_pincode" in callbacks

    @pytest.mark.asyncio
    async def test_quantity_buttons(self, container, make_callback_update, mock_context):
        await CartHandler().handle_cart_action(make_callback_update("cart_inc_bk-006"), mock_context)
        await CartHandler().handle_cart_action(make_callback_update("cart_rm_bk-002"), mock_context)

        cart = await container.get_cart_repository().get_cart(42)
        assert {item.id: item.quantity for item in cart.items} == {"bk-006": 2}

    @pytest.mark.asyncio
    async def test_delivery_check_command(self, container, make_text_update, mock_context):
        mock_context.args = ["751001"]
        update = make_text_update("/pincode 751001")
        await CartHandler().handle_check_delivery(update, mock_context)

        text = update.message.reply_text.await_args.args[0]
        assert "Bhubaneswar, Odisha" in text
        assert "(2 days)" in text
        assert tr("DELIVERY_EXPRESS") in text

    @pytest.mark.asyncio
    async def test_delivery_check_rejects_bad_pincode(
        self, container, make_text_update, mock_context
    ):
        mock_context.args = ["7510"]
        update = make_text_update("/pincode 7510")
        await CartHandler().handle_check_delivery(update, mock_context)
        update.message.reply_text.assert_awaited_once_with("Enter valid 6-digit pincode")

    @pytest.mark.asyncio
    async def test_delivery_button_explains_command(
        self, container, make_callback_update, mock_context
    ):
        update = make_callback_update("cart_pincode")
        await CartHandler().handle_check_delivery(update, mock_context)
        update.callback_query.message.reply_text.assert_awaited_once_with(tr("PINCODE_ASK"))


class TestCheckoutHandler:
    """Walk through checkout with button presses and text answers"""

    @pytest.mark.asyncio
    async def test_empty_cart_shows_cart_instead(
        self, checkout_handler, make_callback_update, mock_context
    ):
        update = make_callback_update("checkout_start", user_id=7)
        await checkout_handler.handle_start_checkout(update, mock_context)

        assert CHECKOUT_SESSION not in mock_context.user_data
        assert update.callback_query.edit_message_text.await_args.args[0] == tr("CART_EMPTY")

    @pytest.mark.asyncio
    async def test_full_checkout(
        self, container, checkout_handler, make_callback_update, make_text_update, mock_context
    ):
        start = make_callback_update("checkout_start")
        await checkout_handler.handle_start_checkout(start, mock_context)
        session = mock_context.user_data[CHECKOUT_SESSION]
        assert session.current_step == CheckoutStep.LOGIN
        assert "co_next" not in _callbacks(_last_markup(start.callback_query.edit_message_text))

        await checkout_handler.handle_checkout_callback(
            make_callback_update("co_login_guest"), mock_context
        )
        assert session.current_step == CheckoutStep.ADDRESS

        new_address = make_callback_update("co_addr_new")
        await checkout_handler.handle_checkout_callback(new_address, mock_context)
        new_address.callback_query.message.reply_text.assert_awaited_once_with(
            tr("ADDRESS_ASK_FULL_NAME")
        )

        for answer in ["Asha Rao", "98765 43210", "12 Temple Road", "-"]:
            await checkout_handler.handle_text_input(make_text_update(answer), mock_context)

        pincode = make_text_update("751001")
        await checkout_handler.handle_text_input(pincode, mock_context)
        replies = [call.args[0] for call in pincode.message.reply_text.await_args_list]
        assert replies == [
            tr("ADDRESS_AUTOFILLED").format(city="Bhubaneswar", state="Odisha"),
            tr("ADDRESS_ASK_TYPE"),
        ]

        await checkout_handler.handle_checkout_callback(
            make_callback_update("co_atype_work"), mock_context
        )
        assert session.current_step == CheckoutStep.PAYMENT
        assert session.address.city == "Bhubaneswar"
        assert session.address.landmark == ""
        assert AWAITING_INPUT not in mock_context.user_data

        await checkout_handler.handle_checkout_callback(
            make_callback_update("co_pay_cod"), mock_context
        )
        assert session.current_step == CheckoutStep.REVIEW

        place = make_callback_update("co_place")
        await checkout_handler.handle_checkout_callback(place, mock_context)

        confirmation = place.callback_query.edit_message_text.await_args.args[0]
        assert "ORD-" in confirmation
        assert "₹447.50" in confirmation
        assert CHECKOUT_SESSION not in mock_context.user_data
        assert (await container.get_cart_repository().get_cart(42)).is_empty()

    @pytest.mark.asyncio
    async def test_rejected_address_field_is_asked_again(
        self, checkout_handler, make_callback_update, make_text_update, mock_context
    ):
        await checkout_handler.handle_start_checkout(
            make_callback_update("checkout_start"), mock_context
        )
        await checkout_handler.handle_checkout_callback(
            make_callback_update("co_login_guest"), mock_context
        )
        await checkout_handler.handle_checkout_callback(
            make_callback_update("co_addr_new"), mock_context
        )
        for answer in ["Asha Rao", "12345", "12 Temple Road", "-", "751001"]:
            await checkout_handler.handle_text_input(make_text_update(answer), mock_context)

        submit = make_callback_update("co_atype_home")
        await checkout_handler.handle_checkout_callback(submit, mock_context)
        session = mock_context.user_data[CHECKOUT_SESSION]
        assert session.current_step == CheckoutStep.ADDRESS
        assert "Enter valid 10-digit phone" in submit.callback_query.edit_message_text.await_args_list[0].args[0]
        assert submit.callback_query.edit_message_text.await_args.args[0] == tr("ADDRESS_ASK_PHONE")

        await checkout_handler.handle_text_input(make_text_update("9876543210"), mock_context)
        assert session.current_step == CheckoutStep.PAYMENT
        assert session.address.phone == "9876543210"

    @pytest.mark.asyncio
    async def test_upi_and_coupon(
        self, review_session, checkout_handler, make_callback_update, make_text_update, mock_context
    ):
        review_session.go_to_step(CheckoutStep.PAYMENT)
        mock_context.user_data[CHECKOUT_SESSION] = review_session

        await checkout_handler.handle_checkout_callback(
            make_callback_update("co_pay_upi"), mock_context
        )
        await checkout_handler.handle_text_input(make_text_update("asha@okaxis"), mock_context)
        assert review_session.current_step == CheckoutStep.REVIEW
        assert review_session.payment.details["vpa"] == "asha@okaxis"

        await checkout_handler.handle_checkout_callback(
            make_callback_update("co_coupon"), mock_context
        )
        await checkout_handler.handle_text_input(make_text_update("first10"), mock_context)
        assert review_session.coupon_code == "FIRST10"
        assert review_session.discount == 3500

    @pytest.mark.asyncio
    async def test_invalid_card_keeps_payment_step(
        self, review_session, checkout_handler, make_callback_update, make_text_update, mock_context
    ):
        review_session.go_to_step(CheckoutStep.PAYMENT)
        mock_context.user_data[CHECKOUT_SESSION] = review_session

        await checkout_handler.handle_checkout_callback(
            make_callback_update("co_pay_card"), mock_context
        )
        update = make_text_update("4111111111111112 12/39")
        await checkout_handler.handle_text_input(update, mock_context)

        assert review_session.current_step == CheckoutStep.PAYMENT
        assert review_session.payment.is_cod
        update.message.reply_text.assert_awaited_once_with("Enter a valid card number")

    @pytest.mark.asyncio
    async def test_back_to_completed_step(
        self, review_session, checkout_handler, make_callback_update, mock_context
    ):
        mock_context.user_data[CHECKOUT_SESSION] = review_session
        await checkout_handler.handle_checkout_callback(
            make_callback_update("co_step_2"), mock_context
        )
        assert review_session.current_step == CheckoutStep.ADDRESS
        assert review_session.payment.is_cod

    @pytest.mark.asyncio
    async def test_forward_button_without_data_is_inert(
        self, checkout_handler, make_callback_update, mock_context
    ):
        await checkout_handler.handle_start_checkout(
            make_callback_update("checkout_start"), mock_context
        )
        await checkout_handler.handle_checkout_callback(
            make_callback_update("co_next"), mock_context
        )
        assert mock_context.user_data[CHECKOUT_SESSION].current_step == CheckoutStep.LOGIN

    @pytest.mark.asyncio
    async def test_cart_emptied_mid_checkout(
        self, container, review_session, checkout_handler, make_callback_update, mock_context
    ):
        mock_context.user_data[CHECKOUT_SESSION] = review_session
        await container.get_cart_repository().clear_cart(42)

        update = make_callback_update("co_place")
        await checkout_handler.handle_checkout_callback(update, mock_context)

        assert CHECKOUT_SESSION not in mock_context.user_data
        assert update.callback_query.edit_message_text.await_args.args[0] == tr("CART_EMPTY")

    @pytest.mark.asyncio
    async def test_cart_change_reprices_before_ordering(
        self, container, review_session, checkout_handler, make_callback_update, mock_context
    ):
        review_session.apply_discount("READ50", 5000)
        mock_context.user_data[CHECKOUT_SESSION] = review_session
        await CartHandler().handle_cart_action(make_callback_update("cart_rm_bk-002"), mock_context)

        place = make_callback_update("co_place")
        await checkout_handler.handle_checkout_callback(place, mock_context)

        text = place.callback_query.edit_message_text.await_args.args[0]
        assert "Your total has been updated" in text
        assert "₹237.50" in text
        assert mock_context.user_data[CHECKOUT_SESSION] is review_session
        assert review_session.coupon_code == ""
        assert container.get_order_repository().orders == []

    @pytest.mark.parametrize("data", ["co_step_x", "co_step_", "co_addr_-1", "co_addr_²"])
    @pytest.mark.asyncio
    async def test_malformed_callback_is_ignored(
        self, data, review_session, checkout_handler, make_callback_update, mock_context
    ):
        mock_context.user_data[CHECKOUT_SESSION] = review_session
        update = make_callback_update(data)
        await checkout_handler.handle_checkout_callback(update, mock_context)

        assert review_session.current_step == CheckoutStep.REVIEW
        update.callback_query.edit_message_text.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_expired_session(self, checkout_handler, make_callback_update, mock_context):
        update = make_callback_update("co_next")
        await checkout_handler.handle_checkout_callback(update, mock_context)
        assert update.callback_query.edit_message_text.await_args.args[0] == tr("CHECKOUT_EXPIRED")

    @pytest.mark.asyncio
    async def test_cancel(self, review_session, checkout_handler, make_callback_update, mock_context):
        mock_context.user_data[CHECKOUT_SESSION] = review_session
        update = make_callback_update("co_cancel")
        await checkout_handler.handle_checkout_callback(update, mock_context)
        assert CHECKOUT_SESSION not in mock_context.user_data

    @pytest.mark.asyncio
    async def test_unexpected_text(self, checkout_handler, make_text_update, mock_context):
        update = make_text_update("hello")
        await checkout_handler.handle_text_input(update, mock_context)
        update.message.reply_text.assert_awaited_once_with(tr("UNKNOWN_INPUT"))
