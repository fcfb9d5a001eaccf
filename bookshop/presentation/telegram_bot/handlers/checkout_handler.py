"""
Checkout Handler

Walks the shopper through Login -> Address -> Payment -> Review with inline
keyboards, and collects free-text answers (address form, UPI ID, card,
coupon) through a single message handler.
"""

import logging
from typing import Optional

from telegram import Update
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from bookshop.application.dtos.checkout_dtos import AddressRequest, PaymentRequest
from bookshop.domain.entities.checkout_session import CheckoutSession, CheckoutStep
from bookshop.domain.value_objects.payment import PaymentMethod
from bookshop.infrastructure.container.dependency_injection import get_container
from bookshop.infrastructure.utilities.exceptions import error_handler
from bookshop.infrastructure.utilities.i18n import tr
from bookshop.presentation.telegram_bot.keyboards.cart import (
    get_cart_keyboard,
    get_empty_cart_keyboard,
    get_main_menu_keyboard,
)
from bookshop.presentation.telegram_bot.keyboards.checkout import (
    get_address_type_keyboard,
    get_bank_keyboard,
    get_checkout_keyboard,
    get_review_keyboard,
    get_wallet_keyboard,
)
from bookshop.presentation.telegram_bot.states import (
    ADDRESS_FIELDS,
    ADDRESS_FORM,
    AWAITING_ADDRESS,
    AWAITING_CARD,
    AWAITING_COUPON,
    AWAITING_INPUT,
    AWAITING_UPI,
    CHECKOUT_SESSION,
)
from bookshop.presentation.telegram_bot.views import (
    render_address,
    render_cart,
    render_cod_note,
    render_confirmation,
    render_field_errors,
    render_review,
    render_step_indicator,
)

logger = logging.getLogger(__name__)


class CheckoutHandler:
    """Handler for the checkout flow"""

    def __init__(self):
        self._logger = logging.getLogger(self.__class__.__name__)
        self._container = get_container()
        self._checkout = self._container.get_checkout_flow_use_case()
        self._orders = self._container.get_order_submission_use_case()
        self._cart_use_case = self._container.get_cart_management_use_case()
        self._pricing_policy = self._container.get_pricing_policy()

    # -- entry ---------------------------------------------------------------

    @error_handler("start_checkout")
    async def handle_start_checkout(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        query = update.callback_query
        await query.answer()
        user_id = update.effective_user.id
        self._logger.info("🧾 CHECKOUT: User %s", user_id)

        self._reset_input(context)
        response = await self._checkout.start_checkout(user_id)
        if response.redirect_to_cart:
            context.user_data.pop(CHECKOUT_SESSION, None)
            await self._show_cart(update, user_id)
            return
        if not response.success:
            await query.edit_message_text(response.error_message)
            return

        context.user_data[CHECKOUT_SESSION] = response.session
        await self._render_step(update, response.session)

    # -- callbacks -----------------------------------------------------------

    async def handle_noop(self, update: Update, _: ContextTypes.DEFAULT_TYPE) -> None:
        """Buttons that only display information"""
        await update.callback_query.answer()

    @error_handler("checkout_callback")
    async def handle_checkout_callback(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        """Dispatch co_* buttons"""
        query = update.callback_query
        await query.answer()
        data = query.data
        self._logger.info("🎯 CHECKOUT CALLBACK: User %s clicked: %s", update.effective_user.id, data)

        if data == "co_cancel":
            self._end_checkout(context)
            await query.edit_message_text(tr("CHECKOUT_CANCELLED"), reply_markup=get_main_menu_keyboard())
            return

        session = await self._active_session(update, context)
        if session is None:
            return

        if data == "co_login_profile":
            user = update.effective_user
            await self._checkout.sign_in(session, user.full_name)
        elif data == "co_login_guest":
            await self._checkout.continue_as_guest(session)
        elif data == "co_addr_new":
            context.user_data[ADDRESS_FORM] = {}
            context.user_data[AWAITING_INPUT] = AWAITING_ADDRESS
            await query.message.reply_text(tr("ADDRESS_ASK_FULL_NAME"))
            return
        elif data.startswith("co_addr_"):
            index = self._callback_number(data, "co_addr_")
            if index is not None:
                self._checkout.use_saved_address(session, index)
        elif data.startswith("co_atype_"):
            form = context.user_data.setdefault(ADDRESS_FORM, {})
            form["address_type"] = data[len("co_atype_"):]
            await self._submit_address_form(update, context, session)
            return
        elif data.startswith("co_pay_"):
            if await self._choose_payment_method(update, context, session, data[len("co_pay_"):]):
                return
        elif data.startswith("co_bank_"):
            if not await self._select_payment(
                update, session, PaymentRequest("netbanking", {"bank": data[len("co_bank_"):]})
            ):
                return
        elif data.startswith("co_wallet_"):
            if not await self._select_payment(
                update, session, PaymentRequest("wallet", {"provider": data[len("co_wallet_"):]})
            ):
                return
        elif data == "co_next":
            self._checkout.advance(session)
        elif data.startswith("co_step_"):
            step = self._callback_number(data, "co_step_")
            if step is not None:
                self._reset_input(context)
                self._checkout.go_to_step(session, step)
        elif data == "co_coupon":
            context.user_data[AWAITING_INPUT] = AWAITING_COUPON
            await query.message.reply_text(tr("COUPON_ASK"))
            return
        elif data == "co_coupon_remove":
            self._checkout.remove_coupon(session)
        elif data == "co_place":
            await self._place_order(update, context, session)
            return

        await self._render_step(update, session)

    async def _choose_payment_method(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE, session: CheckoutSession, method: str
    ) -> bool:
        """Ask for the method's details; returns True when a prompt was sent"""
        message = update.callback_query.message
        if method == PaymentMethod.UPI.value:
            context.user_data[AWAITING_INPUT] = AWAITING_UPI
            await message.reply_text(tr("PAYMENT_ASK_UPI"))
            return True
        if method == PaymentMethod.CARD.value:
            context.user_data[AWAITING_INPUT] = AWAITING_CARD
            await message.reply_text(tr("PAYMENT_ASK_CARD"))
            return True
        if method == PaymentMethod.NETBANKING.value:
            await message.reply_text(tr("PAYMENT_CHOOSE_BANK"), reply_markup=get_bank_keyboard())
            return True
        if method == PaymentMethod.WALLET.value:
            await message.reply_text(tr("PAYMENT_CHOOSE_WALLET"), reply_markup=get_wallet_keyboard())
            return True
        await self._select_payment(update, session, PaymentRequest(method))
        return False

    async def _select_payment(
        self, update: Update, session: CheckoutSession, request: PaymentRequest
    ) -> bool:
        response = self._checkout.select_payment(session, request)
        if not response.success:
            await self._reply(update, response.error_message)
        return response.success

    # -- free text -----------------------------------------------------------

    @error_handler("checkout_text")
    async def handle_text_input(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Route a text message to whatever the bot asked for"""
        awaiting = context.user_data.get(AWAITING_INPUT)
        if awaiting is None:
            await update.message.reply_text(tr("UNKNOWN_INPUT"))
            return

        session = await self._active_session(update, context)
        if session is None:
            return

        text = update.message.text.strip()
        if awaiting == AWAITING_ADDRESS:
            await self._handle_address_answer(update, context, session, text)
        elif awaiting == AWAITING_UPI:
            if await self._select_payment(update, session, PaymentRequest("upi", {"vpa": text})):
                self._reset_input(context)
                await self._render_step(update, session)
        elif awaiting == AWAITING_CARD:
            number, _, expiry = text.rpartition(" ")
            if await self._select_payment(
                update, session, PaymentRequest("card", {"number": number, "expiry": expiry})
            ):
                self._reset_input(context)
                await self._render_step(update, session)
        elif awaiting == AWAITING_COUPON:
            response = await self._checkout.apply_coupon(session, text)
            self._reset_input(context)
            if not response.success:
                await update.message.reply_text(response.error_message)
            await self._render_step(update, session)

    async def _handle_address_answer(
        self,
        update: Update,
        context: ContextTypes.DEFAULT_TYPE,
        session: CheckoutSession,
        text: str,
    ) -> None:
        form = context.user_data.setdefault(ADDRESS_FORM, {})
        field = self._next_field(form)
        if field is None:
            await self._submit_address_form(update, context, session)
            return

        form[field] = "" if field == "landmark" and text == "-" else text

        if field == "zip_code" and not (form.get("city") and form.get("state")):
            found = self._checkout.lookup_pincode(text)
            if found:
                form.setdefault("city", found[0])
                form.setdefault("state", found[1])
                await update.message.reply_text(
                    tr("ADDRESS_AUTOFILLED").format(city=found[0], state=found[1])
                )

        next_field = self._next_field(form)
        if next_field is not None:
            await update.message.reply_text(tr(f"ADDRESS_ASK_{next_field.upper()}"))
        elif "address_type" not in form:
            await update.message.reply_text(
                tr("ADDRESS_ASK_TYPE"), reply_markup=get_address_type_keyboard()
            )
        else:
            await self._submit_address_form(update, context, session)

    @staticmethod
    def _next_field(form: dict) -> Optional[str]:
        return next((name for name in ADDRESS_FIELDS if name not in form), None)

    async def _submit_address_form(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE, session: CheckoutSession
    ) -> None:
        form = context.user_data.get(ADDRESS_FORM, {})
        response = self._checkout.submit_address(
            session,
            AddressRequest(
                full_name=form.get("full_name", ""),
                phone=form.get("phone", ""),
                street=form.get("street", ""),
                zip_code=form.get("zip_code", ""),
                city=form.get("city", ""),
                state=form.get("state", ""),
                landmark=form.get("landmark", ""),
                address_type=form.get("address_type", "home"),
            ),
        )
        if response.success:
            self._reset_input(context)
            await self._render_step(update, session)
            return

        # Ask again for every rejected field, keeping the valid answers
        for name in response.field_errors:
            form.pop(name, None)
        context.user_data[AWAITING_INPUT] = AWAITING_ADDRESS
        await self._reply(update, render_field_errors(response.field_errors), parse_mode="HTML")
        next_field = self._next_field(form)
        if next_field is not None:
            await self._reply(update, tr(f"ADDRESS_ASK_{next_field.upper()}"))
        else:
            await self._reply(update, tr("ADDRESS_ASK_TYPE"), reply_markup=get_address_type_keyboard())

    # -- order placement -----------------------------------------------------

    async def _place_order(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE, session: CheckoutSession
    ) -> None:
        query = update.callback_query
        user_id = update.effective_user.id
        await query.edit_message_text(tr("ORDER_PLACING"))

        response = await self._orders.place_order(session, user_id)
        if response.success:
            self._end_checkout(context)
            await query.edit_message_text(
                render_confirmation(response.confirmation),
                parse_mode="HTML",
                reply_markup=get_main_menu_keyboard(),
            )
            return
        if response.redirect_to_cart:
            self._end_checkout(context)
            await self._show_cart(update, user_id)
            return

        notice = "ORDER_REPRICED" if response.repriced else "ORDER_FAILED"
        summary = await self._checkout.get_summary(session)
        await query.edit_message_text(
            tr(notice).format(error=response.error_message)
            + "\n\n"
            + render_review(summary),
            parse_mode="HTML",
            reply_markup=get_review_keyboard(session),
        )

    # -- helpers -------------------------------------------------------------

    async def _active_session(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> Optional[CheckoutSession]:
        """The user's session with a fresh item snapshot, or None after a redirect"""
        session = context.user_data.get(CHECKOUT_SESSION)
        if session is None:
            self._reset_input(context)
            await self._reply(update, tr("CHECKOUT_EXPIRED"), reply_markup=get_main_menu_keyboard())
            return None

        refreshed = await self._checkout.refresh_session(session)
        if refreshed.redirect_to_cart:
            self._end_checkout(context)
            await self._show_cart(update, update.effective_user.id)
            return None
        return session

    async def _render_step(self, update: Update, session: CheckoutSession) -> None:
        lines = [render_step_indicator(session), ""]
        if session.current_step == CheckoutStep.LOGIN:
            lines.append(tr("LOGIN_PROMPT"))
        elif session.current_step == CheckoutStep.ADDRESS:
            lines.append(tr("ADDRESS_PROMPT"))
            if session.address:
                lines.extend(["", render_address(session.address)])
        elif session.current_step == CheckoutStep.PAYMENT:
            lines.append(tr("PAYMENT_PROMPT"))
            if session.payment:
                lines.extend(["", tr("PAYMENT_SELECTED").format(method=session.payment.describe())])
            lines.extend(["", render_cod_note(self._pricing_policy)])
        else:
            summary = await self._checkout.get_summary(session)
            lines.append(render_review(summary))

        await self._reply(
            update, "\n".join(lines), parse_mode="HTML", reply_markup=get_checkout_keyboard(session)
        )

    async def _show_cart(self, update: Update, user_id: int) -> None:
        response = await self._cart_use_case.get_cart(user_id)
        summary = response.cart_summary
        if summary is None or summary.is_empty:
            await self._reply(update, tr("CART_EMPTY"), reply_markup=get_empty_cart_keyboard())
        else:
            await self._reply(
                update, render_cart(summary), parse_mode="HTML", reply_markup=get_cart_keyboard(summary)
            )

    @staticmethod
    async def _reply(update: Update, text: str, **kwargs) -> None:
        """Edit the button's message for callbacks, reply for text messages"""
        if update.callback_query:
            await update.callback_query.edit_message_text(text, **kwargs)
        else:
            await update.message.reply_text(text, **kwargs)

    def _callback_number(self, data: str, prefix: str) -> Optional[int]:
        """Number after a callback prefix; None for anything else"""
        value = data[len(prefix):]
        if not value.isdecimal():
            self._logger.warning("⚠️ MALFORMED CALLBACK: %r", data)
            return None
        return int(value)

    @staticmethod
    def _reset_input(context: ContextTypes.DEFAULT_TYPE) -> None:
        context.user_data.pop(AWAITING_INPUT, None)
        context.user_data.pop(ADDRESS_FORM, None)

    def _end_checkout(self, context: ContextTypes.DEFAULT_TYPE) -> None:
        self._reset_input(context)
        context.user_data.pop(CHECKOUT_SESSION, None)


def register_checkout_handlers(application: Application):
    """Register checkout handlers"""
    handler = CheckoutHandler()

    application.add_handler(
        CallbackQueryHandler(handler.handle_start_checkout, pattern="^checkout_start$")
    )
    application.add_handler(CallbackQueryHandler(handler.handle_checkout_callback, pattern="^co_"))
    application.add_handler(CallbackQueryHandler(handler.handle_noop, pattern="^noop$"))
    application.add_handler(
        MessageHandler(filters.TEXT & ~filters.COMMAND, handler.handle_text_input)
    )
