"""
Cart Handler

Handles shopping cart operations using Clean Architecture patterns.
"""

import logging

from telegram import Update
from telegram.ext import Application, CallbackQueryHandler, CommandHandler, ContextTypes

from bookshop.application.dtos.cart_dtos import AddToCartRequest
from bookshop.infrastructure.container.dependency_injection import get_container
from bookshop.infrastructure.utilities.exceptions import error_handler
from bookshop.infrastructure.utilities.i18n import tr
from bookshop.presentation.telegram_bot.keyboards.cart import (
    get_cart_keyboard,
    get_empty_cart_keyboard,
    get_post_add_keyboard,
)
from bookshop.presentation.telegram_bot.states import CHECKOUT_SESSION
from bookshop.presentation.telegram_bot.views import render_cart, render_delivery_estimate

logger = logging.getLogger(__name__)


class CartHandler:
    """Handler for cart operations"""

    def __init__(self):
        self._logger = logging.getLogger(self.__class__.__name__)
        self._container = get_container()
        self._cart_use_case = self._container.get_cart_management_use_case()
        self._delivery_use_case = self._container.get_delivery_estimate_use_case()

    @error_handler("add_to_cart")
    async def handle_add_to_cart(self, update: Update, _: ContextTypes.DEFAULT_TYPE) -> None:
        """Handle adding a book to the cart"""
        query = update.callback_query
        await query.answer()

        user_id = update.effective_user.id
        book_id = query.data[len("add_"):]
        self._logger.info("🛒 ADD TO CART: User %s clicked: %s", user_id, book_id)

        response = await self._cart_use_case.add_to_cart(AddToCartRequest(user_id, book_id))
        if response.success:
            added = next(
                (item for item in response.cart_summary.items if item.book_id == book_id), None
            )
            await query.edit_message_text(
                tr("ADD_SUCCESS").format(
                    title=added.title if added else book_id,
                    count=response.cart_summary.item_count,
                ),
                parse_mode="HTML",
                reply_markup=get_post_add_keyboard(),
            )
        else:
            self._logger.error("❌ ADD FAILED: %s", response.error_message)
            await query.edit_message_text(
                tr("ADD_FAILURE").format(error=response.error_message),
                reply_markup=get_post_add_keyboard(),
            )

    @error_handler("view_cart")
    async def handle_view_cart(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Show the cart from /cart or the cart button"""
        query = update.callback_query
        if query:
            await query.answer()
        # Leaving for the cart view ends any checkout in progress
        context.user_data.pop(CHECKOUT_SESSION, None)
        await self.show_cart(update, update.effective_user.id)

    @error_handler("cart_action")
    async def handle_cart_action(self, update: Update, _: ContextTypes.DEFAULT_TYPE) -> None:
        """Handle +, - and remove buttons"""
        query = update.callback_query
        await query.answer()

        user_id = update.effective_user.id
        _, action, book_id = query.data.split("_", 2)
        self._logger.info("🔄 CART ACTION: User %s %s %s", user_id, action, book_id)

        if action == "inc":
            response = await self._cart_use_case.change_quantity(user_id, book_id, 1)
        elif action == "dec":
            response = await self._cart_use_case.change_quantity(user_id, book_id, -1)
        else:
            response = await self._cart_use_case.remove_item(user_id, book_id)

        if not response.success:
            await query.message.reply_text(response.error_message)
        await self.show_cart(update, user_id)

    @error_handler("clear_cart")
    async def handle_clear_cart(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        query = update.callback_query
        await query.answer()
        context.user_data.pop(CHECKOUT_SESSION, None)
        response = await self._cart_use_case.clear_cart(update.effective_user.id)
        text = tr("CART_CLEARED") if response.success else response.error_message
        await query.edit_message_text(text, reply_markup=get_empty_cart_keyboard())

    @error_handler("check_delivery")
    async def handle_check_delivery(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """/pincode <code> answers with an estimate; the cart button explains how to ask"""
        query = update.callback_query
        if query:
            await query.answer()
            await query.message.reply_text(tr("PINCODE_ASK"))
            return

        if not context.args:
            await update.message.reply_text(tr("PINCODE_ASK"))
            return

        response = self._delivery_use_case.check_pincode(context.args[0])
        if response.success:
            await update.message.reply_text(
                render_delivery_estimate(response.estimate), parse_mode="HTML"
            )
        else:
            await update.message.reply_text(response.error_message)

    async def show_cart(self, update: Update, user_id: int) -> None:
        """Render the cart with a freshly computed price breakdown"""
        response = await self._cart_use_case.get_cart(user_id)
        if not response.success:
            text, keyboard = response.error_message, get_empty_cart_keyboard()
        elif response.cart_summary.is_empty:
            text, keyboard = tr("CART_EMPTY"), get_empty_cart_keyboard()
        else:
            text = render_cart(response.cart_summary)
            keyboard = get_cart_keyboard(response.cart_summary)

        if update.callback_query:
            await update.callback_query.edit_message_text(
                text, parse_mode="HTML", reply_markup=keyboard
            )
        else:
            await update.message.reply_text(text, parse_mode="HTML", reply_markup=keyboard)


def register_cart_handlers(application: Application):
    """Register cart handlers"""
    cart_handler = CartHandler()

    application.add_handler(CommandHandler("cart", cart_handler.handle_view_cart))
    application.add_handler(CallbackQueryHandler(cart_handler.handle_view_cart, pattern="^cart_view$"))
    application.add_handler(CallbackQueryHandler(cart_handler.handle_clear_cart, pattern="^cart_clear$"))
    application.add_handler(CommandHandler("pincode", cart_handler.handle_check_delivery))
    application.add_handler(
        CallbackQueryHandler(cart_handler.handle_check_delivery, pattern="^cart_pincode$")
    )
    application.add_handler(
        CallbackQueryHandler(cart_handler.handle_cart_action, pattern="^cart_(inc|dec|rm)_")
    )
    application.add_handler(CallbackQueryHandler(cart_handler.handle_add_to_cart, pattern="^add_"))
