"""
Start and catalog handler

/start greeting and the /books listing.
"""

import logging

from telegram import Update
from telegram.ext import Application, CallbackQueryHandler, CommandHandler, ContextTypes

from bookshop.infrastructure.container.dependency_injection import get_container
from bookshop.infrastructure.utilities.exceptions import error_handler
from bookshop.infrastructure.utilities.i18n import tr
from bookshop.presentation.telegram_bot.keyboards.cart import (
    get_catalog_keyboard,
    get_main_menu_keyboard,
)

logger = logging.getLogger(__name__)


class StartHandler:
    """Greeting and catalog browsing"""

    def __init__(self):
        self._container = get_container()
        self._cart_use_case = self._container.get_cart_management_use_case()
        self._logger = logging.getLogger(self.__class__.__name__)

    @error_handler("start_command")
    async def start_command(self, update: Update, _: ContextTypes.DEFAULT_TYPE) -> None:
        """Handle /start"""
        user = update.effective_user
        self._logger.info("👋 START: User %s", user.id)
        await update.message.reply_text(
            tr("WELCOME").format(name=user.first_name or "reader"),
            parse_mode="HTML",
            reply_markup=get_main_menu_keyboard(),
        )

    @error_handler("list_books")
    async def books_command(self, update: Update, _: ContextTypes.DEFAULT_TYPE) -> None:
        """Handle /books and the browse button"""
        query = update.callback_query
        if query:
            await query.answer()

        response = await self._cart_use_case.list_books()
        if not response.success:
            text, keyboard = response.error_message, get_main_menu_keyboard()
        elif not response.books:
            text, keyboard = tr("CATALOG_EMPTY"), get_main_menu_keyboard()
        else:
            text, keyboard = tr("CATALOG_TITLE"), get_catalog_keyboard(response.books)

        if query:
            await query.edit_message_text(text, parse_mode="HTML", reply_markup=keyboard)
        else:
            await update.message.reply_text(text, parse_mode="HTML", reply_markup=keyboard)


def register_start_handlers(application: Application):
    """Register start and catalog handlers"""
    handler = StartHandler()

    application.add_handler(CommandHandler("start", handler.start_command))
    application.add_handler(CommandHandler("books", handler.books_command))
    application.add_handler(CallbackQueryHandler(handler.books_command, pattern="^menu_books$"))
