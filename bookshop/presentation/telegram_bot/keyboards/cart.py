"""
Catalog and cart keyboards
"""

from typing import List

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from bookshop.application.dtos.cart_dtos import CartSummary
from bookshop.domain.repositories.book_repository import BookListing
from bookshop.infrastructure.utilities.helpers import format_price
from bookshop.infrastructure.utilities.i18n import tr


def get_main_menu_keyboard(lang: str | None = None):
    """Start screen keyboard"""
    keyboard = [
        [InlineKeyboardButton(tr("BUTTON_BROWSE_BOOKS", lang), callback_data="menu_books")],
        [InlineKeyboardButton(tr("BUTTON_VIEW_CART", lang), callback_data="cart_view")],
    ]
    return InlineKeyboardMarkup(keyboard)


def get_catalog_keyboard(books: List[BookListing], lang: str | None = None):
    """One button per book plus a cart shortcut"""
    keyboard = [
        [
            InlineKeyboardButton(
                f"{book.title} · {format_price(book.price)}", callback_data=f"add_{book.id}"
            )
        ]
        for book in books
    ]
    keyboard.append([InlineKeyboardButton(tr("BUTTON_VIEW_CART", lang), callback_data="cart_view")])
    return InlineKeyboardMarkup(keyboard)


def get_post_add_keyboard(lang: str | None = None):
    keyboard = [
        [
            InlineKeyboardButton(tr("BUTTON_BROWSE_BOOKS", lang), callback_data="menu_books"),
            InlineKeyboardButton(tr("BUTTON_VIEW_CART", lang), callback_data="cart_view"),
        ]
    ]
    return InlineKeyboardMarkup(keyboard)


def get_cart_keyboard(summary: CartSummary, lang: str | None = None):
    """Quantity controls for every line, then clear and checkout"""
    keyboard = []
    for item in summary.items:
        keyboard.append(
            [
                InlineKeyboardButton("➖", callback_data=f"cart_dec_{item.book_id}"),
                InlineKeyboardButton(f"{item.quantity} × {item.title[:20]}", callback_data="noop"),
                InlineKeyboardButton("➕", callback_data=f"cart_inc_{item.book_id}"),
                InlineKeyboardButton("🗑️", callback_data=f"cart_rm_{item.book_id}"),
            ]
        )
    keyboard.append(
        [
            InlineKeyboardButton(tr("BUTTON_CLEAR_CART", lang), callback_data="cart_clear"),
            InlineKeyboardButton(tr("BUTTON_CHECKOUT", lang), callback_data="checkout_start"),
        ]
    )
    keyboard.append(
        [InlineKeyboardButton(tr("BUTTON_CHECK_DELIVERY", lang), callback_data="cart_pincode")]
    )
    keyboard.append([InlineKeyboardButton(tr("BUTTON_BROWSE_BOOKS", lang), callback_data="menu_books")])
    return InlineKeyboardMarkup(keyboard)


def get_empty_cart_keyboard(lang: str | None = None):
    return InlineKeyboardMarkup(
        [[InlineKeyboardButton(tr("BUTTON_BROWSE_BOOKS", lang), callback_data="menu_books")]]
    )
