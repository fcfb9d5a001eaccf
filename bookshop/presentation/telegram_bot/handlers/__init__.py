"""
Telegram Bot Handlers

Central registration point for all bot handlers.
"""

from telegram.ext import Application

from .cart_handler import register_cart_handlers
from .checkout_handler import register_checkout_handlers
from .start_handler import register_start_handlers


def register_handlers(application: Application):
    """Register all bot handlers; the checkout text handler goes last"""
    register_start_handlers(application)
    register_cart_handlers(application)
    register_checkout_handlers(application)
