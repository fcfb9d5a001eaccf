"""
Bookshop checkout bot

Telegram storefront for an online bookstore: cart, guided checkout and
order placement.
"""

__version__ = "1.0.0"
