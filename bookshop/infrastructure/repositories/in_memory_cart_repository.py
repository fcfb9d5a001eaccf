"""
In-memory cart repository

Cart store kept in process memory; used in development and tests.
"""

import asyncio
import copy
import logging
from typing import Dict

from bookshop.domain.entities.cart_entity import Cart, CartItem
from bookshop.domain.repositories.cart_repository import CartRepository


class InMemoryCartRepository(CartRepository):
    """Cart store backed by a dict of carts"""

    def __init__(self):
        self._carts: Dict[int, Cart] = {}
        self._lock = asyncio.Lock()
        self._logger = logging.getLogger(self.__class__.__name__)

    def _cart(self, customer_id: int) -> Cart:
        return self._carts.setdefault(customer_id, Cart(customer_id=customer_id))

    @staticmethod
    def _snapshot(cart: Cart) -> Cart:
        return Cart(customer_id=cart.customer_id, items=[copy.copy(i) for i in cart.items])

    async def get_cart(self, customer_id: int) -> Cart:
        async with self._lock:
            return self._snapshot(self._cart(customer_id))

    async def add_item(self, customer_id: int, item: CartItem) -> Cart:
        async with self._lock:
            cart = self._cart(customer_id)
            cart.add_item(copy.copy(item))
            self._logger.debug("🛒 ADD: user %s book %s", customer_id, item.id)
            return self._snapshot(cart)

    async def remove_item(self, customer_id: int, item_id: str) -> Cart:
        async with self._lock:
            cart = self._cart(customer_id)
            cart.remove_item(item_id)
            return self._snapshot(cart)

    async def update_quantity(self, customer_id: int, item_id: str, quantity: int) -> Cart:
        async with self._lock:
            cart = self._cart(customer_id)
            cart.update_quantity(item_id, quantity)
            return self._snapshot(cart)

    async def clear_cart(self, customer_id: int) -> bool:
        async with self._lock:
            self._cart(customer_id).clear()
            self._logger.info("🗑️ CART CLEARED: user %s", customer_id)
            return True
