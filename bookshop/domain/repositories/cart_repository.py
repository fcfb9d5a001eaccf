"""
Cart repository interface

Defines the contract for the cart store.
"""

from abc import ABC, abstractmethod

from bookshop.domain.entities.cart_entity import Cart, CartItem


class CartRepository(ABC):
    """Repository interface for cart operations"""

    @abstractmethod
    async def get_cart(self, customer_id: int) -> Cart:
        """Get the customer's cart, empty when none exists"""

    @abstractmethod
    async def add_item(self, customer_id: int, item: CartItem) -> Cart:
        """Add a book, raising its quantity when already present"""

    @abstractmethod
    async def remove_item(self, customer_id: int, item_id: str) -> Cart:
        """Remove a book from the cart"""

    @abstractmethod
    async def update_quantity(self, customer_id: int, item_id: str, quantity: int) -> Cart:
        """Set a line's quantity; zero or less removes it"""

    @abstractmethod
    async def clear_cart(self, customer_id: int) -> bool:
        """Clear cart for customer"""
