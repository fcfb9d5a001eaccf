"""
Cart domain entity

The shopper's cart as held by the cart store.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from bookshop.infrastructure.utilities.constants import ValidationSettings


@dataclass
class CartItem:
    """One book line in the cart"""

    id: str
    title: str
    author: str
    unit_price: int
    quantity: int = 1
    image_ref: Optional[str] = None

    def __post_init__(self):
        if not self.id:
            raise ValueError("Cart item id is required")
        if self.unit_price < 0:
            raise ValueError("Unit price cannot be negative")
        if self.quantity < 1:
            raise ValueError("Quantity must be at least 1")

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "price": self.unit_price,
            "quantity": self.quantity,
            "image": self.image_ref,
        }


@dataclass
class Cart:
    """
    Cart aggregate

    Items keep insertion order. Adding a book that is already in the cart
    raises its quantity; setting a quantity of zero or less removes the line.
    """

    customer_id: int
    items: List[CartItem] = field(default_factory=list)

    def _find(self, item_id: str) -> Optional[CartItem]:
        return next((item for item in self.items if item.id == item_id), None)

    def add_item(self, item: CartItem) -> None:
        existing = self._find(item.id)
        if existing:
            existing.quantity = min(
                existing.quantity + item.quantity, ValidationSettings.MAX_CART_ITEM_QUANTITY
            )
        else:
            self.items.append(item)

    def remove_item(self, item_id: str) -> bool:
        existing = self._find(item_id)
        if existing is None:
            return False
        self.items.remove(existing)
        return True

    def update_quantity(self, item_id: str, quantity: int) -> bool:
        """Set a line's quantity; zero or less removes it"""
        existing = self._find(item_id)
        if existing is None:
            return False
        if quantity <= 0:
            self.items.remove(existing)
        else:
            existing.quantity = min(quantity, ValidationSettings.MAX_CART_ITEM_QUANTITY)
        return True

    def clear(self) -> None:
        self.items.clear()

    @property
    def total_price(self) -> int:
        return sum(item.line_total for item in self.items)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def is_empty(self) -> bool:
        return not self.items
