"""
Cart DTOs

Data Transfer Objects for cart-related operations.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from bookshop.domain.services.pricing import PriceBreakdown


@dataclass
class AddToCartRequest:
    """Request to add a book to the cart"""
    customer_id: int
    book_id: str
    quantity: int = 1


@dataclass
class UpdateQuantityRequest:
    """Request to change a cart line's quantity"""
    customer_id: int
    book_id: str
    quantity: int


@dataclass
class CartItemInfo:
    """Cart item information"""
    book_id: str
    title: str
    author: str
    quantity: int
    unit_price: int
    total_price: int


@dataclass
class CartSummary:
    """Cart lines plus the price breakdown"""
    items: List[CartItemInfo]
    item_count: int
    pricing: PriceBreakdown

    @property
    def is_empty(self) -> bool:
        return not self.items


@dataclass
class CartOperationResponse:
    """Response for cart operations"""
    success: bool
    cart_summary: Optional[CartSummary] = None
    error_message: Optional[str] = None


@dataclass
class CatalogResponse:
    """Books available to add"""
    success: bool
    books: List = field(default_factory=list)
    error_message: Optional[str] = None
