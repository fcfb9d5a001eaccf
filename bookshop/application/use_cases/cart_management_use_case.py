"""
Cart management use case

Handles shopping cart operations for customers.
"""

import logging
from typing import Optional

from bookshop.application.dtos.cart_dtos import (
    AddToCartRequest,
    CartItemInfo,
    CartOperationResponse,
    CartSummary,
    CatalogResponse,
    UpdateQuantityRequest,
)
from bookshop.domain.entities.cart_entity import Cart, CartItem
from bookshop.domain.repositories.book_repository import BookRepository
from bookshop.domain.repositories.cart_repository import CartRepository
from bookshop.domain.services.pricing import DEFAULT_POLICY, PricingPolicy, calculate_pricing
from bookshop.domain.value_objects.customer_id import CustomerId
from bookshop.infrastructure.utilities.exceptions import BookshopError


class CartManagementUseCase:
    """
    Use case for cart management operations

    Handles:
    1. Listing books that can be added
    2. Adding and removing books
    3. Updating quantities
    4. Getting the cart summary with its price breakdown
    5. Clearing the cart
    """

    def __init__(
        self,
        cart_repository: CartRepository,
        book_repository: BookRepository,
        pricing_policy: PricingPolicy = DEFAULT_POLICY,
    ):
        self._cart_repository = cart_repository
        self._book_repository = book_repository
        self._pricing_policy = pricing_policy
        self._logger = logging.getLogger(self.__class__.__name__)

    async def list_books(self) -> CatalogResponse:
        """Books available for the /books listing"""
        try:
            books = await self._book_repository.list_books()
            return CatalogResponse(success=True, books=books)
        except BookshopError as e:
            self._logger.error("💥 LIST BOOKS ERROR: %s", e)
            return CatalogResponse(success=False, error_message=e.user_message)

    async def add_to_cart(self, request: AddToCartRequest) -> CartOperationResponse:
        """Add a book to the customer's cart"""
        self._logger.info(
            "🛒 CART USE CASE: Adding to cart - User: %s, Book: %s, Qty: %s",
            request.customer_id,
            request.book_id,
            request.quantity,
        )

        try:
            customer_id = CustomerId(request.customer_id)
            if request.quantity <= 0:
                raise ValueError("Quantity must be greater than 0")

            book = await self._book_repository.get_book(request.book_id)
            if not book:
                raise ValueError("Book not found")

            cart = await self._cart_repository.add_item(
                customer_id.value,
                CartItem(
                    id=book.id,
                    title=book.title,
                    author=book.author,
                    unit_price=book.price,
                    quantity=request.quantity,
                    image_ref=book.image_ref,
                ),
            )
            self._logger.info("✅ CART REPOSITORY SUCCESS: %d items", cart.item_count)
            return CartOperationResponse(success=True, cart_summary=self.summarize(cart))

        except BookshopError as e:
            self._logger.error("💥 CART STORE ERROR adding to cart: %s", e)
            return CartOperationResponse(success=False, error_message=e.user_message)
        except ValueError as e:
            self._logger.warning("💥 VALIDATION ERROR adding to cart: %s", e)
            return CartOperationResponse(success=False, error_message=str(e))

    async def get_cart(self, customer_id: int) -> CartOperationResponse:
        """Get the customer's cart summary"""
        self._logger.info("👀 GET CART USE CASE: Retrieving cart for user %s", customer_id)
        try:
            cart = await self._cart_repository.get_cart(CustomerId(customer_id).value)
            return CartOperationResponse(success=True, cart_summary=self.summarize(cart))
        except BookshopError as e:
            self._logger.error("💥 GET CART ERROR for user %s: %s", customer_id, e)
            return CartOperationResponse(success=False, error_message=e.user_message)

    async def update_quantity(self, request: UpdateQuantityRequest) -> CartOperationResponse:
        """Change a line's quantity; zero or less removes the book"""
        self._logger.info(
            "🔄 UPDATE QUANTITY: User %s, Book %s -> %s",
            request.customer_id,
            request.book_id,
            request.quantity,
        )
        try:
            cart = await self._cart_repository.update_quantity(
                CustomerId(request.customer_id).value, request.book_id, request.quantity
            )
            return CartOperationResponse(success=True, cart_summary=self.summarize(cart))
        except BookshopError as e:
            self._logger.error("💥 UPDATE QUANTITY ERROR: %s", e)
            return CartOperationResponse(success=False, error_message=e.user_message)

    async def change_quantity(
        self, customer_id: int, book_id: str, delta: int
    ) -> CartOperationResponse:
        """Increment or decrement a line by ``delta``"""
        current = await self._cart_repository.get_cart(customer_id)
        line = next((item for item in current.items if item.id == book_id), None)
        if line is None:
            return CartOperationResponse(success=False, error_message="Item not in cart")
        return await self.update_quantity(
            UpdateQuantityRequest(customer_id, book_id, line.quantity + delta)
        )

    async def remove_item(self, customer_id: int, book_id: str) -> CartOperationResponse:
        """Remove a book from the cart"""
        self._logger.info("➖ REMOVE ITEM: User %s, Book %s", customer_id, book_id)
        try:
            cart = await self._cart_repository.remove_item(CustomerId(customer_id).value, book_id)
            return CartOperationResponse(success=True, cart_summary=self.summarize(cart))
        except BookshopError as e:
            self._logger.error("💥 REMOVE ITEM ERROR: %s", e)
            return CartOperationResponse(success=False, error_message=e.user_message)

    async def clear_cart(self, customer_id: int) -> CartOperationResponse:
        """Clear the customer's cart"""
        self._logger.info("🗑️ CLEAR CART USE CASE: User %s", customer_id)
        try:
            success = await self._cart_repository.clear_cart(CustomerId(customer_id).value)
            if not success:
                self._logger.error("💥 CLEAR CART FAILED: Repository returned false")
                return CartOperationResponse(success=False, error_message="Failed to clear cart")
            return CartOperationResponse(success=True)
        except BookshopError as e:
            self._logger.error("💥 CLEAR CART ERROR: %s", e)
            return CartOperationResponse(success=False, error_message=e.user_message)

    def summarize(self, cart: Cart, payment_method: Optional[str] = None) -> CartSummary:
        """Build the cart summary; totals are recomputed on every call"""
        items = [
            CartItemInfo(
                book_id=item.id,
                title=item.title,
                author=item.author,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total_price=item.line_total,
            )
            for item in cart.items
        ]
        pricing = calculate_pricing(
            cart.total_price, payment_method, 0, self._pricing_policy
        )
        return CartSummary(items=items, item_count=cart.item_count, pricing=pricing)
