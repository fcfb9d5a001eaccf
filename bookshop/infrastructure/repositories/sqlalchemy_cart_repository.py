"""
SQLAlchemy Cart Repository

Concrete implementation of CartRepository using SQLAlchemy ORM.
"""

import logging
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from bookshop.domain.entities.cart_entity import Cart, CartItem
from bookshop.domain.repositories.cart_repository import CartRepository
from bookshop.infrastructure.database.models import CartLine
from bookshop.infrastructure.database.operations import DatabaseManager, get_db_manager
from bookshop.infrastructure.utilities.constants import ValidationSettings


class SQLAlchemyCartRepository(CartRepository):
    """SQLAlchemy implementation of cart repository"""

    def __init__(self, db_manager: Optional[DatabaseManager] = None):
        self._db = db_manager or get_db_manager()
        self._logger = logging.getLogger(self.__class__.__name__)

    @staticmethod
    def _load(session: Session, customer_id: int) -> Cart:
        lines = session.scalars(
            select(CartLine).where(CartLine.customer_id == customer_id).order_by(CartLine.id)
        ).all()
        return Cart(
            customer_id=customer_id,
            items=[
                CartItem(
                    id=line.book_id,
                    title=line.title,
                    author=line.author,
                    unit_price=line.unit_price,
                    quantity=line.quantity,
                    image_ref=line.image_ref,
                )
                for line in lines
            ],
        )

    @staticmethod
    def _line(session: Session, customer_id: int, item_id: str) -> Optional[CartLine]:
        return session.scalars(
            select(CartLine).where(
                CartLine.customer_id == customer_id, CartLine.book_id == item_id
            )
        ).first()

    async def get_cart(self, customer_id: int) -> Cart:
        self._logger.info("🔍 GET CART: Fetching cart for user %s", customer_id)
        with self._db.managed_session() as session:
            return self._load(session, customer_id)

    async def add_item(self, customer_id: int, item: CartItem) -> Cart:
        with self._db.managed_session() as session:
            line = self._line(session, customer_id, item.id)
            if line:
                line.quantity = min(
                    line.quantity + item.quantity, ValidationSettings.MAX_CART_ITEM_QUANTITY
                )
            else:
                session.add(
                    CartLine(
                        customer_id=customer_id,
                        book_id=item.id,
                        title=item.title,
                        author=item.author,
                        unit_price=item.unit_price,
                        quantity=item.quantity,
                        image_ref=item.image_ref,
                    )
                )
            session.flush()
            self._logger.info("✅ ITEM ADDED: user %s book %s", customer_id, item.id)
            return self._load(session, customer_id)

    async def remove_item(self, customer_id: int, item_id: str) -> Cart:
        with self._db.managed_session() as session:
            session.execute(
                delete(CartLine).where(
                    CartLine.customer_id == customer_id, CartLine.book_id == item_id
                )
            )
            return self._load(session, customer_id)

    async def update_quantity(self, customer_id: int, item_id: str, quantity: int) -> Cart:
        with self._db.managed_session() as session:
            line = self._line(session, customer_id, item_id)
            if line is not None:
                if quantity <= 0:
                    session.delete(line)
                else:
                    line.quantity = min(quantity, ValidationSettings.MAX_CART_ITEM_QUANTITY)
                session.flush()
            return self._load(session, customer_id)

    async def clear_cart(self, customer_id: int) -> bool:
        with self._db.managed_session() as session:
            session.execute(delete(CartLine).where(CartLine.customer_id == customer_id))
        self._logger.info("🗑️ CART CLEARED: user %s", customer_id)
        return True
