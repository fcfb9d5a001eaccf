"""
SQLAlchemy database models for the bookshop

The cart store keeps one row per (customer, book) line. Book data is copied
onto the line so the cart keeps its prices even if the catalog changes.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, declarative_base, mapped_column
from sqlalchemy.sql import func

Base = declarative_base()


class Book(Base):
    """Catalog book"""
    __tablename__ = "books"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    author: Mapped[str] = mapped_column(String(200), nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)  # paise
    image_ref: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    @property
    def price_display(self) -> str:
        rupees, paise = divmod(self.price, 100)
        return f"₹{rupees:,}.{paise:02d}"


class CartLine(Base):
    """One line of a customer's cart"""
    __tablename__ = "cart_lines"
    __table_args__ = (UniqueConstraint("customer_id", "book_id", name="uq_cart_customer_book"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    customer_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    book_id: Mapped[str] = mapped_column(String(50), ForeignKey("books.id"), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    author: Mapped[str] = mapped_column(String(200), nullable=False)
    unit_price: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    image_ref: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
