"""
SQLAlchemy Book Repository
"""

import logging
from typing import List, Optional

from sqlalchemy import select

from bookshop.domain.repositories.book_repository import BookListing, BookRepository
from bookshop.infrastructure.database.models import Book
from bookshop.infrastructure.database.operations import DatabaseManager, get_db_manager


def _to_listing(book: Book) -> BookListing:
    return BookListing(
        id=book.id,
        title=book.title,
        author=book.author,
        price=book.price,
        image_ref=book.image_ref,
    )


class SQLAlchemyBookRepository(BookRepository):
    """Catalog reads"""

    def __init__(self, db_manager: Optional[DatabaseManager] = None):
        self._db = db_manager or get_db_manager()
        self._logger = logging.getLogger(self.__class__.__name__)

    async def list_books(self) -> List[BookListing]:
        with self._db.managed_session() as session:
            books = session.scalars(select(Book).order_by(Book.position, Book.title)).all()
            return [_to_listing(book) for book in books]

    async def get_book(self, book_id: str) -> Optional[BookListing]:
        with self._db.managed_session() as session:
            book = session.get(Book, book_id)
            return _to_listing(book) if book else None
