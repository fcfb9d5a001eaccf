"""
Book repository interface

Read access to the small catalog the bot offers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class BookListing:
    id: str
    title: str
    author: str
    price: int
    image_ref: Optional[str] = None


class BookRepository(ABC):
    """Repository interface for catalog operations"""

    @abstractmethod
    async def list_books(self) -> List[BookListing]:
        """All books in display order"""

    @abstractmethod
    async def get_book(self, book_id: str) -> Optional[BookListing]:
        """A single book or None"""
