"""
Database infrastructure
"""

from .models import Base, Book, CartLine
from .operations import DatabaseManager, get_db_manager, init_db, reset_db_manager

__all__ = [
    "Base",
    "Book",
    "CartLine",
    "DatabaseManager",
    "get_db_manager",
    "init_db",
    "reset_db_manager",
]
