"""
Database operations and connection management
"""

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator, Optional

from sqlalchemy import Engine, create_engine, event, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from bookshop.infrastructure.configuration.config import get_config
from bookshop.infrastructure.database.models import Base, Book
from bookshop.infrastructure.logging.logging_config import PerformanceLogger
from bookshop.infrastructure.utilities.constants import DatabaseSettings
from bookshop.infrastructure.utilities.exceptions import DatabaseError

logger = logging.getLogger(__name__)

DEFAULT_BOOKS_FILE = Path(__file__).resolve().parent.parent / "data" / "books.json"


class DatabaseManager:
    """Database manager with engine, sessions and schema setup"""

    def __init__(self, config: Optional[Any] = None, database_url: Optional[str] = None):
        """Initialize database manager with configuration"""
        self.config = config or get_config()
        self.database_url = database_url or self.config.database_url
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None
        self.logger = logging.getLogger(__name__)

    def get_engine(self) -> Engine:
        """Get database engine with proper configuration"""
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    def _create_engine(self) -> Engine:
        """Create database engine with environment-specific settings"""
        if self.database_url.startswith("sqlite"):
            self._ensure_sqlite_directory()
            engine = create_engine(
                self.database_url,
                poolclass=StaticPool,
                connect_args={
                    "check_same_thread": False,
                    "timeout": DatabaseSettings.CONNECTION_TIMEOUT_SECONDS,
                },
            )
            # SQLite leaves foreign keys off unless asked
            event.listen(
                engine,
                "connect",
                lambda dbapi_conn, _record: dbapi_conn.execute("PRAGMA foreign_keys=ON"),
            )
            return engine

        if self.config.environment == "production":
            pool_size = DatabaseSettings.PRODUCTION_POOL_SIZE
            max_overflow = DatabaseSettings.PRODUCTION_MAX_OVERFLOW
        else:
            pool_size = DatabaseSettings.DEVELOPMENT_POOL_SIZE
            max_overflow = DatabaseSettings.DEVELOPMENT_MAX_OVERFLOW

        return create_engine(
            self.database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_recycle=DatabaseSettings.POOL_RECYCLE_SECONDS,
            pool_pre_ping=True,
        )

    def _ensure_sqlite_directory(self) -> None:
        prefix = "sqlite:///"
        if self.database_url.startswith(prefix) and ":memory:" not in self.database_url:
            Path(self.database_url[len(prefix):]).parent.mkdir(parents=True, exist_ok=True)

    def get_session_factory(self) -> sessionmaker:
        """Get session factory"""
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self.get_engine(), expire_on_commit=False)
        return self._session_factory

    def get_session(self) -> Session:
        """Get database session"""
        return self.get_session_factory()()

    @contextmanager
    def managed_session(self) -> Generator[Session, None, None]:
        """
        Session scope with commit on success and rollback on error.

        Raises:
            DatabaseError: wrapping any SQLAlchemy failure.
        """
        session = self.get_session()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            self.logger.error("💥 DATABASE ERROR: %s", e)
            session.rollback()
            raise DatabaseError(str(e), operation="session") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_tables(self) -> None:
        """Create all database tables"""
        try:
            with PerformanceLogger("create_tables", self.logger):
                Base.metadata.create_all(self.get_engine())
                self.logger.info("Database tables created successfully")
        except SQLAlchemyError as e:
            self.logger.error("Failed to create database tables: %s", e, exc_info=True)
            raise DatabaseError(f"Failed to create database tables: {e}", "create_tables") from e

    def seed_books(self, books_file: Path = DEFAULT_BOOKS_FILE) -> int:
        """Insert catalog books that are not present yet; returns how many were added"""
        with open(books_file, encoding="utf-8") as fh:
            books = json.load(fh)

        added = 0
        with self.managed_session() as session:
            existing = set(session.scalars(select(Book.id)))
            for position, entry in enumerate(books):
                if entry["id"] in existing:
                    continue
                session.add(
                    Book(
                        id=entry["id"],
                        title=entry["title"],
                        author=entry["author"],
                        price=int(entry["price"]),
                        image_ref=entry.get("image"),
                        position=position,
                    )
                )
                added += 1
        self.logger.info("Seeded %d catalog books", added)
        return added

    def health_check(self) -> Dict[str, Any]:
        """Perform database health check"""
        try:
            with PerformanceLogger("db_health_check", self.logger):
                with self.get_session() as session:
                    result = session.execute(text("SELECT 1")).scalar()
            if result == 1:
                return {"status": "healthy", "environment": self.config.environment}
            return {"status": "unhealthy", "error": "Health check query returned unexpected result"}
        except SQLAlchemyError as e:
            self.logger.error("Database health check failed: %s", e, exc_info=True)
            return {"status": "unhealthy", "error": str(e)}

    def close(self) -> None:
        """Close database connections"""
        if self._engine:
            self._engine.dispose()
            self._engine = None
        self._session_factory = None
        self.logger.info("Database connections closed")


# Global database manager instance
_db_manager: Optional[DatabaseManager] = None


def get_db_manager() -> DatabaseManager:
    """Get global database manager instance"""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager


def reset_db_manager() -> None:
    global _db_manager
    if _db_manager is not None:
        _db_manager.close()
    _db_manager = None


def init_db(manager: Optional[DatabaseManager] = None) -> DatabaseManager:
    """Create tables and seed the catalog"""
    manager = manager or get_db_manager()
    manager.create_tables()
    manager.seed_books()
    return manager


__all__ = [
    "DEFAULT_BOOKS_FILE",
    "DatabaseManager",
    "get_db_manager",
    "init_db",
    "reset_db_manager",
]
