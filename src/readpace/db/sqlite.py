"""SQLite database operations.

Handles database connection, session management and the book
repository. The repository only knows two operations: load every book,
and replace every book. Callers always write back the whole collection.
"""

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Iterable, Optional

from sqlalchemy import create_engine, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, sessionmaker
from sqlalchemy.pool import StaticPool

from ..plan.calendar import parse_date_key
from .models import Base, BookRecord, CompletedDayRecord, DailyGoalRecord
from .schemas import Book, DailyGoal

log = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Raised when books cannot be loaded from or written to storage."""

    pass


class Database:
    """Database connection and book repository."""

    def __init__(self, db_path: Optional[str] = None):
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file. If None, uses
                     READPACE_DB_PATH env var or the configured default.
        """
        if db_path is None:
            from ..config import get_config

            db_path = os.environ.get("READPACE_DB_PATH", str(get_config().db_path))

        self.db_path = Path(db_path)
        self._is_memory = str(db_path) == ":memory:"

        if not self._is_memory:
            self._ensure_directory()

        # For in-memory databases, use StaticPool to reuse the same connection
        # This ensures all sessions share the same in-memory database
        if self._is_memory:
            self.engine = create_engine(
                "sqlite:///:memory:",
                echo=False,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                connect_args={"check_same_thread": False},
            )
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

    def _ensure_directory(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def create_tables(self) -> None:
        """Create all database tables."""
        Base.metadata.create_all(self.engine)

    def drop_tables(self) -> None:
        """Drop all database tables. Use with caution!"""
        Base.metadata.drop_all(self.engine)

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Get a database session context manager."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ========================================================================
    # Book Repository
    # ========================================================================

    def load_all(self) -> list[Book]:
        """Load every stored book, in the order they were last written.

        Raises:
            RepositoryError: If the database cannot be read.
        """
        try:
            with self.get_session() as s:
                stmt = (
                    select(BookRecord)
                    .options(
                        selectinload(BookRecord.daily_goals),
                        selectinload(BookRecord.completed_days),
                    )
                    .order_by(BookRecord.position, BookRecord.created_at)
                )
                records = s.execute(stmt).scalars().all()
                books = [self._record_to_book(r) for r in records]
        except SQLAlchemyError as e:
            log.error("Loading books failed: %s", e)
            raise RepositoryError(f"Could not load books: {e}") from e
        except ValueError as e:
            log.error("Stored book failed validation: %s", e)
            raise RepositoryError(f"Stored book data is invalid: {e}") from e

        log.debug("Loaded %d book(s) from %s", len(books), self.db_path)
        return books

    def replace_all(self, books: Iterable[Book]) -> None:
        """Replace the stored collection with ``books``.

        Runs in one transaction: either the whole collection is written or
        the previous one is left untouched.

        Raises:
            RepositoryError: If the write fails.
        """
        books = list(books)
        try:
            with self.get_session() as s:
                s.execute(delete(CompletedDayRecord))
                s.execute(delete(DailyGoalRecord))
                s.execute(delete(BookRecord))
                for position, book in enumerate(books):
                    s.add(self._book_to_record(book, position))
        except SQLAlchemyError as e:
            log.error("Writing %d book(s) failed: %s", len(books), e)
            raise RepositoryError(f"Could not save books: {e}") from e

        log.debug("Wrote %d book(s) to %s", len(books), self.db_path)

    @staticmethod
    def _book_to_record(book: Book, position: int) -> BookRecord:
        record = BookRecord(
            id=book.id,
            title=book.title,
            file_path=book.file_path,
            total_pages=book.total_pages,
            current_page=book.current_page,
            max_page_reached=book.max_page_reached,
            target_date=book.target_date.isoformat(),
            start_date=book.start_date.isoformat(),
            position=position,
        )
        record.daily_goals = [
            DailyGoalRecord(
                date=goal.date.isoformat(),
                start_page=goal.start_page,
                end_page=goal.end_page,
            )
            for goal in book.daily_goals.values()
        ]
        record.completed_days = [
            CompletedDayRecord(date=day.isoformat(), position=i)
            for i, day in enumerate(book.completed_days)
        ]
        return record

    @staticmethod
    def _record_to_book(record: BookRecord) -> Book:
        max_page_reached = record.max_page_reached
        if max_page_reached is None:
            # Rows from before the high-water mark: the last viewed page is
            # the best available estimate.
            max_page_reached = record.current_page or 0

        daily_goals = {}
        for row in record.daily_goals:
            key = parse_date_key(row.date)
            daily_goals[key] = DailyGoal(
                date=key, start_page=row.start_page, end_page=row.end_page
            )

        return Book(
            id=record.id,
            title=record.title,
            file_path=record.file_path,
            total_pages=record.total_pages,
            current_page=record.current_page or 1,
            max_page_reached=max_page_reached,
            target_date=parse_date_key(record.target_date),
            start_date=parse_date_key(record.start_date),
            completed_days=[parse_date_key(row.date) for row in record.completed_days],
            daily_goals=daily_goals,
        )


# Global database instance
_db: Optional[Database] = None


def get_db(db_path: Optional[str] = None) -> Database:
    """Get or create the global database instance."""
    global _db
    if _db is None:
        _db = Database(db_path)
        _db.create_tables()
    return _db


def reset_db() -> None:
    """Reset the global database instance. Used for testing."""
    global _db
    _db = None
