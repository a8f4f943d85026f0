"""Plan manager: the host side of the scheduler.

Owns the in-memory book collection, reads the clock once per operation
and writes the whole collection back after every change.
"""

import logging
import threading
import time
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Optional

from thefuzz import fuzz

from ..db.schemas import Book, DailyGoal
from ..db.sqlite import Database, RepositoryError, get_db
from .calendar import today_key
from .goals import get_or_create_goal
from .preview import preview_plan
from .progress import PageVisitResult, record_page_visit
from .status import ProgressSummary, summarize

log = logging.getLogger(__name__)

# Minimum similarity (0-100) for a fuzzy title match
TITLE_MATCH_THRESHOLD = 80


class BookNotFoundError(ValueError):
    """No book with the requested id."""

    pass


class PlanManager:
    """Creates plans, hands out daily goals and records page visits."""

    def __init__(
        self,
        db: Optional[Database] = None,
        clock: Optional[Callable[[], datetime]] = None,
        retry_max: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ):
        """Initialize plan manager.

        Args:
            db: Database instance
            clock: Returns the current datetime (default: datetime.now)
            retry_max: Attempts per write (default from config)
            retry_delay: Seconds before the first retry, doubled after each
                failure (default from config)
        """
        if retry_max is None or retry_delay is None:
            from ..config import get_config

            config = get_config()
            if retry_max is None:
                retry_max = config.persist_retry_max
            if retry_delay is None:
                retry_delay = config.persist_retry_delay

        self.db = db or get_db()
        self.retry_max = max(1, retry_max)
        self.retry_delay = retry_delay
        self._clock = clock
        self._lock = threading.Lock()
        self._books: list[Book] = self.db.load_all()

    def today(self) -> date:
        """Current calendar date from the manager's clock."""
        return today_key(self._clock)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def list_books(self) -> list[Book]:
        """All books, in collection order."""
        return list(self._books)

    def get_book(self, book_id: str) -> Book:
        """Get a book by id.

        Raises:
            BookNotFoundError: If no book has that id.
        """
        for book in self._books:
            if book.id == book_id:
                return book
        raise BookNotFoundError(f"Book not found: {book_id}")

    def find_books(self, query: str) -> list[Book]:
        """Books whose id starts with ``query`` or whose title contains it.

        When nothing matches exactly, titles close to ``query`` are returned
        instead, best match first, so a typo still finds the book.
        """
        needle = query.lower().strip()
        matches = [
            book
            for book in self._books
            if book.id.startswith(query) or needle in book.title.lower()
        ]
        if matches or not needle:
            return matches

        scored = []
        for book in self._books:
            title = book.title.lower()
            score = max(fuzz.ratio(needle, title), fuzz.token_sort_ratio(needle, title))
            if score >= TITLE_MATCH_THRESHOLD:
                scored.append((score, book))
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [book for _, book in scored]

    def summaries(self) -> list[ProgressSummary]:
        """Progress summary for every book, as of today."""
        today = self.today()
        return [summarize(book, today) for book in self._books]

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def create_plan(
        self,
        total_pages: int,
        target_date: date,
        title: Optional[str] = None,
        file_path: Optional[str] = None,
    ) -> Book:
        """Start tracking a document.

        Args:
            total_pages: Page count of the document
            target_date: Day the reader wants to be done
            title: Display title (default: document file name)
            file_path: Where the document lives

        Returns:
            The new Book

        Raises:
            InvalidDeadline: If ``target_date`` is not after today.
            RepositoryError: If the book could not be saved.
        """
        with self._lock:
            today = self.today()
            preview_plan(total_pages, target_date, today)

            if not title:
                title = Path(file_path).stem if file_path else "Untitled"

            book = Book(
                title=title,
                file_path=file_path,
                total_pages=total_pages,
                current_page=1,
                max_page_reached=0,
                target_date=target_date,
                start_date=today,
            )
            self._books.append(book)
            log.info("Created plan %s: %d pages by %s", book.id, total_pages, target_date)
            self._persist()
            return book

    def open_book(
        self, book_id: str, today: Optional[date] = None
    ) -> tuple[Book, Optional[DailyGoal]]:
        """Get a book together with today's goal, creating the goal if needed.

        Args:
            book_id: Book to open
            today: Date the caller already read from the clock, so the goal
                and anything shown alongside it describe the same day
                (default: read the clock now)

        Returns:
            Tuple of (book, goal). The goal is None once the book is finished.
        """
        with self._lock:
            book = self.get_book(book_id)
            if today is None:
                today = self.today()
            had_goal = today in book.daily_goals
            goal = get_or_create_goal(book, today)
            if goal is not None and not had_goal:
                self._persist()
            return book, goal

    def visit_page(self, book_id: str, page_number: int) -> PageVisitResult:
        """Record a page turn for a book.

        Today's goal is created first if it does not exist yet, so
        completion detection always has a goal to compare against.

        Raises:
            BookNotFoundError: If no book has that id.
            InvalidPageNumber: If the page is outside the book.
        """
        with self._lock:
            book = self.get_book(book_id)
            today = self.today()
            get_or_create_goal(book, today)
            result = record_page_visit(book, page_number, today)
            self._persist()
            return result

    def remove_book(self, book_id: str) -> bool:
        """Stop tracking a book. Its whole plan history is discarded.

        Returns:
            True if a book was removed
        """
        with self._lock:
            remaining = [b for b in self._books if b.id != book_id]
            if len(remaining) == len(self._books):
                return False
            self._books = remaining
            log.info("Removed book %s", book_id)
            self._persist()
            return True

    def flush(self) -> None:
        """Write the in-memory collection again, e.g. after a failed save."""
        with self._lock:
            self._persist()

    def _persist(self) -> None:
        """Write every book, retrying with exponential backoff.

        The in-memory state is kept on failure so a later ``flush`` can
        write the same data.
        """
        backoff = self.retry_delay

        for attempt in range(self.retry_max):
            try:
                self.db.replace_all(self._books)
                return
            except RepositoryError as e:
                if attempt == self.retry_max - 1:
                    log.error("Giving up saving books after %d attempt(s)", self.retry_max)
                    raise
                log.warning("Saving books failed (%s), retrying in %ss", e, backoff)
                time.sleep(backoff)
                backoff *= 2
