"""Page visit tracking and daily completion detection."""

import logging
from dataclasses import dataclass
from datetime import date

from ..db.schemas import Book
from .goals import is_finished

log = logging.getLogger(__name__)


class InvalidPageNumber(ValueError):
    """Page number outside the book's page range."""

    def __init__(self, page_number: int, total_pages: int):
        self.page_number = page_number
        self.total_pages = total_pages
        super().__init__(f"Page {page_number} is outside 1-{total_pages}")


@dataclass
class PageVisitResult:
    """Outcome of recording one page visit."""

    goal_just_completed_today: bool
    max_page_reached: int
    goal_missing: bool = False


def record_page_visit(book: Book, page_number: int, today: date) -> PageVisitResult:
    """Record that the reader is looking at ``page_number``.

    Moves the resume position, advances the high-water mark when the page
    is new territory and marks ``today`` completed the first time the
    high-water mark reaches the end of today's goal. Later visits on the
    same day never report completion again.

    Args:
        book: Book being read (mutated in place)
        page_number: Page now on screen
        today: Calendar date of the visit

    Returns:
        PageVisitResult

    Raises:
        InvalidPageNumber: If the page is outside the book. Nothing is
            changed in that case.
    """
    if not 1 <= page_number <= book.total_pages:
        raise InvalidPageNumber(page_number, book.total_pages)

    was_finished = is_finished(book)

    book.current_page = page_number
    if page_number > book.max_page_reached:
        book.max_page_reached = page_number

    goal = book.daily_goals.get(today)
    if goal is None and was_finished:
        # Finished books get no goals; rereading is not an ordering error
        return PageVisitResult(
            goal_just_completed_today=False,
            max_page_reached=book.max_page_reached,
        )
    if goal is None:
        log.warning(
            "Page visit for book %s on %s with no goal for that date",
            book.id,
            today.isoformat(),
        )
        return PageVisitResult(
            goal_just_completed_today=False,
            max_page_reached=book.max_page_reached,
            goal_missing=True,
        )

    if book.max_page_reached >= goal.end_page and today not in book.completed_days:
        book.completed_days.append(today)
        log.info("Book %s: goal for %s completed", book.id, today.isoformat())
        return PageVisitResult(
            goal_just_completed_today=True,
            max_page_reached=book.max_page_reached,
        )

    return PageVisitResult(
        goal_just_completed_today=False,
        max_page_reached=book.max_page_reached,
    )
