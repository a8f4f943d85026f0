"""Daily goal engine.

A book gets one goal per calendar date. The first time a date is asked
about, the remaining pages are spread over the remaining days and the
resulting page range is frozen under that date. Later calls on the same
date return the frozen range even if the reader has moved on since;
catching up or getting ahead only shows in the next day's goal.
"""

import logging
from datetime import date
from typing import Optional

from ..db.schemas import Book, DailyGoal
from .calendar import days_until

log = logging.getLogger(__name__)


def ceil_div(numerator: int, denominator: int) -> int:
    """Integer ceiling division for positive denominators."""
    return -(-numerator // denominator)


def is_finished(book: Book) -> bool:
    """Whether the reader has reached the last page."""
    return book.max_page_reached >= book.total_pages


def compute_goal(book: Book, today: date) -> Optional[DailyGoal]:
    """Goal ``today`` would get, without storing it.

    Returns None for a finished book. A deadline that is today or already
    behind us counts as one remaining day, so an overdue book is asked to
    finish everything today rather than left without a goal.
    """
    if is_finished(book):
        return None

    days_left = max(1, days_until(book.target_date, today))
    pages_left = book.total_pages - book.max_page_reached
    pages_per_day = ceil_div(pages_left, days_left)

    return DailyGoal(
        date=today,
        start_page=book.max_page_reached + 1,
        end_page=min(book.max_page_reached + pages_per_day, book.total_pages),
    )


def get_or_create_goal(book: Book, today: date) -> Optional[DailyGoal]:
    """Return today's goal for ``book``, creating and caching it if needed.

    Mutates ``book.daily_goals`` the first time a date is seen; the caller
    is responsible for persisting the book afterwards.

    Args:
        book: Book to plan for
        today: Calendar date the goal applies to

    Returns:
        The stored goal for ``today``, or None if the book is finished
    """
    # Checked before the cache so a finished book never gets a goal
    if is_finished(book):
        return None

    goal = book.daily_goals.get(today)
    if goal is not None:
        return goal

    goal = compute_goal(book, today)
    book.daily_goals[today] = goal
    log.info(
        "New goal for book %s on %s: pages %d-%d",
        book.id,
        today.isoformat(),
        goal.start_page,
        goal.end_page,
    )
    return goal
