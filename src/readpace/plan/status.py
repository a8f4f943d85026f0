"""Read-only classification of where a reader stands today.

Nothing in this module changes a book. When no goal has been stored for
the date yet, the goal the engine would create is used instead.
"""

import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from ..db.schemas import Book, DailyGoal
from .calendar import days_until
from .goals import ceil_div, compute_goal, is_finished


class GoalStatus(str, Enum):
    """Display state of a book for one day."""

    FINISHED = "finished"
    TODAY_COMPLETE = "today_complete"
    BEHIND = "behind"
    ON_TRACK = "on_track"


@dataclass
class ProgressSummary:
    """Everything a progress card shows for one book."""

    book_id: str
    title: str
    status: GoalStatus
    goal: Optional[DailyGoal]
    progress_percent: int
    daily_progress_percent: int
    pages_read: int
    pages_left: int
    days_left: int
    pages_per_day: int


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def goal_for(book: Book, today: date) -> Optional[DailyGoal]:
    """Stored goal for ``today``, or the one that would be generated."""
    if is_finished(book):
        return None
    goal = book.daily_goals.get(today)
    if goal is None:
        goal = compute_goal(book, today)
    return goal


def classify(book: Book, today: date) -> GoalStatus:
    """Classify ``book`` as finished, done for today, behind or on track."""
    if is_finished(book):
        return GoalStatus.FINISHED

    goal = goal_for(book, today)
    if book.max_page_reached >= goal.end_page:
        return GoalStatus.TODAY_COMPLETE
    # Not even yesterday's end page has been reached
    if goal.start_page > 1 and book.max_page_reached < goal.start_page - 1:
        return GoalStatus.BEHIND
    return GoalStatus.ON_TRACK


def is_today_complete(book: Book, today: date) -> bool:
    return classify(book, today) == GoalStatus.TODAY_COMPLETE


def is_behind_schedule(book: Book, today: date) -> bool:
    return classify(book, today) == GoalStatus.BEHIND


def progress_percent(book: Book) -> int:
    """Overall completion, 0-100."""
    return min(100, _round_half_up(book.max_page_reached / book.total_pages * 100))


def pages_left(book: Book) -> int:
    return book.total_pages - book.max_page_reached


def days_left(book: Book, today: date) -> int:
    """Days until the deadline, never negative."""
    return max(0, days_until(book.target_date, today))


def current_pace(book: Book, today: date) -> int:
    """Pages per day needed from now on to meet the deadline.

    Recomputed from the live high-water mark, so unlike the frozen daily
    goal it moves as soon as the reader does.
    """
    remaining = pages_left(book)
    if remaining <= 0:
        return 0
    return ceil_div(remaining, max(1, days_until(book.target_date, today)))


def daily_progress_percent(book: Book, today: date) -> int:
    """How much of today's page range is covered, 0-100.

    A book without a goal (finished) counts as fully done.
    """
    goal = goal_for(book, today)
    if goal is None:
        return 100

    read_today = max(0, min(book.max_page_reached - goal.start_page + 1, goal.page_count))
    return min(100, _round_half_up(read_today / goal.page_count * 100))


def summarize(book: Book, today: date) -> ProgressSummary:
    """Collect the derived progress values for ``book`` on ``today``."""
    return ProgressSummary(
        book_id=book.id,
        title=book.title,
        status=classify(book, today),
        goal=goal_for(book, today),
        progress_percent=progress_percent(book),
        daily_progress_percent=daily_progress_percent(book, today),
        pages_read=book.max_page_reached,
        pages_left=pages_left(book),
        days_left=days_left(book, today),
        pages_per_day=current_pace(book, today),
    )
