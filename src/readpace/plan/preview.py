"""Pages-per-day projection for a plan that does not exist yet."""

from dataclasses import dataclass
from datetime import date

from .calendar import days_until
from .goals import ceil_div


class InvalidDeadline(ValueError):
    """Deadline for a new plan is not in the future."""

    def __init__(self, target_date: date, today: date, days: int):
        self.target_date = target_date
        self.today = today
        self.days = days
        super().__init__(
            f"Target date {target_date.isoformat()} must be after {today.isoformat()}"
        )


@dataclass
class PlanPreview:
    """What a candidate deadline means per day."""

    total_pages: int
    days: int
    pages_per_day: int


def preview_plan(total_pages: int, target_date: date, today: date) -> PlanPreview:
    """Project the daily page count a new plan would need.

    Unlike goal generation for an existing book, a deadline of today or
    earlier is refused here instead of being treated as one day.

    Raises:
        ValueError: If ``total_pages`` is not positive.
        InvalidDeadline: If ``target_date`` is not after ``today``.
    """
    if total_pages <= 0:
        raise ValueError(f"total_pages must be positive, got {total_pages}")

    days = days_until(target_date, today)
    if days <= 0:
        raise InvalidDeadline(target_date, today, days)

    return PlanPreview(
        total_pages=total_pages,
        days=days,
        pages_per_day=ceil_div(total_pages, days),
    )
