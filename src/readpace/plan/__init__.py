"""Daily reading plan scheduling and progress tracking."""

from .calendar import days_until, parse_date_key, today_key
from .goals import compute_goal, get_or_create_goal
from .preview import InvalidDeadline, PlanPreview, preview_plan
from .progress import InvalidPageNumber, PageVisitResult, record_page_visit
from .status import GoalStatus, ProgressSummary, classify, summarize

__all__ = [
    "days_until",
    "parse_date_key",
    "today_key",
    "compute_goal",
    "get_or_create_goal",
    "InvalidDeadline",
    "PlanPreview",
    "preview_plan",
    "InvalidPageNumber",
    "PageVisitResult",
    "record_page_visit",
    "GoalStatus",
    "ProgressSummary",
    "classify",
    "summarize",
]
