"""Database module for local SQLite storage."""

from .models import BookRecord, CompletedDayRecord, DailyGoalRecord
from .schemas import Book, DailyGoal
from .sqlite import Database, RepositoryError, get_db

__all__ = [
    "BookRecord",
    "CompletedDayRecord",
    "DailyGoalRecord",
    "Book",
    "DailyGoal",
    "Database",
    "RepositoryError",
    "get_db",
]
