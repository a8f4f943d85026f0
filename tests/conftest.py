"""Pytest configuration and shared fixtures.

This module provides fixtures for testing readpace, including
temporary databases, a fixed clock and sample books.
"""

import os
import tempfile
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Generator

import pytest

from readpace.config import reset_config
from readpace.db.schemas import Book, DailyGoal
from readpace.db.sqlite import Database, reset_db
from readpace.plan.manager import PlanManager

TODAY = date(2025, 3, 10)


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture(scope="function")
def temp_db_path() -> Generator[Path, None, None]:
    """Create a temporary database file path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)
    yield db_path
    # Cleanup
    if db_path.exists():
        db_path.unlink()


@pytest.fixture(scope="function")
def db(temp_db_path: Path) -> Generator[Database, None, None]:
    """Create a test database instance."""
    # Reset any global state
    reset_db()
    reset_config()

    # Set environment variable for test database
    os.environ["READPACE_DB_PATH"] = str(temp_db_path)

    database = Database(str(temp_db_path))
    database.create_tables()
    yield database

    # Cleanup
    reset_db()
    reset_config()
    if "READPACE_DB_PATH" in os.environ:
        del os.environ["READPACE_DB_PATH"]


@pytest.fixture
def memory_db() -> Database:
    """Create an in-memory database for testing."""
    database = Database(":memory:")
    database.create_tables()
    return database


# ============================================================================
# Clock Fixtures
# ============================================================================


class FakeClock:
    """Clock that stays put until a test moves it."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, days: int = 0, hours: int = 0) -> None:
        self.now += timedelta(days=days, hours=hours)


@pytest.fixture
def today() -> date:
    """The date every scheduler test treats as today."""
    return TODAY


@pytest.fixture
def clock() -> FakeClock:
    """Clock set to 09:30 on TODAY."""
    return FakeClock(datetime(TODAY.year, TODAY.month, TODAY.day, 9, 30))


@pytest.fixture
def manager(memory_db: Database, clock: FakeClock) -> PlanManager:
    """Create a PlanManager over an in-memory database with a fixed clock."""
    return PlanManager(memory_db, clock=clock, retry_max=3, retry_delay=0)


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def make_book():
    """Factory for books with sensible defaults."""

    def _make(
        total_pages: int = 100,
        max_page_reached: int = 0,
        days_to_deadline: int = 10,
        **kwargs,
    ) -> Book:
        kwargs.setdefault("title", "Thinking in Systems")
        kwargs.setdefault("start_date", TODAY)
        kwargs.setdefault("current_page", max(1, max_page_reached))
        return Book(
            total_pages=total_pages,
            max_page_reached=max_page_reached,
            target_date=TODAY + timedelta(days=days_to_deadline),
            **kwargs,
        )

    return _make


@pytest.fixture
def sample_book(make_book) -> Book:
    """100 pages, nothing read, deadline ten days out."""
    return make_book()


@pytest.fixture
def book_with_history() -> Book:
    """A book two days into its plan with stored goals and one completed day."""
    day1 = TODAY - timedelta(days=2)
    day2 = TODAY - timedelta(days=1)
    return Book(
        id="6f1c0f6e-8f34-4a5e-9d0e-0c6f2a7f1b11",
        title="Designing Data-Intensive Applications",
        file_path="/home/reader/docs/ddia.pdf",
        total_pages=120,
        current_page=18,
        max_page_reached=20,
        target_date=TODAY + timedelta(days=10),
        start_date=day1,
        completed_days=[day1],
        daily_goals={
            day1: DailyGoal(date=day1, start_page=1, end_page=10),
            day2: DailyGoal(date=day2, start_page=11, end_page=22),
        },
    )
