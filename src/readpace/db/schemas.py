"""Pydantic schemas for reading plans.

``Book`` and ``DailyGoal`` are the shapes every part of readpace passes
around: the scheduler mutates them in memory, the repository stores them
and the JSON importer/exporter translate them. Dates are plain ``date``
values so goal lookups never depend on string formatting or time zones.
"""

from datetime import date
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator, model_validator


def generate_uuid() -> str:
    """Generate a UUID string for book identifiers."""
    return str(uuid4())


class DailyGoal(BaseModel):
    """Page range assigned to one calendar date."""

    date: date
    start_page: int = Field(..., ge=1)
    end_page: int = Field(..., ge=1)

    @model_validator(mode="after")
    def check_range(self) -> "DailyGoal":
        if self.end_page < self.start_page:
            raise ValueError(
                f"end_page {self.end_page} is before start_page {self.start_page}"
            )
        return self

    @property
    def page_count(self) -> int:
        """Number of pages in the range, both ends included."""
        return self.end_page - self.start_page + 1


class Book(BaseModel):
    """A tracked document and its reading plan."""

    id: str = Field(default_factory=generate_uuid)
    title: str = Field(..., min_length=1)
    file_path: Optional[str] = Field(None, description="Where the document lives")

    total_pages: int = Field(..., gt=0)
    current_page: int = Field(1, ge=1, description="Last page viewed, for resuming")
    max_page_reached: int = Field(0, ge=0, description="Furthest page ever reached")

    target_date: date
    start_date: date = Field(default_factory=date.today)

    completed_days: list[date] = Field(default_factory=list)
    daily_goals: dict[date, DailyGoal] = Field(default_factory=dict)

    @field_validator("completed_days")
    @classmethod
    def unique_completed_days(cls, value: list[date]) -> list[date]:
        if len(set(value)) != len(value):
            raise ValueError("completed_days contains a date more than once")
        return value

    @model_validator(mode="after")
    def check_pages(self) -> "Book":
        if self.current_page > self.total_pages:
            raise ValueError(
                f"current_page {self.current_page} exceeds total_pages {self.total_pages}"
            )
        if self.max_page_reached > self.total_pages:
            raise ValueError(
                f"max_page_reached {self.max_page_reached} exceeds total_pages {self.total_pages}"
            )
        for key, goal in self.daily_goals.items():
            if goal.date != key:
                raise ValueError(f"Goal stored under {key} is dated {goal.date}")
            if goal.end_page > self.total_pages:
                raise ValueError(
                    f"Goal for {key} ends at page {goal.end_page}, "
                    f"past total_pages {self.total_pages}"
                )
        return self

    def __repr__(self) -> str:
        return (
            f"<Book(id={self.id}, title='{self.title}', "
            f"max_page_reached={self.max_page_reached}/{self.total_pages})>"
        )
