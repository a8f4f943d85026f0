"""SQLAlchemy ORM models for local SQLite database.

Tables:
- books: One row per tracked document and its plan
- daily_goals: Page range assigned to a book for one date
- completed_days: Dates on which a book's daily goal was met
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class BookRecord(Base):
    """Stored book and reading plan."""

    __tablename__ = "books"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    file_path: Mapped[Optional[str]] = mapped_column(Text)

    # Pages
    total_pages: Mapped[int] = mapped_column(Integer, nullable=False)
    current_page: Mapped[int] = mapped_column(Integer, default=1)
    # NULL on rows written before the high-water mark existed
    max_page_reached: Mapped[Optional[int]] = mapped_column(Integer)

    # Dates
    target_date: Mapped[str] = mapped_column(String(10), nullable=False)  # ISO date
    start_date: Mapped[str] = mapped_column(String(10), nullable=False)  # ISO date

    # Ordering of the collection as last written
    position: Mapped[int] = mapped_column(Integer, default=0)

    # Timestamps
    created_at: Mapped[str] = mapped_column(
        String(26), default=lambda: datetime.now(timezone.utc).isoformat()
    )
    updated_at: Mapped[str] = mapped_column(
        String(26),
        default=lambda: datetime.now(timezone.utc).isoformat(),
        onupdate=lambda: datetime.now(timezone.utc).isoformat(),
    )

    # Relationships
    daily_goals: Mapped[list["DailyGoalRecord"]] = relationship(
        "DailyGoalRecord",
        back_populates="book",
        cascade="all, delete-orphan",
        order_by="DailyGoalRecord.date",
    )
    completed_days: Mapped[list["CompletedDayRecord"]] = relationship(
        "CompletedDayRecord",
        back_populates="book",
        cascade="all, delete-orphan",
        order_by="CompletedDayRecord.position",
    )

    def __repr__(self) -> str:
        return f"<BookRecord(id={self.id}, title='{self.title}')>"


class DailyGoalRecord(Base):
    """Daily goal row - write-once per (book, date)."""

    __tablename__ = "daily_goals"
    __table_args__ = (UniqueConstraint("book_id", "date", name="uq_daily_goal_book_date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    book_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date: Mapped[str] = mapped_column(String(10), nullable=False)  # ISO date
    start_page: Mapped[int] = mapped_column(Integer, nullable=False)
    end_page: Mapped[int] = mapped_column(Integer, nullable=False)

    book: Mapped["BookRecord"] = relationship("BookRecord", back_populates="daily_goals")

    def __repr__(self) -> str:
        return (
            f"<DailyGoalRecord(book_id={self.book_id}, date={self.date}, "
            f"pages={self.start_page}-{self.end_page})>"
        )


class CompletedDayRecord(Base):
    """A date on which the book's daily goal was met."""

    __tablename__ = "completed_days"
    __table_args__ = (UniqueConstraint("book_id", "date", name="uq_completed_day_book_date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    book_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date: Mapped[str] = mapped_column(String(10), nullable=False)  # ISO date
    position: Mapped[int] = mapped_column(Integer, default=0)  # insertion order

    book: Mapped["BookRecord"] = relationship("BookRecord", back_populates="completed_days")

    def __repr__(self) -> str:
        return f"<CompletedDayRecord(book_id={self.book_id}, date={self.date})>"
