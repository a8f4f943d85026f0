"""Import books from the desktop app's ``books-data.json``.

The file looks like ``{"books": [...], "settings": {...}}`` with camelCase
keys. Older versions wrote books without ``maxPageReached`` or
``dailyGoals``; those gaps are filled here, on the way in, so the
scheduler only ever sees complete books.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError
from tqdm import tqdm

from ..db.schemas import Book, DailyGoal
from ..db.sqlite import Database, get_db
from ..plan.calendar import parse_date_key

log = logging.getLogger(__name__)


class LegacyImportError(Exception):
    """The import file itself cannot be used."""

    pass


@dataclass
class ImportResult:
    """Result of an import operation."""

    success: bool
    source_file: Optional[Path] = None
    total_records: int = 0
    imported: int = 0
    skipped: int = 0
    errors: int = 0
    error_messages: list[str] = field(default_factory=list)
    imported_books: list[Book] = field(default_factory=list)

    @property
    def summary(self) -> str:
        """Get summary string."""
        return (
            f"Imported: {self.imported}, "
            f"Skipped: {self.skipped}, "
            f"Errors: {self.errors}"
        )


def migrate_legacy_record(data: dict[str, Any]) -> dict[str, Any]:
    """Fill in fields that older files did not have.

    Returns a new dict; ``data`` is left alone.
    """
    migrated = dict(data)
    if migrated.get("maxPageReached") is None:
        migrated["maxPageReached"] = migrated.get("currentPage") or 0
    if not migrated.get("dailyGoals"):
        migrated["dailyGoals"] = {}
    if migrated.get("completedDays") is None:
        migrated["completedDays"] = []
    return migrated


def legacy_record_to_book(data: dict[str, Any]) -> Book:
    """Convert one camelCase record into a Book.

    Raises:
        ValueError: If required fields are missing or invalid.
    """
    data = migrate_legacy_record(data)

    for key in ("id", "totalPages", "targetDate"):
        if data.get(key) in (None, ""):
            raise ValueError(f"missing {key}")

    daily_goals = {}
    for key, goal in data["dailyGoals"].items():
        goal_date = parse_date_key(goal.get("date") or key)
        daily_goals[goal_date] = DailyGoal(
            date=goal_date,
            start_page=goal["startPage"],
            end_page=goal["endPage"],
        )

    # Older files could list a day twice
    completed_days = []
    for day in data["completedDays"]:
        day = parse_date_key(day)
        if day not in completed_days:
            completed_days.append(day)

    target_date = parse_date_key(data["targetDate"])
    start_date = parse_date_key(data["startDate"]) if data.get("startDate") else target_date

    file_path = data.get("filePath")
    title = data.get("title") or (Path(file_path).stem if file_path else "Untitled")

    return Book(
        id=str(data["id"]),
        title=title,
        file_path=file_path,
        total_pages=int(data["totalPages"]),
        current_page=int(data.get("currentPage") or 1),
        max_page_reached=int(data["maxPageReached"]),
        target_date=target_date,
        start_date=start_date,
        completed_days=completed_days,
        daily_goals=daily_goals,
    )


class LegacyJSONImporter:
    """Imports books from a legacy ``books-data.json`` file."""

    source_name = "legacy_json"

    def __init__(self, db: Optional[Database] = None):
        """Initialize importer.

        Args:
            db: Database instance
        """
        self.db = db or get_db()

    def read_records(self, file_path: Path) -> list[dict[str, Any]]:
        """Read the raw book records from the file.

        Raises:
            LegacyImportError: If the file is missing or not the expected shape.
        """
        if not file_path.exists():
            raise LegacyImportError(f"File not found: {file_path}")

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise LegacyImportError(f"Not valid JSON: {e}") from e

        if isinstance(data, list):
            records = data
        elif isinstance(data, dict):
            records = data.get("books", [])
        else:
            raise LegacyImportError("Expected an object with a 'books' list")

        if not isinstance(records, list):
            raise LegacyImportError("'books' must be a list")
        return records

    def import_file(
        self,
        file_path: Path,
        dry_run: bool = False,
        show_progress: bool = False,
    ) -> ImportResult:
        """Import books from a legacy JSON file.

        Books whose id is already tracked are skipped. Records that fail
        validation are counted as errors and do not stop the import.

        Args:
            file_path: Path to books-data.json
            dry_run: Parse and validate without writing anything
            show_progress: Show tqdm progress bar

        Returns:
            ImportResult with statistics
        """
        result = ImportResult(success=False, source_file=file_path)

        try:
            records = self.read_records(file_path)
        except LegacyImportError as e:
            result.errors = 1
            result.error_messages.append(str(e))
            return result

        result.total_records = len(records)
        existing = self.db.load_all()
        known_ids = {book.id for book in existing}

        iterator = tqdm(records, desc="Importing books", disable=not show_progress)
        for index, record in enumerate(iterator, 1):
            if not isinstance(record, dict):
                result.errors += 1
                result.error_messages.append(f"Record {index}: not an object")
                continue

            try:
                book = legacy_record_to_book(record)
            except (ValidationError, ValueError, KeyError, TypeError, AttributeError) as e:
                result.errors += 1
                result.error_messages.append(f"Record {index}: {e}")
                log.warning("Skipping legacy record %d: %s", index, e)
                continue

            if book.id in known_ids:
                result.skipped += 1
                continue

            known_ids.add(book.id)
            result.imported_books.append(book)
            result.imported += 1

        if result.imported_books and not dry_run:
            self.db.replace_all(existing + result.imported_books)
            log.info("Imported %d book(s) from %s", result.imported, file_path)

        result.success = result.errors == 0
        return result
