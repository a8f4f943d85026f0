"""JSON export functionality.

Writes books in the desktop app's ``books-data.json`` shape so the file
can be opened there or imported back with ``LegacyJSONImporter``.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from ..db.schemas import Book
from ..db.sqlite import Database, RepositoryError, get_db

log = logging.getLogger(__name__)


@dataclass
class JSONExportResult:
    """Result of a JSON export operation."""

    success: bool
    file_path: Optional[Path] = None
    books_exported: int = 0
    error: Optional[str] = None


def book_to_legacy_dict(book: Book) -> dict[str, Any]:
    """Convert a Book to the camelCase record format."""
    return {
        "id": book.id,
        "title": book.title,
        "filePath": book.file_path,
        "totalPages": book.total_pages,
        "currentPage": book.current_page,
        "maxPageReached": book.max_page_reached,
        "targetDate": book.target_date.isoformat(),
        "startDate": book.start_date.isoformat(),
        "completedDays": [day.isoformat() for day in book.completed_days],
        "dailyGoals": {
            key.isoformat(): {
                "startPage": goal.start_page,
                "endPage": goal.end_page,
                "date": goal.date.isoformat(),
            }
            for key, goal in sorted(book.daily_goals.items())
        },
    }


class JSONExporter:
    """Exports books to JSON format."""

    def __init__(self, db: Optional[Database] = None):
        """Initialize exporter.

        Args:
            db: Database instance
        """
        self.db = db or get_db()

    def export_all(
        self,
        output_path: Path,
        pretty: bool = True,
        settings: Optional[dict[str, Any]] = None,
    ) -> JSONExportResult:
        """Export all books to a JSON file.

        Args:
            output_path: Path for output file
            pretty: Pretty-print JSON output
            settings: Value for the file's ``settings`` object

        Returns:
            JSONExportResult with success status
        """
        try:
            books = self.db.load_all()
        except RepositoryError as e:
            return JSONExportResult(success=False, error=str(e))

        export_data = {
            "books": [book_to_legacy_dict(book) for book in books],
            "settings": settings if settings is not None else {"darkMode": True},
        }

        try:
            with open(output_path, "w", encoding="utf-8") as f:
                if pretty:
                    json.dump(export_data, f, indent=2, ensure_ascii=False)
                else:
                    json.dump(export_data, f, ensure_ascii=False)
        except OSError as e:
            log.error("Export to %s failed: %s", output_path, e)
            return JSONExportResult(success=False, error=str(e))

        log.info("Exported %d book(s) to %s", len(books), output_path)
        return JSONExportResult(
            success=True,
            file_path=output_path,
            books_exported=len(books),
        )
