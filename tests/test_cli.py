"""Tests for the CLI interface."""

import json
import os
import tempfile
from datetime import date, datetime, timedelta
from pathlib import Path

import pytest
from typer.testing import CliRunner

from readpace.cli import app, format_library_table
from readpace.config import reset_config
from readpace.db.sqlite import get_db, reset_db
from readpace.plan.manager import PlanManager


@pytest.fixture(autouse=True)
def setup_test_db(tmp_path):
    """Set up a test database for each test."""
    reset_db()
    reset_config()

    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name

    os.environ["READPACE_DB_PATH"] = db_path
    os.environ["READPACE_LOG_PATH"] = str(tmp_path / "readpace.log")

    yield

    # Cleanup
    reset_db()
    reset_config()
    for key in ("READPACE_DB_PATH", "READPACE_LOG_PATH"):
        if key in os.environ:
            del os.environ[key]
    if Path(db_path).exists():
        Path(db_path).unlink()


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


def in_days(days: int) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


def add_book(runner, title="Dune", pages="100", days=10):
    result = runner.invoke(app, ["add", pages, "--target", in_days(days), "--title", title])
    assert result.exit_code == 0, result.stdout
    return result


class TestCLIBasics:
    """Tests for basic CLI functionality."""

    def test_help(self, runner: CliRunner):
        """Test that help command works."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "daily schedule" in result.stdout

    def test_version(self, runner: CliRunner):
        """Test version command."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.stdout

    def test_writes_log_file(self, runner: CliRunner, tmp_path):
        runner.invoke(app, ["version"])

        assert (tmp_path / "readpace.log").exists()


class TestPreviewCommand:
    """Tests for preview command."""

    def test_preview(self, runner: CliRunner):
        result = runner.invoke(app, ["preview", "100", "--target", in_days(9)])

        assert result.exit_code == 0
        assert "100 pages" in result.stdout
        assert "9 days" in result.stdout
        assert "~12 pages/day" in result.stdout

    def test_preview_today_refused(self, runner: CliRunner):
        result = runner.invoke(app, ["preview", "100", "--target", in_days(0)])

        assert result.exit_code == 1
        assert "Please select a future date." in result.stdout

    def test_preview_bad_date(self, runner: CliRunner):
        result = runner.invoke(app, ["preview", "100", "--target", "next week"])

        assert result.exit_code == 1
        assert "--target" in result.stdout

    def test_preview_zero_pages(self, runner: CliRunner):
        result = runner.invoke(app, ["preview", "0", "--target", in_days(5)])

        assert result.exit_code == 1
        assert "total_pages" in result.stdout


class TestAddCommand:
    """Tests for add command."""

    def test_add(self, runner: CliRunner):
        result = add_book(runner)

        assert "Added:" in result.stdout
        assert "Dune" in result.stdout
        assert "~10 pages/day" in result.stdout

    def test_add_title_from_file(self, runner: CliRunner):
        result = runner.invoke(
            app, ["add", "50", "--target", in_days(5), "--file", "/tmp/docs/notes.pdf"]
        )

        assert result.exit_code == 0
        assert "Added: notes" in result.stdout

    def test_add_past_deadline(self, runner: CliRunner):
        result = runner.invoke(app, ["add", "100", "--target", in_days(-1), "--title", "Late"])

        assert result.exit_code == 1
        assert "Please select a future date." in result.stdout
        assert get_db().load_all() == []


class TestListCommand:
    """Tests for list command."""

    def test_list_empty(self, runner: CliRunner):
        result = runner.invoke(app, ["list"])

        assert result.exit_code == 0
        assert "No books yet" in result.stdout

    def test_list_shows_today_range(self, runner: CliRunner):
        add_book(runner)

        result = runner.invoke(app, ["list"])

        assert result.exit_code == 0
        assert "Dune" in result.stdout
        assert "1-10" in result.stdout


class TestTodayCommand:
    """Tests for today command."""

    def test_today(self, runner: CliRunner):
        add_book(runner)

        result = runner.invoke(app, ["today", "Dune"])

        assert result.exit_code == 0
        assert "Today: pages 1-10" in result.stdout
        assert "Today's reading" in result.stdout

    def test_today_saves_goal(self, runner: CliRunner):
        add_book(runner)

        runner.invoke(app, ["today", "Dune"])

        (book,) = get_db().load_all()
        assert date.today() in book.daily_goals

    def test_today_unknown_book(self, runner: CliRunner):
        result = runner.invoke(app, ["today", "Nothing"])

        assert result.exit_code == 1
        assert "No book found" in result.stdout


class TestVisitCommand:
    """Tests for visit command."""

    def test_visit(self, runner: CliRunner):
        add_book(runner)

        result = runner.invoke(app, ["visit", "Dune", "4"])

        assert result.exit_code == 0
        assert "Now on page 4" in result.stdout

    def test_visit_completes_goal_once(self, runner: CliRunner):
        add_book(runner)
        runner.invoke(app, ["today", "Dune"])

        first = runner.invoke(app, ["visit", "Dune", "10"])
        second = runner.invoke(app, ["visit", "Dune", "10"])

        assert "Daily Goal Complete" in first.stdout
        assert "Daily Goal Complete" not in second.stdout

    def test_visit_last_page(self, runner: CliRunner):
        add_book(runner, pages="20", days=1)
        runner.invoke(app, ["visit", "Dune", "20"])

        result = runner.invoke(app, ["visit", "Dune", "20"])

        assert "Book complete!" in result.stdout

    def test_visit_out_of_range(self, runner: CliRunner):
        add_book(runner)

        result = runner.invoke(app, ["visit", "Dune", "101"])

        assert result.exit_code == 1
        assert "outside 1-100" in result.stdout

    def test_visit_ambiguous_prompts(self, runner: CliRunner):
        add_book(runner, title="Dune")
        add_book(runner, title="Dune Messiah", pages="200")

        result = runner.invoke(app, ["visit", "dune", "150"], input="2\n")

        assert result.exit_code == 0
        assert "Multiple books found" in result.stdout
        messiah = [b for b in get_db().load_all() if b.title == "Dune Messiah"][0]
        assert messiah.max_page_reached == 150


class TestProgressCommand:
    """Tests for progress command."""

    def test_progress(self, runner: CliRunner):
        add_book(runner)
        runner.invoke(app, ["visit", "Dune", "25"])

        result = runner.invoke(app, ["progress"])

        assert result.exit_code == 0
        assert "Dune" in result.stdout
        assert "25%" in result.stdout

    def test_progress_empty(self, runner: CliRunner):
        result = runner.invoke(app, ["progress"])

        assert result.exit_code == 0
        assert "No books yet" in result.stdout


class TestRemoveCommand:
    """Tests for remove command."""

    def test_remove_with_yes(self, runner: CliRunner):
        add_book(runner)

        result = runner.invoke(app, ["remove", "Dune", "--yes"])

        assert result.exit_code == 0
        assert "Removed: Dune" in result.stdout
        assert get_db().load_all() == []

    def test_remove_confirmed(self, runner: CliRunner):
        add_book(runner)

        result = runner.invoke(app, ["remove", "Dune"], input="y\n")

        assert result.exit_code == 0
        assert get_db().load_all() == []

    def test_remove_cancelled(self, runner: CliRunner):
        add_book(runner)

        result = runner.invoke(app, ["remove", "Dune"], input="n\n")

        assert "Cancelled" in result.stdout
        assert len(get_db().load_all()) == 1


class TestImportExportCommands:
    """Tests for import and export commands."""

    @pytest.fixture
    def books_file(self, tmp_path):
        path = tmp_path / "books-data.json"
        path.write_text(
            json.dumps(
                {
                    "books": [
                        {
                            "id": "1718034567890",
                            "title": "Legacy Book",
                            "filePath": "/Users/reader/legacy.pdf",
                            "totalPages": 90,
                            "currentPage": 30,
                            "targetDate": in_days(20),
                        }
                    ],
                    "settings": {"darkMode": True},
                }
            ),
            encoding="utf-8",
        )
        return path

    def test_import(self, runner: CliRunner, books_file):
        result = runner.invoke(app, ["import", str(books_file)])

        assert result.exit_code == 0
        assert "Imported: 1" in result.stdout
        (book,) = get_db().load_all()
        assert book.max_page_reached == 30

    def test_import_dry_run(self, runner: CliRunner, books_file):
        result = runner.invoke(app, ["import", str(books_file), "--dry-run"])

        assert result.exit_code == 0
        assert "Would import: 1" in result.stdout
        assert get_db().load_all() == []

    def test_import_missing_file(self, runner: CliRunner, tmp_path):
        result = runner.invoke(app, ["import", str(tmp_path / "nope.json")])

        assert result.exit_code == 1
        assert "Nothing imported" in result.stdout

    def test_export(self, runner: CliRunner, tmp_path):
        add_book(runner)
        output = tmp_path / "out.json"

        result = runner.invoke(app, ["export", str(output)])

        assert result.exit_code == 0
        assert "Exported 1 book(s)" in result.stdout
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["books"][0]["title"] == "Dune"


class TestLibraryTable:
    """Tests for format_library_table."""

    def test_single_clock_read(self, memory_db, make_book):
        """Every row describes the same day even if midnight passes mid-table."""
        memory_db.replace_all([make_book(title=t) for t in ["One", "Two", "Three"]])
        reads = []

        def ticking_clock():
            reads.append(1)
            return datetime(2025, 3, 10, 23, 59) + timedelta(days=len(reads) - 1)

        manager = PlanManager(memory_db, clock=ticking_clock, retry_max=1, retry_delay=0)

        format_library_table(manager)

        assert len(reads) == 1
        for book in manager.list_books():
            assert list(book.daily_goals) == [date(2025, 3, 10)]
