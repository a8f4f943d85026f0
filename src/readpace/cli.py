"""Command-line interface for readpace.

Built with Typer for commands and Rich for beautiful output.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import Config, get_config
from .db import RepositoryError, get_db
from .db.schemas import Book
from .plan import (
    GoalStatus,
    InvalidDeadline,
    InvalidPageNumber,
    preview_plan,
    summarize,
    today_key,
)
from .plan.goals import is_finished
from .plan.manager import BookNotFoundError, PlanManager

# Create the main app
app = typer.Typer(
    name="readpace",
    help="Read documents on a daily schedule toward a deadline.",
    no_args_is_help=True,
)

# Rich console for pretty output
console = Console()

STATUS_LABELS = {
    GoalStatus.FINISHED: "[bold green]Finished[/bold green]",
    GoalStatus.TODAY_COMPLETE: "[green]Today's reading complete[/green]",
    GoalStatus.BEHIND: "[bold red]Behind schedule[/bold red]",
    GoalStatus.ON_TRACK: "[yellow]Today's reading[/yellow]",
}

_log_handler: Optional[logging.Handler] = None


# ============================================================================
# Helper Functions
# ============================================================================


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[dim]{message}[/dim]")


def _setup_logging(config: Config) -> None:
    global _log_handler

    logger = logging.getLogger("readpace")
    if _log_handler is not None:
        logger.removeHandler(_log_handler)
        _log_handler.close()

    config.log_path.parent.mkdir(parents=True, exist_ok=True)
    _log_handler = logging.FileHandler(config.log_path, encoding="utf-8")
    _log_handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    logger.addHandler(_log_handler)
    logger.setLevel(getattr(logging, config.log_level, logging.WARNING))


def _parse_date(value: str, option: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        print_error(f"{option} must be a date like 2025-06-30, got: {value}")
        raise typer.Exit(1)


def _get_manager() -> PlanManager:
    try:
        return PlanManager(get_db())
    except RepositoryError as e:
        print_error(str(e))
        raise typer.Exit(1)


def _resolve_book(manager: PlanManager, query: str) -> Book:
    """Find a single book by id prefix or title, prompting if ambiguous."""
    books = manager.find_books(query)
    if not books:
        print_error(f"No book found matching: {query}")
        raise typer.Exit(1)

    if len(books) == 1:
        return books[0]

    console.print("\n[bold]Multiple books found:[/bold]")
    for i, b in enumerate(books, 1):
        console.print(f"  {i}. {b.title} [dim]({b.id[:8]})[/dim]")
    choice = typer.prompt("Select book number", type=int, default=1)
    if choice < 1 or choice > len(books):
        print_error("Invalid selection")
        raise typer.Exit(1)
    return books[choice - 1]


def format_library_table(manager: PlanManager) -> Table:
    """Create a rich table with one row per book and today's assignment."""
    table = Table(title="Library", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan", no_wrap=False, max_width=40)
    table.add_column("Pages", justify="right")
    table.add_column("Complete", justify="right")
    table.add_column("Today", justify="center")
    table.add_column("Status")

    today = manager.today()
    for book in manager.list_books():
        _, goal = manager.open_book(book.id, today=today)
        summary = summarize(book, today)
        table.add_row(
            book.id[:8],
            book.title,
            f"{book.total_pages} (~{summary.pages_per_day}/day)",
            f"{summary.progress_percent}%",
            f"{goal.start_page}-{goal.end_page}" if goal else "-",
            STATUS_LABELS[summary.status],
        )

    return table


# ============================================================================
# Plan Commands
# ============================================================================


@app.callback()
def main_callback() -> None:
    """Read documents on a daily schedule toward a deadline."""
    config = get_config()
    errors = config.validate()
    for error in errors:
        print_warning(error)
    _setup_logging(config)


@app.command()
def preview(
    pages: int = typer.Argument(..., help="Number of pages in the document"),
    target: str = typer.Option(..., "--target", "-t", help="Finish by this date (YYYY-MM-DD)"),
) -> None:
    """Show how many pages per day a deadline would take."""
    target_date = _parse_date(target, "--target")

    try:
        plan = preview_plan(pages, target_date, today_key())
    except InvalidDeadline:
        print_error("Please select a future date.")
        raise typer.Exit(1)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)

    console.print(
        Panel(
            f"[bold]{plan.total_pages} pages[/bold] over [bold]{plan.days} days[/bold]\n"
            f"Daily reading: [bold]~{plan.pages_per_day} pages/day[/bold]",
            title="Plan Preview",
        )
    )


@app.command()
def add(
    pages: int = typer.Argument(..., help="Number of pages in the document"),
    target: str = typer.Option(..., "--target", "-t", help="Finish by this date (YYYY-MM-DD)"),
    title: Optional[str] = typer.Option(None, "--title", help="Title (default: file name)"),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Path to the document"),
) -> None:
    """Start a reading plan for a document."""
    target_date = _parse_date(target, "--target")
    manager = _get_manager()

    try:
        book = manager.create_plan(
            total_pages=pages,
            target_date=target_date,
            title=title,
            file_path=str(file) if file else None,
        )
    except InvalidDeadline:
        print_error("Please select a future date.")
        raise typer.Exit(1)
    except RepositoryError as e:
        print_error(f"Could not save plan: {e}")
        raise typer.Exit(1)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)

    plan = preview_plan(book.total_pages, book.target_date, book.start_date)
    print_success(f"Added: {book.title}")
    console.print(f"  ID: {book.id}")
    console.print(f"  {book.total_pages} pages by {book.target_date.isoformat()}")
    console.print(f"  Daily reading: ~{plan.pages_per_day} pages/day")


@app.command("list")
def list_books() -> None:
    """List books with today's reading assignment."""
    manager = _get_manager()

    if not manager.list_books():
        console.print("[dim]No books yet. Use 'readpace add' to start a plan.[/dim]")
        return

    try:
        table = format_library_table(manager)
    except RepositoryError as e:
        print_error(f"Could not save today's goals: {e}")
        raise typer.Exit(1)
    console.print(table)


@app.command()
def today(
    query: str = typer.Argument(..., help="Book title or ID"),
) -> None:
    """Show today's page range for a book."""
    manager = _get_manager()
    book = _resolve_book(manager, query)

    day = manager.today()
    try:
        book, goal = manager.open_book(book.id, today=day)
    except RepositoryError as e:
        print_error(f"Could not save today's goal: {e}")
        raise typer.Exit(1)

    summary = summarize(book, day)

    table = Table(title=book.title, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    if goal:
        table.add_row("Assignment", f"Today: pages {goal.start_page}-{goal.end_page}")
    else:
        table.add_row("Assignment", "Book complete!")
    table.add_row("Today", f"{summary.daily_progress_percent}%")
    table.add_row("Status", STATUS_LABELS[summary.status])
    table.add_row("Resume at", f"page {book.current_page} of {book.total_pages}")
    table.add_row("Furthest page", str(book.max_page_reached))

    console.print(table)


@app.command()
def visit(
    query: str = typer.Argument(..., help="Book title or ID"),
    page: int = typer.Argument(..., help="Page you are on"),
) -> None:
    """Record the page you are reading."""
    manager = _get_manager()
    book = _resolve_book(manager, query)

    try:
        result = manager.visit_page(book.id, page)
    except InvalidPageNumber as e:
        print_error(str(e))
        raise typer.Exit(1)
    except BookNotFoundError as e:
        print_error(str(e))
        raise typer.Exit(1)
    except RepositoryError as e:
        print_error(f"Progress not saved: {e}")
        raise typer.Exit(1)

    console.print(f"[green]Now on page {page}[/green] [dim](furthest: {result.max_page_reached})[/dim]")

    if result.goal_just_completed_today:
        console.print(
            Panel(
                "You've finished today's reading. Great job!",
                title="Daily Goal Complete",
                border_style="green",
            )
        )
    elif is_finished(book):
        console.print("[bold green]Book complete![/bold green]")


@app.command()
def progress() -> None:
    """Show overall progress for every book."""
    manager = _get_manager()

    if not manager.list_books():
        console.print("[dim]No books yet. Use 'readpace add' to start a plan.[/dim]")
        return

    table = Table(title="Progress", show_header=True, header_style="bold magenta")
    table.add_column("Title", style="cyan", max_width=40)
    table.add_column("Target")
    table.add_column("Complete", justify="right")
    table.add_column("Pages Read", justify="right")
    table.add_column("Pages Left", justify="right")
    table.add_column("Pages/Day", justify="right")
    table.add_column("Days Left", justify="right")

    books = {book.id: book for book in manager.list_books()}
    for summary in manager.summaries():
        book = books[summary.book_id]
        table.add_row(
            summary.title,
            book.target_date.strftime("%b %d, %Y"),
            f"{summary.progress_percent}%",
            str(summary.pages_read),
            str(summary.pages_left),
            str(summary.pages_per_day),
            str(summary.days_left),
        )

    console.print(table)


@app.command()
def remove(
    query: str = typer.Argument(..., help="Book title or ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Stop tracking a book and delete its reading history."""
    manager = _get_manager()
    book = _resolve_book(manager, query)

    if not yes and not typer.confirm(
        f'Are you sure you want to remove "{book.title}"? This will delete all reading progress.'
    ):
        print_info("Cancelled.")
        return

    try:
        manager.remove_book(book.id)
    except RepositoryError as e:
        print_error(f"Could not save: {e}")
        raise typer.Exit(1)

    print_success(f"Removed: {book.title}")


# ============================================================================
# Import / Export Commands
# ============================================================================


@app.command("import")
def import_books(
    file: Path = typer.Argument(..., help="Path to books-data.json"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Validate without saving"),
) -> None:
    """Import books from the desktop app's books-data.json."""
    from .imports import LegacyJSONImporter

    importer = LegacyJSONImporter(get_db())
    try:
        result = importer.import_file(file, dry_run=dry_run, show_progress=True)
    except RepositoryError as e:
        print_error(f"Could not save imported books: {e}")
        raise typer.Exit(1)

    for message in result.error_messages:
        print_warning(message)

    if result.imported == 0 and result.errors and not result.total_records:
        print_error("Nothing imported.")
        raise typer.Exit(1)

    prefix = "Would import" if dry_run else "Imported"
    console.print(f"{prefix}: {result.imported}, Skipped: {result.skipped}, Errors: {result.errors}")


@app.command("export")
def export_books(
    file: Path = typer.Argument(..., help="Output JSON file"),
) -> None:
    """Export all books to a books-data.json file."""
    from .export import JSONExporter

    result = JSONExporter(get_db()).export_all(file)
    if not result.success:
        print_error(f"Export failed: {result.error}")
        raise typer.Exit(1)

    print_success(f"Exported {result.books_exported} book(s) to {result.file_path}")


# ============================================================================
# Version Command
# ============================================================================


@app.command()
def version() -> None:
    """Show version information."""
    from . import __version__

    console.print(f"readpace version {__version__}")


# ============================================================================
# Main Entry Point
# ============================================================================


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
