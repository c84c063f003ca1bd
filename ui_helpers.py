import os
import json
from typing import Any, Dict, List
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

# Environment variable controlling CLI output mode.
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "BOOKS_CLI_OUTPUT"
OUTPUT_MODES = {"plain", "json", "rich"}

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in OUTPUT_MODES:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def _line(book: Dict[str, Any]) -> str:
    return f"{book.get('id')} - {book.get('title')} by {book.get('author')}"


def print_list_result(books: List[Dict[str, Any]]) -> None:
    """Print a list of book dicts in the current output mode.
    - plain: 'ID - Title by Author' lines, or 'No books in library.'
    - json: the JSON array as returned by the API
    - rich: a Rich table
    """
    mode = get_output_mode()

    if not books:
        print("No books in library.")
        return

    if mode == "json":
        print(json.dumps(books, ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="📚 Books", show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True, justify="right")
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("Genre", style="white")
        table.add_column("Copies", justify="right")
        for b in books:
            table.add_row(
                str(b.get("id", "")),
                str(b.get("title") or ""),
                str(b.get("author") or ""),
                str(b.get("genre") or ""),
                str(b.get("copiesAvailable", 0)),
            )
        _console.print(table)
    else:
        for b in books:
            print(_line(b))


def print_book_result(book: Dict[str, Any]) -> None:
    """Print a single book's details in the current output mode."""
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps(book, ensure_ascii=False))
    elif mode == "rich":
        content = (
            f"[bold]Title:[/] {book.get('title')}\n"
            f"[bold]Author:[/] {book.get('author')}\n"
            f"[bold]Genre:[/] {book.get('genre')}\n"
            f"[bold]Copies Available:[/] {book.get('copiesAvailable')}"
        )
        _console.print(Panel.fit(content, title=f"📖 Book {book.get('id')}", border_style="blue"))
    else:
        print(f"ID: {book.get('id')}")
        print(f"Title: {book.get('title')}")
        print(f"Author: {book.get('author')}")
        print(f"Genre: {book.get('genre')}")
        print(f"Copies Available: {book.get('copiesAvailable')}")
