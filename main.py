from typing import Any, Dict, Optional

import httpx
import typer
import uvicorn

from config import settings
from logging_config import setup_logging
from ui_helpers import set_output_mode, print_list_result, print_book_result

APP_NAME = "Books CLI"

app = typer.Typer(help=APP_NAME)


def _client() -> httpx.Client:
    """HTTP client bound to the configured Books API."""
    return httpx.Client(base_url=settings.base_url, timeout=settings.api_timeout)


def _request(method: str, path: str, json: Optional[Dict[str, Any]] = None) -> httpx.Response:
    try:
        with _client() as client:
            return client.request(method, path, json=json)
    except httpx.RequestError as e:
        print(f"Could not reach the API at {settings.base_url}: {e}")
        raise typer.Exit(code=1)


def _fail_unexpected(response: httpx.Response) -> None:
    print(f"Unexpected response {response.status_code}: {response.text}")
    raise typer.Exit(code=1)


def _fields(title: Optional[str], author: Optional[str], genre: Optional[str],
            copies: Optional[int]) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    if title is not None:
        payload["title"] = title
    if author is not None:
        payload["author"] = author
    if genre is not None:
        payload["genre"] = genre
    if copies is not None:
        payload["copiesAvailable"] = copies
    return payload


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    )
):
    """Global CLI options (e.g. output mode)."""
    if output:
        set_output_mode(output)


@app.command("serve")
def cli_serve(
    host: Optional[str] = typer.Option(None, "--host", help="Host to bind to"),
    port: Optional[int] = typer.Option(None, "--port", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload for development"),
):
    """Start the Books API with uvicorn."""
    host = host or settings.api_host
    port = int(port or settings.api_port)
    setup_logging(settings.log_level, settings.log_file)
    print(f"Starting Books API on http://{host}:{port}/")
    uvicorn.run("api:app", host=host, port=port, reload=reload, log_level=settings.log_level.lower())


@app.command("list")
def cli_list():
    """List every book."""
    response = _request("GET", "/api/books")
    if response.status_code != 200:
        _fail_unexpected(response)
    print_list_result(response.json())


@app.command("show")
def cli_show(book_id: int):
    """Show a single book by id."""
    response = _request("GET", f"/api/books/{book_id}")
    if response.status_code == 404:
        print(f"Book with id {book_id} not found.")
        return
    if response.status_code != 200:
        _fail_unexpected(response)
    print_book_result(response.json())


@app.command("add")
def cli_add(
    title: str = typer.Option(..., "--title", help="Book title"),
    author: str = typer.Option(..., "--author", help="Book author"),
    genre: Optional[str] = typer.Option(None, "--genre", help="Genre"),
    copies: Optional[int] = typer.Option(None, "--copies", help="Copies available"),
):
    """Add a new book."""
    response = _request("POST", "/api/books", json=_fields(title, author, genre, copies))
    if response.status_code != 201:
        _fail_unexpected(response)
    book = response.json()
    print(f"Added: {book['title']} by {book['author']} (id {book['id']})")


@app.command("update")
def cli_update(
    book_id: int,
    title: Optional[str] = typer.Option(None, "--title", help="New title"),
    author: Optional[str] = typer.Option(None, "--author", help="New author"),
    genre: Optional[str] = typer.Option(None, "--genre", help="New genre"),
    copies: Optional[int] = typer.Option(None, "--copies", help="New number of copies"),
):
    """Update only the supplied fields of a book."""
    payload = _fields(title, author, genre, copies)
    if not payload:
        print("Nothing to update. Provide at least one of --title, --author, --genre, --copies.")
        raise typer.Exit(code=1)
    response = _request("PUT", f"/api/books/{book_id}", json=payload)
    if response.status_code == 404:
        print(f"Book with id {book_id} not found.")
        return
    if response.status_code != 200:
        _fail_unexpected(response)
    print("Book updated.")
    print_book_result(response.json())


@app.command("remove")
def cli_remove(book_id: int):
    """Remove a book by id."""
    response = _request("DELETE", f"/api/books/{book_id}")
    if response.status_code == 204:
        print(f"Book with id {book_id} has been removed.")
    elif response.status_code == 404:
        print(f"Book with id {book_id} not found.")
    else:
        _fail_unexpected(response)


if __name__ == "__main__":
    app()
