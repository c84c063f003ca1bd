import json
from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient
from typer.testing import CliRunner

import main
from main import app
from ui_helpers import OUTPUT_MODE_ENV

runner = CliRunner()


@pytest.fixture
def api(monkeypatch, client):
    # Route the CLI's HTTP client to the in-process application
    monkeypatch.setattr(main, "_client", lambda: TestClient(client.app))
    monkeypatch.delenv(OUTPUT_MODE_ENV, raising=False)
    return client


def test_list_books(api):
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "1 - The Great Gatsby by F. Scott Fitzgerald" in result.stdout
    assert "3 - 1984 by George Orwell" in result.stdout


def test_list_no_books(api):
    for book_id in (1, 2, 3):
        api.delete(f"/api/books/{book_id}")
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "No books in library." in result.stdout


def test_list_books_json_output(api):
    result = runner.invoke(app, ["--output", "json", "list"])
    assert result.exit_code == 0
    books = json.loads(result.stdout.strip().splitlines()[-1])
    assert [b["id"] for b in books] == [1, 2, 3]


def test_show_book(api):
    result = runner.invoke(app, ["show", "1"])
    assert result.exit_code == 0
    assert "Title: The Great Gatsby" in result.stdout
    assert "Author: F. Scott Fitzgerald" in result.stdout
    assert "Copies Available: 5" in result.stdout


def test_show_book_not_found(api):
    result = runner.invoke(app, ["show", "999"])
    assert result.exit_code == 0
    assert "Book with id 999 not found." in result.stdout


def test_add_book(api):
    result = runner.invoke(app, ["add", "--title", "Dune", "--author", "Frank Herbert", "--copies", "2"])
    assert result.exit_code == 0
    assert "Added: Dune by Frank Herbert (id 4)" in result.stdout
    assert api.get("/api/books/4").json()["copiesAvailable"] == 2


def test_update_book(api):
    result = runner.invoke(app, ["update", "2", "--copies", "0"])
    assert result.exit_code == 0
    assert "Book updated." in result.stdout
    book = api.get("/api/books/2").json()
    assert book["copiesAvailable"] == 0
    assert book["title"] == "To Kill a Mockingbird"


def test_update_requires_a_field(api):
    result = runner.invoke(app, ["update", "2"])
    assert result.exit_code == 1
    assert "Nothing to update" in result.stdout


def test_update_book_not_found(api):
    result = runner.invoke(app, ["update", "9999", "--title", "x"])
    assert result.exit_code == 0
    assert "Book with id 9999 not found." in result.stdout


def test_remove_book(api):
    result = runner.invoke(app, ["remove", "3"])
    assert result.exit_code == 0
    assert "Book with id 3 has been removed." in result.stdout

    result = runner.invoke(app, ["remove", "3"])
    assert result.exit_code == 0
    assert "Book with id 3 not found." in result.stdout


def test_unreachable_api(monkeypatch):
    def broken_client():
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Client(base_url="http://testserver", transport=httpx.MockTransport(handler))

    monkeypatch.setattr(main, "_client", broken_client)
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 1
    assert "Could not reach the API" in result.stdout


@patch("main.uvicorn.run")
def test_serve_command(mock_run):
    result = runner.invoke(app, ["serve", "--port", "3100"])
    assert result.exit_code == 0
    assert "Starting Books API on" in result.stdout
    mock_run.assert_called_once()
    args, kwargs = mock_run.call_args
    assert args[0] == "api:app"
    assert kwargs["port"] == 3100
    assert kwargs["reload"] is False
