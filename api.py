import logging
import re
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Body, Depends, FastAPI, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from bookstore import BookNotFoundError, BookStore
from config import settings
from logging_config import setup_logging

logger = logging.getLogger(__name__)

# Leading integer, the way a lenient parseInt reads it: "12abc" -> 12, "abc" -> None.
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

NOT_FOUND_BODY = {"error": "Book not found"}


# --- Models ---
class BookModel(BaseModel):
    id: int
    title: Optional[str] = None
    author: Optional[str] = None
    genre: Optional[str] = ""
    copiesAvailable: Optional[int] = 0


class BookPayload(BaseModel):
    """Partial book body used by both create and update.

    Only the keys the client actually sent end up in
    ``model_dump(exclude_unset=True)``, which is what update relies on.
    """

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = Field(default=None, description="Book title")
    author: Optional[str] = Field(default=None, description="Book author")
    genre: Optional[str] = Field(default=None, description="Defaults to an empty string on create")
    copiesAvailable: Optional[int] = Field(default=None, description="Defaults to 0 on create")


# --- Helper Functions ---
def parse_book_id(raw: str) -> Optional[int]:
    """Parse a path id leniently; ``None`` means it can never match a book."""
    match = _LEADING_INT.match(raw)
    if not match:
        return None
    return int(match.group(1))


def _fields(payload: Optional[BookPayload]) -> dict:
    if payload is None:
        return {}
    return payload.model_dump(exclude_unset=True)


def get_store(request: Request) -> BookStore:
    """Dependency returning the store owned by the running application."""
    return request.app.state.store


# --- Application ---
def create_app(store: Optional[BookStore] = None) -> FastAPI:
    """Build the Books API around ``store`` (a freshly seeded one by default)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level, settings.log_file)
        logger.info("%s starting with %d books", settings.app_name, len(app.state.store))
        yield
        logger.info("%s shutting down", settings.app_name)

    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)
    app.state.store = store if store is not None else BookStore(seed=settings.seed_books)

    @app.exception_handler(BookNotFoundError)
    async def book_not_found_handler(request: Request, exc: BookNotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=NOT_FOUND_BODY)

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return "Books API"

    @app.get("/api/books", response_model=List[BookModel])
    def list_books(store: BookStore = Depends(get_store)):
        """Return every book in insertion order."""
        return [b.to_dict() for b in store.list_books()]

    @app.get("/api/books/{book_id}", response_model=BookModel)
    def get_book(book_id: str, store: BookStore = Depends(get_store)):
        return store.get_book(parse_book_id(book_id)).to_dict()

    @app.post("/api/books", response_model=BookModel, status_code=status.HTTP_201_CREATED)
    def create_book(payload: Optional[BookPayload] = Body(default=None), store: BookStore = Depends(get_store)):
        """Add a new book; genre and copiesAvailable are defaulted when missing."""
        return store.create_book(_fields(payload)).to_dict()

    @app.put("/api/books/{book_id}", response_model=BookModel)
    def update_book(book_id: str, payload: Optional[BookPayload] = Body(default=None),
                    store: BookStore = Depends(get_store)):
        """Overwrite only the fields present in the body."""
        return store.update_book(parse_book_id(book_id), _fields(payload)).to_dict()

    @app.delete("/api/books/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_book(book_id: str, store: BookStore = Depends(get_store)):
        store.delete_book(parse_book_id(book_id))
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app


app = create_app()
