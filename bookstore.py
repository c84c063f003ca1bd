import itertools
import logging
from threading import RLock
from typing import Any, Dict, Iterable, List, Mapping, Optional

from book import Book

logger = logging.getLogger(__name__)

SEED_BOOKS: List[Dict[str, Any]] = [
    {
        "id": 1,
        "title": "The Great Gatsby",
        "author": "F. Scott Fitzgerald",
        "genre": "Fiction",
        "copiesAvailable": 5,
    },
    {
        "id": 2,
        "title": "To Kill a Mockingbird",
        "author": "Harper Lee",
        "genre": "Fiction",
        "copiesAvailable": 3,
    },
    {
        "id": 3,
        "title": "1984",
        "author": "George Orwell",
        "genre": "Dystopian Fiction",
        "copiesAvailable": 7,
    },
]


class BookNotFoundError(LookupError):
    """Raised when no book in the store has the requested id."""

    def __init__(self, book_id: Optional[int]) -> None:
        super().__init__(f"Book with id {book_id} not found.")
        self.book_id = book_id


class BookStore:
    """Owns the in-memory, ordered collection of books.

    Every public operation runs under a single re-entrant lock, so one store
    can be shared by request handlers running on a threadpool. Ids come from
    a monotonic counter and are never handed out twice, even after deletes.
    """

    def __init__(self, seed: bool = True, books: Optional[Iterable[Mapping[str, Any]]] = None) -> None:
        self._lock = RLock()
        self._seed = seed
        self._initial = [dict(b) for b in books] if books is not None else None
        self.reset()

    # ------------------------- Core operations ------------------------- #
    def list_books(self) -> List[Book]:
        with self._lock:
            return list(self._books)

    def get_book(self, book_id: Optional[int]) -> Book:
        with self._lock:
            book = self._find(book_id)
            if book is None:
                logger.debug("Lookup miss for book id %s", book_id)
                raise BookNotFoundError(book_id)
            return book

    def create_book(self, fields: Mapping[str, Any]) -> Book:
        """Append a new book built from ``fields`` and return it.

        Missing ``genre`` becomes ``""`` and missing ``copiesAvailable``
        becomes ``0``. Title and author are not required.
        """
        with self._lock:
            book = Book(
                id=next(self._ids),
                title=fields.get("title"),
                author=fields.get("author"),
                genre=fields.get("genre"),
                copies_available=fields.get("copiesAvailable"),
            )
            self._books.append(book)
            logger.info("Created book %s (%r by %r)", book.id, book.title, book.author)
            return book

    def update_book(self, book_id: Optional[int], fields: Mapping[str, Any]) -> Book:
        with self._lock:
            book = self.get_book(book_id)
            book.apply(fields)
            logger.info("Updated book %s: %s", book.id, sorted(fields))
            return book

    def delete_book(self, book_id: Optional[int]) -> None:
        with self._lock:
            for index, book in enumerate(self._books):
                if book.id == book_id:
                    del self._books[index]
                    logger.info("Deleted book %s", book_id)
                    return
            logger.debug("Delete miss for book id %s", book_id)
            raise BookNotFoundError(book_id)

    def reset(self) -> None:
        """Restore the initial catalog and restart the id counter."""
        with self._lock:
            if self._initial is not None:
                source = self._initial
            else:
                source = SEED_BOOKS if self._seed else []
            self._books: List[Book] = [Book.from_dict(b) for b in source]
            start = max((b.id for b in self._books), default=0) + 1
            self._ids = itertools.count(start)

    # ------------------------- Utilities ------------------------- #
    def _find(self, book_id: Optional[int]) -> Optional[Book]:
        for book in self._books:
            if book.id == book_id:
                return book
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._books)
