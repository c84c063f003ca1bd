from __future__ import annotations

from typing import Any, Mapping

# Wire name -> attribute for the fields a client may set; ``id`` is assigned by the store.
EDITABLE_FIELDS = {
    "title": "title",
    "author": "author",
    "genre": "genre",
    "copiesAvailable": "copies_available",
}


class Book:
    """Represents a single book record in the store."""

    def __init__(self, id: int, title: str | None, author: str | None, genre: str | None = None,
                 copies_available: int | None = None) -> None:
        self.id = id
        self.title = title
        self.author = author
        self.genre = genre or ""
        self.copies_available = 0 if copies_available is None else copies_available

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} by {self.author} (id: {self.id})"

    def __repr__(self) -> str:  # pragma: no cover
        return f"Book(id={self.id!r}, title={self.title!r}, author={self.author!r})"

    def apply(self, fields: Mapping[str, Any]) -> None:
        """Overwrite every editable field whose key is present in ``fields``.

        Presence is what counts: an explicit ``""``, ``0`` or ``None`` still
        overwrites the stored value.
        """
        for key, attr in EDITABLE_FIELDS.items():
            if key in fields:
                setattr(self, attr, fields[key])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "genre": self.genre,
            "copiesAvailable": self.copies_available,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Book":
        return Book(
            id=data["id"],
            title=data.get("title"),
            author=data.get("author"),
            genre=data.get("genre"),
            copies_available=data.get("copiesAvailable"),
        )
