# ABOUTME: Core data structure for the synthetic Book document.
# ABOUTME: Maps between the Book dataclass and the stored document field names.

import re
from dataclasses import dataclass
from typing import Any

ISBN_PATTERN = re.compile(r"^978-\d{10}$")

MIN_YEAR = 1990
MAX_YEAR = 2025
MIN_PRICE = 19.99
MAX_PRICE = 99.99

DOCUMENT_FIELDS = frozenset({"_id", "title", "author", "isbn", "publishedYear", "price"})


@dataclass
class Book:
    """A synthetic book as generated by the loader.

    The backend assigns `_id` on insert, so it never appears here.
    """

    title: str
    author: str
    isbn: str
    published_year: int
    price: float

    def to_document(self) -> dict[str, Any]:
        """Convert to a dict suitable for insert_many."""
        return {
            "title": self.title,
            "author": self.author,
            "isbn": self.isbn,
            "publishedYear": self.published_year,
            "price": self.price,
        }


def document_to_book(doc: dict[str, Any]) -> Book:
    """Convert a stored document back to a Book, dropping `_id`."""
    return Book(
        title=doc["title"],
        author=doc["author"],
        isbn=doc["isbn"],
        published_year=doc["publishedYear"],
        price=doc["price"],
    )


def validate_document(doc: dict[str, Any]) -> list[str]:
    """Check a stored document against the Book schema.

    Returns:
        A list of human-readable problems; empty when the document conforms.
    """
    problems: list[str] = []

    keys = set(doc.keys())
    if keys != DOCUMENT_FIELDS:
        missing = sorted(DOCUMENT_FIELDS - keys)
        extra = sorted(keys - DOCUMENT_FIELDS)
        if missing:
            problems.append(f"missing fields: {', '.join(missing)}")
        if extra:
            problems.append(f"unexpected fields: {', '.join(extra)}")

    for name in ("title", "author"):
        value = doc.get(name)
        if not isinstance(value, str) or not value:
            problems.append(f"{name} must be non-empty text")

    isbn = doc.get("isbn")
    if not isinstance(isbn, str) or not ISBN_PATTERN.match(isbn):
        problems.append(f"isbn {isbn!r} does not match 978-NNNNNNNNNN")

    year = doc.get("publishedYear")
    if isinstance(year, bool) or not isinstance(year, int):
        problems.append("publishedYear must be an integer")
    elif not MIN_YEAR <= year <= MAX_YEAR:
        problems.append(f"publishedYear {year} outside [{MIN_YEAR}, {MAX_YEAR}]")

    price = doc.get("price")
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        problems.append("price must be a number")
    else:
        if not MIN_PRICE <= price <= MAX_PRICE:
            problems.append(f"price {price} outside [{MIN_PRICE}, {MAX_PRICE}]")
        if round(price, 2) != price:
            problems.append(f"price {price} has more than two fractional digits")

    return problems
