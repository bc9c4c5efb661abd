"""Reading-list data: books loaded from a YAML file."""

import logging
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import ValidationError

from folio.models.book import Book, BookStatus

logger = logging.getLogger(__name__)


def load_reading_list(path: Path) -> List[Book]:
    """Return the books listed in the YAML file at *path*.

    A missing file is an empty reading list. So is an unreadable or
    malformed file, which is logged. Entries that fail validation are logged
    and skipped.
    """
    if not path.is_file():
        logger.warning("Reading list not found at %s", path)
        return []

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or []
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        logger.error("Cannot read reading list %s: %s", path, exc)
        return []
    if not isinstance(raw, list):
        logger.error("Reading list %s must be a YAML list, got %s", path, type(raw).__name__)
        return []

    books: List[Book] = []
    for index, entry in enumerate(raw):
        try:
            books.append(Book.model_validate(entry))
        except ValidationError as exc:
            logger.error("Skipping reading-list entry #%d: %s", index, exc)
    return books


def find_book(books: List[Book], book_id: str) -> Optional[Book]:
    return next((book for book in books if book.id == book_id), None)


def cover_url(book: Book, base: str) -> Optional[str]:
    """Return the absolute cover image URL, or *None* when the book has no cover."""
    if not book.cover:
        return None
    if book.cover.startswith(("http://", "https://")):
        return book.cover
    return f"{base.rstrip('/')}/{book.cover.lstrip('/')}"


def group_by_status(books: List[Book]) -> Dict[BookStatus, List[Book]]:
    groups: Dict[BookStatus, List[Book]] = {
        "currently-reading": [],
        "future": [],
        "previously-read": [],
    }
    for book in books:
        groups[book.status].append(book)
    return groups
