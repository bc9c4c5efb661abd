import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from folio.config import Settings, get_settings
from folio.models.book import Book, ReadingListResponse
from folio.services.reading_list import cover_url, find_book, group_by_status, load_reading_list

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter(prefix="/reading-list", tags=["Reading list"])


def _with_cover(book: Book, settings: Settings) -> Book:
    return book.model_copy(update={"cover": cover_url(book, settings.covers_base)})


@router.get("", response_model=ReadingListResponse, summary="Books grouped by reading status")
@limiter.limit("60/minute")
async def reading_list(request: Request, settings: Settings = Depends(get_settings)) -> ReadingListResponse:
    books = [_with_cover(book, settings) for book in load_reading_list(settings.reading_list_path)]
    groups = group_by_status(books)
    return ReadingListResponse(
        currently_reading=groups["currently-reading"],
        future=groups["future"],
        previously_read=groups["previously-read"],
    )


@router.get("/{book_id}", response_model=Book, summary="A single reading-list entry")
@limiter.limit("60/minute")
async def book_detail(request: Request, book_id: str, settings: Settings = Depends(get_settings)) -> Book:
    book = find_book(load_reading_list(settings.reading_list_path), book_id)
    if book is None:
        raise HTTPException(status_code=404, detail=f"No book with id '{book_id}'.")
    return _with_cover(book, settings)
