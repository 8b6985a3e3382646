"""Book CRUD and search endpoints. Access rules come from the route policy."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from app.api.deps import get_app_settings, get_book_repository
from app.core.config import Settings
from app.core.errors import NotFoundError
from app.repositories.books import BookRepository
from app.schemas.books import BookPage, BookPayload, BookRecord
from app.services.book_search import SearchPage, search

router = APIRouter()


def _to_page(result: SearchPage) -> BookPage:
    return BookPage(
        records=result.records,
        total_count=result.total_count,
        page=result.page,
        page_size=result.page_size,
    )


def _search(
    repository: BookRepository, settings: Settings, query: str, page: int, size: int | None
) -> BookPage:
    result = search(
        repository,
        query=query,
        page=page,
        page_size=size if size is not None else settings.SEARCH_DEFAULT_PAGE_SIZE,
        max_page_size=settings.SEARCH_MAX_PAGE_SIZE,
    )
    return _to_page(result)


@router.post("", response_model=BookRecord, status_code=status.HTTP_201_CREATED)
def create_book(
    body: BookPayload,
    repository: Annotated[BookRepository, Depends(get_book_repository)],
) -> BookRecord:
    return repository.insert(body)


@router.get("", response_model=BookPage)
def list_books(
    repository: Annotated[BookRepository, Depends(get_book_repository)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    page: Annotated[int, Query(description="1-based page number")] = 1,
    size: Annotated[int | None, Query(description="Page size (clamped to the configured maximum)")] = None,
) -> BookPage:
    """All books, ordered by id, one page at a time."""
    return _search(repository, settings, "", page, size)


# Declared before /{book_id} so 'search' is not taken for an id.
@router.get("/search", response_model=BookPage)
def search_books(
    repository: Annotated[BookRepository, Depends(get_book_repository)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    query: Annotated[str, Query(max_length=255, description="Substring of title, author or ISBN")] = "",
    page: Annotated[int, Query(description="1-based page number")] = 1,
    size: Annotated[int | None, Query(description="Page size (clamped to the configured maximum)")] = None,
) -> BookPage:
    """
    Case-insensitive substring search over title, author and ISBN.

    Results are ordered by id; totalCount counts every match, not just this page.
    """
    return _search(repository, settings, query, page, size)


@router.get("/{book_id}", response_model=BookRecord)
def get_book(
    book_id: int,
    repository: Annotated[BookRepository, Depends(get_book_repository)],
) -> BookRecord:
    book = repository.find_by_id(book_id)
    if book is None:
        raise NotFoundError("Book not found")
    return book


@router.put("/{book_id}", response_model=BookRecord)
def replace_book(
    book_id: int,
    body: BookPayload,
    repository: Annotated[BookRepository, Depends(get_book_repository)],
) -> BookRecord:
    book = repository.update(book_id, body)
    if book is None:
        raise NotFoundError("Book not found")
    return book


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_book(
    book_id: int,
    repository: Annotated[BookRepository, Depends(get_book_repository)],
) -> Response:
    """Delete a book (admin only; enforced by the route policy)."""
    if not repository.delete(book_id):
        raise NotFoundError("Book not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
