"""Book search: case-insensitive substring match with stable, id-ordered pages.

Records come from BookRepository.find_all; filtering, ordering and slicing
happen in memory. Sorting by id before slicing keeps pages stable while the
catalog grows, because new records get larger ids and land after existing ones.
"""

import math
import re
from collections.abc import Iterable
from dataclasses import dataclass

from app.core.errors import ValidationError
from app.repositories.books import BookRepository
from app.schemas.books import BookRecord

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

_ISBN_SEPARATORS = re.compile(r"[\s-]+")


@dataclass(frozen=True)
class SearchPage:
    records: list[BookRecord]
    total_count: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size)


def matches(record: BookRecord, query: str) -> bool:
    """True if query is a case-insensitive substring of title, author or isbn. Empty matches all."""
    if not query.strip():
        return True
    needle = query.casefold()
    if needle in record.title.casefold() or needle in record.author.casefold():
        return True
    isbn_needle = _ISBN_SEPARATORS.sub("", needle)
    return bool(isbn_needle) and isbn_needle in record.isbn.casefold()


def paginate(records: Iterable[BookRecord], page: int, page_size: int) -> tuple[list[BookRecord], int]:
    """Order by id and return (slice for the 1-based page, total record count)."""
    ordered = sorted(records, key=lambda r: r.id)
    start = (page - 1) * page_size
    return ordered[start : start + page_size], len(ordered)


def search(
    repository: BookRepository,
    query: str = "",
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    max_page_size: int = MAX_PAGE_SIZE,
) -> SearchPage:
    """
    Return one page of books matching query, ordered by id ascending.

    page_size is clamped to max_page_size. A page past the end is empty but
    still reports the full total_count.
    """
    if page < 1:
        raise ValidationError("page must be >= 1")
    if page_size < 1:
        raise ValidationError("size must be >= 1")
    page_size = min(page_size, max_page_size)

    matched = (r for r in repository.find_all() if matches(r, query))
    records, total_count = paginate(matched, page, page_size)
    return SearchPage(records=records, total_count=total_count, page=page, page_size=page_size)
