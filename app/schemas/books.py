"""Pydantic schemas for book records, book payloads and paginated results."""

import re
from datetime import date

from pydantic import ConfigDict, Field, field_validator

from app.schemas.common import CamelModel

ISBN_LENGTH = 13
TITLE_MAX_LENGTH = 500
AUTHOR_MAX_LENGTH = 255

_ISBN_SEPARATORS = re.compile(r"[\s-]+")
_ISBN_BODY = re.compile(r"^\d*[\dX]$")


def normalize_isbn(value: str) -> str:
    """
    Normalize an ISBN to the stored fixed-length form.

    Hyphens and whitespace are dropped, a trailing check character 'x' is
    upper-cased, and the result is zero-padded on the left to 13 characters:
    '0001' -> '0000000000001', '978-0-306-40615-7' -> '9780306406157'.
    Raises ValueError for anything that is not 1-13 digits (optionally ending in X).
    """
    compact = _ISBN_SEPARATORS.sub("", value).upper()
    if not compact or len(compact) > ISBN_LENGTH or not _ISBN_BODY.match(compact):
        raise ValueError(
            f"isbn must be 1-{ISBN_LENGTH} digits (hyphens allowed, optional trailing X)"
        )
    return compact.rjust(ISBN_LENGTH, "0")


class BookPayload(CamelModel):
    """Body for creating or replacing a book."""

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH, description="Book title")
    author: str = Field(..., min_length=1, max_length=AUTHOR_MAX_LENGTH, description="Author name")
    isbn: str = Field(..., description="ISBN; normalized to 13 characters")
    published_date: date = Field(..., description="Publication date (YYYY-MM-DD)")

    @field_validator("title", "author")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        s = v.strip()
        if not s:
            raise ValueError("must be non-empty")
        return s

    @field_validator("isbn")
    @classmethod
    def validate_isbn(cls, v: str) -> str:
        return normalize_isbn(v)


class BookRecord(CamelModel):
    """A stored book as returned by the repository and the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    author: str
    isbn: str
    published_date: date


class BookPage(CamelModel):
    """One page of books plus the size of the full match set."""

    records: list[BookRecord]
    total_count: int = Field(..., ge=0, description="Number of records matching, across all pages")
    page: int = Field(..., ge=1, description="1-based page number")
    page_size: int = Field(..., ge=1, description="Effective page size after clamping")
