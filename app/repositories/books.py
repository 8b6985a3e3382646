"""
Book repository: the storage interface the handlers and the query engine use.

The interface is deliberately small (find_by_id, find_all, insert, update,
delete). Search, ordering and pagination live in app.services.book_search and
only need find_all, so any backing store that can list its records works.
"""

import logging
from abc import ABC, abstractmethod

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import InternalError
from app.models import Book
from app.schemas.books import BookPayload, BookRecord

logger = logging.getLogger(__name__)

# Largest value a signed 32-bit Integer primary key can hold. Larger ids
# cannot name a stored book, and the drivers reject them as bind parameters.
MAX_BOOK_ID = 2**31 - 1


def _is_storable_id(book_id: int) -> bool:
    return 1 <= book_id <= MAX_BOOK_ID


class BookRepository(ABC):
    """Storage operations for book records. Missing ids yield None/False, never errors."""

    @abstractmethod
    def find_by_id(self, book_id: int) -> BookRecord | None: ...

    @abstractmethod
    def find_all(self) -> list[BookRecord]: ...

    @abstractmethod
    def insert(self, data: BookPayload) -> BookRecord: ...

    @abstractmethod
    def update(self, book_id: int, data: BookPayload) -> BookRecord | None: ...

    @abstractmethod
    def delete(self, book_id: int) -> bool: ...


class SqlAlchemyBookRepository(BookRepository):
    """BookRepository over a SQLAlchemy session. Driver errors surface as InternalError."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_by_id(self, book_id: int) -> BookRecord | None:
        if not _is_storable_id(book_id):
            return None
        try:
            book = self.session.get(Book, book_id)
        except SQLAlchemyError:
            logger.exception("Failed to load book id=%s", book_id)
            raise InternalError()
        return BookRecord.model_validate(book) if book is not None else None

    def find_all(self) -> list[BookRecord]:
        try:
            books = self.session.scalars(select(Book).order_by(Book.id)).all()
        except SQLAlchemyError:
            logger.exception("Failed to list books")
            raise InternalError()
        return [BookRecord.model_validate(b) for b in books]

    def insert(self, data: BookPayload) -> BookRecord:
        book = Book(
            title=data.title,
            author=data.author,
            isbn=data.isbn,
            published_date=data.published_date,
        )
        try:
            self.session.add(book)
            self.session.commit()
            self.session.refresh(book)
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to insert book")
            raise InternalError()
        logger.info("Book created: id=%s", book.id)
        return BookRecord.model_validate(book)

    def update(self, book_id: int, data: BookPayload) -> BookRecord | None:
        if not _is_storable_id(book_id):
            return None
        try:
            book = self.session.get(Book, book_id)
            if book is None:
                return None
            book.title = data.title
            book.author = data.author
            book.isbn = data.isbn
            book.published_date = data.published_date
            self.session.commit()
            self.session.refresh(book)
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to update book id=%s", book_id)
            raise InternalError()
        return BookRecord.model_validate(book)

    def delete(self, book_id: int) -> bool:
        if not _is_storable_id(book_id):
            return False
        try:
            book = self.session.get(Book, book_id)
            if book is None:
                return False
            self.session.delete(book)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to delete book id=%s", book_id)
            raise InternalError()
        logger.info("Book deleted: id=%s", book_id)
        return True
