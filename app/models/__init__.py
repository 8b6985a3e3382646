"""SQLAlchemy ORM models."""

from app.models.account import Account
from app.models.base import Base
from app.models.book import Book

__all__ = ["Account", "Base", "Book"]
