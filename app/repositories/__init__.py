"""Repositories: named data-access methods kept apart from query and HTTP logic."""

from app.repositories.books import BookRepository, SqlAlchemyBookRepository

__all__ = ["BookRepository", "SqlAlchemyBookRepository"]
