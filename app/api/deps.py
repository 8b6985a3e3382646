"""Shared FastAPI dependencies: settings, token service, credential store, book repository."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.database import get_db
from app.core.tokens import TokenService
from app.repositories.books import BookRepository, SqlAlchemyBookRepository
from app.services.credentials import CredentialStore


def get_app_settings(request: Request) -> Settings:
    """Settings the app was built with (see app.main.create_app)."""
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.security.token_service


def get_credential_store(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> CredentialStore:
    return CredentialStore(db, bcrypt_rounds=settings.BCRYPT_ROUNDS)


def get_book_repository(db: Annotated[Session, Depends(get_db)]) -> BookRepository:
    return SqlAlchemyBookRepository(db)
