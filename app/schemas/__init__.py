"""Pydantic request/response schemas."""

from app.schemas.auth import (
    AccountInfo,
    AccountsListResponse,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
)
from app.schemas.books import BookPage, BookPayload, BookRecord, normalize_isbn
from app.schemas.common import CamelModel, ErrorResponse, HealthResponse

__all__ = [
    "AccountInfo",
    "AccountsListResponse",
    "BookPage",
    "BookPayload",
    "BookRecord",
    "CamelModel",
    "ErrorResponse",
    "HealthResponse",
    "LoginRequest",
    "RegisterRequest",
    "TokenResponse",
    "normalize_isbn",
]
