"""API routes."""

from fastapi import APIRouter

from app.api import books, health, users
from app.schemas.common import ErrorResponse

# Documented error bodies; the access middleware can answer any protected route with these.
PROTECTED_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Missing, malformed, invalid or expired token"},
    403: {"model": ErrorResponse, "description": "Role not allowed on this route"},
}

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(books.router, prefix="/books", tags=["books"], responses=PROTECTED_RESPONSES)
