"""Core: configuration, database, errors, and the access-control building blocks."""

from app.core.config import get_settings, settings
from app.core.database import get_db
from app.core.middleware import AccessControlMiddleware, Principal, SecurityConfig

__all__ = [
    "AccessControlMiddleware",
    "Principal",
    "SecurityConfig",
    "get_db",
    "get_settings",
    "settings",
]
