"""Request/response schemas for account and login endpoints."""

from datetime import datetime

from pydantic import ConfigDict, Field

from app.core.policy import Role
from app.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    """New account credentials. Length rules are enforced by the credential store."""

    username: str = Field(..., description="Username (case-sensitive, 1-255 chars)")
    password: str = Field(..., description="Password (1-72 bytes UTF-8)")


class LoginRequest(CamelModel):
    """Credentials for login."""

    username: str = Field(..., description="Username")
    password: str = Field(..., description="Password")


class TokenResponse(CamelModel):
    """Access token returned after successful login."""

    access_token: str = Field(..., description="Signed bearer token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_at: datetime = Field(..., description="Instant after which the token is rejected")


class AccountInfo(CamelModel):
    """Public view of an account (no password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    role: Role


class AccountsListResponse(CamelModel):
    """Response for GET /users (admin only)."""

    users: list[AccountInfo]
