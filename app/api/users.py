"""Account registration, login, and account lookups."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.api.deps import get_credential_store, get_token_service
from app.core.errors import NotFoundError
from app.core.middleware import Principal, get_current_principal
from app.core.policy import Role
from app.core.tokens import TokenService
from app.schemas.auth import (
    AccountInfo,
    AccountsListResponse,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
)
from app.services.credentials import CredentialStore

router = APIRouter()


@router.post("/register", response_model=AccountInfo, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> AccountInfo:
    """Create a member account. 409 if the username is taken, 400 if input is invalid."""
    account_id = store.register(body.username, body.password)
    return AccountInfo(id=account_id, username=body.username, role=Role.MEMBER)


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    store: Annotated[CredentialStore, Depends(get_credential_store)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> TokenResponse:
    """
    Authenticate with username and password; returns a bearer token.
    Include the token in the Authorization header as: Bearer <accessToken>
    """
    account = store.verify(body.username, body.password)
    issued = tokens.issue(account)
    return TokenResponse(access_token=issued.token, token_type="bearer", expires_at=issued.expires_at)


@router.get("/me", response_model=AccountInfo)
def read_me(
    principal: Annotated[Principal, Depends(get_current_principal)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> AccountInfo:
    """The account behind the presented token."""
    account = store.get_account(principal.account_id)
    if account is None:
        raise NotFoundError("Account not found")
    return account


@router.get("", response_model=AccountsListResponse)
def list_accounts(
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> AccountsListResponse:
    """List all accounts (admin only; enforced by the route policy)."""
    return AccountsListResponse(users=store.list_accounts())
