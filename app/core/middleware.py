"""Access control middleware: bearer token validation and route policy enforcement.

Per request: resolve the route rule; public routes go straight to the handler.
Otherwise the ordered access chain runs (extract bearer token, validate it,
check the role). Each step either hands its result to the next one or raises
an AppError, which ends the request with the uniform error response. The chain
does no I/O besides the token check, so it never touches the database.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from app.core.errors import AppError, AuthenticationError, AuthorizationError, error_response
from app.core.policy import Access, Role, RolePolicy, RouteRule, default_policy
from app.core.tokens import Claims, TokenService

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"


@dataclass(frozen=True)
class SecurityConfig:
    """Everything the access chain needs, built once at app construction."""

    token_service: TokenService
    policy: RolePolicy

    @classmethod
    def from_settings(cls, settings: "Settings") -> "SecurityConfig":
        return cls(
            token_service=TokenService.from_settings(settings),
            policy=default_policy(settings.API_PREFIX),
        )


@dataclass(frozen=True)
class Principal:
    """Authenticated caller attached to request.state by the middleware."""

    account_id: int
    role: Role


@dataclass
class AccessRequest:
    """What flows through the access chain for one request."""

    rule: RouteRule
    authorization: str | None
    token: str | None = None
    claims: Claims | None = None


AccessStep = Callable[[AccessRequest], None]


def extract_bearer_token(request: AccessRequest) -> None:
    """Read 'Authorization: Bearer <token>'; no header or another scheme is NoToken."""
    header = (request.authorization or "").strip()
    scheme, _, token = header.partition(" ")
    token = token.strip()
    if scheme.lower() != BEARER_SCHEME or not token:
        raise AuthenticationError("Not authenticated")
    request.token = token


def make_token_validation_step(token_service: TokenService) -> AccessStep:
    def validate_token(request: AccessRequest) -> None:
        if request.token is None:
            raise AuthenticationError("Not authenticated")
        request.claims = token_service.validate(request.token)

    return validate_token


def enforce_role(request: AccessRequest) -> None:
    if request.claims is None:
        raise AuthenticationError("Not authenticated")
    if not request.rule.permits(request.claims.role):
        raise AuthorizationError()


class AccessControlMiddleware(BaseHTTPMiddleware):
    """Authenticate and authorize every request before it reaches a route handler."""

    def __init__(self, app: ASGIApp, config: SecurityConfig) -> None:
        super().__init__(app)
        self.policy = config.policy
        self.chain: tuple[AccessStep, ...] = (
            extract_bearer_token,
            make_token_validation_step(config.token_service),
            enforce_role,
        )

    def authorize(self, rule: RouteRule, authorization: str | None) -> Principal:
        """Run the access chain; raises AuthenticationError/AuthorizationError on rejection."""
        access = AccessRequest(rule=rule, authorization=authorization)
        for step in self.chain:
            step(access)
        if access.claims is None:
            raise AuthenticationError("Not authenticated")
        return Principal(account_id=access.claims.subject, role=access.claims.role)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rule = self.policy.resolve(request.method, request.url.path)
        if rule.access is Access.PUBLIC:
            return await call_next(request)

        try:
            principal = self.authorize(rule, request.headers.get("Authorization"))
        except AppError as exc:
            logger.info(
                "Access denied: %s %s status=%s reason=%s",
                request.method,
                request.url.path,
                exc.status_code,
                exc.message,
            )
            return error_response(exc)

        request.state.principal = principal
        return await call_next(request)


def get_current_principal(request: Request) -> Principal:
    """Dependency: the principal the middleware attached. Raises 401 when absent."""
    principal: Any = getattr(request.state, "principal", None)
    if not isinstance(principal, Principal):
        raise AuthenticationError("Not authenticated")
    return principal
