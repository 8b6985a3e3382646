"""Stateless signed access tokens (JWT, HMAC-signed).

A token is ``header.claims.signature``, each segment base64url-encoded. The
claims are ``sub`` (account id), ``role``, ``iat`` and ``exp``; the signature
binds them to the server secret, so editing any claim invalidates the token.
There is no revocation: a token is accepted until ``exp``.
"""

import binascii
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any, Protocol

import jwt
from jwt.utils import base64url_decode, base64url_encode

from app.core.errors import TokenError, TokenErrorReason
from app.core.policy import Role

if TYPE_CHECKING:
    from app.core.config import Settings

REQUIRED_CLAIMS = ["sub", "role", "iat", "exp"]


def utc_now() -> datetime:
    return datetime.now(UTC)


class TokenSubject(Protocol):
    """Anything with an id and a role can be issued a token."""

    id: int
    role: Role


@dataclass(frozen=True)
class Claims:
    subject: int
    role: Role
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


def _is_canonical_segment(segment: str) -> bool:
    """True if the segment is exactly the unpadded base64url encoding of what it decodes to."""
    try:
        raw = base64url_decode(segment)
    except (binascii.Error, ValueError):
        return False
    return base64url_encode(raw).decode("ascii") == segment


class TokenService:
    """
    Issue and validate access tokens.

    Holds only the secret, ttl, algorithm and clock, so concurrent calls need
    no locking.
    """

    def __init__(
        self,
        secret: str,
        ttl: timedelta = timedelta(hours=1),
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if not secret:
            raise ValueError("Token signing secret must be non-empty")
        if ttl <= timedelta(0):
            raise ValueError("Token ttl must be positive")
        self._secret = secret
        self._ttl = ttl
        self._algorithm = algorithm
        self._clock = clock

    @classmethod
    def from_settings(
        cls, settings: "Settings", clock: Callable[[], datetime] = utc_now
    ) -> "TokenService":
        return cls(
            secret=settings.JWT_SECRET.get_secret_value(),
            ttl=timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
            algorithm=settings.JWT_ALGORITHM,
            clock=clock,
        )

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, account: TokenSubject) -> IssuedToken:
        """Create a token for the account, valid from now until now + ttl."""
        now = self._clock().replace(microsecond=0)
        expires_at = now + self._ttl
        payload: dict[str, Any] = {
            "sub": str(account.id),
            "role": Role(account.role).value,
            "iat": now,
            "exp": expires_at,
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return IssuedToken(token=token, expires_at=expires_at)

    def validate(self, token: str) -> Claims:
        """
        Verify signature and expiry and return the claims.

        Raises TokenError with reason MALFORMED, INVALID_SIGNATURE or EXPIRED.
        """
        segments = token.split(".")
        if len(segments) != 3 or not all(segments):
            raise TokenError(TokenErrorReason.MALFORMED)
        # PyJWT rejects an undecodable claims segment as malformed before it
        # checks the signature, and base64 decoding ignores the spare low bits
        # of the final character. A non-canonical claims or signature segment
        # is therefore reported as a bad signature.
        if not (_is_canonical_segment(segments[1]) and _is_canonical_segment(segments[2])):
            raise TokenError(TokenErrorReason.INVALID_SIGNATURE)

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": REQUIRED_CLAIMS,
                },
            )
        except jwt.InvalidSignatureError:
            raise TokenError(TokenErrorReason.INVALID_SIGNATURE)
        except jwt.PyJWTError:
            raise TokenError(TokenErrorReason.MALFORMED)

        claims = self._parse_claims(payload)
        if self._clock() >= claims.expires_at:
            raise TokenError(TokenErrorReason.EXPIRED)
        return claims

    @staticmethod
    def _parse_claims(payload: dict[str, Any]) -> Claims:
        try:
            subject = int(payload["sub"])
            role = Role(payload["role"])
            issued_at = datetime.fromtimestamp(int(payload["iat"]), UTC)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), UTC)
        except (KeyError, TypeError, ValueError, OverflowError, OSError):
            raise TokenError(TokenErrorReason.MALFORMED)
        return Claims(subject=subject, role=role, issued_at=issued_at, expires_at=expires_at)
