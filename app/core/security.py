"""Password hashing and credential input validation."""

from functools import lru_cache

import bcrypt

from app.core.errors import ValidationError

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 1
# bcrypt only reads the first 72 bytes; longer passwords are rejected rather than truncated.
PASSWORD_MAX_BYTES = 72


def validate_username(username: str) -> None:
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN) or not username.strip():
        raise ValidationError("Invalid username length.")


def validate_password(password: str) -> None:
    if len(password) < PASSWORD_MIN_LEN or len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValidationError("Invalid password length.")


def hash_password(plain_password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    pw_bytes = plain_password.encode("utf-8")
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash (constant-time compare inside bcrypt)."""
    pw_bytes = plain_password.encode("utf-8")
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@lru_cache
def dummy_password_hash(rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash checked for unknown usernames so lookups cost the same either way."""
    return hash_password("not-a-real-password", rounds=rounds)
