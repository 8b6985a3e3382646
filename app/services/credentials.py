"""Credential store: account registration and password verification.

Password hashes never leave this module; callers get AccountInfo.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import AuthenticationError, ConflictError, InternalError
from app.core.policy import Role
from app.core.security import (
    BCRYPT_ROUNDS,
    dummy_password_hash,
    hash_password,
    validate_password,
    validate_username,
    verify_password,
)
from app.models import Account
from app.schemas.auth import AccountInfo

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid username or password."


class CredentialStore:
    """Accounts backed by the accounts table; uniqueness comes from its unique index."""

    def __init__(self, session: Session, bcrypt_rounds: int = BCRYPT_ROUNDS) -> None:
        self.session = session
        self.bcrypt_rounds = bcrypt_rounds

    def register(self, username: str, raw_password: str, role: Role = Role.MEMBER) -> int:
        """
        Create an account and return its id.

        Raises ValidationError for bad input and ConflictError if the username is
        taken. The insert itself is the uniqueness check: two concurrent calls
        with the same username cannot both commit.
        """
        validate_username(username)
        validate_password(raw_password)

        account = Account(
            username=username,
            password_hash=hash_password(raw_password, rounds=self.bcrypt_rounds),
            role=Role(role).value,
        )
        try:
            self.session.add(account)
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ConflictError("Username already exists.")
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Failed to store new account")
            raise InternalError()
        logger.info("Account registered: id=%s role=%s", account.id, account.role)
        return account.id

    def verify(self, username: str, raw_password: str) -> AccountInfo:
        """
        Return the account if the password matches.

        Unknown username and wrong password raise the same AuthenticationError,
        and both paths run one bcrypt check.
        """
        try:
            account = self.session.scalars(
                select(Account).where(Account.username == username)
            ).first()
        except SQLAlchemyError:
            logger.exception("Failed to load account for login")
            raise InternalError()

        if account is None:
            verify_password(raw_password, dummy_password_hash(self.bcrypt_rounds))
            logger.info("Failed login attempt")
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)
        if not verify_password(raw_password, account.password_hash):
            logger.info("Failed login attempt")
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)
        return AccountInfo.model_validate(account)

    def get_account(self, account_id: int) -> AccountInfo | None:
        try:
            account = self.session.get(Account, account_id)
        except SQLAlchemyError:
            logger.exception("Failed to load account id=%s", account_id)
            raise InternalError()
        return AccountInfo.model_validate(account) if account is not None else None

    def list_accounts(self) -> list[AccountInfo]:
        try:
            accounts = self.session.scalars(select(Account).order_by(Account.id)).all()
        except SQLAlchemyError:
            logger.exception("Failed to list accounts")
            raise InternalError()
        return [AccountInfo.model_validate(a) for a in accounts]
