"""ORM model for accounts (credentials and role)."""

from sqlalchemy import Column, Integer, String

from app.models.base import Base


class Account(Base):
    """
    Account for bearer-token authentication and role-based access control.

    role: 'member' or 'admin'. username uniqueness is enforced by the unique index,
    which is what makes concurrent registrations safe.
    """

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default="member")
