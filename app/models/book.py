"""ORM model for catalog books."""

from sqlalchemy import Column, Date, Integer, String

from app.models.base import Base


class Book(Base):
    """
    A book record. ids come from an autoincrement sequence, so newer records always
    sort after older ones.
    """

    __tablename__ = "books"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(500), nullable=False)
    author = Column(String(255), nullable=False, index=True)
    isbn = Column(String(13), nullable=False, index=True)
    published_date = Column(Date, nullable=False)
