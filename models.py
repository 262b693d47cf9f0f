from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base


class User(Base):
    """
    Identity record keyed by username.

    Name data is denormalized onto the row: ``full_name`` for rows written by
    the oldest clients, ``first_name``/``last_name`` for everything newer.
    Migrated rows also own exactly one ``Name`` sub-record.
    """

    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("username", name="uq_user_username"),)

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(20), nullable=False, index=True)
    full_name = Column(String(256), nullable=True)
    first_name = Column(String(128), nullable=True)
    last_name = Column(String(128), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    name = relationship(
        "Name",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )


class Name(Base):
    """Normalized copy of a user's split name, owned 1:1 by ``User``."""

    __tablename__ = "names"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    first_name = Column(String(128), nullable=True)
    last_name = Column(String(128), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    user = relationship("User", back_populates="name")
