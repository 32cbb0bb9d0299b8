"""
Database models for the Proftest application.
"""
from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from .base import Base


class Test(Base):
    """A psychometric test from the catalog.

    Question payloads are opaque to the server; only their count and order
    matter. ``thinking_types``, ``description`` and ``levels`` describe the
    scored dimensions and are positionally aligned with the scorer's output.
    """

    __tablename__ = "tests"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    icon = Column(String(500))
    type = Column(String(100), index=True)
    short_desc = Column(Text)
    long_desc = Column(Text)
    instruction = Column(Text)
    questions = Column(JSON, nullable=False, default=list)
    thinking_types = Column(JSON, nullable=False, default=list)
    description = Column(JSON, nullable=False, default=list)
    levels = Column(JSON, nullable=False, default=list)
    scorer = Column(String(100), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # Relationships
    completions = relationship(
        "TestCompletion", back_populates="test", cascade="all, delete-orphan"
    )


class User(Base):
    """User model. Credentials are managed by the auth provider."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    first_name = Column(String(32))
    last_name = Column(String(32))
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # Relationships
    completions = relationship(
        "TestCompletion", back_populates="user", cascade="all, delete-orphan"
    )


class TestCompletion(Base):
    """A user's scored pass through a test.

    One row per (user, test); retaking a test overwrites answers and result.
    """

    __tablename__ = "test_completions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    test_id = Column(
        Integer, ForeignKey("tests.id", ondelete="CASCADE"), nullable=False
    )
    passed_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    answers = Column(JSON, nullable=False)
    result = Column(JSON, nullable=False)

    # Relationships
    user = relationship("User", back_populates="completions")
    test = relationship("Test", back_populates="completions")

    __table_args__ = (
        UniqueConstraint("user_id", "test_id", name="uq_user_test_completion"),
        # Pass counts filter by test_id alone
        Index("ix_test_completions_test_id", "test_id"),
    )
