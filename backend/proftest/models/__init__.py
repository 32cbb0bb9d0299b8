"""
Models package for the Proftest backend.
"""
from .base import Base, AsyncSessionLocal, get_db, get_session_factory
from .models import Test, User, TestCompletion

__all__ = [
    "Base",
    "AsyncSessionLocal",
    "get_db",
    "get_session_factory",
    "Test",
    "User",
    "TestCompletion",
]
