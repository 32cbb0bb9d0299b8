"""
Core module for application configuration and utilities.

Note: the auth module is not imported at package level because it imports
proftest.models, which creates the database engine on import. Import it
directly: from proftest.core.auth import ...
"""
from .config import settings

__all__ = ["settings"]
