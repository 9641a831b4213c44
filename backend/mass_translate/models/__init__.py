"""
Database Models Package

Tables:
1. users - Accounts and admin flag
"""

from .database import (
    engine,
    AsyncSessionLocal,
    Base,
    init_db,
    get_db,
)

from .user import User

__all__ = [
    # Database utilities
    "engine",
    "AsyncSessionLocal",
    "Base",
    "init_db",
    "get_db",

    # Models
    "User",
]
