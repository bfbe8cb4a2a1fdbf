"""Database module for SQLite persistence.

Provides:
- Database connection management
- Schema initialization
- Repository functions for the hierarchy, exercises, attempts and profiles
"""

from vectorlab.db.database import get_db, init_db

__all__ = ["get_db", "init_db"]
