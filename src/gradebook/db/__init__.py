"""Database module for SQLite persistence.

Provides:
- Database connection management
- Schema initialization
- Repository functions for users, exercises and submissions
"""

from gradebook.db.database import DatabaseError, close_db, open_db

__all__ = ["DatabaseError", "close_db", "open_db"]
