"""SQLite database connection and schema management.

Provides connection management and schema initialization for the gradebook.
The column names and declared types below are the persisted contract: an
existing database file stays readable only while they are kept as-is.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

logger = structlog.get_logger(__name__)

MEMORY_DB = ":memory:"

# Table name -> column definitions
SCHEMA: dict[str, str] = {
    "User": (
        "UserId INTEGER PRIMARY KEY, Username TEXT UNIQUE, "
        "Firstname TEXT, Lastname TEXT, Password TEXT"
    ),
    "Exercise": "ExerciseId INTEGER PRIMARY KEY, Name TEXT, DueDate INTEGER",
    "Question": (
        "ExerciseId INTEGER, QuestionId INTEGER AUTO_INCREMENT, Name TEXT, "
        "Desc TEXT, Points INTEGER, PRIMARY KEY (ExerciseId, QuestionId)"
    ),
    "Submission": (
        "SubmissionId INTEGER PRIMARY KEY, UserId INTEGER, "
        "ExerciseId INTEGER, SubmissionTime INTEGER"
    ),
    "QuestionGrade": (
        "SubmissionId INTEGER, QuestionId INTEGER, Grade REAL, "
        "PRIMARY KEY (SubmissionId, QuestionId)"
    ),
}


class DatabaseError(Exception):
    """Any failure reported by the underlying database."""

    pass


@contextmanager
def translate_errors(operation: str) -> Generator[None, None, None]:
    """Re-raise sqlite3 errors as DatabaseError.

    Args:
        operation: Short name of the failing operation, used in the message
    """
    try:
        yield
    except sqlite3.Error as e:
        logger.error("database.error", operation=operation, error=str(e))
        raise DatabaseError(f"{operation} failed: {e}") from e


def open_db(db_path: Path | str) -> sqlite3.Connection:
    """Open the gradebook database, creating it if necessary.

    Args:
        db_path: Path to database file, or ":memory:"

    Returns:
        SQLite connection with row factory set to sqlite3.Row

    Raises:
        DatabaseError: If the file cannot be opened or the schema created
    """
    target = str(db_path)
    if target != MEMORY_DB:
        # Ensure directory exists
        Path(target).parent.mkdir(parents=True, exist_ok=True)

    with translate_errors("open_db"):
        conn = sqlite3.connect(target)
        conn.row_factory = sqlite3.Row
        try:
            create_schema(conn)
        except sqlite3.Error:
            conn.close()
            raise

    logger.info("database.opened", path=target)
    return conn


def create_schema(conn: sqlite3.Connection) -> None:
    """Create the five gradebook tables.

    Uses IF NOT EXISTS for idempotency.
    """
    for table, columns in SCHEMA.items():
        conn.execute(f"CREATE TABLE IF NOT EXISTS {table} ({columns})")
    conn.commit()


def close_db(conn: sqlite3.Connection | None) -> None:
    """Close the connection if it is open."""
    if conn is None:
        return

    with translate_errors("close_db"):
        conn.close()

    logger.info("database.closed")
