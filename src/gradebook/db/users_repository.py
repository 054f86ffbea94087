"""Repository functions for the User table.

Note: passwords are stored and compared in plaintext. This is insecure;
real deployments must store only a password hash.
"""

from __future__ import annotations

import sqlite3

import structlog

from gradebook.db.database import translate_errors
from gradebook.db.records import User

logger = structlog.get_logger(__name__)


def get_user_id(conn: sqlite3.Connection, username: str) -> int | None:
    """Get the UserId for a username.

    Returns:
        UserId if found, None otherwise
    """
    with translate_errors("get_user_id"):
        row = conn.execute(
            "SELECT UserId FROM User WHERE Username = ?", (username,)
        ).fetchone()

    if row is None:
        return None
    return row["UserId"]


def add_or_update_user(conn: sqlite3.Connection, user: User, password: str) -> int:
    """Add a user, or update an existing one with the same username.

    An existing user keeps its id; its password and first/last name are
    overwritten.

    Args:
        conn: Open connection
        user: User to store (`user.id` is ignored on input and set on output)
        password: Plaintext password

    Returns:
        The UserId
    """
    user_id = get_user_id(conn, user.username)

    with translate_errors("add_or_update_user"):
        if user_id is not None:
            conn.execute(
                "UPDATE User SET Password = ?, Firstname = ?, Lastname = ? WHERE Username = ?",
                (password, user.firstname, user.lastname, user.username),
            )
            logger.debug("users.updated", user_id=user_id, username=user.username)
        else:
            cursor = conn.execute(
                "INSERT INTO User (Username, Firstname, Lastname, Password) VALUES (?, ?, ?, ?)",
                (user.username, user.firstname, user.lastname, password),
            )
            user_id = cursor.lastrowid
            logger.debug("users.created", user_id=user_id, username=user.username)

    user.id = user_id
    return user_id


def verify_login(conn: sqlite3.Connection, username: str, password: str) -> bool:
    """Verify a user's login credentials.

    Returns:
        True if the user exists and the password matches exactly
    """
    with translate_errors("verify_login"):
        row = conn.execute(
            "SELECT Password FROM User WHERE Username = ?", (username,)
        ).fetchone()

    if row is None:
        return False

    return row["Password"] == password
