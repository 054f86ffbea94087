"""Gradebook facade.

Holds the single database connection of the process and exposes the
user, exercise and submission operations. Each write is committed as
soon as it completes.

Usage:
    with Gradebook() as gb:
        gb.open_db("db/gradebook.db")
        user_id = gb.add_or_update_user(User("ada", "Ada", "Lovelace"), "secret")
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from gradebook.config.app_config import get_db_path
from gradebook.db import exercises_repository, submissions_repository, users_repository
from gradebook.db.database import DatabaseError, close_db, open_db, translate_errors
from gradebook.db.records import Exercise, Question, Submission, User


class Gradebook:
    """Grading-records store over one SQLite database."""

    def __init__(self) -> None:
        # None while the database is closed
        self.db: sqlite3.Connection | None = None

    def __enter__(self) -> Gradebook:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close_db()

    # ---------------------------------------------------------------------
    # Connection
    # ---------------------------------------------------------------------

    def open_db(self, db_path: Path | str | None = None) -> sqlite3.Connection:
        """Open the database, creating file and tables if necessary.

        Args:
            db_path: Database file; defaults to the configured path

        Returns:
            The new connection
        """
        if self.db is not None:
            self.close_db()
        self.db = open_db(db_path if db_path is not None else get_db_path())
        return self.db

    def close_db(self) -> None:
        """Close the database if it is open."""
        conn, self.db = self.db, None
        close_db(conn)

    def _conn(self) -> sqlite3.Connection:
        if self.db is None:
            raise DatabaseError("Database is not open")
        return self.db

    def _commit(self) -> None:
        with translate_errors("commit"):
            self._conn().commit()

    # ---------------------------------------------------------------------
    # Users
    # ---------------------------------------------------------------------

    def add_or_update_user(self, user: User, password: str) -> int:
        """Add a user or update the one with the same username.

        Returns:
            The user id
        """
        user_id = users_repository.add_or_update_user(self._conn(), user, password)
        self._commit()
        return user_id

    def verify_login(self, username: str, password: str) -> bool:
        """Check a user's credentials.

        Note: this is totally insecure, passwords are kept in plaintext.
        """
        return users_repository.verify_login(self._conn(), username, password)

    # ---------------------------------------------------------------------
    # Exercises
    # ---------------------------------------------------------------------

    def add_exercise(self, exercise: Exercise) -> int:
        """Add an exercise with its questions.

        Returns:
            The exercise id, or -1 if the id already exists
        """
        try:
            return exercises_repository.add_exercise(self._conn(), exercise)
        finally:
            # Rows written before a failure stay committed
            self._commit_if_open()

    def add_question(self, question: Question, exercise_id: int) -> int:
        """Add one question to an existing exercise."""
        question_id = exercises_repository.add_question(self._conn(), question, exercise_id)
        self._commit()
        return question_id

    def load_exercises(self) -> list[Exercise]:
        """All exercises, sorted by id."""
        return exercises_repository.load_exercises(self._conn())

    # ---------------------------------------------------------------------
    # Submissions
    # ---------------------------------------------------------------------

    def store_submission(self, submission: Submission) -> int:
        """Store a submission.

        Returns:
            The submission id, or -1 if the user doesn't exist
        """
        submission_id = submissions_repository.store_submission(self._conn(), submission)
        self._commit()
        return submission_id

    def get_last_submission(self, user: User, exercise: Exercise) -> Submission | None:
        """Latest submission of the exercise by the user, or None."""
        return submissions_repository.get_last_submission(self._conn(), user, exercise)

    def get_best_submission(self, user: User, exercise: Exercise) -> Submission | None:
        """Submission with the highest total grade, or None."""
        return submissions_repository.get_best_submission(self._conn(), user, exercise)

    def _commit_if_open(self) -> None:
        if self.db is not None:
            self._commit()
