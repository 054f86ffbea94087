"""Tests for database connection and schema."""

import sqlite3

import pytest

from gradebook.db.database import (
    MEMORY_DB,
    SCHEMA,
    DatabaseError,
    close_db,
    create_schema,
    open_db,
    translate_errors,
)


def _columns(conn, table):
    return [
        (row["name"], row["type"], row["pk"])
        for row in conn.execute(f"PRAGMA table_info({table})").fetchall()
    ]


class TestOpenDb:
    """Tests for open_db."""

    def test_creates_file_and_parent_dirs(self, tmp_path):
        """Creates the database file, including missing directories."""
        db_path = tmp_path / "nested" / "dir" / "gradebook.db"

        conn = open_db(db_path)
        close_db(conn)

        assert db_path.exists()

    def test_creates_all_tables(self, conn):
        """All five tables exist after opening."""
        tables = {
            row["name"]
            for row in conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table'"
            ).fetchall()
        }
        assert {"User", "Exercise", "Question", "Submission", "QuestionGrade"} <= tables

    def test_in_memory_database(self):
        """Accepts :memory: without touching the filesystem."""
        conn = open_db(MEMORY_DB)
        try:
            assert conn.execute("SELECT COUNT(*) FROM User").fetchone()[0] == 0
        finally:
            close_db(conn)

    def test_row_factory_is_row(self, conn):
        """Rows can be accessed by column name."""
        row = conn.execute("SELECT 1 AS one").fetchone()
        assert row["one"] == 1

    def test_reopen_keeps_data(self, db_path):
        """Opening an existing database keeps its rows."""
        conn = open_db(db_path)
        conn.execute("INSERT INTO Exercise (ExerciseId, Name, DueDate) VALUES (7, 'x', 0)")
        conn.commit()
        close_db(conn)

        conn = open_db(db_path)
        try:
            row = conn.execute("SELECT Name FROM Exercise WHERE ExerciseId = 7").fetchone()
            assert row["Name"] == "x"
        finally:
            close_db(conn)

    def test_unopenable_path_raises_database_error(self, tmp_path):
        """A directory in place of the file surfaces as DatabaseError."""
        directory = tmp_path / "is_a_dir"
        directory.mkdir()

        with pytest.raises(DatabaseError):
            open_db(directory)


class TestSchema:
    """Tests for the persisted schema."""

    def test_create_schema_is_idempotent(self, conn):
        """Running schema creation twice is harmless."""
        create_schema(conn)
        create_schema(conn)

    def test_user_columns(self, conn):
        assert _columns(conn, "User") == [
            ("UserId", "INTEGER", 1),
            ("Username", "TEXT", 0),
            ("Firstname", "TEXT", 0),
            ("Lastname", "TEXT", 0),
            ("Password", "TEXT", 0),
        ]

    def test_question_composite_key(self, conn):
        """Question is keyed by (ExerciseId, QuestionId)."""
        columns = _columns(conn, "Question")
        assert [c[0] for c in columns] == ["ExerciseId", "QuestionId", "Name", "Desc", "Points"]
        assert [c[2] for c in columns] == [1, 2, 0, 0, 0]

    def test_question_grade_columns(self, conn):
        assert _columns(conn, "QuestionGrade") == [
            ("SubmissionId", "INTEGER", 1),
            ("QuestionId", "INTEGER", 2),
            ("Grade", "REAL", 0),
        ]

    def test_username_is_unique(self, conn):
        """Duplicate usernames are rejected by the schema."""
        conn.execute("INSERT INTO User (Username) VALUES ('bob')")
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute("INSERT INTO User (Username) VALUES ('bob')")

    def test_schema_lists_five_tables(self):
        assert list(SCHEMA) == ["User", "Exercise", "Question", "Submission", "QuestionGrade"]


class TestErrors:
    """Tests for error translation."""

    def test_translate_errors_wraps_sqlite_errors(self):
        """sqlite3 errors become DatabaseError with the original as cause."""
        with pytest.raises(DatabaseError) as exc:
            with translate_errors("broken"):
                raise sqlite3.OperationalError("no such table: Nope")

        assert "broken" in str(exc.value)
        assert isinstance(exc.value.__cause__, sqlite3.OperationalError)

    def test_translate_errors_passes_other_errors(self):
        """Non-database errors propagate unchanged."""
        with pytest.raises(KeyError):
            with translate_errors("other"):
                raise KeyError("x")

    def test_close_none_is_noop(self):
        close_db(None)
