"""Fixtures for gradebook tests."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from gradebook.config.app_config import DB_PATH_ENV, clear_config_cache
from gradebook.core.gradebook import Gradebook
from gradebook.db.database import close_db, open_db
from gradebook.db.records import Exercise, User


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Never touch the configured database from tests."""
    clear_config_cache()
    monkeypatch.setenv(DB_PATH_ENV, str(tmp_path / "db" / "env.db"))
    yield
    clear_config_cache()


@pytest.fixture
def db_path(tmp_path) -> Path:
    """Path to a fresh database file."""
    return tmp_path / "db" / "gradebook.db"


@pytest.fixture
def conn(db_path):
    """Open connection with the schema created."""
    connection = open_db(db_path)
    yield connection
    close_db(connection)


@pytest.fixture
def gradebook(db_path):
    """Open Gradebook facade."""
    gb = Gradebook()
    gb.open_db(db_path)
    yield gb
    gb.close_db()


@pytest.fixture
def alice() -> User:
    return User(username="alice", firstname="Alice", lastname="Liddell")


@pytest.fixture
def sample_exercise() -> Exercise:
    """Exercise 1 with three questions (10 points total)."""
    exercise = Exercise(
        id=1,
        name="Recursion",
        due_date=datetime(2026, 11, 1, 23, 59, tzinfo=timezone.utc),
    )
    exercise.add_question("Factorial", "Write factorial recursively", 3)
    exercise.add_question("Fibonacci", "Write fibonacci recursively", 3)
    exercise.add_question("Hanoi", "Solve the towers of Hanoi", 4)
    return exercise
