"""Tests for the Gradebook facade."""

from datetime import datetime, timezone

import pytest

from gradebook import DatabaseError, Exercise, Gradebook, Question, Submission, User
from gradebook.config.app_config import DB_PATH_ENV


class TestConnection:
    """Tests for open/close."""

    def test_open_sets_db(self, db_path):
        gb = Gradebook()
        assert gb.db is None

        conn = gb.open_db(db_path)

        assert gb.db is conn
        gb.close_db()
        assert gb.db is None

    def test_close_twice_is_harmless(self, gradebook):
        gradebook.close_db()
        gradebook.close_db()

    def test_operations_require_open_db(self, alice):
        """Calling an operation while closed raises DatabaseError."""
        gb = Gradebook()

        with pytest.raises(DatabaseError):
            gb.add_or_update_user(alice, "rabbit")
        with pytest.raises(DatabaseError):
            gb.load_exercises()

    def test_default_path_comes_from_config(self, tmp_path, monkeypatch):
        """open_db() without a path uses GRADEBOOK_DB_PATH / the config file."""
        target = tmp_path / "from_env.db"
        monkeypatch.setenv(DB_PATH_ENV, str(target))

        with Gradebook() as gb:
            gb.open_db()

        assert target.exists()

    def test_context_manager_closes(self, db_path):
        with Gradebook() as gb:
            gb.open_db(db_path)
        assert gb.db is None


class TestPersistence:
    """Writes are committed and survive reopening."""

    def test_data_survives_reopen(self, db_path, alice, sample_exercise):
        with Gradebook() as gb:
            gb.open_db(db_path)
            user_id = gb.add_or_update_user(alice, "rabbit")
            gb.add_exercise(sample_exercise)
            gb.store_submission(
                Submission(
                    None,
                    alice,
                    sample_exercise,
                    datetime(2026, 10, 2, tzinfo=timezone.utc),
                    [3.0, 3.0, 4.0],
                )
            )

        with Gradebook() as gb:
            gb.open_db(db_path)
            assert gb.verify_login("alice", "rabbit")
            assert gb.add_or_update_user(User("alice"), "rabbit") == user_id
            exercises = gb.load_exercises()
            assert [e.name for e in exercises] == ["Recursion"]
            best = gb.get_best_submission(alice, exercises[0])
            assert best.grades == [3.0, 3.0, 4.0]


class TestWorkflow:
    """End-to-end flow through the facade."""

    def test_full_flow(self, gradebook, alice, sample_exercise):
        gradebook.add_or_update_user(alice, "rabbit")
        assert gradebook.add_exercise(sample_exercise) == 1
        assert gradebook.add_exercise(sample_exercise) == -1

        gradebook.store_submission(
            Submission(None, alice, sample_exercise, datetime(2026, 10, 1, tzinfo=timezone.utc), [3, 3, 4])
        )
        gradebook.store_submission(
            Submission(None, alice, sample_exercise, datetime(2026, 10, 5, tzinfo=timezone.utc), [1, 0, 0])
        )

        assert gradebook.get_last_submission(alice, sample_exercise).grades == [1.0, 0.0, 0.0]
        assert gradebook.get_best_submission(alice, sample_exercise).grades == [3.0, 3.0, 4.0]

    def test_store_for_unknown_user(self, gradebook, sample_exercise):
        gradebook.add_exercise(sample_exercise)
        submission = Submission(
            None, User("ghost"), sample_exercise, datetime(2026, 10, 1, tzinfo=timezone.utc), [1, 1, 1]
        )

        assert gradebook.store_submission(submission) == -1

    def test_add_question_after_exercise(self, gradebook, sample_exercise):
        gradebook.add_exercise(sample_exercise)

        question_id = gradebook.add_question(Question("Bonus", None, 1), 1)

        assert question_id == 4
        assert len(gradebook.load_exercises()[0].questions) == 4

    def test_exercise_helpers(self):
        exercise = Exercise(id=3, name="Graphs", due_date=datetime(2026, 1, 1, tzinfo=timezone.utc))
        question = exercise.add_question("BFS", "Breadth first", 2)
        exercise.add_question("DFS", "Depth first", 3)

        assert question.id is None
        assert exercise.total_points == 5
