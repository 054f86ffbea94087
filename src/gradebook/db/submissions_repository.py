"""Repository functions for the Submission and QuestionGrade tables.

Submission queries take three positional parameters:
1. username
2. exercise id
3. limit on the number of rows (the exercise's question count)

and return one row per question of the selected submission, sorted by
QuestionId, with columns SubmissionId, QuestionId, Grade and SubmissionTime.
"""

from __future__ import annotations

import sqlite3

import structlog

from gradebook.db.database import translate_errors
from gradebook.db.exercises_repository import exercise_exists, get_question_ids
from gradebook.db.records import Exercise, Submission, User
from gradebook.db.users_repository import get_user_id
from gradebook.utils.timeconv import from_epoch_millis, to_epoch_millis

logger = structlog.get_logger(__name__)

# Returned by store_submission when the submitting user is not stored
USER_NOT_FOUND = -1

# Submission id meaning "assign a new id"
_UNASSIGNED_ID = -1

_GRADES_FOR_SUBMISSION = """
    SELECT s.SubmissionId, qg.QuestionId, qg.Grade, s.SubmissionTime
    FROM QuestionGrade qg
    JOIN Submission s ON s.SubmissionId = qg.SubmissionId
    WHERE s.SubmissionId = ({selector})
    ORDER BY qg.QuestionId
    LIMIT ?
"""

_LATEST_SELECTOR = """
    SELECT s2.SubmissionId
    FROM Submission s2
    JOIN User u ON u.UserId = s2.UserId
    WHERE u.Username = ? AND s2.ExerciseId = ?
    ORDER BY s2.SubmissionTime DESC, s2.SubmissionId DESC
    LIMIT 1
"""

# Totals are compared rounded to 6 decimals; equal totals: the earliest
# submission wins
_BEST_SELECTOR = """
    SELECT s2.SubmissionId
    FROM Submission s2
    JOIN User u ON u.UserId = s2.UserId
    JOIN QuestionGrade g ON g.SubmissionId = s2.SubmissionId
    WHERE u.Username = ? AND s2.ExerciseId = ?
    GROUP BY s2.SubmissionId
    ORDER BY ROUND(SUM(g.Grade), 6) DESC, s2.SubmissionTime ASC, s2.SubmissionId ASC
    LIMIT 1
"""


class SubmissionValidationError(ValueError):
    """Submission grades do not match the exercise's questions."""

    pass


def last_submission_grades_query() -> str:
    """SQL selecting the grades of the latest submission."""
    return _GRADES_FOR_SUBMISSION.format(selector=_LATEST_SELECTOR)


def best_submission_grades_query() -> str:
    """SQL selecting the grades of the submission with the highest total."""
    return _GRADES_FOR_SUBMISSION.format(selector=_BEST_SELECTOR)


def store_submission(conn: sqlite3.Connection, submission: Submission) -> int:
    """Store a submission and its per-question grades.

    `submission.id` is used as SubmissionId unless it is None or -1.
    Grades are matched, in order, to the exercise's stored question ids.

    Returns:
        The submission id, or USER_NOT_FOUND if the user is not stored

    Raises:
        SubmissionValidationError: If the exercise is not stored, or the grade
            count differs from its stored question count
        DatabaseError: On database failure (e.g. a duplicate SubmissionId)
    """
    user_id = get_user_id(conn, submission.user.username)
    if user_id is None:
        logger.info("submissions.unknown_user", username=submission.user.username)
        return USER_NOT_FOUND

    exercise_id = submission.exercise.id
    if not exercise_exists(conn, exercise_id):
        raise SubmissionValidationError(f"Exercise {exercise_id} is not stored")

    question_ids = get_question_ids(conn, exercise_id)
    if len(question_ids) != len(submission.grades):
        raise SubmissionValidationError(
            f"Exercise {exercise_id} has {len(question_ids)} questions, "
            f"got {len(submission.grades)} grades"
        )

    submission_id = submission.id
    if submission_id == _UNASSIGNED_ID:
        submission_id = None

    with translate_errors("store_submission"):
        cursor = conn.execute(
            """
            INSERT INTO Submission (SubmissionId, UserId, ExerciseId, SubmissionTime)
            VALUES (?, ?, ?, ?)
            """,
            (
                submission_id,
                user_id,
                exercise_id,
                to_epoch_millis(submission.submission_time),
            ),
        )
        submission_id = cursor.lastrowid

        conn.executemany(
            "INSERT INTO QuestionGrade (SubmissionId, QuestionId, Grade) VALUES (?, ?, ?)",
            [
                (submission_id, question_id, float(grade))
                for question_id, grade in zip(question_ids, submission.grades)
            ],
        )

    submission.id = submission_id
    submission.user.id = user_id

    logger.debug(
        "submissions.stored",
        submission_id=submission_id,
        user_id=user_id,
        exercise_id=exercise_id,
    )
    return submission_id


def get_submission(
    conn: sqlite3.Connection,
    user: User,
    exercise: Exercise,
    query: str,
) -> Submission | None:
    """Run a submission query and fold its rows into a Submission.

    Args:
        conn: Open connection
        user: Submitting user (matched by username)
        exercise: Exercise; its question count bounds the rows read
        query: One of the *_submission_grades_query() statements

    Returns:
        Submission, or None if the user has no submission for the exercise
    """
    question_count = len(exercise.questions)

    with translate_errors("get_submission"):
        rows = conn.execute(
            query, (user.username, exercise.id, question_count)
        ).fetchall()

    if not rows:
        return None

    first = rows[0]
    grades = [0.0] * question_count
    for i, row in enumerate(rows):
        grades[i] = row["Grade"]

    return Submission(
        id=first["SubmissionId"],
        user=user,
        exercise=exercise,
        submission_time=from_epoch_millis(first["SubmissionTime"]),
        grades=grades,
    )


def get_last_submission(
    conn: sqlite3.Connection, user: User, exercise: Exercise
) -> Submission | None:
    """Get the latest submission of an exercise by a user."""
    return get_submission(conn, user, exercise, last_submission_grades_query())


def get_best_submission(
    conn: sqlite3.Connection, user: User, exercise: Exercise
) -> Submission | None:
    """Get the submission with the highest total grade."""
    return get_submission(conn, user, exercise, best_submission_grades_query())
