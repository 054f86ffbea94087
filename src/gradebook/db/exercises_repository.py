"""Repository functions for the Exercise and Question tables."""

from __future__ import annotations

import sqlite3

import structlog

from gradebook.db.database import translate_errors
from gradebook.db.records import Exercise, Question
from gradebook.utils.timeconv import from_epoch_millis, to_epoch_millis

logger = structlog.get_logger(__name__)

# Returned by add_exercise when the exercise id is already taken
EXERCISE_EXISTS = -1


def exercise_exists(conn: sqlite3.Connection, exercise_id: int) -> bool:
    """Check whether an exercise id is already stored."""
    with translate_errors("exercise_exists"):
        row = conn.execute(
            "SELECT ExerciseId FROM Exercise WHERE ExerciseId = ?", (exercise_id,)
        ).fetchone()
    return row is not None


def add_exercise(conn: sqlite3.Connection, exercise: Exercise) -> int:
    """Add an exercise and its questions.

    The exercise row is inserted first, then one row per question in list
    order. The statements do not share a transaction.

    Returns:
        The exercise id, or EXERCISE_EXISTS if that id is already stored
    """
    if exercise_exists(conn, exercise.id):
        logger.info("exercises.duplicate", exercise_id=exercise.id)
        return EXERCISE_EXISTS

    with translate_errors("add_exercise"):
        conn.execute(
            "INSERT INTO Exercise (ExerciseId, Name, DueDate) VALUES (?, ?, ?)",
            (exercise.id, exercise.name, to_epoch_millis(exercise.due_date)),
        )

    for question in exercise.questions:
        add_question(conn, question, exercise.id)

    logger.debug(
        "exercises.inserted",
        exercise_id=exercise.id,
        questions_count=len(exercise.questions),
    )
    return exercise.id


def add_question(conn: sqlite3.Connection, question: Question, exercise_id: int) -> int:
    """Add a question to an exercise.

    QuestionId is the next free id within the exercise, starting at 1.

    Returns:
        The assigned QuestionId (also set on `question.id`)
    """
    with translate_errors("add_question"):
        conn.execute(
            """
            INSERT INTO Question (ExerciseId, QuestionId, Name, Desc, Points)
            VALUES (
                ?,
                (SELECT COALESCE(MAX(QuestionId), 0) + 1 FROM Question WHERE ExerciseId = ?),
                ?, ?, ?
            )
            """,
            (exercise_id, exercise_id, question.name, question.desc, question.points),
        )
        row = conn.execute(
            "SELECT MAX(QuestionId) AS QuestionId FROM Question WHERE ExerciseId = ?",
            (exercise_id,),
        ).fetchone()

    question.id = row["QuestionId"]
    return question.id


def get_question_ids(conn: sqlite3.Connection, exercise_id: int) -> list[int]:
    """Get the stored question ids of an exercise in ascending order."""
    with translate_errors("get_question_ids"):
        rows = conn.execute(
            "SELECT QuestionId FROM Question WHERE ExerciseId = ? ORDER BY QuestionId",
            (exercise_id,),
        ).fetchall()
    return [row["QuestionId"] for row in rows]


def load_exercises(conn: sqlite3.Connection) -> list[Exercise]:
    """Load all exercises sorted by id, with their questions.

    Returns:
        List of Exercise, questions ordered by QuestionId
    """
    with translate_errors("load_exercises"):
        exercise_rows = conn.execute(
            "SELECT ExerciseId, Name, DueDate FROM Exercise ORDER BY ExerciseId"
        ).fetchall()
        question_rows = conn.execute(
            """
            SELECT ExerciseId, QuestionId, Name, Desc, Points
            FROM Question
            ORDER BY ExerciseId, QuestionId
            """
        ).fetchall()

    exercises: dict[int, Exercise] = {}
    for row in exercise_rows:
        exercises[row["ExerciseId"]] = Exercise(
            id=row["ExerciseId"],
            name=row["Name"],
            due_date=from_epoch_millis(row["DueDate"]),
        )

    for row in question_rows:
        exercise = exercises.get(row["ExerciseId"])
        if exercise is None:
            # Orphan question rows are ignored
            continue
        exercise.questions.append(
            Question(
                name=row["Name"],
                desc=row["Desc"],
                points=row["Points"],
                id=row["QuestionId"],
            )
        )

    return list(exercises.values())
