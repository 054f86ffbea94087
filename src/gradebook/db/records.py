"""In-memory records mapped to gradebook tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class User:
    """A gradebook user."""

    username: str
    firstname: str | None = None
    lastname: str | None = None
    id: int | None = None


@dataclass
class Question:
    """An exercise question.

    `points` is the maximum grade for the question. `id` is the QuestionId
    within the owning exercise, assigned when the question is stored.
    """

    name: str
    desc: str | None
    points: int
    id: int | None = None


@dataclass
class Exercise:
    """An exercise definition with its ordered questions."""

    id: int
    name: str
    due_date: datetime
    questions: list[Question] = field(default_factory=list)

    def add_question(self, name: str, desc: str | None, points: int) -> Question:
        """Append a new question and return it."""
        question = Question(name=name, desc=desc, points=points)
        self.questions.append(question)
        return question

    @property
    def total_points(self) -> int:
        """Sum of the maximum points over all questions."""
        return sum(q.points for q in self.questions)


@dataclass
class Submission:
    """One attempt by a user at an exercise.

    `grades` holds one grade per question, in question-id order.
    """

    id: int | None
    user: User
    exercise: Exercise
    submission_time: datetime
    grades: list[float]

    @property
    def total_grade(self) -> float:
        """Sum of all question grades."""
        return sum(self.grades)
