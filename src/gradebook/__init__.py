"""Gradebook - a grading-records store for users, exercises and submissions."""

from gradebook.core.gradebook import Gradebook
from gradebook.db.database import DatabaseError
from gradebook.db.records import Exercise, Question, Submission, User

__version__ = "0.1.0"

__all__ = [
    "DatabaseError",
    "Exercise",
    "Gradebook",
    "Question",
    "Submission",
    "User",
    "__version__",
]
