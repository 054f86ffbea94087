"""CLI commands for the gradebook.

Commands:
- init-db: Create the database and its tables
- add-user / login: User management
- add-exercise / list-exercises: Exercise management
- submit / last / best: Submission storage and queries
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

import typer
import yaml
from rich.console import Console
from rich.table import Table

from gradebook import __version__
from gradebook.core.gradebook import Gradebook
from gradebook.db.database import DatabaseError
from gradebook.db.exercises_repository import EXERCISE_EXISTS
from gradebook.db.records import Exercise, Submission, User
from gradebook.db.submissions_repository import USER_NOT_FOUND, SubmissionValidationError

app = typer.Typer(
    name="gradebook",
    help="Grading-records store for users, exercises and submissions.",
    no_args_is_help=True,
)

console = Console()


def _db_option():
    return typer.Option(None, "--db", help="Database file (default: configured path)")


@contextmanager
def _open_gradebook(db: Path | None) -> Generator[Gradebook, None, None]:
    """Open the gradebook, or exit with an error message."""
    gradebook = Gradebook()
    try:
        gradebook.open_db(db)
        yield gradebook
    except DatabaseError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)
    finally:
        gradebook.close_db()


def _parse_datetime(value: str) -> datetime:
    """Parse an ISO 8601 date/time, or exit."""
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        console.print(f"[red]✗ Invalid date: {value}[/red]")
        raise typer.Exit(code=1)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _find_exercise(gradebook: Gradebook, exercise_id: int) -> Exercise:
    """Load an exercise by id, or exit."""
    for exercise in gradebook.load_exercises():
        if exercise.id == exercise_id:
            return exercise
    console.print(f"[red]✗ Exercise not found: {exercise_id}[/red]")
    raise typer.Exit(code=1)


def _exercise_from_yaml(path: Path) -> Exercise:
    """Build an Exercise from a YAML definition file.

    Expected keys: id, name, due_date (ISO 8601) and a questions list of
    {name, desc, points}.
    """
    if not path.exists():
        console.print(f"[red]✗ File not found: {path}[/red]")
        raise typer.Exit(code=1)

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        due_date = data["due_date"]
        if not isinstance(due_date, datetime):
            due_date = _parse_datetime(str(due_date))
        exercise = Exercise(id=int(data["id"]), name=str(data["name"]), due_date=due_date)
        for q in data.get("questions", []):
            exercise.add_question(q["name"], q.get("desc"), int(q["points"]))
    except (yaml.YAMLError, KeyError, TypeError, ValueError) as e:
        console.print(f"[red]✗ Invalid exercise file {path}: {e}[/red]")
        raise typer.Exit(code=1)

    return exercise


def _print_submission(label: str, submission: Submission | None) -> None:
    if submission is None:
        console.print("[yellow]⚠ No submission found[/yellow]")
        raise typer.Exit(code=1)

    table = Table(title=f"{label} submission #{submission.id}")
    table.add_column("Question")
    table.add_column("Points", justify="right")
    table.add_column("Grade", justify="right")
    for question, grade in zip(submission.exercise.questions, submission.grades):
        table.add_row(question.name, str(question.points), f"{grade:g}")

    console.print(table)
    console.print(f"  [dim]submitted:[/dim] {submission.submission_time.isoformat()}")
    console.print(f"  [dim]total:[/dim]     {submission.total_grade:g}")


@app.command()
def version() -> None:
    """Show the gradebook version."""
    console.print(f"gradebook {__version__}")


@app.command(name="init-db")
def init_db(db: Path | None = _db_option()) -> None:
    """Create the database and its tables if they don't exist."""
    with _open_gradebook(db):
        console.print("[green]✓ Database ready[/green]")


@app.command(name="add-user")
def add_user(
    username: str = typer.Argument(..., help="Unique username"),
    firstname: str | None = typer.Option(None, "--first", help="First name"),
    lastname: str | None = typer.Option(None, "--last", help="Last name"),
    password: str = typer.Option(
        ..., "--password", "-p", prompt=True, hide_input=True, help="Password"
    ),
    db: Path | None = _db_option(),
) -> None:
    """Add a user, or update the existing user with that username."""
    with _open_gradebook(db) as gradebook:
        user_id = gradebook.add_or_update_user(User(username, firstname, lastname), password)
    console.print("[green]✓ User saved[/green]")
    console.print(f"  [dim]user_id:[/dim] {user_id}")


@app.command()
def login(
    username: str = typer.Argument(..., help="Username"),
    password: str = typer.Option(
        ..., "--password", "-p", prompt=True, hide_input=True, help="Password"
    ),
    db: Path | None = _db_option(),
) -> None:
    """Verify a user's credentials."""
    with _open_gradebook(db) as gradebook:
        ok = gradebook.verify_login(username, password)
    if not ok:
        console.print("[red]✗ Invalid username or password[/red]")
        raise typer.Exit(code=1)
    console.print("[green]✓ Login ok[/green]")


@app.command(name="add-exercise")
def add_exercise(
    file: Path = typer.Argument(..., help="YAML exercise definition"),
    db: Path | None = _db_option(),
) -> None:
    """Add an exercise and its questions from a YAML file."""
    exercise = _exercise_from_yaml(file)
    with _open_gradebook(db) as gradebook:
        result = gradebook.add_exercise(exercise)
    if result == EXERCISE_EXISTS:
        console.print(f"[yellow]⚠ Exercise {exercise.id} already exists[/yellow]")
        raise typer.Exit(code=1)
    console.print("[green]✓ Exercise added[/green]")
    console.print(f"  [dim]exercise_id:[/dim] {result}")
    console.print(f"  [dim]questions:[/dim]   {len(exercise.questions)}")


@app.command(name="list-exercises")
def list_exercises(db: Path | None = _db_option()) -> None:
    """List all exercises."""
    with _open_gradebook(db) as gradebook:
        exercises = gradebook.load_exercises()

    if not exercises:
        console.print("[dim]No exercises[/dim]")
        return

    table = Table(title="Exercises")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Due")
    table.add_column("Questions", justify="right")
    table.add_column("Points", justify="right")
    for exercise in exercises:
        table.add_row(
            str(exercise.id),
            exercise.name,
            exercise.due_date.isoformat() if exercise.due_date else "-",
            str(len(exercise.questions)),
            str(exercise.total_points),
        )
    console.print(table)


@app.command()
def submit(
    username: str = typer.Argument(..., help="Submitting user"),
    exercise_id: int = typer.Argument(..., help="Exercise id"),
    grades: list[float] = typer.Argument(..., help="One grade per question"),
    at: str | None = typer.Option(None, "--at", help="Submission time (ISO 8601, default now)"),
    db: Path | None = _db_option(),
) -> None:
    """Store a submission with one grade per question."""
    submission_time = _parse_datetime(at) if at else datetime.now(timezone.utc)

    with _open_gradebook(db) as gradebook:
        exercise = _find_exercise(gradebook, exercise_id)
        submission = Submission(
            id=None,
            user=User(username),
            exercise=exercise,
            submission_time=submission_time,
            grades=list(grades),
        )
        try:
            result = gradebook.store_submission(submission)
        except SubmissionValidationError as e:
            console.print(f"[red]✗ {e}[/red]")
            raise typer.Exit(code=1)

    if result == USER_NOT_FOUND:
        console.print(f"[red]✗ User not found: {username}[/red]")
        raise typer.Exit(code=1)
    console.print("[green]✓ Submission stored[/green]")
    console.print(f"  [dim]submission_id:[/dim] {result}")


@app.command()
def last(
    username: str = typer.Argument(..., help="Username"),
    exercise_id: int = typer.Argument(..., help="Exercise id"),
    db: Path | None = _db_option(),
) -> None:
    """Show the latest submission of an exercise by a user."""
    with _open_gradebook(db) as gradebook:
        exercise = _find_exercise(gradebook, exercise_id)
        submission = gradebook.get_last_submission(User(username), exercise)
    _print_submission("Latest", submission)


@app.command()
def best(
    username: str = typer.Argument(..., help="Username"),
    exercise_id: int = typer.Argument(..., help="Exercise id"),
    db: Path | None = _db_option(),
) -> None:
    """Show the highest-scoring submission of an exercise by a user."""
    with _open_gradebook(db) as gradebook:
        exercise = _find_exercise(gradebook, exercise_id)
        submission = gradebook.get_best_submission(User(username), exercise)
    _print_submission("Best", submission)


if __name__ == "__main__":
    app()
