"""Timestamp conversion helpers.

DueDate and SubmissionTime are stored as integer milliseconds since the
Unix epoch (UTC). Naive datetimes are treated as UTC.
"""

from __future__ import annotations

from datetime import datetime, timezone


def to_epoch_millis(value: datetime) -> int:
    """Convert a datetime to epoch milliseconds."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(round(value.timestamp() * 1000))


def from_epoch_millis(millis: int | None) -> datetime | None:
    """Convert epoch milliseconds to an aware UTC datetime."""
    if millis is None:
        return None
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
