"""Timestamp formatting for API payloads."""

from datetime import datetime


def iso_or_none(dt: datetime | None) -> str | None:
    """ISO-8601 string for a DB timestamp; NULL columns stay None."""
    return dt.isoformat() if dt is not None else None
