"""Timestamp parsing shared by the API, services and stores."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from services.errors import InvalidInputError


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    candidate = value.strip()
    if not candidate:
        raise ValueError("Timestamp is empty.")

    if candidate.endswith(("Z", "z")):
        candidate = candidate[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise ValueError("Invalid timestamp format") from exc

    return ensure_utc(parsed)


def parse_date_param(value: Optional[str], name: str = "date") -> Optional[datetime]:
    """Parse an optional ISO-8601 query parameter into a UTC instant."""
    if value is None:
        return None
    try:
        return parse_timestamp(value)
    except ValueError as exc:
        raise InvalidInputError(f"Invalid {name} {value!r}: expected an ISO-8601 date-time.") from exc
