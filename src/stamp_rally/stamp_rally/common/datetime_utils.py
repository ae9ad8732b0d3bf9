from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Optional


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_utc() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """Format as ISO-8601 UTC with millisecond precision, e.g. 2024-03-10T09:15:00.000Z."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def start_of_day_utc(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def end_of_day_utc(day: date) -> datetime:
    return datetime.combine(day, time.max, tzinfo=timezone.utc)


def utc_day_key(value: datetime) -> str:
    """Calendar day (UTC) used as histogram bucket."""
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d")


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    if value is None or not value.strip():
        return None
    return parse_iso_date(value.strip())
