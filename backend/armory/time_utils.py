from __future__ import annotations

from datetime import datetime, time, timezone
from typing import Optional


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 datetime string and normalize to UTC-naive datetime.

    - None / "" -> None
    - "YYYY-MM-DD" -> midnight of that day
    - "YYYY-MM-DDTHH:MM" (naive) is interpreted as UTC
    - "...Z" or "...+/-HH:MM" is converted to UTC and tzinfo is stripped
    """
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None

    # Accept trailing Z
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    dt = datetime.fromisoformat(s)

    if dt.tzinfo is None:
        return dt

    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_date_range(start: Optional[str], end: Optional[str]) -> tuple[Optional[datetime], Optional[datetime]]:
    """
    Parse a start/end query window.

    A date-only end bound ("2024-03-31") covers the whole day, so the
    window stays inclusive the way the dashboard date pickers expect.
    Raises ValueError on malformed input.
    """
    start_dt = parse_iso_datetime(start)
    end_dt = parse_iso_datetime(end)
    if end_dt is not None and end is not None and len(end.strip()) == 10:
        end_dt = datetime.combine(end_dt.date(), time.max)
    return start_dt, end_dt


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with millisecond precision and trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc)
    return dt_utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")
