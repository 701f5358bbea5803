"""Date-range overlap rules shared by bookings, maintenance and pricing."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable

from resort.domain.errors import ValidationError
from resort.domain.models import DateInterval


def _require_well_formed(interval: DateInterval) -> None:
    if interval.start >= interval.end:
        raise ValidationError("interval start must be before end")


def overlaps(a: DateInterval, b: DateInterval) -> bool:
    """True when the intervals share at least one day.

    Boundaries are inclusive: a stay ending on the 5th conflicts with one
    starting on the 5th.
    """
    _require_well_formed(a)
    _require_well_formed(b)
    return a.start <= b.end and a.end >= b.start


def would_overlap_any(candidate: DateInterval, existing: Iterable[DateInterval]) -> bool:
    return any(overlaps(candidate, interval) for interval in existing)


def parse_date(value: str | date, field_name: str = "date") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError as exc:
        raise ValidationError(
            f"{field_name} must follow YYYY-MM-DD format"
        ) from exc


def parse_interval(
    start: str | date,
    end: str | date,
    *,
    start_field: str = "start_date",
    end_field: str = "end_date",
) -> DateInterval:
    """Build an interval from ISO-8601 input, rejecting empty ranges."""
    start_day = parse_date(start, start_field)
    end_day = parse_date(end, end_field)
    if start_day >= end_day:
        raise ValidationError(f"{start_field} must be before {end_field}")
    return DateInterval(start=start_day, end=end_day)


def parse_optional_interval(
    start: str | date | None,
    end: str | date | None,
    *,
    start_field: str = "start_date",
    end_field: str = "end_date",
) -> DateInterval | None:
    """Interval for partial updates: both bounds or neither."""
    if start is None and end is None:
        return None
    if start is None or end is None:
        raise ValidationError(f"{start_field} and {end_field} must be provided together")
    return parse_interval(start, end, start_field=start_field, end_field=end_field)
