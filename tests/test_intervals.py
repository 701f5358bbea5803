from __future__ import annotations

from datetime import date, datetime

import pytest

from resort.domain.errors import ValidationError
from resort.domain.intervals import (
    overlaps,
    parse_date,
    parse_interval,
    parse_optional_interval,
    would_overlap_any,
)
from resort.domain.models import DateInterval


def interval(start_day: int, end_day: int) -> DateInterval:
    return DateInterval(date(2026, 3, start_day), date(2026, 3, end_day))


def test_overlap_is_symmetric() -> None:
    a = interval(1, 5)
    b = interval(3, 8)
    assert overlaps(a, b) is True
    assert overlaps(b, a) is True


def test_interval_overlaps_itself() -> None:
    a = interval(10, 12)
    assert overlaps(a, a) is True


def test_touching_intervals_overlap() -> None:
    # Inclusive boundaries: a checkout day is still a conflicting day.
    assert overlaps(interval(1, 5), interval(5, 10)) is True
    assert overlaps(interval(5, 10), interval(1, 5)) is True


def test_disjoint_intervals_do_not_overlap() -> None:
    assert overlaps(interval(1, 4), interval(5, 10)) is False


def test_contained_interval_overlaps() -> None:
    assert overlaps(interval(1, 20), interval(5, 6)) is True


def test_would_overlap_any() -> None:
    existing = [interval(1, 3), interval(10, 12)]
    assert would_overlap_any(interval(4, 9), existing) is False
    assert would_overlap_any(interval(9, 10), existing) is True
    assert would_overlap_any(interval(4, 9), []) is False


def test_empty_or_reversed_interval_is_rejected() -> None:
    with pytest.raises(ValidationError):
        DateInterval(date(2026, 3, 5), date(2026, 3, 5))
    with pytest.raises(ValidationError):
        DateInterval(date(2026, 3, 5), date(2026, 3, 1))


def test_interval_days_and_contains() -> None:
    stay = interval(1, 4)
    assert stay.days == 3
    assert stay.contains(date(2026, 3, 1))
    assert stay.contains(date(2026, 3, 4))
    assert not stay.contains(date(2026, 3, 5))


def test_parse_date_accepts_iso_strings_and_datetimes() -> None:
    assert parse_date("2026-03-01") == date(2026, 3, 1)
    assert parse_date("2026-03-01T15:30:00Z") == date(2026, 3, 1)
    assert parse_date(datetime(2026, 3, 1, 9, 0)) == date(2026, 3, 1)
    assert parse_date(date(2026, 3, 1)) == date(2026, 3, 1)


def test_parse_date_rejects_garbage() -> None:
    with pytest.raises(ValidationError, match="check_in must follow YYYY-MM-DD format"):
        parse_date("01/03/2026", "check_in")


def test_parse_interval_requires_start_before_end() -> None:
    with pytest.raises(ValidationError, match="check_in must be before check_out"):
        parse_interval("2026-03-05", "2026-03-05", start_field="check_in", end_field="check_out")
    assert parse_interval("2026-03-01", "2026-03-05") == interval(1, 5)


def test_parse_optional_interval_needs_both_bounds() -> None:
    assert parse_optional_interval(None, None) is None
    assert parse_optional_interval("2026-03-01", "2026-03-02") == interval(1, 2)
    with pytest.raises(ValidationError):
        parse_optional_interval("2026-03-01", None)
