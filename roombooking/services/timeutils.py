"""Helpers for "HH:MM" time-of-day values."""

from __future__ import annotations

import datetime as dt

from pydantic import ValidationError

from roombooking.domain.errors import InvalidIntervalError
from roombooking.domain.models import Interval


def parse_time(raw: str | dt.time) -> dt.time:
    """Parse an ``HH:MM`` string into a ``time``.

    Raises ``InvalidIntervalError`` for anything that is not a valid time of day.
    """
    if isinstance(raw, dt.time):
        return raw
    if not isinstance(raw, str) or ":" not in raw:
        raise InvalidIntervalError(f"invalid time of day: {raw!r}")
    hours, _, minutes = raw.strip().partition(":")
    try:
        return dt.time(int(hours), int(minutes or 0))
    except ValueError as exc:
        raise InvalidIntervalError(f"invalid time of day: {raw!r}") from exc


def format_time(value: dt.time) -> str:
    return value.strftime("%H:%M")


def minutes_since_midnight(value: dt.time) -> int:
    return value.hour * 60 + value.minute


def calculate_end_time(start: dt.time, duration_minutes: int, day_end: dt.time) -> dt.time:
    """Add *duration_minutes* to *start*, never going past *day_end*."""
    if duration_minutes <= 0:
        raise InvalidIntervalError("duration must be positive")
    total = minutes_since_midnight(start) + duration_minutes
    if total >= minutes_since_midnight(day_end):
        return day_end
    return dt.time(total // 60, total % 60)


def build_interval(
    date: dt.date | None,
    start: str | dt.time | None,
    end: str | dt.time | None,
) -> Interval:
    """Build an Interval from loose form values, raising ``InvalidIntervalError``."""
    if date is None or start is None or end is None:
        raise InvalidIntervalError("date, start and end are all required")
    start_time = parse_time(start)
    end_time = parse_time(end)
    try:
        return Interval(date=date, start_time=start_time, end_time=end_time)
    except ValidationError as exc:
        raise InvalidIntervalError(
            f"end {format_time(end_time)} must be after start {format_time(start_time)}"
        ) from exc
