"""Service for expanding a seed booking into a recurring series of candidates."""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Iterator
from itertools import islice

from dateutil.relativedelta import relativedelta
from dateutil.rrule import DAILY, FR, MO, SA, SU, TH, TU, WE, WEEKLY, rrule

from roombooking.config import settings
from roombooking.domain.errors import InvalidRecurrenceError
from roombooking.domain.models import BookingRequest, RecurrencePattern, RecurrenceRule

logger = logging.getLogger(__name__)

# ISO weekday number -> dateutil weekday
_ISO_WEEKDAYS = {1: MO, 2: TU, 3: WE, 4: TH, 5: FR, 6: SA, 7: SU}


def validate_rule(rule: RecurrenceRule) -> None:
    """Raise ``InvalidRecurrenceError`` unless *rule* has exactly one bound."""
    if rule.occurrences is None and rule.end_date is None:
        raise InvalidRecurrenceError("a recurrence needs either occurrences or end_date")
    if rule.occurrences is not None and rule.end_date is not None:
        raise InvalidRecurrenceError("occurrences and end_date are mutually exclusive")
    if rule.pattern == RecurrencePattern.WEEKLY and not rule.weekdays:
        raise InvalidRecurrenceError("a weekly recurrence needs at least one weekday")


def expand_recurrence(
    seed: BookingRequest,
    rule: RecurrenceRule,
    max_occurrences: int | None = None,
) -> list[BookingRequest]:
    """Expand *seed* into one candidate per date produced by *rule*.

    Candidates are ordered by date and copy everything from the seed except
    the date. The seed's own date is the first cursor position; for weekly
    rules it is only included if its weekday is selected. No overlap
    checking happens here.

    Monthly rules keep the seed's day of month; in shorter months the day is
    clamped to the month's last day (Jan 31 -> Feb 29 -> Mar 31 -> Apr 30).
    """
    validate_rule(rule)
    limit = max_occurrences or settings.max_recurrence_occurrences
    if rule.occurrences is not None and rule.occurrences > limit:
        raise InvalidRecurrenceError(
            f"{rule.occurrences} occurrences exceeds the limit of {limit}"
        )

    dates = list(islice(_iter_dates(seed.date, rule), limit + 1))
    if len(dates) > limit:
        raise InvalidRecurrenceError(
            f"recurrence until {rule.end_date} produces more than {limit} occurrences"
        )

    logger.debug(
        "expanded %s recurrence from %s into %d candidate(s)",
        rule.pattern,
        seed.date,
        len(dates),
    )
    return [seed.on_date(date) for date in dates]


def series_end_date(
    start: dt.date, pattern: RecurrencePattern, occurrences: int
) -> dt.date:
    """Last date covered by a count-bounded series, for previewing in a form.

    Weekly series report the end of the n-th seven-day window, since the
    exact last date depends on which weekdays are selected.
    """
    if occurrences < 1:
        raise InvalidRecurrenceError("occurrences must be at least 1")
    if pattern == RecurrencePattern.DAILY:
        return start + dt.timedelta(days=occurrences - 1)
    if pattern == RecurrencePattern.WEEKLY:
        return start + dt.timedelta(days=occurrences * 7 - 1)
    return start + relativedelta(months=occurrences - 1)


def _iter_dates(start: dt.date, rule: RecurrenceRule) -> Iterator[dt.date]:
    if rule.pattern == RecurrencePattern.MONTHLY:
        return _iter_monthly(start, rule.occurrences, rule.end_date)

    dtstart = dt.datetime.combine(start, dt.time.min)
    kwargs: dict = {"dtstart": dtstart}
    if rule.occurrences is not None:
        kwargs["count"] = rule.occurrences
    else:
        kwargs["until"] = dt.datetime.combine(rule.end_date, dt.time.min)

    if rule.pattern == RecurrencePattern.WEEKLY:
        kwargs["byweekday"] = [_ISO_WEEKDAYS[d] for d in sorted(set(rule.weekdays))]
        occurrences = rrule(WEEKLY, **kwargs)
    else:
        occurrences = rrule(DAILY, **kwargs)
    return (occurrence.date() for occurrence in occurrences)


def _iter_monthly(
    start: dt.date, count: int | None, until: dt.date | None
) -> Iterator[dt.date]:
    # Offsets are taken from the seed each time so a clamp never carries over.
    n = 0
    while count is None or n < count:
        cursor = start + relativedelta(months=n)
        if until is not None and cursor > until:
            return
        yield cursor
        n += 1
