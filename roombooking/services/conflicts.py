"""Service for detecting overlapping bookings in a room."""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Iterable

from roombooking.domain.errors import InvalidIntervalError
from roombooking.domain.models import (
    Booking,
    BookingId,
    ConflictReport,
    Interval,
    RoomId,
)

logger = logging.getLogger(__name__)


def intervals_overlap(
    a_start: dt.time, a_end: dt.time, b_start: dt.time, b_end: dt.time
) -> bool:
    """Half-open interval overlap: ``[start, end)``.

    Overlap iff a_start < b_end AND a_end > b_start, so back-to-back
    bookings (one ends at 10:00, the next starts at 10:00) are compatible.
    """
    return a_start < b_end and a_end > b_start


def find_conflicts(
    room_id: RoomId,
    interval: Interval,
    existing: Iterable[Booking],
    exclude_booking_id: BookingId | None = None,
) -> list[Booking]:
    """Return every booking in *existing* that collides with *interval*.

    The snapshot is expected to be scoped to the room and date already, but
    both are re-checked. A booking whose id equals *exclude_booking_id* is
    skipped without being evaluated.
    """
    if interval is None:
        raise InvalidIntervalError("an interval is required")
    return [
        booking
        for booking in existing
        if (exclude_booking_id is None or booking.id != exclude_booking_id)
        and booking.room_id == room_id
        and booking.date == interval.date
        and intervals_overlap(
            interval.start_time, interval.end_time, booking.start_time, booking.end_time
        )
    ]


def check_overlap(
    room_id: RoomId,
    interval: Interval,
    existing: Iterable[Booking],
    exclude_booking_id: BookingId | None = None,
) -> ConflictReport:
    """Decide whether *interval* may be booked in *room_id*."""
    conflicts = find_conflicts(room_id, interval, existing, exclude_booking_id)
    if conflicts:
        logger.debug(
            "room %s on %s %s-%s collides with %s",
            room_id,
            interval.date,
            interval.start_time,
            interval.end_time,
            [b.id for b in conflicts],
        )
        return ConflictReport(has_conflict=True, conflicts=conflicts)
    return ConflictReport.clear()
