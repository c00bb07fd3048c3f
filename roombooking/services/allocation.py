"""Service for choosing a room automatically."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence

from roombooking.domain.errors import BookingValidationError, InvalidIntervalError
from roombooking.domain.models import Booking, Interval, Room, RoomId
from roombooking.services.conflicts import find_conflicts

logger = logging.getLogger(__name__)


def find_largest_available(
    interval: Interval,
    rooms: Sequence[Room],
    existing_for_date: Iterable[Booking],
) -> Room | None:
    """Return the largest room that is free for the whole of *interval*.

    Rooms are tried in descending capacity order; equal capacities keep
    their input order. Returns ``None`` when every room is taken.
    """
    if interval is None:
        raise InvalidIntervalError("an interval is required")

    by_room: dict[RoomId, list[Booking]] = defaultdict(list)
    for booking in existing_for_date:
        by_room[booking.room_id].append(booking)

    # sorted() is stable, so ties stay in input order
    for room in sorted(rooms, key=lambda r: r.capacity, reverse=True):
        if not find_conflicts(room.id, interval, by_room.get(room.id, [])):
            logger.info(
                "allocated room %s (capacity %d) for %s %s-%s",
                room.name,
                room.capacity,
                interval.date,
                interval.start_time,
                interval.end_time,
            )
            return room

    logger.info(
        "no free room among %d for %s %s-%s",
        len(rooms),
        interval.date,
        interval.start_time,
        interval.end_time,
    )
    return None


def suggest_room(rooms: Sequence[Room], attendees: int) -> Room | None:
    """Suggest the smallest room that seats *attendees*.

    Falls back to the largest room when nothing is big enough, so the form
    always has something to show. Availability is not considered here.
    """
    if attendees < 1:
        raise BookingValidationError("attendees must be at least 1")
    if not rooms:
        return None
    fitting = [room for room in rooms if room.capacity >= attendees]
    if fitting:
        return min(fitting, key=lambda r: r.capacity)
    return max(rooms, key=lambda r: r.capacity)
