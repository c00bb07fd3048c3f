"""Read-through TTL cache in front of a booking store."""

from __future__ import annotations

import datetime as dt
import logging
import time
from typing import Callable

from roombooking.config import settings
from roombooking.domain.models import Booking, BookingRequest, Room, RoomId
from roombooking.repos.memory import BookingStore

logger = logging.getLogger(__name__)


class CachedBookingStore:
    """Caches rooms and per-date booking lists for ``ttl_seconds``.

    The cache belongs to whoever constructs it; nothing is shared between
    instances. Writes go straight to the wrapped store and drop the cached
    bookings for the affected date.
    """

    def __init__(
        self,
        store: BookingStore,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._ttl = settings.cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._rooms: tuple[float, list[Room]] | None = None
        self._bookings: dict[dt.date, tuple[float, list[Booking]]] = {}

    def _fresh(self, fetched_at: float) -> bool:
        return self._clock() - fetched_at < self._ttl

    async def list_rooms(self) -> list[Room]:
        if self._rooms is not None and self._fresh(self._rooms[0]):
            return list(self._rooms[1])
        rooms = await self._store.list_rooms()
        self._rooms = (self._clock(), rooms)
        return list(rooms)

    async def list_bookings(
        self, date: dt.date, room_id: RoomId | None = None
    ) -> list[Booking]:
        entry = self._bookings.get(date)
        if entry is None or not self._fresh(entry[0]):
            logger.debug("cache miss for bookings on %s", date)
            bookings = await self._store.list_bookings(date)
            entry = (self._clock(), bookings)
            self._bookings[date] = entry
        return [b for b in entry[1] if room_id is None or b.room_id == room_id]

    async def add_booking(self, request: BookingRequest) -> Booking:
        booking = await self._store.add_booking(request)
        self._bookings.pop(booking.date, None)
        return booking

    def invalidate(self) -> None:
        self._rooms = None
        self._bookings.clear()
