"""In-memory storage collaborator for rooms and bookings."""

from __future__ import annotations

import datetime as dt
import itertools
from typing import Protocol

from roombooking.domain.errors import BookingValidationError
from roombooking.domain.models import Booking, BookingRequest, Room, RoomId


class BookingStore(Protocol):
    """What the booking services need from storage.

    Every method may raise ``DataSourceError`` when the backend fails.
    """

    async def list_rooms(self) -> list[Room]: ...

    async def list_bookings(
        self, date: dt.date, room_id: RoomId | None = None
    ) -> list[Booking]: ...

    async def add_booking(self, request: BookingRequest) -> Booking: ...


class InMemoryBookingStore:
    """Dict-backed store; booking ids are assigned sequentially from 1."""

    def __init__(self, rooms: list[Room] | None = None) -> None:
        self._rooms: dict[RoomId, Room] = {room.id: room for room in rooms or []}
        self._bookings: dict[int, Booking] = {}
        self._ids = itertools.count(1)

    def add_room(self, room: Room) -> None:
        self._rooms[room.id] = room

    async def list_rooms(self) -> list[Room]:
        return list(self._rooms.values())

    async def list_bookings(
        self, date: dt.date, room_id: RoomId | None = None
    ) -> list[Booking]:
        """Return bookings on *date*, optionally for one room, ordered by start time."""
        items = [
            b
            for b in self._bookings.values()
            if b.date == date and (room_id is None or b.room_id == room_id)
        ]
        items.sort(key=lambda b: b.start_time)
        return items

    async def add_booking(self, request: BookingRequest) -> Booking:
        if request.room_id not in self._rooms:
            raise BookingValidationError(f"unknown room {request.room_id!r}")
        fields = request.model_dump(include=set(BookingRequest.model_fields))
        booking = Booking(id=next(self._ids), **fields)
        self._bookings[booking.id] = booking
        return booking

    def reset(self) -> None:
        """Clear all bookings. For testing only."""
        self._bookings.clear()
        self._ids = itertools.count(1)


# ---------------------------------------------------------------------------
# Seed data – the four rooms the office started with
# ---------------------------------------------------------------------------


DEFAULT_ROOMS = [
    Room(id=1, name="Svea", capacity=8, features=["projector", "whiteboard"]),
    Room(
        id=2,
        name="Göta",
        capacity=12,
        features=["projector", "whiteboard", "video conferencing"],
    ),
    Room(id=3, name="Vasa", capacity=4, features=["screen", "whiteboard"]),
    Room(
        id=4,
        name="Kalmar",
        capacity=20,
        features=["projector", "whiteboard", "video conferencing"],
    ),
]


def create_booking_store() -> InMemoryBookingStore:
    """Return an InMemoryBookingStore pre-loaded with the default rooms."""
    return InMemoryBookingStore(rooms=list(DEFAULT_ROOMS))
