"""Domain events emitted by the booking services."""

from __future__ import annotations

from pydantic import BaseModel

from roombooking.domain.models import BookingId, RealtimeOutcome, RoomId


class DomainEvent(BaseModel):
    """Base class for everything published on the bus."""


class BookingCreated(DomainEvent):
    """Fired when an accepted booking has been persisted."""

    booking_id: BookingId
    room_id: RoomId
    is_quick: bool = False


class BookingConflictDetected(DomainEvent):
    """Fired when a submission is refused because of overlapping bookings."""

    room_id: RoomId
    conflicting_booking_ids: list[BookingId]


class RecurringSeriesCreated(DomainEvent):
    """Fired after a recurring batch has been submitted."""

    room_id: RoomId
    created_booking_ids: list[BookingId]
    skipped_count: int
    interrupted: bool = False


class ValidationCompleted(DomainEvent):
    """Fired when a realtime check produced the result the form should show."""

    sequence: int
    outcome: RealtimeOutcome
