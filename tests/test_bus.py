"""Tests for the in-process event bus."""

from __future__ import annotations

from roombooking.domain.bus import EventBus
from roombooking.domain.events import BookingConflictDetected, BookingCreated, DomainEvent


def test_handlers_receive_only_their_event_type():
    bus = EventBus()
    created: list = []
    bus.subscribe(BookingCreated, created.append)

    bus.publish(BookingConflictDetected(room_id=1, conflicting_booking_ids=[2]))
    bus.publish(BookingCreated(booking_id=3, room_id=1))

    assert [e.booking_id for e in created] == [3]


def test_base_class_subscription_sees_every_event_after_specific_handlers():
    bus = EventBus()
    order: list[str] = []
    bus.subscribe(DomainEvent, lambda e: order.append("any"))
    bus.subscribe(BookingCreated, lambda e: order.append("created"))

    bus.publish(BookingCreated(booking_id=1, room_id=1))
    bus.publish(BookingConflictDetected(room_id=1, conflicting_booking_ids=[]))

    assert order == ["created", "any", "any"]
