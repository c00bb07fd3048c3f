"""Tests for the TTL cache in front of a booking store."""

from __future__ import annotations

import asyncio
from datetime import date, time

from roombooking.domain.models import BookingRequest, Room
from roombooking.repos.cache import CachedBookingStore
from roombooking.repos.memory import InMemoryBookingStore

DAY = date(2024, 3, 4)


class CountingStore(InMemoryBookingStore):
    def __init__(self, rooms):
        super().__init__(rooms=rooms)
        self.room_reads = 0
        self.booking_reads = 0

    async def list_rooms(self):
        self.room_reads += 1
        return await super().list_rooms()

    async def list_bookings(self, date, room_id=None):
        self.booking_reads += 1
        return await super().list_bookings(date, room_id)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _make_request(room_id: int = 1) -> BookingRequest:
    return BookingRequest(
        room_id=room_id, date=DAY, start_time=time(9, 0), end_time=time(10, 0), booker="Ola"
    )


def _setup(ttl: float = 30):
    store = CountingStore([Room(id=1, name="Svea", capacity=8), Room(id=2, name="Vasa", capacity=4)])
    clock = FakeClock()
    return store, clock, CachedBookingStore(store, ttl_seconds=ttl, clock=clock)


def test_rooms_are_cached_until_ttl_expires():
    store, clock, cached = _setup()

    async def run():
        await cached.list_rooms()
        await cached.list_rooms()
        clock.now = 31
        await cached.list_rooms()

    asyncio.run(run())
    assert store.room_reads == 2


def test_bookings_are_cached_per_date_and_filtered_by_room():
    store, clock, cached = _setup()

    async def run():
        await store.add_booking(_make_request(1))
        await store.add_booking(_make_request(2))
        all_bookings = await cached.list_bookings(DAY)
        room_two = await cached.list_bookings(DAY, room_id=2)
        return all_bookings, room_two

    all_bookings, room_two = asyncio.run(run())
    assert len(all_bookings) == 2
    assert [b.room_id for b in room_two] == [2]
    assert store.booking_reads == 1


def test_write_invalidates_the_date():
    store, clock, cached = _setup()

    async def run():
        assert await cached.list_bookings(DAY) == []
        await cached.add_booking(_make_request())
        return await cached.list_bookings(DAY)

    assert len(asyncio.run(run())) == 1
    assert store.booking_reads == 2


def test_zero_ttl_disables_caching():
    store, clock, cached = _setup(ttl=0)

    async def run():
        await cached.list_bookings(DAY)
        await cached.list_bookings(DAY)

    asyncio.run(run())
    assert store.booking_reads == 2


def test_invalidate_drops_everything():
    store, clock, cached = _setup()

    async def run():
        await cached.list_rooms()
        await cached.list_bookings(DAY)
        cached.invalidate()
        await cached.list_rooms()
        await cached.list_bookings(DAY)

    asyncio.run(run())
    assert store.room_reads == 2
    assert store.booking_reads == 2
