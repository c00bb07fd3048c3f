"""Authoritative booking submission flows.

Every flow re-checks the slot against freshly fetched data before asking the
store to persist anything. Storage failures surface as ``DataSourceError``.
"""

from __future__ import annotations

import datetime as dt
import logging

from roombooking.config import settings
from roombooking.domain.bus import EventBus
from roombooking.domain.errors import (
    DataSourceError,
    InvalidIntervalError,
    OverlapConflictError,
    RecurringSeriesInterrupted,
)
from roombooking.domain.events import (
    BookingConflictDetected,
    BookingCreated,
    RecurringSeriesCreated,
)
from roombooking.domain.models import (
    Booking,
    BookingId,
    BookingRequest,
    BookingType,
    ConflictReport,
    Interval,
    RecurrenceRule,
    RecurringBatchResult,
    Room,
    RoomId,
    SkippedOccurrence,
)
from roombooking.repos.memory import BookingStore
from roombooking.services.allocation import find_largest_available
from roombooking.services.conflicts import check_overlap, find_conflicts
from roombooking.services.recurrence import expand_recurrence
from roombooking.services.timeutils import build_interval, calculate_end_time

logger = logging.getLogger(__name__)


class BookingService:
    def __init__(self, store: BookingStore, bus: EventBus | None = None) -> None:
        self._store = store
        self._bus = bus or EventBus()

    async def check_overlap(
        self,
        room_id: RoomId,
        interval: Interval,
        exclude_booking_id: BookingId | None = None,
    ) -> ConflictReport:
        existing = await self._store.list_bookings(interval.date, room_id=room_id)
        return check_overlap(room_id, interval, existing, exclude_booking_id)

    async def find_largest_available(self, interval: Interval) -> Room | None:
        rooms = await self._store.list_rooms()
        existing = await self._store.list_bookings(interval.date)
        return find_largest_available(interval, rooms, existing)

    async def create_booking(
        self,
        request: BookingRequest,
        exclude_booking_id: BookingId | None = None,
    ) -> Booking:
        """Persist *request*, raising ``OverlapConflictError`` if the slot is taken."""
        report = await self.check_overlap(
            request.room_id, request.interval, exclude_booking_id
        )
        if report.has_conflict:
            self._bus.publish(
                BookingConflictDetected(
                    room_id=request.room_id,
                    conflicting_booking_ids=[b.id for b in report.conflicts],
                )
            )
            raise OverlapConflictError(report)

        booking = await self._store.add_booking(request)
        logger.info(
            "booked room %s on %s %s-%s for %s (id %s)",
            booking.room_id,
            booking.date,
            booking.start_time,
            booking.end_time,
            booking.booker,
            booking.id,
        )
        self._bus.publish(
            BookingCreated(
                booking_id=booking.id, room_id=booking.room_id, is_quick=booking.is_quick
            )
        )
        return booking

    async def create_emergency_booking(
        self,
        now: dt.datetime | None = None,
        duration_minutes: int | None = None,
        booker: str | None = None,
    ) -> Booking | None:
        """Book the largest free room from the top of the current hour.

        The booking lasts *duration_minutes* (default from settings) but never
        runs past the configured end of the business day. Returns ``None``
        when no room is free.
        """
        now = now or dt.datetime.now()
        start = now.time().replace(minute=0, second=0, microsecond=0)
        end = calculate_end_time(
            start,
            duration_minutes or settings.default_duration_minutes,
            settings.business_day_end,
        )
        if end <= start:
            raise InvalidIntervalError(
                f"no time left before {settings.business_day_end} for an emergency booking"
            )
        interval = build_interval(now.date(), start, end)

        room = await self.find_largest_available(interval)
        if room is None:
            logger.info("emergency booking on %s %s-%s: no room free", now.date(), start, end)
            return None

        request = BookingRequest(
            room_id=room.id,
            date=interval.date,
            start_time=interval.start_time,
            end_time=interval.end_time,
            booker=booker or settings.emergency_booker,
            purpose=settings.emergency_booker,
            booking_type=BookingType.MEETING,
            is_quick=True,
        )
        return await self.create_booking(request)

    async def create_recurring_series(
        self, seed: BookingRequest, rule: RecurrenceRule
    ) -> RecurringBatchResult:
        """Expand *seed* and persist every occurrence that does not collide.

        Colliding occurrences are reported as skipped; the rest of the series
        is still created. If storage fails partway, the bookings already
        written stay, the partial result is published, and
        ``RecurringSeriesInterrupted`` carries it to the caller.
        """
        candidates = expand_recurrence(seed, rule)
        result = RecurringBatchResult(candidates=candidates)

        for index, candidate in enumerate(candidates):
            try:
                existing = await self._store.list_bookings(
                    candidate.date, room_id=candidate.room_id
                )
                conflicts = find_conflicts(candidate.room_id, candidate.interval, existing)
                if conflicts:
                    logger.warning(
                        "skipping %s for room %s: overlaps %s",
                        candidate.date,
                        candidate.room_id,
                        [b.id for b in conflicts],
                    )
                    result.skipped.append(
                        SkippedOccurrence(request=candidate, conflicts=conflicts)
                    )
                    continue
                result.created.append(await self._store.add_booking(candidate))
            except DataSourceError as exc:
                result.unprocessed = candidates[index:]
                logger.warning(
                    "recurring series for room %s interrupted at %s: %s "
                    "(%d created, %d skipped, %d unprocessed)",
                    seed.room_id,
                    candidate.date,
                    exc,
                    result.created_count,
                    result.skipped_count,
                    len(result.unprocessed),
                )
                self._publish_series(seed.room_id, result)
                raise RecurringSeriesInterrupted(result, exc) from exc

        logger.info(
            "recurring series for room %s: %d candidate(s), %d created, %d skipped",
            seed.room_id,
            len(candidates),
            result.created_count,
            result.skipped_count,
        )
        self._publish_series(seed.room_id, result)
        return result

    def _publish_series(self, room_id: RoomId, result: RecurringBatchResult) -> None:
        self._bus.publish(
            RecurringSeriesCreated(
                room_id=room_id,
                created_booking_ids=[b.id for b in result.created],
                skipped_count=result.skipped_count,
                interrupted=bool(result.unprocessed),
            )
        )
