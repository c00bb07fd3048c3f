"""Debounced conflict checking for interactive booking forms.

A form calls ``RealtimeValidator.validate`` on every edit of its room, date
or time fields. Calls arriving within the debounce window collapse into a
single data fetch for the last call's parameters, and a fetch that comes
back after a newer call was issued is discarded rather than shown.

The check here is advisory only; ``BookingService.create_booking`` repeats
it when the form is submitted.
"""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
from typing import Awaitable, Callable

from roombooking.config import settings
from roombooking.domain.bus import EventBus
from roombooking.domain.errors import DataSourceError, InvalidIntervalError
from roombooking.domain.events import ValidationCompleted
from roombooking.domain.models import (
    Booking,
    BookingId,
    RealtimeOutcome,
    RoomId,
    Superseded,
    ValidationSkipped,
    ValidationUnavailable,
)
from roombooking.services.conflicts import check_overlap
from roombooking.services.timeutils import build_interval

logger = logging.getLogger(__name__)

FetchBookings = Callable[[RoomId, dt.date], Awaitable[list[Booking]]]


def _resolve(waiter: asyncio.Future, fired: bool) -> None:
    if not waiter.done():
        waiter.set_result(fired)


class RealtimeValidator:
    """Per-form validator; keep one instance for the lifetime of a form."""

    def __init__(
        self,
        fetch_bookings: FetchBookings,
        debounce_seconds: float | None = None,
        bus: EventBus | None = None,
    ) -> None:
        self._fetch = fetch_bookings
        self._debounce = (
            settings.debounce_seconds if debounce_seconds is None else debounce_seconds
        )
        self._bus = bus
        self._sequence = 0
        self._timer: asyncio.TimerHandle | None = None
        self._waiter: asyncio.Future | None = None
        self.latest: RealtimeOutcome | None = None

    async def validate(
        self,
        room_id: RoomId | None,
        date: dt.date | None,
        start_time: str | dt.time | None,
        end_time: str | dt.time | None,
        exclude_booking_id: BookingId | None = None,
    ) -> RealtimeOutcome:
        """Check the slot once the form has been quiet for the debounce window.

        Returns the ``ConflictReport`` when this call's result was applied,
        ``ValidationSkipped`` for incomplete input, ``ValidationUnavailable``
        when the data source failed, or ``Superseded`` when a newer call
        replaced this one.
        """
        self._sequence += 1
        sequence = self._sequence
        self._cancel_pending()

        try:
            if room_id is None or room_id == "":
                raise InvalidIntervalError("a room is required")
            interval = build_interval(date, start_time, end_time)
        except InvalidIntervalError as exc:
            return self._apply(sequence, ValidationSkipped(reason=str(exc)))

        loop = asyncio.get_running_loop()
        waiter = loop.create_future()
        self._waiter = waiter
        self._timer = loop.call_later(self._debounce, _resolve, waiter, True)
        if not await waiter:
            return Superseded(sequence=sequence)
        if self._waiter is waiter:
            self._timer = None
            self._waiter = None
        # A newer call may have arrived between the timer firing and this resume.
        if sequence != self._sequence:
            return Superseded(sequence=sequence)

        logger.debug("realtime check #%d for room %s on %s", sequence, room_id, interval.date)
        outcome: RealtimeOutcome
        try:
            bookings = await self._fetch(room_id, interval.date)
        except DataSourceError as exc:
            logger.warning("realtime check #%d unavailable: %s", sequence, exc)
            outcome = ValidationUnavailable(error=str(exc))
        else:
            outcome = check_overlap(room_id, interval, bookings, exclude_booking_id)

        if sequence != self._sequence:
            logger.debug("discarding stale realtime result #%d", sequence)
            return Superseded(sequence=sequence)
        return self._apply(sequence, outcome)

    def close(self) -> None:
        """Drop any pending check, e.g. when the form is closed."""
        self._sequence += 1
        self._cancel_pending()

    def _cancel_pending(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._waiter is not None:
            _resolve(self._waiter, False)
            self._waiter = None

    def _apply(self, sequence: int, outcome: RealtimeOutcome) -> RealtimeOutcome:
        self.latest = outcome
        if self._bus is not None:
            self._bus.publish(ValidationCompleted(sequence=sequence, outcome=outcome))
        return outcome
