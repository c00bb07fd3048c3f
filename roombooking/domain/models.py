"""Domain models for the room booking engine.

All times are naive local wall-clock values. A booking lives on a single
calendar date and occupies the half-open range ``[start_time, end_time)``.
"""

from __future__ import annotations

import datetime as dt
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

BookingId = int | str
RoomId = int | str


class BookingType(StrEnum):
    MEETING = "meeting"
    PRESENTATION = "presentation"
    WORKSHOP = "workshop"
    INTERNAL = "internal"
    EXTERNAL = "external"


class RecurrencePattern(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


NEUTRAL_COLOR = "gray"

BOOKING_TYPE_COLORS: dict[BookingType, str] = {
    BookingType.MEETING: "blue",
    BookingType.PRESENTATION: "green",
    BookingType.WORKSHOP: "purple",
    BookingType.INTERNAL: "amber",
    BookingType.EXTERNAL: "red",
}


def booking_type_color(booking_type: BookingType | None) -> str:
    """Display colour for a booking type; untyped bookings get the neutral colour."""
    if booking_type is None:
        return NEUTRAL_COLOR
    return BOOKING_TYPE_COLORS[BookingType(booking_type)]


def _now() -> dt.datetime:
    return dt.datetime.now()


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class Room(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: RoomId
    name: str
    capacity: int = Field(ge=1)
    features: list[str] = Field(default_factory=list)


class Interval(BaseModel):
    """A half-open time range on one day.

    Inverted times fail construction with pydantic's ``ValidationError``.
    Raw form values should go through ``services.timeutils.build_interval``,
    which raises ``InvalidIntervalError`` instead.
    """

    model_config = ConfigDict(frozen=True)

    date: dt.date
    start_time: dt.time
    end_time: dt.time

    @model_validator(mode="after")
    def _end_after_start(self) -> Interval:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class BookingRequest(BaseModel):
    """A candidate booking that has not been persisted yet."""

    room_id: RoomId
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    booker: str = Field(min_length=1)
    purpose: str | None = None
    booking_type: BookingType | None = None
    is_quick: bool = False

    @model_validator(mode="after")
    def _end_after_start(self) -> BookingRequest:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    @property
    def interval(self) -> Interval:
        return Interval(
            date=self.date, start_time=self.start_time, end_time=self.end_time
        )

    def on_date(self, date: dt.date) -> BookingRequest:
        """Return an unpersisted copy moved to *date* (ids are never copied)."""
        fields = self.model_dump(include=set(BookingRequest.model_fields))
        fields["date"] = date
        return BookingRequest(**fields)


class Booking(BookingRequest):
    id: BookingId
    created_at: dt.datetime = Field(default_factory=_now)

    @property
    def color(self) -> str:
        return booking_type_color(self.booking_type)


class RecurrenceRule(BaseModel):
    """How to repeat a seed booking.

    Exactly one of ``occurrences`` and ``end_date`` must be set; the
    expander rejects rules that break this.
    """

    pattern: RecurrencePattern
    weekdays: list[int] = Field(default_factory=list)
    occurrences: int | None = Field(default=None, ge=1)
    end_date: dt.date | None = None

    @model_validator(mode="after")
    def _weekdays_in_range(self) -> RecurrenceRule:
        for day in self.weekdays:
            if not 1 <= day <= 7:
                raise ValueError("weekdays use ISO numbering, 1=Monday..7=Sunday")
        return self


class ConflictReport(BaseModel):
    has_conflict: bool
    conflicts: list[Booking] = Field(default_factory=list)

    @classmethod
    def clear(cls) -> ConflictReport:
        return cls(has_conflict=False, conflicts=[])


class ValidationSkipped(BaseModel):
    """Realtime input was incomplete; no check was performed."""

    reason: str
    has_conflict: bool = False


class ValidationUnavailable(BaseModel):
    """The data source failed, so the slot could not be checked."""

    error: str


class Superseded(BaseModel):
    """A newer realtime request replaced this one before it was applied."""

    sequence: int


RealtimeOutcome = ConflictReport | ValidationSkipped | ValidationUnavailable | Superseded


class SkippedOccurrence(BaseModel):
    request: BookingRequest
    conflicts: list[Booking]


class RecurringBatchResult(BaseModel):
    candidates: list[BookingRequest] = Field(default_factory=list)
    created: list[Booking] = Field(default_factory=list)
    skipped: list[SkippedOccurrence] = Field(default_factory=list)
    # Filled only when storage failed mid-batch: the failed occurrence onwards.
    unprocessed: list[BookingRequest] = Field(default_factory=list)

    @computed_field
    @property
    def created_count(self) -> int:
        return len(self.created)

    @computed_field
    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class OverlapCheckRequest(BaseModel):
    room_id: RoomId
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    exclude_booking_id: BookingId | None = None

    @model_validator(mode="after")
    def _end_after_start(self) -> OverlapCheckRequest:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    @property
    def interval(self) -> Interval:
        return Interval(
            date=self.date, start_time=self.start_time, end_time=self.end_time
        )


class RecurringBookingRequest(BaseModel):
    seed: BookingRequest
    rule: RecurrenceRule


class EmergencyBookingRequest(BaseModel):
    now: dt.datetime | None = None
    duration_minutes: int | None = Field(default=None, gt=0)
    booker: str | None = None
