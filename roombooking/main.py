"""FastAPI application: HTTP access to the booking engine over the in-memory store."""

from __future__ import annotations

import datetime as dt
import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from roombooking.config import settings
from roombooking.domain.bus import EventBus
from roombooking.domain.errors import (
    BookingValidationError,
    DataSourceError,
    OverlapConflictError,
    RecurringSeriesInterrupted,
)
from roombooking.domain.models import (
    Booking,
    BookingRequest,
    ConflictReport,
    EmergencyBookingRequest,
    Interval,
    OverlapCheckRequest,
    RecurringBatchResult,
    RecurringBookingRequest,
    Room,
)
from roombooking.repos.memory import create_booking_store
from roombooking.services.booking import BookingService
from roombooking.services.recurrence import expand_recurrence

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("roombooking")

app = FastAPI(title="Room Booking Service")

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
booking_store = create_booking_store()
booking_service = BookingService(store=booking_store, bus=event_bus)


# ── Error mapping ─────────────────────────────────────────────────────


@app.exception_handler(BookingValidationError)
async def _validation_error(request: Request, exc: BookingValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"detail": f"Validation error: {exc}"},
    )


@app.exception_handler(OverlapConflictError)
async def _overlap_conflict(request: Request, exc: OverlapConflictError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "detail": "Overlap conflict: booking overlaps an existing booking in this room.",
            "report": exc.report.model_dump(mode="json"),
        },
    )


@app.exception_handler(DataSourceError)
async def _data_source_error(request: Request, exc: DataSourceError) -> JSONResponse:
    logger.warning("data source failure on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Booking data is unavailable, try again later."},
    )


@app.exception_handler(RecurringSeriesInterrupted)
async def _series_interrupted(request: Request, exc: RecurringSeriesInterrupted) -> JSONResponse:
    logger.warning("recurring series interrupted on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "detail": "Booking data became unavailable partway through the series.",
            "result": exc.result.model_dump(mode="json"),
        },
    )


# ── Routes ────────────────────────────────────────────────────────────


@app.get("/rooms", response_model=list[Room])
async def list_rooms() -> list[Room]:
    return await booking_store.list_rooms()


@app.get("/bookings", response_model=list[Booking])
async def list_bookings(date: dt.date) -> list[Booking]:
    """Return all bookings on *date*, ordered by start time."""
    return await booking_store.list_bookings(date)


@app.post("/overlap", response_model=ConflictReport)
async def check_overlap(payload: OverlapCheckRequest) -> ConflictReport:
    """Report which bookings, if any, collide with the given slot."""
    return await booking_service.check_overlap(
        payload.room_id, payload.interval, payload.exclude_booking_id
    )


@app.post("/allocate", response_model=Room | None)
async def allocate(payload: Interval) -> Room | None:
    """Return the largest room free for the whole interval, or null."""
    return await booking_service.find_largest_available(payload)


@app.post("/recurrence/expand", response_model=list[BookingRequest])
async def expand(payload: RecurringBookingRequest) -> list[BookingRequest]:
    """Preview the occurrences of a recurring booking without checking them."""
    return expand_recurrence(payload.seed, payload.rule)


@app.post("/bookings", response_model=Booking, status_code=status.HTTP_201_CREATED)
async def create_booking(payload: BookingRequest) -> Booking:
    return await booking_service.create_booking(payload)


@app.post(
    "/bookings/emergency", response_model=Booking, status_code=status.HTTP_201_CREATED
)
async def create_emergency_booking(payload: EmergencyBookingRequest) -> Booking:
    """Book the largest free room right now."""
    booking = await booking_service.create_emergency_booking(
        now=payload.now,
        duration_minutes=payload.duration_minutes,
        booker=payload.booker,
    )
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No room is free right now.",
        )
    return booking


@app.post(
    "/bookings/recurring",
    response_model=RecurringBatchResult,
    status_code=status.HTTP_201_CREATED,
)
async def create_recurring_series(payload: RecurringBookingRequest) -> RecurringBatchResult:
    """Create every non-conflicting occurrence and report the skipped ones."""
    return await booking_service.create_recurring_series(payload.seed, payload.rule)
