"""Exceptions raised by the booking engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from roombooking.domain.models import ConflictReport, RecurringBatchResult


class BookingError(Exception):
    """Base class for domain/service errors."""


class BookingValidationError(BookingError, ValueError):
    """Input was malformed; nothing was checked or persisted."""


class InvalidIntervalError(BookingValidationError):
    pass


class InvalidRecurrenceError(BookingValidationError):
    pass


class OverlapConflictError(BookingError):
    """A submitted booking collides with existing bookings in the same room."""

    def __init__(self, report: ConflictReport) -> None:
        self.report = report
        ids = ", ".join(str(b.id) for b in report.conflicts)
        super().__init__(f"booking overlaps existing booking(s): {ids}")


class DataSourceError(BookingError):
    """The storage collaborator failed to answer."""


class RecurringSeriesInterrupted(DataSourceError):
    """Storage failed partway through a recurring batch.

    ``result`` holds what was created and skipped before the failure; the
    failed occurrence and everything after it are in ``result.unprocessed``.
    """

    def __init__(self, result: RecurringBatchResult, cause: Exception) -> None:
        self.result = result
        super().__init__(
            f"recurring series interrupted after {result.created_count} created, "
            f"{len(result.unprocessed)} unprocessed: {cause}"
        )
