"""Exception types raised by the calendar core."""

from typing import Optional


class CalendarError(Exception):
    """Base calendar error."""


class ValidationError(CalendarError):
    """Raised when input is rejected locally, before any call to the station."""


class ScheduleServiceError(CalendarError):
    """Raised when a call to the station service fails."""

    def __init__(
        self,
        message: str,
        operation: str = "",
        schedule_id: Optional[int] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.schedule_id = schedule_id
        self.status_code = status_code

    def __str__(self):
        target = f" schedule {self.schedule_id}" if self.schedule_id is not None else ""
        if self.operation:
            return f"{self.operation}{target} failed: {self.message}"
        return self.message


class ScheduleNotFoundError(ScheduleServiceError):
    """Raised when a schedule id is unknown to the store or the station."""


class ScheduleConflictError(ScheduleServiceError):
    """Raised when a proposed slot overlaps another active schedule."""


class SplitIncompleteError(ScheduleServiceError):
    """Raised when a split stopped part way.

    The transaction is attached; its phase tells which step is still pending,
    and ``retry_split`` resumes from there.
    """

    def __init__(self, message: str, transaction, status_code: Optional[int] = None):
        super().__init__(
            message,
            operation="split",
            schedule_id=transaction.schedule_id,
            status_code=status_code,
        )
        self.transaction = transaction
