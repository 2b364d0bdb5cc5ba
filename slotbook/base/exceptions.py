"""
Scheduling error taxonomy.

Each error carries the HTTP status the API layer answers with, so the
exception handlers in ``error_handlers`` stay a single mapping.
"""


class SchedulingError(Exception):
    status_code = 400
    error_type = "scheduling_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CalendarNotConnectedError(SchedulingError):
    """The participant has no connected calendar account."""

    status_code = 412
    error_type = "calendar_not_connected"

    def __init__(self, user_id: str, provider: str):
        super().__init__(f"User {user_id} has not connected a {provider} calendar")
        self.user_id = user_id
        self.provider = provider


class SlotUnavailableError(SchedulingError):
    """The proposed interval failed the last-moment availability check."""

    status_code = 409
    error_type = "slot_unavailable"


class InvalidStateTransitionError(SchedulingError):
    status_code = 409
    error_type = "invalid_state_transition"


class CalendarEventCreationError(SchedulingError):
    """The calendar provider did not return an event id."""

    status_code = 502
    error_type = "calendar_event_creation_failed"


class InterviewNotFoundError(SchedulingError):
    status_code = 404
    error_type = "interview_not_found"

    def __init__(self, interview_id: str):
        super().__init__(f"Interview {interview_id} not found")
        self.interview_id = interview_id


class CalendarProviderError(SchedulingError):
    """The calendar provider rejected or failed a request."""

    status_code = 502
    error_type = "calendar_provider_error"

    def __init__(self, operation: str, message: str):
        super().__init__(f"Calendar {operation} failed: {message}")
        self.operation = operation
