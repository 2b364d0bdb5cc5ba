from .provider import (
    DEFAULT_REMINDERS,
    CalendarProvider,
    ConferenceRequest,
    CreatedEvent,
    Reminder,
)
from .memory import InMemoryCalendarProvider
from .google_calendar import GoogleCalendarProvider

__all__ = [
    "DEFAULT_REMINDERS",
    "CalendarProvider",
    "ConferenceRequest",
    "CreatedEvent",
    "Reminder",
    "InMemoryCalendarProvider",
    "GoogleCalendarProvider",
]
