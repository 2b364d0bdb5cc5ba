from functools import lru_cache

from slotbook.base.config import settings
from slotbook.calendar import GoogleCalendarProvider, InMemoryCalendarProvider
from slotbook.calendar.provider import CalendarProvider
from slotbook.services.booking_service import BookingService
from slotbook.store import SqlAlchemyInterviewStore
from slotbook.store.base import InterviewStore


@lru_cache()
def get_calendar_provider() -> CalendarProvider:
    if settings.CALENDAR_BACKEND == "memory":
        return InMemoryCalendarProvider()
    return GoogleCalendarProvider()


@lru_cache()
def get_interview_store() -> InterviewStore:
    return SqlAlchemyInterviewStore()


def get_booking_service() -> BookingService:
    return BookingService(get_calendar_provider(), get_interview_store(), settings)
