import os

# Configure before any slotbook module reads settings
os.environ.setdefault("ENABLE_FILE_LOGGING", "false")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CALENDAR_BACKEND", "memory")

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from slotbook.base.config import AppConfig
from slotbook.base.models import AvailabilityConfig, WorkingHours
from slotbook.calendar.memory import InMemoryCalendarProvider
from slotbook.services.booking_service import BookingService
from slotbook.store.memory import InMemoryInterviewStore

SAST = ZoneInfo("Africa/Johannesburg")

ALICE = "user-alice"
ALICE_EMAIL = "alice@example.com"
BOB = "user-bob"
BOB_EMAIL = "bob@example.com"


def sast(year, month, day, hour=0, minute=0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=SAST)


@pytest.fixture
def now():
    """Monday 2 March 2026, 08:00 in Johannesburg."""
    return sast(2026, 3, 2, 8).astimezone(timezone.utc)


@pytest.fixture
def config():
    return AvailabilityConfig(
        working_hours=WorkingHours(start=9, end=17, days=[1, 2, 3, 4, 5], timezone="Africa/Johannesburg"),
        slot_interval=30,
        meeting_duration=60,
        buffer_before=15,
        buffer_after=15,
        min_notice_hours=24,
    )


@pytest.fixture
def app_settings():
    return AppConfig(CALENDAR_PROVIDER_NAME="google", VALIDATION_PADDING_MINUTES=30)


@pytest.fixture
def calendar():
    return InMemoryCalendarProvider()


@pytest.fixture
def store():
    store = InMemoryInterviewStore()
    store.connect_account(ALICE, ALICE_EMAIL)
    store.connect_account(BOB, BOB_EMAIL)
    return store


@pytest.fixture
def service(calendar, store, app_settings):
    return BookingService(calendar, store, app_settings)
