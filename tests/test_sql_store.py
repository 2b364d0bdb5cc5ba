import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from slotbook.base.models import InterviewStatus
from slotbook.db.session import init_db
from slotbook.services.booking_service import BookingService
from slotbook.store.sql import SqlAlchemyInterviewStore
from tests.conftest import ALICE, ALICE_EMAIL, sast
from tests.test_booking_service import booking_request

pytestmark = pytest.mark.integration


@pytest.fixture
def sql_store():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    init_db(bind=engine)
    store = SqlAlchemyInterviewStore(sessionmaker(bind=engine, autoflush=False, future=True))
    store.connect_account(ALICE, ALICE_EMAIL)
    return store


def interview_fields(**overrides):
    fields = {
        "organization_id": "org-1",
        "candidate_name": "Thandi Nkosi",
        "candidate_email": "thandi@example.com",
        "interviewer_user_id": ALICE,
        "title": "Technical Interview",
        "start_time": sast(2026, 3, 3, 11, 30),
        "end_time": sast(2026, 3, 3, 12, 30),
        "timezone": "Africa/Johannesburg",
        "provider": "google",
        "provider_event_id": "evt-1",
        "status": InterviewStatus.SCHEDULED,
    }
    fields.update(overrides)
    return fields


@pytest.mark.asyncio
async def test_connected_account_lookup(sql_store):
    account = await sql_store.get_connected_account(ALICE, "google")

    assert account.email == ALICE_EMAIL
    assert await sql_store.get_connected_account(ALICE, "outlook") is None
    assert await sql_store.get_connected_account("someone-else", "google") is None


@pytest.mark.asyncio
async def test_create_and_fetch_keeps_instants(sql_store):
    created = await sql_store.create_interview(interview_fields())
    fetched = await sql_store.get_interview(created.id)

    assert fetched.id == created.id
    assert fetched.status == InterviewStatus.SCHEDULED
    assert fetched.start_time == sast(2026, 3, 3, 11, 30)
    assert fetched.end_time == sast(2026, 3, 3, 12, 30)
    assert fetched.reminder_sent is False


@pytest.mark.asyncio
async def test_partial_update(sql_store):
    created = await sql_store.create_interview(interview_fields())

    updated = await sql_store.update_interview(created.id, {"status": InterviewStatus.CANCELLED})

    assert updated.status == InterviewStatus.CANCELLED
    assert updated.start_time == created.start_time
    assert updated.provider_event_id == "evt-1"


@pytest.mark.asyncio
async def test_missing_interview(sql_store):
    assert await sql_store.get_interview("missing") is None
    assert await sql_store.update_interview("missing", {"status": InterviewStatus.CANCELLED}) is None


@pytest.mark.asyncio
async def test_full_lifecycle_on_sql_store(sql_store, calendar, app_settings, now):
    service = BookingService(calendar, sql_store, app_settings)

    booked = await service.book_interview(booking_request(sast(2026, 3, 3, 11, 30), sast(2026, 3, 3, 12, 30)), now=now)
    moved = await service.reschedule_interview(booked.id, sast(2026, 3, 4, 14), sast(2026, 3, 4, 15), now=now)
    cancelled = await service.cancel_interview(booked.id)

    assert booked.status == InterviewStatus.SCHEDULED
    assert moved.status == InterviewStatus.RESCHEDULED
    assert moved.provider_event_id == booked.provider_event_id
    assert cancelled.status == InterviewStatus.CANCELLED
    assert (await sql_store.get_interview(booked.id)).start_time == sast(2026, 3, 4, 14)
