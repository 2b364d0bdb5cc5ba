# slotbook/services/booking_service.py

from datetime import datetime
from typing import List, Optional

from slotbook.base.config import AppConfig, settings
from slotbook.base.exceptions import (
    CalendarEventCreationError,
    CalendarProviderError,
    InterviewNotFoundError,
    InvalidStateTransitionError,
    SlotUnavailableError,
)
from slotbook.base.logging_config import booking_logger as logger
from slotbook.base.metrics import (
    booking_counter,
    calendar_failure_counter,
    cancellation_counter,
    reschedule_counter,
)
from slotbook.base.models import (
    AvailabilityRequest,
    BookingRequest,
    Interview,
    InterviewStatus,
    PanelAvailabilityRequest,
    TimeSlot,
    WorkingHours,
    ensure_aware,
)
from slotbook.calendar.provider import DEFAULT_REMINDERS, CalendarProvider, ConferenceRequest
from slotbook.services.availability_service import AvailabilityService, default_availability_config
from slotbook.store.base import InterviewStore


class BookingService:
    """
    Owns the interview lifecycle: booking a validated slot into a calendar
    event plus a stored interview, then rescheduling or cancelling that pair.

    scheduled -> rescheduled (repeatable) -> cancelled (terminal)

    Every operation runs validate -> external calendar call -> persist, in
    that order, and none of them retries. Booking is optimistic: the slot is
    re-checked right before the event is created, but nothing reserves it,
    so a concurrent booking landing between the check and the provider
    accepting the event is possible and left to humans to resolve.
    """

    def __init__(
        self,
        calendar: CalendarProvider,
        store: InterviewStore,
        app_settings: AppConfig = settings,
    ):
        self.calendar = calendar
        self.store = store
        self.settings = app_settings
        self.availability = AvailabilityService(calendar, store, app_settings)

    @property
    def provider_name(self) -> str:
        return self.settings.CALENDAR_PROVIDER_NAME

    # === Availability ===

    async def get_interview_availability(
        self, req: AvailabilityRequest, now: Optional[datetime] = None
    ) -> List[TimeSlot]:
        config = default_availability_config(
            self.settings,
            working_hours=req.working_hours,
            slot_interval=req.slot_interval,
            meeting_duration=req.meeting_duration,
            buffer_before=req.buffer_before,
            buffer_after=req.buffer_after,
            min_notice_hours=req.min_notice_hours,
        )
        return await self.availability.get_available_slots(
            req.interviewer_user_id, req.start_date, req.end_date, config, now=now
        )

    async def get_panel_availability(
        self, req: PanelAvailabilityRequest, now: Optional[datetime] = None
    ) -> List[TimeSlot]:
        config = req.availability_config or default_availability_config(self.settings)
        return await self.availability.get_available_slots_multiple(
            req.interviewer_user_ids, req.start_date, req.end_date, config, now=now
        )

    # === Lifecycle ===

    async def get_interview(self, interview_id: str) -> Interview:
        interview = await self.store.get_interview(interview_id)
        if interview is None:
            raise InterviewNotFoundError(interview_id)
        return interview

    async def book_interview(self, req: BookingRequest, now: Optional[datetime] = None) -> Interview:
        """
        Book an interview.

        1. Re-validates the slot against fresh busy data
        2. Creates the calendar event with a meeting link and reminders
        3. Persists the interview, only once the event exists
        """
        tz_name = req.timezone or self.settings.DEFAULT_TIMEZONE
        account = await self.availability.require_account(req.interviewer_user_id)

        config = default_availability_config(
            self.settings,
            working_hours=WorkingHours(
                start=self.settings.DEFAULT_WORK_START_HOUR,
                end=self.settings.DEFAULT_WORK_END_HOUR,
                days=self.settings.DEFAULT_WORK_DAYS,
                timezone=tz_name,
            ),
        )
        is_available = await self.availability.validate_slot(
            req.interviewer_user_id, req.start_time, req.end_time, config, now=now
        )
        if not is_available:
            booking_counter.labels(outcome="unavailable").inc()
            raise SlotUnavailableError("This time slot is no longer available")

        try:
            created = await self.calendar.create_event(
                calendar_id=account.email,
                title=req.title,
                description=req.description,
                start=req.start_time,
                end=req.end_time,
                timezone=tz_name,
                attendee_emails=[req.candidate_email, account.email],
                conference_request=ConferenceRequest(),
                reminders=DEFAULT_REMINDERS,
            )
        except CalendarProviderError:
            calendar_failure_counter.labels(operation="create_event").inc()
            booking_counter.labels(outcome="calendar_error").inc()
            raise

        if not created.provider_event_id:
            logger.error(f"[Book] Calendar returned no event id for {req.interviewer_user_id}")
            calendar_failure_counter.labels(operation="create_event").inc()
            booking_counter.labels(outcome="calendar_error").inc()
            raise CalendarEventCreationError("Failed to create calendar event")

        try:
            interview = await self.store.create_interview({
                "organization_id": req.organization_id,
                "job_id": req.job_id,
                "pool_id": req.pool_id,
                "candidate_name": req.candidate_name,
                "candidate_email": req.candidate_email,
                "candidate_phone": req.candidate_phone,
                "interviewer_user_id": req.interviewer_user_id,
                "title": req.title,
                "description": req.description,
                "start_time": req.start_time,
                "end_time": req.end_time,
                "timezone": tz_name,
                "provider": self.provider_name,
                "provider_event_id": created.provider_event_id,
                "meeting_join_url": created.meeting_join_url,
                "location": None,
                "status": InterviewStatus.SCHEDULED,
                "reminder_sent": False,
                "feedback": None,
            })
        except Exception:
            # The event exists without a record; reconciliation can recover it
            logger.exception(f"[Book] Calendar event {created.provider_event_id} created but interview not saved")
            booking_counter.labels(outcome="store_error").inc()
            raise

        booking_counter.labels(outcome="booked").inc()
        logger.info(
            f"[Book] Interview {interview.id} booked for {req.interviewer_user_id} "
            f"at {req.start_time.isoformat()} (event {created.provider_event_id})"
        )
        return interview

    async def reschedule_interview(
        self,
        interview_id: str,
        new_start_time: datetime,
        new_end_time: datetime,
        now: Optional[datetime] = None,
    ) -> Interview:
        interview = await self.get_interview(interview_id)

        if interview.status == InterviewStatus.CANCELLED:
            reschedule_counter.labels(outcome="invalid_state").inc()
            raise InvalidStateTransitionError("Cannot reschedule a cancelled interview")

        account = await self.availability.require_account(interview.interviewer_user_id)
        new_start_time = ensure_aware(new_start_time)
        new_end_time = ensure_aware(new_end_time)

        # Same-day changes are allowed, so the notice is shorter than for booking
        config = default_availability_config(
            self.settings,
            working_hours=WorkingHours(
                start=self.settings.DEFAULT_WORK_START_HOUR,
                end=self.settings.DEFAULT_WORK_END_HOUR,
                days=self.settings.DEFAULT_WORK_DAYS,
                timezone=interview.timezone,
            ),
            min_notice_hours=self.settings.RESCHEDULE_MIN_NOTICE_HOURS,
        )
        is_available = await self.availability.validate_slot(
            interview.interviewer_user_id, new_start_time, new_end_time, config, now=now
        )
        if not is_available:
            reschedule_counter.labels(outcome="unavailable").inc()
            raise SlotUnavailableError("New time slot is not available")

        if interview.provider_event_id:
            try:
                await self.calendar.patch_event(
                    calendar_id=account.email,
                    provider_event_id=interview.provider_event_id,
                    start=new_start_time,
                    end=new_end_time,
                    timezone=interview.timezone,
                )
            except CalendarProviderError:
                calendar_failure_counter.labels(operation="patch_event").inc()
                reschedule_counter.labels(outcome="calendar_error").inc()
                raise

        updated = await self.store.update_interview(interview_id, {
            "start_time": new_start_time,
            "end_time": new_end_time,
            "status": InterviewStatus.RESCHEDULED,
        })

        reschedule_counter.labels(outcome="rescheduled").inc()
        logger.info(f"[Reschedule] Interview {interview_id} moved to {new_start_time.isoformat()}")
        return updated

    async def cancel_interview(self, interview_id: str) -> Interview:
        """
        Cancel an interview. Idempotent: an already cancelled interview is
        returned untouched. A failing calendar delete is logged and the
        interview is still marked cancelled.
        """
        interview = await self.get_interview(interview_id)

        if interview.status == InterviewStatus.CANCELLED:
            logger.info(f"[Cancel] Interview {interview_id} already cancelled")
            return interview

        account = await self.availability.require_account(interview.interviewer_user_id)

        if interview.provider_event_id:
            try:
                await self.calendar.delete_event(
                    calendar_id=account.email,
                    provider_event_id=interview.provider_event_id,
                    notify_attendees=True,
                )
                logger.info(f"[Cancel] Calendar event {interview.provider_event_id} deleted")
            except Exception as e:
                calendar_failure_counter.labels(operation="delete_event").inc()
                logger.warning(f"[Calendar] Failed to delete event {interview.provider_event_id}: {e}")

        updated = await self.store.update_interview(interview_id, {"status": InterviewStatus.CANCELLED})

        cancellation_counter.labels(outcome="cancelled").inc()
        logger.info(f"[Cancel] Interview {interview_id} cancelled")
        return updated
