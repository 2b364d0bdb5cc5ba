# slotbook/services/availability_service.py

import asyncio
import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, List, Optional, Sequence

from slotbook.base.config import AppConfig, settings
from slotbook.base.exceptions import CalendarNotConnectedError
from slotbook.base.metrics import availability_duration
from slotbook.base.models import (
    AvailabilityConfig,
    BusyWindow,
    ConnectedAccount,
    TimeSlot,
    WorkingHours,
    ensure_aware,
)
from slotbook.calendar.provider import CalendarProvider
from slotbook.store.base import InterviewStore

logger = logging.getLogger("booking.availability")


def default_availability_config(app_settings: AppConfig = settings, **overrides) -> AvailabilityConfig:
    """Build an AvailabilityConfig from settings; ``None`` overrides are ignored."""
    values = {
        "working_hours": WorkingHours(
            start=app_settings.DEFAULT_WORK_START_HOUR,
            end=app_settings.DEFAULT_WORK_END_HOUR,
            days=app_settings.DEFAULT_WORK_DAYS,
            timezone=app_settings.DEFAULT_TIMEZONE,
        ),
        "slot_interval": app_settings.DEFAULT_SLOT_INTERVAL_MINUTES,
        "meeting_duration": app_settings.DEFAULT_MEETING_DURATION_MINUTES,
        "buffer_before": app_settings.DEFAULT_BUFFER_BEFORE_MINUTES,
        "buffer_after": app_settings.DEFAULT_BUFFER_AFTER_MINUTES,
        "min_notice_hours": app_settings.DEFAULT_MIN_NOTICE_HOURS,
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    return AvailabilityConfig(**values)


# === Pure slot computation ===

def weekday_index(moment: datetime) -> int:
    """Weekday with 0 = Sunday ... 6 = Saturday."""
    return moment.isoweekday() % 7


def is_within_working_hours(moment: datetime, working_hours: WorkingHours) -> bool:
    local = moment.astimezone(working_hours.tzinfo)
    if weekday_index(local) not in working_hours.days:
        return False
    return working_hours.start <= local.hour < working_hours.end


def overlaps_busy(slot: TimeSlot, busy_windows: Iterable[BusyWindow], buffer_before: int, buffer_after: int) -> bool:
    """Buffers widen the busy windows, not the slot."""
    return any(slot.overlaps(window.buffered(buffer_before, buffer_after)) for window in busy_windows)


def working_day_bounds(day: date, working_hours: WorkingHours):
    tz = working_hours.tzinfo
    day_start = datetime.combine(day, time(hour=working_hours.start), tzinfo=tz)
    if working_hours.end == 24:
        day_end = datetime.combine(day + timedelta(days=1), time(0), tzinfo=tz)
    else:
        day_end = datetime.combine(day, time(hour=working_hours.end), tzinfo=tz)
    # Arithmetic on UTC instants so DST shifts do not distort slot lengths
    return day_start.astimezone(timezone.utc), day_end.astimezone(timezone.utc)


def iter_days(range_start: datetime, range_end: datetime, working_hours: WorkingHours):
    tz = working_hours.tzinfo
    day = ensure_aware(range_start).astimezone(tz).date()
    last_day = ensure_aware(range_end).astimezone(tz).date()
    while day <= last_day:
        yield day
        day += timedelta(days=1)


def compute_slots(
    config: AvailabilityConfig,
    busy_windows: Sequence[BusyWindow],
    range_start: datetime,
    range_end: datetime,
    now: Optional[datetime] = None,
) -> List[TimeSlot]:
    """
    Generate bookable slots for one participant.

    Walks every calendar day of the range (inclusive, in the working-hours
    timezone) and emits candidates every ``slot_interval`` minutes that fit
    inside working hours, respect the minimum notice and stay clear of every
    buffered busy window. Output is ordered and depends only on the inputs.
    """
    now = ensure_aware(now or datetime.now(timezone.utc))
    earliest_start = now + timedelta(hours=config.min_notice_hours)
    duration = timedelta(minutes=config.meeting_duration)
    step = timedelta(minutes=config.slot_interval)
    working_hours = config.working_hours

    slots: List[TimeSlot] = []
    for day in iter_days(range_start, range_end, working_hours):
        day_start, day_end = working_day_bounds(day, working_hours)

        current = day_start
        while current + duration <= day_end:
            slot = TimeSlot(start=current, end=current + duration)
            if (
                slot.start >= earliest_start
                and is_within_working_hours(slot.start, working_hours)
                and not overlaps_busy(slot, busy_windows, config.buffer_before, config.buffer_after)
            ):
                slots.append(slot)
            current += step

    return slots


def intersect_slots(slot_lists: Sequence[Sequence[TimeSlot]]) -> List[TimeSlot]:
    """
    Keep the first list's slots that every other list contains exactly.

    Only meaningful when all lists come from the same slot grid (same
    interval, duration and working hours); differing grids yield an empty
    or partial result.
    """
    if not slot_lists:
        return []

    probe, *others = slot_lists
    other_keys = [{(slot.start, slot.end) for slot in slots} for slots in others]
    return [
        slot for slot in probe
        if all((slot.start, slot.end) in keys for keys in other_keys)
    ]


# === Calendar-backed availability ===

class AvailabilityService:
    """
    Reads busy time from the calendar provider and turns it into bookable
    slots, for one interviewer or a whole panel, and re-checks a single
    interval right before it is booked.
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
        self.provider_name = app_settings.CALENDAR_PROVIDER_NAME

    async def require_account(self, user_id: str) -> ConnectedAccount:
        account = await self.store.get_connected_account(user_id, self.provider_name)
        if account is None:
            logger.warning(f"[Account] No {self.provider_name} calendar connected for {user_id}")
            raise CalendarNotConnectedError(user_id, self.provider_name)
        return account

    async def fetch_busy_windows(
        self,
        account: ConnectedAccount,
        range_start: datetime,
        range_end: datetime,
    ) -> List[BusyWindow]:
        response = await self.calendar.get_free_busy(
            [account.email],
            ensure_aware(range_start).isoformat(),
            ensure_aware(range_end).isoformat(),
        )
        return [BusyWindow.from_provider(window) for window in response.get(account.email, [])]

    async def get_available_slots(
        self,
        user_id: str,
        range_start: datetime,
        range_end: datetime,
        config: AvailabilityConfig,
        now: Optional[datetime] = None,
    ) -> List[TimeSlot]:
        account = await self.require_account(user_id)

        # Query whole local days so slots late on the last day see their busy time
        days = list(iter_days(range_start, range_end, config.working_hours))
        tz = config.working_hours.tzinfo
        query_start = datetime.combine(days[0], time(0), tzinfo=tz) if days else ensure_aware(range_start)
        query_end = (
            datetime.combine(days[-1] + timedelta(days=1), time(0), tzinfo=tz) if days else ensure_aware(range_end)
        )

        busy_windows = await self.fetch_busy_windows(account, query_start, query_end)
        with availability_duration.labels(scope="single").time():
            slots = compute_slots(config, busy_windows, range_start, range_end, now=now)

        logger.info(
            f"[SlotGen] {len(slots)} slots for {user_id} "
            f"({len(busy_windows)} busy windows, {len(days)} days)"
        )
        return slots

    async def get_available_slots_multiple(
        self,
        user_ids: Sequence[str],
        range_start: datetime,
        range_end: datetime,
        config: AvailabilityConfig,
        now: Optional[datetime] = None,
    ) -> List[TimeSlot]:
        """
        Slots every panelist can attend. All panelists share ``config``,
        which keeps their slot grids identical.
        """
        if not user_ids:
            return []

        # Freeze "now" so every panelist is filtered against the same notice threshold
        now = ensure_aware(now or datetime.now(timezone.utc))
        if len(user_ids) == 1:
            return await self.get_available_slots(user_ids[0], range_start, range_end, config, now=now)

        fetches = [
            asyncio.ensure_future(self.get_available_slots(user_id, range_start, range_end, config, now=now))
            for user_id in user_ids
        ]
        try:
            all_availability = await asyncio.gather(*fetches)
        except Exception:
            # One unreadable calendar fails the panel; stop the others and collect their outcomes
            for fetch in fetches:
                fetch.cancel()
            await asyncio.gather(*fetches, return_exceptions=True)
            raise

        with availability_duration.labels(scope="panel").time():
            intersection = intersect_slots(all_availability)

        logger.info(f"[Panel] {len(intersection)} common slots for {len(user_ids)} interviewers")
        return intersection

    async def validate_slot(
        self,
        user_id: str,
        slot_start: datetime,
        slot_end: datetime,
        config: AvailabilityConfig,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Last-moment re-check of one interval against fresh busy data.

        A small gap remains between this check and the provider accepting
        the event; a booking made by someone else inside that gap is not
        detected here.
        """
        account = await self.require_account(user_id)
        slot = TimeSlot(start=ensure_aware(slot_start), end=ensure_aware(slot_end))

        now = ensure_aware(now or datetime.now(timezone.utc))
        if slot.start < now + timedelta(hours=config.min_notice_hours):
            logger.info(f"[Validate] {user_id} {slot.start.isoformat()} is inside the minimum notice")
            return False

        # Widen the query at least as far as the buffers reach
        padding = self.settings.VALIDATION_PADDING_MINUTES
        busy_windows = await self.fetch_busy_windows(
            account,
            slot.start - timedelta(minutes=max(padding, config.buffer_after)),
            slot.end + timedelta(minutes=max(padding, config.buffer_before)),
        )

        if overlaps_busy(slot, busy_windows, config.buffer_before, config.buffer_after):
            logger.info(f"[Validate] {user_id} {slot.start.isoformat()} conflicts with busy time")
            return False
        return True
