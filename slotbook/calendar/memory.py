import logging
import uuid
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional, Set

from slotbook.base.exceptions import CalendarProviderError
from slotbook.base.models import BusyWindow, parse_instant
from slotbook.calendar.provider import (
    DEFAULT_REMINDERS,
    CalendarProvider,
    ConferenceRequest,
    CreatedEvent,
)

logger = logging.getLogger("booking.memory_calendar")


class InMemoryCalendarProvider(CalendarProvider):
    """
    Calendar kept in process memory.

    Used for local development (``CALENDAR_BACKEND=memory``) and tests.
    Events created here show up as busy time, like on a real calendar.
    Operations named in ``failing_operations`` raise ``CalendarProviderError``.
    """

    name = "memory"

    def __init__(self, failing_operations: Optional[Set[str]] = None, omit_event_ids: bool = False):
        self.busy: Dict[str, List[BusyWindow]] = defaultdict(list)
        self.events: Dict[str, dict] = {}
        self.calls: List[tuple] = []
        self.failing_operations = set(failing_operations or ())
        self.omit_event_ids = omit_event_ids

    def add_busy(self, calendar_id: str, start: datetime, end: datetime) -> None:
        self.busy[calendar_id].append(BusyWindow(start=start, end=end))

    def calls_for(self, operation: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == operation]

    def _record(self, operation: str, *args) -> None:
        self.calls.append((operation, *args))
        if operation in self.failing_operations:
            raise CalendarProviderError(operation, "simulated provider failure")

    async def get_free_busy(
        self,
        calendar_ids: List[str],
        range_start: str,
        range_end: str,
    ) -> Dict[str, List[Dict[str, str]]]:
        self._record("freebusy", tuple(calendar_ids), range_start, range_end)
        window = BusyWindow(start=parse_instant(range_start), end=parse_instant(range_end))

        result = {}
        for calendar_id in calendar_ids:
            windows = list(self.busy.get(calendar_id, []))
            windows += [
                BusyWindow(start=event["start"], end=event["end"])
                for event in self.events.values()
                if event["calendar_id"] == calendar_id
            ]
            result[calendar_id] = [
                {"start": w.start.isoformat(), "end": w.end.isoformat()}
                for w in sorted(windows, key=lambda w: w.start)
                if w.start < window.end and w.end > window.start
            ]
        return result

    async def create_event(
        self,
        calendar_id: str,
        title: str,
        description: Optional[str],
        start: datetime,
        end: datetime,
        timezone: str,
        attendee_emails: List[str],
        conference_request: Optional[ConferenceRequest] = None,
        reminders: tuple = DEFAULT_REMINDERS,
    ) -> CreatedEvent:
        self._record("create_event", calendar_id, title, start, end)
        if self.omit_event_ids:
            return CreatedEvent(provider_event_id=None)

        event_id = uuid.uuid4().hex
        meeting_link = None
        if conference_request is not None:
            meeting_link = f"https://meet.example.com/{conference_request.request_id}"

        self.events[event_id] = {
            "calendar_id": calendar_id,
            "title": title,
            "description": description,
            "start": start,
            "end": end,
            "timezone": timezone,
            "attendees": list(attendee_emails),
            "reminders": list(reminders),
            "meeting_link": meeting_link,
        }
        logger.info(f"[EventCreate] Created in-memory event {event_id}")
        return CreatedEvent(provider_event_id=event_id, meeting_join_url=meeting_link)

    async def patch_event(
        self,
        calendar_id: str,
        provider_event_id: str,
        start: datetime,
        end: datetime,
        timezone: str,
    ) -> None:
        self._record("patch_event", calendar_id, provider_event_id, start, end)
        event = self.events.get(provider_event_id)
        if event is None:
            raise CalendarProviderError("patch_event", f"unknown event {provider_event_id}")
        event.update(start=start, end=end, timezone=timezone)

    async def delete_event(
        self,
        calendar_id: str,
        provider_event_id: str,
        notify_attendees: bool = True,
    ) -> None:
        self._record("delete_event", calendar_id, provider_event_id, notify_attendees)
        if self.events.pop(provider_event_id, None) is None:
            raise CalendarProviderError("delete_event", f"unknown event {provider_event_id}")
