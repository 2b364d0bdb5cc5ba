"""
Calendar provider capability interface.

The availability and booking services only talk to a calendar through
``CalendarProvider``; concrete adapters translate these calls into a
provider's API (see ``google_calendar``) or keep events in memory
(see ``memory``).
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Reminder:
    method: str  # email, popup
    minutes: int


# 24h email + 30min popup on every booked interview
DEFAULT_REMINDERS = (
    Reminder(method="email", minutes=24 * 60),
    Reminder(method="popup", minutes=30),
)


@dataclass(frozen=True)
class ConferenceRequest:
    request_id: str = field(default_factory=lambda: f"meet-{uuid.uuid4().hex}")
    solution: str = "hangoutsMeet"


@dataclass(frozen=True)
class CreatedEvent:
    provider_event_id: Optional[str]
    meeting_join_url: Optional[str] = None


class CalendarProvider(ABC):
    """
    Abstract base class for calendar integrations.

    ``calendar_id`` is the connected account's calendar email in every call.
    All methods either complete or raise; none of them retries.
    """

    name: str = "calendar"

    @abstractmethod
    async def get_free_busy(
        self,
        calendar_ids: List[str],
        range_start: str,
        range_end: str,
    ) -> Dict[str, List[Dict[str, str]]]:
        """
        Return busy intervals per calendar id.

        Args:
            calendar_ids: Calendar emails to query
            range_start: ISO 8601 start of the query window
            range_end: ISO 8601 end of the query window

        Returns:
            Mapping of calendar id to ordered ``{"start", "end"}`` ISO pairs
        """

    @abstractmethod
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
        """Create an event and report its id and joinable meeting link."""

    @abstractmethod
    async def patch_event(
        self,
        calendar_id: str,
        provider_event_id: str,
        start: datetime,
        end: datetime,
        timezone: str,
    ) -> None:
        """Move an existing event."""

    @abstractmethod
    async def delete_event(
        self,
        calendar_id: str,
        provider_event_id: str,
        notify_attendees: bool = True,
    ) -> None:
        """Delete an event, optionally notifying every attendee."""
