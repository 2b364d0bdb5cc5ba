import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional

import httplib2
from google.oauth2 import service_account
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from slotbook.base.config import settings
from slotbook.base.exceptions import CalendarProviderError
from slotbook.calendar.provider import (
    DEFAULT_REMINDERS,
    CalendarProvider,
    ConferenceRequest,
    CreatedEvent,
)

logger = logging.getLogger("booking.google_calendar")


class GoogleCalendarProvider(CalendarProvider):
    """
    Google Calendar adapter.

    Authenticates with a service account and impersonates the connected
    account's email (domain-wide delegation), so every call runs against
    that user's own calendar. The google client is blocking, so each
    request is executed in a worker thread on its own connection:
    httplib2.Http is not thread-safe and must not be shared between
    concurrent requests.
    """

    name = "google"

    def __init__(self, credentials_file: Optional[str] = None, scopes: Optional[List[str]] = None):
        self.credentials_file = credentials_file or settings.GOOGLE_CREDENTIALS_FILE
        self.scopes = scopes or settings.GOOGLE_CALENDAR_SCOPES
        self._credentials = None
        self._delegated: Dict[str, object] = {}
        self._services: Dict[str, object] = {}

    def _base_credentials(self):
        if self._credentials is None:
            try:
                self._credentials = service_account.Credentials.from_service_account_file(
                    self.credentials_file, scopes=self.scopes
                )
                logger.info("[GoogleCalendar] Authenticated with service account.")
            except (OSError, ValueError) as e:
                logger.exception(f"[GoogleCalendar] Failed to authenticate: {e}")
                raise
        return self._credentials

    def _credentials_for(self, subject: str):
        if subject not in self._delegated:
            self._delegated[subject] = self._base_credentials().with_subject(subject)
        return self._delegated[subject]

    def _service_for(self, subject: str):
        # Only used to build requests; execution gets a connection from _http_for
        if subject not in self._services:
            self._services[subject] = build(
                "calendar", "v3", credentials=self._credentials_for(subject), cache_discovery=False
            )
        return self._services[subject]

    def _http_for(self, subject: str) -> AuthorizedHttp:
        return AuthorizedHttp(self._credentials_for(subject), http=httplib2.Http())

    async def _execute(self, operation: str, subject: str, request):
        http = self._http_for(subject)
        try:
            return await asyncio.to_thread(request.execute, http=http)
        except HttpError as e:
            logger.error(f"[GoogleCalendar] API Error ({operation}): {e}")
            raise CalendarProviderError(operation, str(e)) from e

    async def get_free_busy(
        self,
        calendar_ids: List[str],
        range_start: str,
        range_end: str,
    ) -> Dict[str, List[Dict[str, str]]]:
        if not calendar_ids:
            return {}

        service = self._service_for(calendar_ids[0])
        request = service.freebusy().query(body={
            "timeMin": range_start,
            "timeMax": range_end,
            "items": [{"id": calendar_id} for calendar_id in calendar_ids],
        })
        response = await self._execute("freebusy", calendar_ids[0], request)

        calendars = response.get("calendars", {})
        busy: Dict[str, List[Dict[str, str]]] = {}
        for calendar_id in calendar_ids:
            entry = calendars.get(calendar_id, {})
            if entry.get("errors"):
                # An unreadable calendar must not look free
                reasons = ", ".join(err.get("reason", "unknown") for err in entry["errors"])
                raise CalendarProviderError("freebusy", f"{calendar_id}: {reasons}")
            busy[calendar_id] = [
                {"start": window["start"], "end": window["end"]}
                for window in entry.get("busy", [])
            ]

        logger.debug(f"[FreeBusy] {sum(len(v) for v in busy.values())} busy windows for {calendar_ids}")
        return busy

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
        event = {
            "summary": title,
            "description": description or "",
            "start": {
                "dateTime": start.isoformat(),
                "timeZone": timezone,
            },
            "end": {
                "dateTime": end.isoformat(),
                "timeZone": timezone,
            },
            "attendees": [{"email": email} for email in attendee_emails],
            "reminders": {
                "useDefault": False,
                "overrides": [
                    {"method": reminder.method, "minutes": reminder.minutes}
                    for reminder in reminders
                ],
            },
        }
        if conference_request is not None:
            event["conferenceData"] = {
                "createRequest": {
                    "requestId": conference_request.request_id,
                    "conferenceSolutionKey": {"type": conference_request.solution},
                }
            }

        request = self._service_for(calendar_id).events().insert(
            calendarId="primary",
            body=event,
            conferenceDataVersion=1,
            sendUpdates="all",
        )
        created_event = await self._execute("create_event", calendar_id, request)

        logger.info(f"[EventCreate] Created: {created_event.get('htmlLink')}")
        return CreatedEvent(
            provider_event_id=created_event.get("id"),
            meeting_join_url=extract_meeting_link(created_event),
        )

    async def patch_event(
        self,
        calendar_id: str,
        provider_event_id: str,
        start: datetime,
        end: datetime,
        timezone: str,
    ) -> None:
        request = self._service_for(calendar_id).events().patch(
            calendarId="primary",
            eventId=provider_event_id,
            body={
                "start": {"dateTime": start.isoformat(), "timeZone": timezone},
                "end": {"dateTime": end.isoformat(), "timeZone": timezone},
            },
        )
        await self._execute("patch_event", calendar_id, request)
        logger.info(f"[EventPatch] Moved event ID: {provider_event_id}")

    async def delete_event(
        self,
        calendar_id: str,
        provider_event_id: str,
        notify_attendees: bool = True,
    ) -> None:
        request = self._service_for(calendar_id).events().delete(
            calendarId="primary",
            eventId=provider_event_id,
            sendUpdates="all" if notify_attendees else "none",
        )
        await self._execute("delete_event", calendar_id, request)
        logger.info(f"[EventDelete] Deleted event ID: {provider_event_id}")


def extract_meeting_link(event: dict) -> Optional[str]:
    if event.get("hangoutLink"):
        return event["hangoutLink"]
    entry_points = event.get("conferenceData", {}).get("entryPoints", [])
    if entry_points:
        return entry_points[0].get("uri")
    return None
