from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_instant(value: str) -> datetime:
    # Calendar APIs answer with a trailing "Z" that older fromisoformat rejects
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return ensure_aware(datetime.fromisoformat(value))


def check_timezone(tz: str) -> str:
    try:
        ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone: {tz}")
    return tz


# === Scheduling Configuration ===

class WorkingHours(BaseModel):
    start: int = Field(9, ge=0, le=23, description="First working hour (0-23)")
    end: int = Field(17, ge=1, le=24, description="Working hours end, exclusive (1-24)")
    days: List[int] = Field(
        default_factory=lambda: [1, 2, 3, 4, 5],
        description="Active weekdays, 0 = Sunday ... 6 = Saturday"
    )
    timezone: str = Field("Africa/Johannesburg", description="IANA timezone identifier")

    @field_validator("days")
    @classmethod
    def validate_days(cls, days: List[int]) -> List[int]:
        if any(day < 0 or day > 6 for day in days):
            raise ValueError("days must be within 0..6 (0 = Sunday)")
        return sorted(set(days))

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, tz: str) -> str:
        return check_timezone(tz)

    @model_validator(mode="after")
    def check_range(self) -> "WorkingHours":
        if self.start >= self.end:
            raise ValueError("start hour must be before end hour")
        return self

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


class AvailabilityConfig(BaseModel):
    working_hours: WorkingHours = Field(default_factory=WorkingHours)
    slot_interval: int = Field(30, gt=0, description="Minutes between candidate slot starts")
    meeting_duration: int = Field(60, gt=0, description="Meeting length in minutes")
    buffer_before: int = Field(15, ge=0, description="Minutes of padding before each busy window")
    buffer_after: int = Field(15, ge=0, description="Minutes of padding after each busy window")
    min_notice_hours: float = Field(24, ge=0, description="Shortest lead time between now and a slot")


# === Time Intervals ===

class BusyWindow(BaseModel):
    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def make_aware(cls, value: datetime) -> datetime:
        return ensure_aware(value)

    @classmethod
    def from_provider(cls, payload: dict) -> "BusyWindow":
        return cls(start=parse_instant(payload["start"]), end=parse_instant(payload["end"]))

    def buffered(self, before_minutes: int, after_minutes: int) -> "BusyWindow":
        return BusyWindow(
            start=self.start - timedelta(minutes=before_minutes),
            end=self.end + timedelta(minutes=after_minutes),
        )


class TimeSlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    def overlaps(self, window: BusyWindow) -> bool:
        return self.start < window.end and self.end > window.start


# === Persistent Entities ===

class InterviewStatus(str, Enum):
    SCHEDULED = "scheduled"
    RESCHEDULED = "rescheduled"
    CANCELLED = "cancelled"


class ConnectedAccount(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    provider: str
    email: str


class Interview(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    organization_id: str
    job_id: Optional[str] = None
    pool_id: Optional[str] = None
    candidate_name: str
    candidate_email: str
    candidate_phone: Optional[str] = None
    interviewer_user_id: str
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    timezone: str
    provider: str
    provider_event_id: Optional[str] = None
    meeting_join_url: Optional[str] = None
    location: Optional[str] = None
    status: InterviewStatus = InterviewStatus.SCHEDULED
    reminder_sent: bool = False
    feedback: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def make_aware(cls, value: datetime) -> datetime:
        return ensure_aware(value)


# === API Request / Response Models ===

class AvailabilityRequest(BaseModel):
    interviewer_user_id: str = Field(..., description="Interviewer whose calendar is checked")
    start_date: datetime = Field(..., description="Start of the date range")
    end_date: datetime = Field(..., description="End of the date range (inclusive day)")
    working_hours: Optional[WorkingHours] = None
    slot_interval: Optional[int] = Field(None, gt=0)
    meeting_duration: Optional[int] = Field(None, gt=0)
    buffer_before: Optional[int] = Field(None, ge=0)
    buffer_after: Optional[int] = Field(None, ge=0)
    min_notice_hours: Optional[float] = Field(None, ge=0)


class PanelAvailabilityRequest(BaseModel):
    interviewer_user_ids: List[str] = Field(..., description="All interviewers that must attend")
    start_date: datetime
    end_date: datetime
    availability_config: Optional[AvailabilityConfig] = Field(
        None, description="Shared slot grid for every panelist; defaults from settings"
    )


class AvailabilityResponse(BaseModel):
    slots: List[TimeSlot]
    count: int


class BookingRequest(BaseModel):
    organization_id: str
    interviewer_user_id: str
    candidate_name: str
    candidate_email: EmailStr
    candidate_phone: Optional[str] = None
    job_id: Optional[str] = None
    pool_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    timezone: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def make_aware(cls, value: datetime) -> datetime:
        return ensure_aware(value)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, tz: Optional[str]) -> Optional[str]:
        return tz if tz is None else check_timezone(tz)

    @model_validator(mode="after")
    def check_interval(self) -> "BookingRequest":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class RescheduleRequest(BaseModel):
    new_start_time: datetime
    new_end_time: datetime

    @field_validator("new_start_time", "new_end_time")
    @classmethod
    def make_aware(cls, value: datetime) -> datetime:
        return ensure_aware(value)

    @model_validator(mode="after")
    def check_interval(self) -> "RescheduleRequest":
        if self.new_end_time <= self.new_start_time:
            raise ValueError("new_end_time must be after new_start_time")
        return self


class CancelResponse(BaseModel):
    status: InterviewStatus
    interview_id: str
