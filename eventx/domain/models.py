"""Domain models for events, users and listing filters."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta, timezone
from enum import Enum

from dateutil import tz
from dateutil.parser import isoparse
from pydantic import (
    BaseModel,
    EmailStr,
    Field,
    HttpUrl,
    field_validator,
    model_validator,
)

from eventx.config import get_settings

try:
    from enum import StrEnum
except ImportError:  # pragma: no cover - fallback for older Python runtimes

    class StrEnum(str, Enum):
        pass


ALL = "all"


class EventType(StrEnum):
    ONLINE = "Online"
    IN_PERSON = "In-Person"
    HYBRID = "Hybrid"


class EventCategory(StrEnum):
    """Suggested categories offered by forms; not enforced on stored events."""

    CONFERENCE = "Conference"
    WORKSHOP = "Workshop"
    SEMINAR = "Seminar"
    WEBINAR = "Webinar"
    OTHER = "Other"


class EventStatus(StrEnum):
    PAST = "past"
    UPCOMING = "upcoming"
    ONGOING = "ongoing"


EVENT_STATUS_LABELS = {
    EventStatus.PAST: "Completed",
    EventStatus.UPCOMING: "Upcoming",
    EventStatus.ONGOING: "Live Now",
}


class SortBy(StrEnum):
    START_TIME = "startDate"
    TITLE = "title"


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def local_timezone():
    """Timezone used for calendar-day filtering and display."""
    return tz.gettz(get_settings().timezone) or timezone.utc


def parse_instant(value: str | datetime) -> datetime:
    """Parse an ISO 8601 instant; naive values are taken as local time."""
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = isoparse(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid date: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=local_timezone())
    return parsed


def parse_calendar_date(value: str | date | None) -> date | None:
    """Parse ``YYYY-MM-DD`` as a local calendar date, not a UTC instant."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid calendar date: {value!r}") from exc


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class Organizer(BaseModel):
    name: str
    email: str


class Event(BaseModel):
    id: str = Field(default_factory=_new_id)
    title: str
    description: str
    event_type: EventType
    category: str
    start_time: datetime
    end_time: datetime
    location: str | None = None
    link: str | None = None
    organizer: Organizer
    created_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _end_after_start(self) -> Event:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    def status_at(self, now: datetime) -> EventStatus:
        if now > self.end_time:
            return EventStatus.PAST
        if now < self.start_time:
            return EventStatus.UPCOMING
        return EventStatus.ONGOING


class User(BaseModel):
    email: str
    name: str
    password_hash: str
    created_at: datetime = Field(default_factory=_utcnow)

    @property
    def display_name(self) -> str:
        return self.name or self.email.split("@")[0]

    def as_organizer(self) -> Organizer:
        return Organizer(name=self.display_name, email=self.email)


class Session(BaseModel):
    token: str
    email: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


# ---------------------------------------------------------------------------
# Listing filters
# ---------------------------------------------------------------------------


class DateRange(BaseModel):
    start: date | None = None
    end: date | None = None

    @field_validator("start", "end", mode="before")
    @classmethod
    def _calendar_date(cls, value):
        return parse_calendar_date(value)


class FilterSpec(BaseModel):
    """Normalized search/filter/sort parameters driving a listing view."""

    search_text: str = ""
    event_type: EventType | str = ALL
    category: str = ALL
    date_range: DateRange = Field(default_factory=DateRange)
    sort_by: SortBy = SortBy.START_TIME
    sort_order: SortOrder = SortOrder.ASC

    @field_validator("event_type", mode="before")
    @classmethod
    def _known_type(cls, value):
        # Unknown types are kept verbatim so they filter to nothing.
        if value in EventType._value2member_map_:
            return EventType(value)
        return value or ALL

    @field_validator("search_text", mode="before")
    @classmethod
    def _trimmed(cls, value):
        return (value or "").strip()

    @field_validator("category", mode="before")
    @classmethod
    def _blank_means_all(cls, value):
        return value or ALL

    @property
    def has_active_filters(self) -> bool:
        return bool(
            self.search_text
            or self.event_type != ALL
            or self.category != ALL
            or self.date_range.start
            or self.date_range.end
        )


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class EventInput(BaseModel):
    """Raw event form fields, validated before any conflict check."""

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    event_type: EventType
    category: str = Field(min_length=1)
    start_time: datetime
    end_time: datetime
    location: str | None = None
    link: HttpUrl | None = None

    @field_validator("title", "description", "category")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _instant(cls, value):
        return parse_instant(value)

    @field_validator("location", "link", mode="before")
    @classmethod
    def _empty_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _check_fields(self) -> EventInput:
        if self.end_time <= self.start_time:
            raise ValueError("End date must be after start date")
        minimum = get_settings().min_event_minutes
        if self.end_time - self.start_time < timedelta(minutes=minimum):
            raise ValueError(f"Event must last at least {minimum} minutes")
        if self.event_type == EventType.ONLINE and self.link is None:
            raise ValueError("Event link is required for online events")
        if self.event_type != EventType.ONLINE and not self.location:
            raise ValueError("Location is required for in-person or hybrid events")
        return self

    def normalized_location(self) -> str | None:
        return None if self.event_type == EventType.ONLINE else self.location

    def normalized_link(self) -> str | None:
        if self.event_type == EventType.IN_PERSON or self.link is None:
            return None
        return str(self.link)


class EventView(Event):
    status: EventStatus
    status_label: str

    @classmethod
    def from_event(cls, event: Event, now: datetime) -> EventView:
        status = event.status_at(now)
        return cls(
            **event.model_dump(),
            status=status,
            status_label=EVENT_STATUS_LABELS[status],
        )


class EventListing(BaseModel):
    events: list[EventView]
    total: int
    filtered: int
    has_active_filters: bool
    query: str


class SignupRequest(BaseModel):
    name: str = Field(min_length=2)
    email: EmailStr
    password: str = Field(min_length=8)
    confirm_password: str

    @model_validator(mode="after")
    def _passwords_match(self) -> SignupRequest:
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserView(BaseModel):
    email: str
    name: str


class SessionView(BaseModel):
    token: str
    user: UserView
    expires_at: datetime
