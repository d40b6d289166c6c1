"""Domain errors raised by the service layer and mapped to HTTP in the routes."""

from __future__ import annotations

from eventx.domain.models import Event

TIME_CONFLICT_MESSAGE = "Time conflict detected! Please choose a different time slot."


class EventXError(Exception):
    """Base class for domain errors."""


class EventNotFoundError(EventXError):
    def __init__(self, event_id: str) -> None:
        super().__init__(f"Event {event_id} not found")
        self.event_id = event_id


class NotOrganizerError(EventXError):
    """Raised when a user edits or deletes an event they did not create."""


class TimeConflictError(EventXError):
    """Raised when a save would overlap one of the organizer's events."""

    def __init__(self, conflicting: list[Event], details: list[str]) -> None:
        super().__init__(TIME_CONFLICT_MESSAGE)
        self.conflicting = conflicting
        self.details = details


class AuthenticationError(EventXError):
    """Bad credentials, or a missing/expired session."""


class DuplicateUserError(EventXError):
    pass
