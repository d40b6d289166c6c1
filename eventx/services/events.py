"""Service handling event form submissions: create, update and delete."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from eventx.domain.errors import (
    EventNotFoundError,
    NotOrganizerError,
    TimeConflictError,
)
from eventx.domain.models import Event, EventInput, User
from eventx.repos.memory import EventRepository
from eventx.services.conflicts import describe_conflicts, find_conflicts, has_conflict

logger = logging.getLogger(__name__)


class EventService:
    """Applies the per-organizer no-overlap rule before every write."""

    def __init__(self, repo: EventRepository) -> None:
        self.repo = repo

    def get(self, event_id: str) -> Event:
        event = self.repo.get(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    def get_owned(self, event_id: str, user: User) -> Event:
        event = self.get(event_id)
        if event.organizer.email != user.email:
            raise NotOrganizerError("This event belongs to another organizer")
        return event

    def create(self, payload: EventInput, user: User, now: datetime | None = None) -> Event:
        event = Event(
            title=payload.title,
            description=payload.description,
            event_type=payload.event_type,
            category=payload.category,
            start_time=payload.start_time,
            end_time=payload.end_time,
            location=payload.normalized_location(),
            link=payload.normalized_link(),
            organizer=user.as_organizer(),
            created_at=now or datetime.now(timezone.utc),
        )
        self._ensure_no_conflict(self.repo.list_for_organizer(user.email), event)
        self.repo.add(event)
        logger.info("Created event %s (%s) for %s", event.id, event.title, user.email)
        return event

    def update(self, event_id: str, payload: EventInput, user: User) -> Event:
        """Replace an event; id, created_at and organizer are preserved."""
        original = self.get_owned(event_id, user)
        updated = Event(
            id=original.id,
            title=payload.title,
            description=payload.description,
            event_type=payload.event_type,
            category=payload.category,
            start_time=payload.start_time,
            end_time=payload.end_time,
            location=payload.normalized_location(),
            link=payload.normalized_link(),
            organizer=original.organizer,
            created_at=original.created_at,
        )
        others = [
            e
            for e in self.repo.list_for_organizer(original.organizer.email)
            if e.id != original.id
        ]
        self._ensure_no_conflict(others, updated)
        self.repo.update(updated)
        logger.info("Updated event %s", updated.id)
        return updated

    def delete(self, event_id: str, user: User) -> None:
        self.get_owned(event_id, user)
        self.repo.delete(event_id)
        logger.info("Deleted event %s", event_id)

    def _ensure_no_conflict(self, existing: list[Event], candidate: Event) -> None:
        if has_conflict(existing, candidate):
            conflicts = find_conflicts(existing, candidate)
            logger.info(
                "Rejected %r: overlaps %d existing event(s)",
                candidate.title,
                len(conflicts),
            )
            raise TimeConflictError(conflicts, describe_conflicts(conflicts))
