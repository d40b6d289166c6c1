"""In-memory repositories for events, users and sessions."""

from __future__ import annotations

from datetime import datetime

from eventx.domain.models import Event, Session, User


class EventRepository:
    """Dict-backed store for Event instances, keyed by id.

    Insertion order is kept so listings are stable between requests.
    """

    def __init__(self) -> None:
        self._store: dict[str, Event] = {}

    def add(self, event: Event) -> None:
        self._store[event.id] = event

    def get(self, event_id: str) -> Event | None:
        return self._store.get(event_id)

    def list_all(self) -> list[Event]:
        return list(self._store.values())

    def list_for_organizer(self, email: str) -> list[Event]:
        return [e for e in self._store.values() if e.organizer.email == email]

    def update(self, event: Event) -> None:
        """Replace the stored event with the same id, keeping its position."""
        if event.id not in self._store:
            raise KeyError(event.id)
        self._store[event.id] = event

    def delete(self, event_id: str) -> None:
        self._store.pop(event_id, None)


class UserRepository:
    """Dict-backed store for User instances, keyed by email."""

    def __init__(self) -> None:
        self._store: dict[str, User] = {}

    def add(self, user: User) -> None:
        self._store[user.email] = user

    def get(self, email: str) -> User | None:
        return self._store.get(email)

    def exists(self, email: str) -> bool:
        return email in self._store


class SessionRepository:
    """Dict-backed store for Session instances, keyed by token."""

    def __init__(self) -> None:
        self._store: dict[str, Session] = {}

    def add(self, session: Session) -> None:
        self._store[session.token] = session

    def get(self, token: str) -> Session | None:
        return self._store.get(token)

    def delete(self, token: str) -> None:
        self._store.pop(token, None)

    def purge_expired(self, now: datetime) -> int:
        expired = [t for t, s in self._store.items() if s.is_expired(now)]
        for token in expired:
            del self._store[token]
        return len(expired)


class EventStoreView:
    """Read-only view of one organizer's events, for per-user listings."""

    def __init__(self, repo: EventRepository, email: str) -> None:
        self.repo = repo
        self.email = email

    def list_all(self) -> list[Event]:
        return self.repo.list_for_organizer(self.email)
