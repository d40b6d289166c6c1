"""Service for detecting scheduling conflicts between events."""

from __future__ import annotations

from datetime import tzinfo

from eventx.domain.models import Event, local_timezone

_TIME_FORMAT = "%b %d, %Y %I:%M %p"


def _overlaps(candidate: Event, existing: Event) -> bool:
    return (
        candidate.start_time < existing.end_time
        and existing.start_time < candidate.end_time
    )


def has_conflict(existing_events: list[Event], candidate: Event) -> bool:
    """Return True if *candidate* overlaps any of *existing_events*.

    Overlap rule: conflict if candidate.start < existing.end AND existing.start < candidate.end.
    Exact boundary touches (end == start) are NOT considered conflicts.
    When checking an update, the caller must drop the candidate's previous
    version from *existing_events* first.
    """
    return any(_overlaps(candidate, event) for event in existing_events)


def find_conflicts(existing_events: list[Event], candidate: Event) -> list[Event]:
    """Return the existing events that overlap *candidate*, in input order."""
    return [event for event in existing_events if _overlaps(candidate, event)]


def describe_conflicts(events: list[Event], zone: tzinfo | None = None) -> list[str]:
    """Format conflicting events as ``"<title> (<start> - <end>)"`` lines."""
    zone = zone or local_timezone()
    lines = []
    for event in events:
        start = event.start_time.astimezone(zone).strftime(_TIME_FORMAT)
        end = event.end_time.astimezone(zone).strftime(_TIME_FORMAT)
        lines.append(f"{event.title} ({start} - {end})")
    return lines
