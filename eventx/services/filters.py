"""Service for filtering event listings by text, type, category and date range."""

from __future__ import annotations

from datetime import date, tzinfo

from eventx.domain.models import ALL, DateRange, Event, FilterSpec, local_timezone


def _matches_text(event: Event, search_text: str) -> bool:
    needle = search_text.lower()
    if not needle:
        return True
    return needle in event.title.lower() or needle in event.description.lower()


def _matches_type(event: Event, event_type: str) -> bool:
    return event_type == ALL or event.event_type == event_type


def _matches_category(event: Event, category: str) -> bool:
    return category == ALL or event.category == category


def event_days(event: Event, zone: tzinfo) -> tuple[date, date]:
    """Return the local calendar days on which *event* starts and ends."""
    return (
        event.start_time.astimezone(zone).date(),
        event.end_time.astimezone(zone).date(),
    )


def _matches_date_range(event: Event, date_range: DateRange, zone: tzinfo) -> bool:
    start, end = date_range.start, date_range.end
    if start is None and end is None:
        return True

    start_day, end_day = event_days(event, zone)
    if start is not None and end is not None:
        return start_day <= end and end_day >= start
    if start is not None:
        return start_day <= start <= end_day
    return end_day <= end


def filter_events(
    events: list[Event], spec: FilterSpec, zone: tzinfo | None = None
) -> list[Event]:
    """Return the events matching every part of *spec*, preserving order.

    Date bounds compare calendar days in *zone* (the configured local
    timezone by default); time of day is ignored.
    """
    zone = zone or local_timezone()
    return [
        event
        for event in events
        if _matches_text(event, spec.search_text)
        and _matches_type(event, spec.event_type)
        and _matches_category(event, spec.category)
        and _matches_date_range(event, spec.date_range, zone)
    ]
