"""Service for ordering event listings."""

from __future__ import annotations

from functools import lru_cache

from pyuca import Collator

from eventx.domain.models import Event, SortBy, SortOrder


@lru_cache
def _collator() -> Collator:
    # Loads the Unicode collation table once per process.
    return Collator()


def _title_key(event: Event) -> tuple[int, ...]:
    return _collator().sort_key(event.title)


def sort_events(
    events: list[Event],
    sort_by: SortBy = SortBy.START_TIME,
    sort_order: SortOrder = SortOrder.ASC,
) -> list[Event]:
    """Return a new, stably sorted list; *events* is left untouched.

    Titles are compared with the Unicode Collation Algorithm, so accents
    and case only break ties between otherwise equal letters. Descending
    order reverses the ascending result rather than inverting the
    comparison.
    """
    if sort_by == SortBy.TITLE:
        ordered = sorted(events, key=_title_key)
    else:
        ordered = sorted(events, key=lambda e: e.start_time)
    if sort_order == SortOrder.DESC:
        ordered.reverse()
    return ordered
