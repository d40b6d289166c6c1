"""Keeps listing filter state, the query string and the computed results in step.

The listing view holds one :class:`FilterStateSynchronizer`. Every filter
change updates local state, rewrites the query string through the host
(replacing it, never appending history) and recomputes the filtered and
sorted events. On first load the direction is reversed: query string ->
spec -> local state -> results.
"""

from __future__ import annotations

import logging
from typing import Protocol
from urllib.parse import parse_qs, urlencode

from pydantic import ValidationError

from eventx.domain.models import (
    ALL,
    DateRange,
    Event,
    FilterSpec,
    SortBy,
    SortOrder,
)
from eventx.services.filters import filter_events
from eventx.services.sorting import sort_events

logger = logging.getLogger(__name__)

# FilterSpec field -> query-string key
PARAM_SEARCH = "search"
PARAM_TYPE = "type"
PARAM_CATEGORY = "category"
PARAM_SORT_BY = "sortBy"
PARAM_SORT_ORDER = "sortOrder"
PARAM_DATE_START = "dateStart"
PARAM_DATE_END = "dateEnd"


class QueryStringHost(Protocol):
    """Where the current query string lives (a browser URL, a request, ...)."""

    def get_query(self) -> str: ...

    def replace_query(self, query: str) -> None: ...


class EventSource(Protocol):
    def list_all(self) -> list[Event]: ...


def to_query_string(spec: FilterSpec) -> str:
    """Serialize *spec*; empty search and unset dates are omitted."""
    params: dict[str, str] = {}
    if spec.search_text:
        params[PARAM_SEARCH] = spec.search_text
    params[PARAM_TYPE] = getattr(spec.event_type, "value", spec.event_type)
    params[PARAM_CATEGORY] = spec.category
    params[PARAM_SORT_BY] = spec.sort_by.value
    params[PARAM_SORT_ORDER] = spec.sort_order.value
    if spec.date_range.start:
        params[PARAM_DATE_START] = spec.date_range.start.isoformat()
    if spec.date_range.end:
        params[PARAM_DATE_END] = spec.date_range.end.isoformat()
    return urlencode(params)


def _enum_or_default(enum_cls, raw: str | None, default):
    try:
        return enum_cls(raw) if raw else default
    except ValueError:
        logger.debug("Ignoring unknown %s value %r", enum_cls.__name__, raw)
        return default


def _date_or_none(raw: str | None):
    try:
        return DateRange(start=raw).start
    except ValidationError:
        logger.debug("Ignoring malformed date bound %r", raw)
        return None


def parse_query_params(params: dict[str, str | None]) -> FilterSpec:
    """Build a FilterSpec from already-decoded query parameters.

    Missing or unrecognised values fall back to the defaults.
    """
    return FilterSpec(
        search_text=params.get(PARAM_SEARCH) or "",
        event_type=params.get(PARAM_TYPE) or ALL,
        category=params.get(PARAM_CATEGORY) or ALL,
        sort_by=_enum_or_default(SortBy, params.get(PARAM_SORT_BY), SortBy.START_TIME),
        sort_order=_enum_or_default(
            SortOrder, params.get(PARAM_SORT_ORDER), SortOrder.ASC
        ),
        date_range=DateRange(
            start=_date_or_none(params.get(PARAM_DATE_START)),
            end=_date_or_none(params.get(PARAM_DATE_END)),
        ),
    )


def parse_query_string(query: str) -> FilterSpec:
    """Parse a raw query string (with or without a leading ``?``)."""
    parsed = parse_qs(query.lstrip("?"), keep_blank_values=False)
    return parse_query_params({key: values[0] for key, values in parsed.items()})


def apply_spec(events: list[Event], spec: FilterSpec) -> list[Event]:
    """Filter then sort *events* according to *spec*."""
    return sort_events(filter_events(events, spec), spec.sort_by, spec.sort_order)


class FilterStateSynchronizer:
    """Owns the live FilterSpec of one listing view."""

    def __init__(self, source: EventSource, host: QueryStringHost) -> None:
        self.source = source
        self.host = host
        self.spec = FilterSpec()
        self._events: list[Event] = []
        self._results: list[Event] = []

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def results(self) -> list[Event]:
        return list(self._results)

    @property
    def has_active_filters(self) -> bool:
        return self.spec.has_active_filters

    @property
    def event_count(self) -> dict[str, int]:
        return {"total": len(self._events), "filtered": len(self._results)}

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def load(self) -> list[Event]:
        """Initial sync from the query string."""
        self.spec = parse_query_string(self.host.get_query())
        return self.refresh()

    def refresh(self) -> list[Event]:
        """Re-read the event snapshot and recompute results for the current spec."""
        self._events = self.source.list_all()
        self._results = apply_spec(self._events, self.spec)
        return self.results

    def set_search_text(self, value: str) -> list[Event]:
        return self._update(search_text=value)

    def set_event_type(self, value: str) -> list[Event]:
        return self._update(event_type=value)

    def set_category(self, value: str) -> list[Event]:
        return self._update(category=value)

    def set_date_range(self, start=None, end=None) -> list[Event]:
        return self._update(date_range=DateRange(start=start, end=end))

    def set_sort(self, sort_by: SortBy | str, sort_order: SortOrder | str) -> list[Event]:
        return self._update(sort_by=SortBy(sort_by), sort_order=SortOrder(sort_order))

    def clear_all(self) -> list[Event]:
        self.spec = FilterSpec()
        return self._sync()

    def _update(self, **changes) -> list[Event]:
        data = self.spec.model_dump()
        data.update(changes)
        self.spec = FilterSpec.model_validate(data)
        return self._sync()

    def _sync(self) -> list[Event]:
        self.host.replace_query(to_query_string(self.spec))
        return self.refresh()
