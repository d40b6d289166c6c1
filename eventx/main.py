"""FastAPI application: entry point for the EventX event management service."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from eventx.config import get_settings
from eventx.domain.errors import (
    AuthenticationError,
    DuplicateUserError,
    EventNotFoundError,
    NotOrganizerError,
    TimeConflictError,
)
from eventx.domain.models import (
    EventCategory,
    EventInput,
    EventListing,
    EventType,
    EventView,
    LoginRequest,
    Session,
    SessionView,
    SignupRequest,
    SortBy,
    SortOrder,
    User,
    UserView,
)
from eventx.logging_config import setup_logging
from eventx.repos.memory import (
    EventRepository,
    EventStoreView,
    SessionRepository,
    UserRepository,
)
from eventx.services.auth import AuthService
from eventx.services.events import EventService
from eventx.services.query_state import FilterStateSynchronizer, to_query_string

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)

# ── Singletons (created at import time for simplicity) ────────────────
event_repo = EventRepository()
user_repo = UserRepository()
session_repo = SessionRepository()

auth_service = AuthService(users=user_repo, sessions=session_repo)
event_service = EventService(repo=event_repo)


class RequestQueryHost:
    """Query-string host backed by the incoming request URL."""

    def __init__(self, request: Request) -> None:
        self.query = request.url.query

    def get_query(self) -> str:
        return self.query

    def replace_query(self, query: str) -> None:
        self.query = query


# ── Error handling ────────────────────────────────────────────────────


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled error while processing %s %s", request.method, request.url.path
    )
    return JSONResponse({"detail": "Internal server error"}, status_code=500)


# ── Dependencies ──────────────────────────────────────────────────────


def _session_token(request: Request) -> str | None:
    header = request.headers.get("authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return request.cookies.get(settings.session_cookie_name)


def current_user(request: Request) -> User:
    try:
        return auth_service.current_user(_session_token(request))
    except AuthenticationError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc


def _set_session_cookie(response: Response, session: Session) -> None:
    response.set_cookie(
        settings.session_cookie_name,
        session.token,
        httponly=True,
        secure=settings.cookie_secure,
        max_age=settings.session_ttl_days * 24 * 60 * 60,
        path="/",
        samesite="lax",
    )


def _session_view(session: Session) -> SessionView:
    user = user_repo.get(session.email)
    return SessionView(
        token=session.token,
        user=UserView(email=user.email, name=user.display_name),
        expires_at=session.expires_at,
    )


# ── Routes: auth ──────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.post("/auth/signup", response_model=SessionView, status_code=201)
def signup(payload: SignupRequest, response: Response) -> SessionView:
    """Register a new account and log it in."""
    try:
        session = auth_service.signup(payload)
    except DuplicateUserError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    _set_session_cookie(response, session)
    return _session_view(session)


@app.post("/auth/login", response_model=SessionView)
def login(payload: LoginRequest, response: Response) -> SessionView:
    try:
        session = auth_service.login(payload)
    except AuthenticationError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    _set_session_cookie(response, session)
    return _session_view(session)


@app.post("/auth/logout")
def logout(request: Request, response: Response) -> dict:
    auth_service.logout(_session_token(request))
    response.delete_cookie(settings.session_cookie_name, path="/")
    return {"success": True}


@app.get("/auth/session", response_model=UserView | None)
def get_session(request: Request) -> UserView | None:
    """Return the logged-in user, or null when there is no valid session."""
    try:
        user = auth_service.current_user(_session_token(request))
    except AuthenticationError:
        return None
    return UserView(email=user.email, name=user.display_name)


# ── Routes: events ────────────────────────────────────────────────────


@app.get("/events", response_model=EventListing)
def list_events(request: Request, user: User = Depends(current_user)) -> EventListing:
    """Filtered, sorted listing of the caller's events.

    Accepts ``search``, ``type``, ``category``, ``sortBy``, ``sortOrder``,
    ``dateStart`` and ``dateEnd``; ``query`` in the response is the
    normalized query string for sharing the same view.
    """
    synchronizer = FilterStateSynchronizer(
        EventStoreView(event_repo, user.email), RequestQueryHost(request)
    )
    synchronizer.load()
    now = datetime.now(timezone.utc)
    counts = synchronizer.event_count
    return EventListing(
        events=[EventView.from_event(e, now) for e in synchronizer.results],
        total=counts["total"],
        filtered=counts["filtered"],
        has_active_filters=synchronizer.has_active_filters,
        query=to_query_string(synchronizer.spec),
    )


@app.get("/events/options")
def event_options() -> dict:
    """Choices offered by the event form and the listing filters."""
    return {
        "event_types": [t.value for t in EventType],
        "categories": [c.value for c in EventCategory],
        "sort_by": [s.value for s in SortBy],
        "sort_order": [o.value for o in SortOrder],
    }


@app.post("/events", response_model=EventView, status_code=201)
def create_event(payload: EventInput, user: User = Depends(current_user)) -> EventView:
    try:
        event = event_service.create(payload, user)
    except TimeConflictError as exc:
        raise HTTPException(
            status_code=409,
            detail={"message": str(exc), "conflicting_events": exc.details},
        ) from exc
    return EventView.from_event(event, datetime.now(timezone.utc))


@app.get("/events/{event_id}", response_model=EventView)
def get_event(event_id: str, user: User = Depends(current_user)) -> EventView:
    """Return one of the caller's events by id."""
    try:
        event = event_service.get_owned(event_id, user)
    except EventNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Event not found") from exc
    except NotOrganizerError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    return EventView.from_event(event, datetime.now(timezone.utc))


@app.put("/events/{event_id}", response_model=EventView)
def update_event(
    event_id: str, payload: EventInput, user: User = Depends(current_user)
) -> EventView:
    try:
        event = event_service.update(event_id, payload, user)
    except EventNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Event not found") from exc
    except NotOrganizerError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    except TimeConflictError as exc:
        raise HTTPException(
            status_code=409,
            detail={"message": str(exc), "conflicting_events": exc.details},
        ) from exc
    return EventView.from_event(event, datetime.now(timezone.utc))


@app.delete("/events/{event_id}", status_code=204)
def delete_event(event_id: str, user: User = Depends(current_user)) -> Response:
    try:
        event_service.delete(event_id, user)
    except EventNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Event not found") from exc
    except NotOrganizerError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    return Response(status_code=204)
