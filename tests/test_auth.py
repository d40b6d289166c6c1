"""Tests for password hashing, sessions and the auth routes."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from eventx.domain.errors import AuthenticationError, DuplicateUserError
from eventx.domain.models import LoginRequest, SignupRequest
from eventx.main import app, event_repo, session_repo, user_repo
from eventx.repos.memory import SessionRepository, UserRepository
from eventx.services.auth import AuthService, hash_password, verify_password


@pytest.fixture(autouse=True)
def _clear_repos():
    """Reset in-memory repos before each test."""
    event_repo._store.clear()
    user_repo._store.clear()
    session_repo._store.clear()
    yield
    event_repo._store.clear()
    user_repo._store.clear()
    session_repo._store.clear()


@pytest.fixture()
def client():
    return TestClient(app)


@pytest.fixture()
def service() -> AuthService:
    return AuthService(users=UserRepository(), sessions=SessionRepository())


def _signup_payload(**overrides) -> dict:
    payload = dict(
        name="Grace Hopper",
        email="grace@example.com",
        password="correct horse",
        confirm_password="correct horse",
    )
    payload.update(overrides)
    return payload


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def test_hash_is_salted_and_verifiable():
    first = hash_password("s3cret-pass", iterations=1000)
    second = hash_password("s3cret-pass", iterations=1000)

    assert first != second
    assert "s3cret-pass" not in first
    assert verify_password("s3cret-pass", first)
    assert not verify_password("wrong-pass", first)


def test_verify_rejects_malformed_hash():
    assert verify_password("anything", "plaintext") is False


# ---------------------------------------------------------------------------
# AuthService
# ---------------------------------------------------------------------------


def test_signup_then_login(service: AuthService):
    session = service.signup(SignupRequest(**_signup_payload()))
    assert service.current_user(session.token).email == "grace@example.com"

    again = service.login(LoginRequest(email="Grace@Example.com", password="correct horse"))
    assert again.token != session.token


def test_signup_duplicate_email(service: AuthService):
    service.signup(SignupRequest(**_signup_payload()))
    with pytest.raises(DuplicateUserError):
        service.signup(SignupRequest(**_signup_payload()))


def test_login_wrong_password(service: AuthService):
    service.signup(SignupRequest(**_signup_payload()))
    with pytest.raises(AuthenticationError):
        service.login(LoginRequest(email="grace@example.com", password="nope"))


def test_expired_session_is_rejected_and_dropped(service: AuthService):
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    session = service.signup(SignupRequest(**_signup_payload()), now=now)

    with pytest.raises(AuthenticationError):
        service.current_user(session.token, now=now + timedelta(days=8))
    assert service.sessions.get(session.token) is None


def test_logout_invalidates_token(service: AuthService):
    session = service.signup(SignupRequest(**_signup_payload()))
    service.logout(session.token)
    with pytest.raises(AuthenticationError):
        service.current_user(session.token)


def test_session_token_is_not_the_email(service: AuthService):
    session = service.signup(SignupRequest(**_signup_payload()))
    assert "grace" not in session.token


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


def test_signup_sets_cookie_and_session(client: TestClient):
    resp = client.post("/auth/signup", json=_signup_payload())
    assert resp.status_code == 201
    assert resp.json()["user"] == {"email": "grace@example.com", "name": "Grace Hopper"}
    assert "session" in resp.cookies

    session_resp = client.get("/auth/session")
    assert session_resp.json()["email"] == "grace@example.com"


def test_signup_password_mismatch(client: TestClient):
    resp = client.post("/auth/signup", json=_signup_payload(confirm_password="different"))
    assert resp.status_code == 422


def test_signup_short_password(client: TestClient):
    resp = client.post(
        "/auth/signup", json=_signup_payload(password="short", confirm_password="short")
    )
    assert resp.status_code == 422


def test_signup_duplicate_returns_409(client: TestClient):
    client.post("/auth/signup", json=_signup_payload())
    resp = client.post("/auth/signup", json=_signup_payload())
    assert resp.status_code == 409


def test_login_bad_credentials_returns_401(client: TestClient):
    client.post("/auth/signup", json=_signup_payload())
    client.post("/auth/logout")

    resp = client.post("/auth/login", json={"email": "grace@example.com", "password": "bad"})
    assert resp.status_code == 401


def test_logout_clears_session(client: TestClient):
    client.post("/auth/signup", json=_signup_payload())
    client.post("/auth/logout")
    assert client.get("/auth/session").json() is None


def test_bearer_token_is_accepted(client: TestClient):
    token = client.post("/auth/signup", json=_signup_payload()).json()["token"]
    fresh = TestClient(app)

    resp = fresh.get("/auth/session", headers={"Authorization": f"Bearer {token}"})
    assert resp.json()["email"] == "grace@example.com"


def test_events_require_login(client: TestClient):
    assert client.get("/events").status_code == 401


def test_new_session_purges_expired_ones(service: AuthService):
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    old = service.signup(SignupRequest(**_signup_payload()), now=now)

    service.login(
        LoginRequest(email="grace@example.com", password="correct horse"),
        now=now + timedelta(days=30),
    )
    assert service.sessions.get(old.token) is None
