"""Service for sign-up, login and session handling.

Passwords are stored as salted PBKDF2-HMAC-SHA256 digests and sessions are
random opaque tokens with an expiry.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone

from eventx.config import get_settings
from eventx.domain.errors import AuthenticationError, DuplicateUserError
from eventx.domain.models import LoginRequest, Session, SignupRequest, User
from eventx.repos.memory import SessionRepository, UserRepository

logger = logging.getLogger(__name__)

_ALGORITHM = "pbkdf2_sha256"


def hash_password(password: str, iterations: int | None = None) -> str:
    """Return ``pbkdf2_sha256$<iterations>$<salt>$<hex digest>``."""
    iterations = iterations or get_settings().password_iterations
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode(), salt.encode(), iterations
    ).hex()
    return f"{_ALGORITHM}${iterations}${salt}${digest}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        algorithm, iterations, salt, digest = encoded.split("$")
    except ValueError:
        return False
    if algorithm != _ALGORITHM:
        return False
    candidate = hashlib.pbkdf2_hmac(
        "sha256", password.encode(), salt.encode(), int(iterations)
    ).hex()
    return hmac.compare_digest(candidate, digest)


class AuthService:
    """Creates users and resolves session tokens to users."""

    def __init__(self, users: UserRepository, sessions: SessionRepository) -> None:
        self.users = users
        self.sessions = sessions

    def signup(self, payload: SignupRequest, now: datetime | None = None) -> Session:
        email = payload.email.lower()
        if self.users.exists(email):
            raise DuplicateUserError(f"An account for {email} already exists")
        user = User(
            email=email,
            name=payload.name.strip(),
            password_hash=hash_password(payload.password),
        )
        self.users.add(user)
        logger.info("Registered user %s", email)
        return self.open_session(user, now)

    def login(self, payload: LoginRequest, now: datetime | None = None) -> Session:
        email = payload.email.lower()
        user = self.users.get(email)
        if user is None or not verify_password(payload.password, user.password_hash):
            logger.warning("Failed login for %s", email)
            raise AuthenticationError("Invalid email or password")
        return self.open_session(user, now)

    def open_session(self, user: User, now: datetime | None = None) -> Session:
        now = now or datetime.now(timezone.utc)
        self.sessions.purge_expired(now)
        session = Session(
            token=secrets.token_urlsafe(32),
            email=user.email,
            expires_at=now + timedelta(days=get_settings().session_ttl_days),
        )
        self.sessions.add(session)
        return session

    def logout(self, token: str | None) -> None:
        if token:
            self.sessions.delete(token)

    def current_user(self, token: str | None, now: datetime | None = None) -> User:
        """Resolve *token* to a user or raise AuthenticationError."""
        if not token:
            raise AuthenticationError("Not logged in")
        session = self.sessions.get(token)
        now = now or datetime.now(timezone.utc)
        if session is None or session.is_expired(now):
            if session is not None:
                self.sessions.delete(token)
            raise AuthenticationError("Session expired")
        user = self.users.get(session.email)
        if user is None:
            raise AuthenticationError("Not logged in")
        return user
