"""In-memory session store with explicit expiry.

Sessions map an opaque bearer token to a user and that user's delegated
mailbox credentials. Expired entries are dropped whenever the store is touched,
so memory stays bounded by the number of live sessions.
"""

from __future__ import annotations

import secrets
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Protocol

import structlog

logger = structlog.get_logger()


class CredentialStore(Protocol):
    """Source of delegated mailbox credentials for a user."""

    def get_credentials(self, user_id: str) -> Any | None: ...


@dataclass(frozen=True)
class UserSession:
    """A signed-in user and their delegated credentials."""

    token: str
    user_id: str
    credentials: Any
    email: str | None
    expires_at: float


class InMemorySessionStore:
    """Process-local session store with a fixed time-to-live."""

    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.monotonic) -> None:
        """Create a store.

        Args:
            ttl_seconds: Lifetime of each session from creation.
            clock: Monotonic time source, injectable for tests.
        """
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._by_token: dict[str, UserSession] = {}
        self._token_by_user: dict[str, str] = {}

    def create_session(self, user_id: str, credentials: Any, email: str | None = None) -> str:
        """Start a session for a user, replacing any previous one, and return its token."""
        token = secrets.token_urlsafe(32)
        session = UserSession(
            token=token,
            user_id=user_id,
            credentials=credentials,
            email=email,
            expires_at=self._clock() + self._ttl_seconds,
        )
        with self._lock:
            self._purge_expired()
            previous = self._token_by_user.pop(user_id, None)
            if previous is not None:
                self._by_token.pop(previous, None)
            self._by_token[token] = session
            self._token_by_user[user_id] = token

        logger.info("session_created", user_id=user_id)
        return token

    def resolve(self, token: str) -> UserSession | None:
        """Return the live session for a bearer token, if any."""
        with self._lock:
            self._purge_expired()
            return self._by_token.get(token)

    def get_credentials(self, user_id: str) -> Any | None:
        with self._lock:
            self._purge_expired()
            token = self._token_by_user.get(user_id)
            if token is None:
                return None
            return self._by_token[token].credentials

    def revoke(self, user_id: str) -> bool:
        """End a user's session. Returns False when there was none."""
        with self._lock:
            token = self._token_by_user.pop(user_id, None)
            if token is None:
                return False
            self._by_token.pop(token, None)

        logger.info("session_revoked", user_id=user_id)
        return True

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired()
            return len(self._by_token)

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [s for s in self._by_token.values() if s.expires_at <= now]
        for session in expired:
            del self._by_token[session.token]
            if self._token_by_user.get(session.user_id) == session.token:
                del self._token_by_user[session.user_id]
        if expired:
            logger.debug("sessions_expired", count=len(expired))
