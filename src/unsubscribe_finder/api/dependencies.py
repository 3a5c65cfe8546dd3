"""FastAPI dependencies: services stored on the app and the signed-in user."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from unsubscribe_finder.pipeline import ActionRecorder, CandidatePipeline
from unsubscribe_finder.ratelimit import RateLimiter
from unsubscribe_finder.sessions import InMemorySessionStore, UserSession

_bearer = HTTPBearer(auto_error=False)


def get_session_store(request: Request) -> InMemorySessionStore:
    return request.app.state.session_store


def get_pipeline(request: Request) -> CandidatePipeline:
    return request.app.state.pipeline


def get_action_recorder(request: Request) -> ActionRecorder:
    return request.app.state.action_recorder


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def current_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    store: InMemorySessionStore = Depends(get_session_store),
) -> UserSession:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Access token required")

    session = store.resolve(credentials.credentials)
    if session is None:
        raise HTTPException(status_code=403, detail="Invalid or expired token")
    return session


def rate_limited_session(
    session: UserSession = Depends(current_session),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> UserSession:
    # RateLimitExceededError is translated by the app's exception handlers.
    limiter.hit(session.user_id)
    return session
