"""FastAPI application factory.

The OAuth sign-in exchange lives outside this service: whatever performs it
registers the resulting delegated credentials with the session store and hands
the bearer token to the client.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from unsubscribe_finder.api.models import HealthResponse
from unsubscribe_finder.api.routes import auth_router, gmail_router
from unsubscribe_finder.config import Settings
from unsubscribe_finder.exceptions import (
    AuthExpiredError,
    CredentialsMissingError,
    InvalidInputError,
    RateLimitExceededError,
    UnsubscribeFinderError,
)
from unsubscribe_finder.gmail.client import MailboxFactory
from unsubscribe_finder.pipeline import ActionRecorder, CandidatePipeline
from unsubscribe_finder.ratelimit import FixedWindowRateLimiter, RateLimiter
from unsubscribe_finder.sessions import InMemorySessionStore

logger = structlog.get_logger()


def _error(status_code: int, message: str, details: str | None = None) -> JSONResponse:
    content: dict[str, str] = {"error": message}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def _install_error_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(InvalidInputError)
    async def _invalid_input(request: Request, exc: InvalidInputError) -> JSONResponse:
        return _error(400, str(exc))

    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error(400, "Invalid request parameters", str(exc.errors()) if settings.debug else None)

    @app.exception_handler(CredentialsMissingError)
    async def _credentials_missing(request: Request, exc: CredentialsMissingError) -> JSONResponse:
        return _error(401, str(exc))

    @app.exception_handler(AuthExpiredError)
    async def _auth_expired(request: Request, exc: AuthExpiredError) -> JSONResponse:
        return _error(401, "Gmail access token expired. Please re-authenticate.")

    @app.exception_handler(RateLimitExceededError)
    async def _rate_limited(request: Request, exc: RateLimitExceededError) -> JSONResponse:
        return _error(429, str(exc))

    @app.exception_handler(UnsubscribeFinderError)
    async def _upstream(request: Request, exc: UnsubscribeFinderError) -> JSONResponse:
        logger.error("request_failed", path=request.url.path, error_type=type(exc).__name__, error=str(exc))
        return _error(500, "Request failed", str(exc) if settings.debug else None)

    @app.exception_handler(HTTPException)
    async def _http_exception(request: Request, exc: HTTPException) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail))


def create_app(
    settings: Settings | None = None,
    *,
    session_store: InMemorySessionStore | None = None,
    mailbox_factory: MailboxFactory | None = None,
    rate_limiter: RateLimiter | None = None,
) -> FastAPI:
    """Build the API application.

    Args:
        settings: Application settings. If None, uses default settings.
        session_store: Sessions and delegated credentials. If None, a fresh
            in-memory store is created.
        mailbox_factory: Builds a mailbox gateway from credentials. If None,
            uses GmailClient.
        rate_limiter: Per-user throttle. If None, a fixed-window limiter is
            built from settings.
    """
    from unsubscribe_finder.config import get_settings

    settings = settings or get_settings()
    session_store = session_store or InMemorySessionStore(settings.session_ttl_seconds)
    rate_limiter = rate_limiter or FixedWindowRateLimiter(
        settings.rate_limit_max_requests,
        settings.rate_limit_window_seconds,
    )

    app = FastAPI(title="Unsubscribe Finder")
    app.state.settings = settings
    app.state.session_store = session_store
    app.state.rate_limiter = rate_limiter
    app.state.pipeline = CandidatePipeline(session_store, mailbox_factory, settings)
    app.state.action_recorder = ActionRecorder(session_store, mailbox_factory, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _install_error_handlers(app, settings)
    app.include_router(gmail_router)
    app.include_router(auth_router)

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse()

    return app
