"""Gmail and auth API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from unsubscribe_finder.api.dependencies import (
    current_session,
    get_action_recorder,
    get_pipeline,
    get_session_store,
    rate_limited_session,
)
from unsubscribe_finder.api.models import CurrentUserResponse, LogoutResponse, MarkUnsubscribedRequest
from unsubscribe_finder.models import ActionResult, EmailDetail, MailboxStats, PageResult
from unsubscribe_finder.pipeline import ActionRecorder, CandidatePipeline
from unsubscribe_finder.sessions import InMemorySessionStore, UserSession

gmail_router = APIRouter(prefix="/api/gmail", tags=["gmail"])
auth_router = APIRouter(prefix="/api/auth", tags=["auth"])


@gmail_router.get("/unsubscribe-emails", response_model=PageResult)
async def list_unsubscribe_emails(
    page: int = Query(default=1),
    limit: int | None = Query(default=None),
    sender: str | None = Query(default=None),
    page_token: str | None = Query(default=None, alias="pageToken"),
    include_archived: bool = Query(default=False, alias="includeArchived"),
    session: UserSession = Depends(rate_limited_session),
    pipeline: CandidatePipeline = Depends(get_pipeline),
) -> PageResult:
    return await pipeline.fetch_candidates(
        session.user_id,
        page=page,
        limit=limit,
        sender=sender,
        page_token=page_token,
        include_archived=include_archived,
    )


@gmail_router.get("/stats", response_model=MailboxStats)
async def mailbox_stats(
    session: UserSession = Depends(rate_limited_session),
    pipeline: CandidatePipeline = Depends(get_pipeline),
) -> MailboxStats:
    return await pipeline.fetch_stats(session.user_id)


@gmail_router.get("/emails/{email_id}", response_model=EmailDetail)
async def email_detail(
    email_id: str,
    session: UserSession = Depends(rate_limited_session),
    pipeline: CandidatePipeline = Depends(get_pipeline),
) -> EmailDetail:
    return await pipeline.fetch_single_email_detail(session.user_id, email_id)


@gmail_router.post("/mark-unsubscribed", response_model=ActionResult)
async def mark_unsubscribed(
    body: MarkUnsubscribedRequest,
    session: UserSession = Depends(current_session),
    recorder: ActionRecorder = Depends(get_action_recorder),
) -> ActionResult:
    return await recorder.record_action(
        session.user_id,
        body.email_id,
        body.unsubscribe_url,
        should_archive=body.should_archive,
    )


@auth_router.get("/me", response_model=CurrentUserResponse)
def current_user(session: UserSession = Depends(current_session)) -> CurrentUserResponse:
    return CurrentUserResponse(id=session.user_id, email=session.email)


@auth_router.post("/logout", response_model=LogoutResponse)
def logout(
    session: UserSession = Depends(current_session),
    store: InMemorySessionStore = Depends(get_session_store),
) -> LogoutResponse:
    store.revoke(session.user_id)
    return LogoutResponse()
