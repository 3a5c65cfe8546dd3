"""Unsubscribe candidate pipeline.

Search the mailbox for unsubscribe-bearing messages, fetch each hit in full,
extract its unsubscribe actions and return the messages that have any.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import structlog

from unsubscribe_finder.config import Settings
from unsubscribe_finder.exceptions import InvalidInputError
from unsubscribe_finder.gmail.client import INBOX_LABEL, MailboxFactory, MailboxGateway
from unsubscribe_finder.gmail.parsing import message_to_email_detail, message_to_unsubscribe_email
from unsubscribe_finder.models import EmailDetail, MailboxStats, PageResult, UnsubscribeEmail
from unsubscribe_finder.pipeline.mailbox import open_mailbox
from unsubscribe_finder.sessions import CredentialStore

logger = structlog.get_logger()

INBOX_FILTER = "in:inbox"
UNSUBSCRIBE_TERMS = ("has:unsubscribe", '"unsubscribe"', '"opt out"', '"remove me"')
STATS_QUERY = 'in:inbox has:unsubscribe OR "unsubscribe" OR "opt out"'


def build_search_query(sender: str | None = None, include_archived: bool = False) -> str:
    """Build the Gmail search query for unsubscribe candidates.

    Args:
        sender: Restrict results to this sender.
        include_archived: Search the whole mailbox instead of the inbox only.
    """
    terms = f"({' OR '.join(UNSUBSCRIBE_TERMS)})"
    parts = [terms] if include_archived else [INBOX_FILTER, terms]

    sender = (sender or "").strip()
    if sender:
        if any(ch.isspace() for ch in sender):
            sender = f'"{sender}"'
        parts.append(f"from:{sender}")

    return " ".join(parts)


class CandidatePipeline:
    """Finds unsubscribe candidates and related read-only views of a mailbox."""

    def __init__(
        self,
        credential_store: CredentialStore,
        mailbox_factory: MailboxFactory | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            credential_store: Source of each user's delegated credentials.
            mailbox_factory: Builds a mailbox gateway from credentials.
                If None, uses GmailClient.
            settings: Application settings. If None, uses default settings.
        """
        from unsubscribe_finder.config import get_settings

        self.settings = settings or get_settings()
        self.credential_store = credential_store
        if mailbox_factory is None:
            from unsubscribe_finder.gmail.client import GmailClient

            def mailbox_factory(credentials):
                return GmailClient(credentials, self.settings)

        self.mailbox_factory = mailbox_factory

    async def fetch_candidates(
        self,
        user_id: str,
        page: int = 1,
        limit: int | None = None,
        sender: str | None = None,
        page_token: str | None = None,
        include_archived: bool = False,
    ) -> PageResult:
        """Return one page of messages that carry unsubscribe actions.

        Raises:
            InvalidInputError: If ``page`` or ``limit`` is out of range.
            CredentialsMissingError: If the user has no stored credentials.
            AuthExpiredError: If Gmail rejects the user's credential.
            UpstreamError: If the search itself fails.
        """
        limit = self.settings.default_page_size if limit is None else limit
        if page < 1:
            raise InvalidInputError("page must be >= 1")
        if limit < 1:
            raise InvalidInputError("limit must be > 0")
        limit = min(limit, self.settings.max_page_size)

        mailbox = open_mailbox(self.credential_store, self.mailbox_factory, user_id)
        query = build_search_query(sender, include_archived)

        logger.info(
            "candidate_fetch_started",
            user_id=user_id,
            page=page,
            limit=limit,
            include_archived=include_archived,
            has_sender=bool(sender),
        )

        result = await mailbox.search_messages(
            query,
            limit,
            page_token=page_token if page > 1 else None,
        )
        if not result.message_ids:
            return PageResult(emails=[], total_count=0, next_page_token=None)

        semaphore = asyncio.Semaphore(self.settings.fetch_concurrency)
        fetched = await asyncio.gather(
            *(
                self._fetch_candidate(mailbox, message_id, semaphore)
                for message_id in result.message_ids[:limit]
            )
        )
        emails = [e for e in fetched if e is not None and e.unsubscribe_links]

        logger.info(
            "candidate_fetch_completed",
            user_id=user_id,
            searched=len(result.message_ids),
            failed=sum(1 for e in fetched if e is None),
            candidates=len(emails),
        )

        return PageResult(
            emails=emails,
            total_count=result.result_size_estimate or 0,
            next_page_token=result.next_page_token or None,
        )

    async def fetch_stats(self, user_id: str) -> MailboxStats:
        """Return inbox size and an estimate of unsubscribe-bearing messages."""
        mailbox = open_mailbox(self.credential_store, self.mailbox_factory, user_id)

        inbox, search = await asyncio.gather(
            mailbox.get_label(INBOX_LABEL),
            mailbox.search_messages(STATS_QUERY, 1),
            return_exceptions=True,
        )
        for outcome in (inbox, search):
            if isinstance(outcome, BaseException):
                raise outcome
        return MailboxStats(
            total_inbox_emails=int(inbox.get("messagesTotal") or 0),
            unsubscribe_emails_count=search.result_size_estimate or 0,
            last_updated=datetime.now(timezone.utc),
        )

    async def fetch_single_email_detail(self, user_id: str, email_id: str) -> EmailDetail:
        """Return one message's headers and resolved body."""
        if not email_id:
            raise InvalidInputError("Email ID required")

        mailbox = open_mailbox(self.credential_store, self.mailbox_factory, user_id)
        raw = await mailbox.get_message_full(email_id)
        return message_to_email_detail(raw, max_depth=self.settings.max_payload_depth)

    async def _fetch_candidate(
        self,
        mailbox: MailboxGateway,
        message_id: str,
        semaphore: asyncio.Semaphore,
    ) -> UnsubscribeEmail | None:
        async with semaphore:
            try:
                raw = await mailbox.get_message_full(message_id)
                return message_to_unsubscribe_email(raw, max_depth=self.settings.max_payload_depth)
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "message_fetch_failed",
                    message_id=message_id,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                return None
