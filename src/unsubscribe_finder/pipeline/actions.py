"""Record unsubscribe decisions and optionally archive the thread."""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from unsubscribe_finder.config import Settings
from unsubscribe_finder.exceptions import InvalidInputError
from unsubscribe_finder.gmail.client import INBOX_LABEL, UNREAD_LABEL, MailboxFactory
from unsubscribe_finder.models import ActionResult
from unsubscribe_finder.pipeline.mailbox import open_mailbox
from unsubscribe_finder.sessions import CredentialStore

logger = structlog.get_logger()


class ActionRecorder:
    """Accepts unsubscribe decisions made by a user.

    Decisions are not persisted. Archiving is best-effort and never fails the
    recorded action.
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        mailbox_factory: MailboxFactory | None = None,
        settings: Settings | None = None,
    ) -> None:
        from unsubscribe_finder.config import get_settings

        self.settings = settings or get_settings()
        self.credential_store = credential_store
        if mailbox_factory is None:
            from unsubscribe_finder.gmail.client import GmailClient

            def mailbox_factory(credentials):
                return GmailClient(credentials, self.settings)

        self.mailbox_factory = mailbox_factory

    async def record_action(
        self,
        user_id: str,
        email_id: str | None,
        unsubscribe_url: str | None,
        should_archive: bool = False,
    ) -> ActionResult:
        """Record that the user acted on an unsubscribe link.

        Args:
            user_id: The signed-in user.
            email_id: Gmail message ID the link came from.
            unsubscribe_url: The link the user chose.
            should_archive: Also move the message's thread out of the inbox,
                leaving it unread.

        Raises:
            InvalidInputError: If ``email_id`` or ``unsubscribe_url`` is missing.
        """
        if not email_id or not unsubscribe_url:
            raise InvalidInputError("Email ID and unsubscribe URL required")

        archived = False
        if should_archive:
            archived = await self._archive_thread(user_id, email_id)

        logger.info("unsubscribe_action_recorded", user_id=user_id, email_id=email_id, archived=archived)

        return ActionResult(
            success=True,
            email_id=email_id,
            unsubscribe_url=unsubscribe_url,
            archived=archived,
            timestamp=datetime.now(timezone.utc),
        )

    async def _archive_thread(self, user_id: str, email_id: str) -> bool:
        try:
            mailbox = open_mailbox(self.credential_store, self.mailbox_factory, user_id)
            metadata = await mailbox.get_message_metadata(email_id)
            thread_id = metadata.get("threadId")
            if not thread_id:
                raise ValueError(f"Message {email_id} has no thread id")
            await mailbox.modify_thread_labels(
                thread_id,
                remove={INBOX_LABEL},
                add={UNREAD_LABEL},
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "archive_failed",
                user_id=user_id,
                email_id=email_id,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return False

        logger.info("thread_archived", user_id=user_id, email_id=email_id, thread_id=thread_id)
        return True
