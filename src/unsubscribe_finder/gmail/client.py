"""Gmail API client implementation.

This module provides a client for reading and relabelling a user's mailbox
with delegated OAuth credentials.

Notes:
    The Google API client is synchronous. This project wraps those calls using
    `asyncio.to_thread` so the rest of the codebase can remain async-friendly.
    Every call gets its own authorized HTTP transport because httplib2
    connections must not be shared between threads.
"""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Protocol

import structlog

from unsubscribe_finder.config import Settings
from unsubscribe_finder.exceptions import AuthExpiredError, GmailAPIError

logger = structlog.get_logger()

INBOX_LABEL = "INBOX"
UNREAD_LABEL = "UNREAD"

_UNAUTHORIZED = 401


@dataclass(frozen=True)
class SearchResult:
    """One page of message ids returned by a mailbox search."""

    message_ids: list[str] = field(default_factory=list)
    result_size_estimate: int = 0
    next_page_token: str | None = None


class MailboxGateway(Protocol):
    """Remote mailbox operations the pipeline depends on."""

    async def search_messages(
        self,
        query: str,
        max_results: int,
        page_token: str | None = None,
    ) -> SearchResult: ...

    async def get_message_full(self, message_id: str) -> dict[str, Any]: ...

    async def get_message_metadata(self, message_id: str) -> dict[str, Any]: ...

    async def modify_thread_labels(
        self,
        thread_id: str,
        remove: Iterable[str],
        add: Iterable[str],
    ) -> None: ...

    async def get_label(self, label_id: str) -> dict[str, Any]: ...


MailboxFactory = Callable[[Any], MailboxGateway]


def _http_status(exc: BaseException) -> int | None:
    status = getattr(getattr(exc, "resp", None), "status", None)
    try:
        return int(status) if status is not None else None
    except (TypeError, ValueError):
        return None


def translate_gmail_error(exc: Exception) -> Exception:
    """Map a Google client failure onto the project's error taxonomy."""
    from google.auth.exceptions import RefreshError
    from googleapiclient.errors import HttpError

    if isinstance(exc, RefreshError):
        return AuthExpiredError(str(exc))
    if isinstance(exc, HttpError) and _http_status(exc) == _UNAUTHORIZED:
        return AuthExpiredError(str(exc))
    return GmailAPIError(str(exc))


class GmailClient:
    """Gmail API client acting on behalf of one signed-in user.

    This client implements `MailboxGateway` on top of googleapiclient.
    """

    def __init__(self, credentials: Any, settings: Settings | None = None) -> None:
        """Initialize Gmail client.

        Args:
            credentials: Delegated google.oauth2 credentials for the user.
            settings: Application settings. If None, uses default settings.
        """
        from unsubscribe_finder.config import get_settings

        self.settings = settings or get_settings()
        self._credentials = credentials
        self._service: Any | None = None
        self._service_lock = threading.Lock()

    async def search_messages(
        self,
        query: str,
        max_results: int,
        page_token: str | None = None,
    ) -> SearchResult:
        """Search the mailbox and return one page of message ids.

        Raises:
            AuthExpiredError: If Gmail rejects the credential.
            GmailAPIError: If the API request fails for any other reason.
        """
        logger.info("searching_messages", max_results=max_results, has_page_token=bool(page_token))

        response = await self._call(
            "search_messages",
            lambda s: s.users()
            .messages()
            .list(
                userId=self.settings.gmail_user_id,
                q=query,
                maxResults=max_results,
                pageToken=page_token,
            ),
        )
        message_ids = [m["id"] for m in response.get("messages", []) or [] if m.get("id")]
        return SearchResult(
            message_ids=message_ids,
            result_size_estimate=int(response.get("resultSizeEstimate") or 0),
            next_page_token=response.get("nextPageToken") or None,
        )

    async def get_message_full(self, message_id: str) -> dict[str, Any]:
        """Get a message with its full payload tree."""
        return await self._call(
            "get_message_full",
            lambda s: s.users()
            .messages()
            .get(userId=self.settings.gmail_user_id, id=message_id, format="full"),
            message_id=message_id,
        )

    async def get_message_metadata(self, message_id: str) -> dict[str, Any]:
        """Get a message's ids and labels without its body."""
        return await self._call(
            "get_message_metadata",
            lambda s: s.users()
            .messages()
            .get(userId=self.settings.gmail_user_id, id=message_id, format="minimal"),
            message_id=message_id,
        )

    async def modify_thread_labels(
        self,
        thread_id: str,
        remove: Iterable[str],
        add: Iterable[str],
    ) -> None:
        """Remove and add labels on every message of a thread."""
        body = {
            "removeLabelIds": sorted(set(remove)),
            "addLabelIds": sorted(set(add)),
        }
        logger.info("modifying_thread_labels", thread_id=thread_id, **body)
        await self._call(
            "modify_thread_labels",
            lambda s: s.users()
            .threads()
            .modify(userId=self.settings.gmail_user_id, id=thread_id, body=body),
        )

    async def get_label(self, label_id: str) -> dict[str, Any]:
        """Get a label with its message counters."""
        return await self._call(
            "get_label",
            lambda s: s.users().labels().get(userId=self.settings.gmail_user_id, id=label_id),
        )

    async def _call(
        self,
        operation: str,
        build_request: Callable[[Any], Any],
        **log_context: Any,
    ) -> dict[str, Any]:
        try:
            return await asyncio.to_thread(self._execute_sync, build_request)
        except Exception as exc:  # noqa: BLE001
            error = translate_gmail_error(exc)
            logger.warning(
                "gmail_call_failed",
                operation=operation,
                error_type=type(error).__name__,
                error=str(exc),
                **log_context,
            )
            raise error from exc

    def _execute_sync(self, build_request: Callable[[Any], Any]) -> dict[str, Any]:
        import google_auth_httplib2
        import httplib2

        request = build_request(self._get_service())
        http = google_auth_httplib2.AuthorizedHttp(self._credentials, http=httplib2.Http())
        return request.execute(http=http) or {}

    def _get_service(self) -> Any:
        with self._service_lock:
            if self._service is not None:
                return self._service
            # Imported lazily to keep import-time cost low and tests fast.
            from googleapiclient.discovery import build

            # cache_discovery=False prevents writing discovery docs to disk.
            self._service = build(
                "gmail",
                "v1",
                credentials=self._credentials,
                cache_discovery=False,
            )
        return self._service
