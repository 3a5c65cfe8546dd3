"""Helpers for parsing Gmail messages into internal models."""

from __future__ import annotations

import base64
import binascii
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from unsubscribe_finder.exceptions import MalformedPayloadError
from unsubscribe_finder.extraction.links import extract_unsubscribe_links
from unsubscribe_finder.models import EmailDetail, UnsubscribeEmail
from unsubscribe_finder.models.payload import DEFAULT_MAX_DEPTH, PayloadPart

HTML_MIME_TYPE = "text/html"

UNKNOWN_SENDER = "Unknown"
NO_SUBJECT = "No Subject"


def build_header_map(headers: Iterable[Mapping[str, Any]] | None) -> dict[str, str]:
    """Build a case-insensitive header lookup keyed by lower-cased name.

    Later headers overwrite earlier ones with the same name.
    """
    result: dict[str, str] = {}
    for h in headers or []:
        name = h.get("name")
        value = h.get("value")
        if isinstance(name, str) and isinstance(value, str):
            result[name.lower()] = value
    return result


def decode_body_data(data: str) -> str:
    """Decode Gmail base64 body content as UTF-8 text.

    Accepts both the standard and URL-safe alphabets, with or without padding.
    """
    padded = data + "=" * (-len(data) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
    except (binascii.Error, ValueError) as exc:
        raise MalformedPayloadError(f"Undecodable body data: {exc}") from exc
    return raw.decode("utf-8", errors="replace")


def _html_from_parts(parts: Iterable[PayloadPart]) -> str:
    for part in parts:
        if part.mime_type == HTML_MIME_TYPE and part.data:
            return decode_body_data(part.data)
        if part.is_multipart:
            nested = _html_from_parts(part.children())
            if nested:
                return nested
    return ""


def resolve_body(payload: PayloadPart) -> str:
    """Recover the most representative renderable body of a message.

    A single-part message returns its own content. Otherwise the first
    ``text/html`` part found depth-first wins; plain-text alternatives are never
    chosen. Returns an empty string when nothing qualifies.
    """
    if payload.data:
        return decode_body_data(payload.data)
    if payload.is_multipart:
        return _html_from_parts(payload.children())
    return ""


def format_internal_date(internal_date: Any) -> str:
    """Render Gmail's epoch-millisecond ``internalDate`` as ISO-8601 UTC.

    Raises:
        MalformedPayloadError: If the value is missing or not a valid timestamp.
    """
    try:
        dt = datetime.fromtimestamp(int(internal_date) / 1000.0, tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError) as exc:
        raise MalformedPayloadError(f"Invalid internalDate: {internal_date!r}") from exc
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _payload_tree(message: Mapping[str, Any], max_depth: int) -> PayloadPart:
    return PayloadPart.from_api(message.get("payload"), max_depth=max_depth)


def message_to_unsubscribe_email(
    message: Mapping[str, Any],
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> UnsubscribeEmail:
    """Convert a Gmail API message (format=full) to an UnsubscribeEmail.

    The returned model may carry no links; callers decide whether to keep it.
    """
    payload = message.get("payload") or {}
    headers = build_header_map(payload.get("headers"))
    body = resolve_body(_payload_tree(message, max_depth))

    return UnsubscribeEmail(
        id=str(message.get("id") or ""),
        thread_id=str(message.get("threadId") or ""),
        sender=headers.get("from") or UNKNOWN_SENDER,
        subject=headers.get("subject") or NO_SUBJECT,
        date=format_internal_date(message.get("internalDate")),
        unsubscribe_links=extract_unsubscribe_links(headers, body),
        snippet=message.get("snippet") or "",
    )


def message_to_email_detail(
    message: Mapping[str, Any],
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> EmailDetail:
    """Convert a Gmail API message (format=full) to an EmailDetail."""
    payload = message.get("payload") or {}
    headers = build_header_map(payload.get("headers"))

    return EmailDetail(
        id=str(message.get("id") or ""),
        subject=headers.get("subject") or NO_SUBJECT,
        sender=headers.get("from") or UNKNOWN_SENDER,
        date=format_internal_date(message.get("internalDate")),
        body=resolve_body(_payload_tree(message, max_depth)),
        headers=headers,
    )
