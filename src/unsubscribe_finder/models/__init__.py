"""Data models for Unsubscribe Finder.

This module contains Pydantic models for the values the pipeline hands back to
its callers. Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from unsubscribe_finder.models.payload import PayloadPart

__all__ = [
    "ActionResult",
    "EmailDetail",
    "LinkSource",
    "MailboxStats",
    "PageResult",
    "PayloadPart",
    "UnsubscribeEmail",
    "UnsubscribeLink",
]


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class LinkSource(str, Enum):
    """Where an unsubscribe link was discovered."""

    HEADER = "header"
    BODY = "body"


class UnsubscribeLink(_WireModel):
    """A single unsubscribe action found in a message."""

    source: LinkSource = Field(description="Declared List-Unsubscribe header or scanned body")
    url: str = Field(description="HTTP(S) URL of the unsubscribe action")


class UnsubscribeEmail(_WireModel):
    """A message carrying at least one unsubscribe action."""

    id: str = Field(description="Gmail message ID")
    thread_id: str = Field(description="Gmail thread ID")
    sender: str = Field(description="Raw From header")
    subject: str = Field(description="Subject header")
    date: str = Field(description="Internal date as an ISO-8601 string")
    unsubscribe_links: list[UnsubscribeLink] = Field(
        default_factory=list,
        description="Header hits first, then body hits",
    )
    snippet: str = Field(default="", description="Short plain-text preview")


class PageResult(_WireModel):
    """One page of unsubscribe candidates."""

    emails: list[UnsubscribeEmail] = Field(default_factory=list)
    total_count: int = Field(default=0, description="Provider estimate, not an exact count")
    next_page_token: Optional[str] = Field(default=None)


class MailboxStats(_WireModel):
    """Aggregate mailbox statistics."""

    total_inbox_emails: int = Field(description="Messages carrying the INBOX label")
    unsubscribe_emails_count: int = Field(description="Estimated unsubscribe-bearing messages")
    last_updated: datetime = Field(description="When these numbers were gathered")


class ActionResult(_WireModel):
    """Outcome of recording an unsubscribe decision."""

    success: bool = Field(default=True)
    message: str = Field(default="Unsubscribe action recorded")
    email_id: str
    unsubscribe_url: str
    archived: bool = Field(default=False, description="Whether the thread was archived")
    timestamp: datetime


class EmailDetail(_WireModel):
    """A single message rendered for viewing."""

    id: str
    subject: str
    sender: str
    date: str
    body: str = Field(default="", description="Resolved renderable body text")
    headers: dict[str, str] = Field(default_factory=dict, description="Lower-cased header map")
