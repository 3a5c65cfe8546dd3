"""Find unsubscribe actions in a message's headers and HTML body.

Two independent passes run in a fixed order: the declared ``List-Unsubscribe``
header first, then a scan of the HTML body. Only http(s) targets are kept.
"""

from __future__ import annotations

import re
from typing import Mapping

from unsubscribe_finder.models import LinkSource, UnsubscribeLink

LIST_UNSUBSCRIBE_HEADER = "list-unsubscribe"
HTML_MARKER = "<html"

_BRACKETED_RE = re.compile(r"<([^>]+)>")

# Order matters: body hits are reported pattern by pattern.
BODY_LINK_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"""href=["']([^"']*unsubscribe[^"']*)["']""", re.IGNORECASE),
    re.compile(r"""href=["']([^"']*opt[_-]?out[^"']*)["']""", re.IGNORECASE),
    re.compile(r"""href=["']([^"']*remove[_-]?me[^"']*)["']""", re.IGNORECASE),
    re.compile(r"""href=["']([^"']*manage[_-]?subscription[^"']*)["']""", re.IGNORECASE),
)


def _is_http(url: str) -> bool:
    return url.startswith("http")


def extract_header_links(headers: Mapping[str, str]) -> list[UnsubscribeLink]:
    """Return http(s) targets from the List-Unsubscribe header, in header order.

    Repeated URLs are kept.
    """
    value = headers.get(LIST_UNSUBSCRIBE_HEADER)
    if not value:
        return []

    return [
        UnsubscribeLink(source=LinkSource.HEADER, url=url)
        for url in _BRACKETED_RE.findall(value)
        if _is_http(url)
    ]


def extract_body_links(body: str) -> list[UnsubscribeLink]:
    """Return unsubscribe-like anchors from an HTML body.

    Bodies without an ``<html`` marker are not scanned. Each URL appears once.
    """
    if not body or HTML_MARKER not in body:
        return []

    links: list[UnsubscribeLink] = []
    seen: set[str] = set()
    for pattern in BODY_LINK_PATTERNS:
        for match in pattern.finditer(body):
            url = match.group(1)
            if _is_http(url) and url not in seen:
                seen.add(url)
                links.append(UnsubscribeLink(source=LinkSource.BODY, url=url))
    return links


def extract_unsubscribe_links(headers: Mapping[str, str], body: str) -> list[UnsubscribeLink]:
    """Return all unsubscribe actions for a message: header hits, then body hits."""
    return extract_header_links(headers) + extract_body_links(body)
