"""Typed view of a Gmail message payload tree.

Gmail returns ``payload`` as nested dicts. ``PayloadPart`` wraps one node of
that tree. Children are built on demand, so a walker that stops early never
touches the rest of the tree and the depth cap only applies to nodes that are
actually visited.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

from unsubscribe_finder.exceptions import PayloadTooDeepError

DEFAULT_MAX_DEPTH = 50


@dataclass(frozen=True)
class PayloadPart:
    """A node in a message payload tree.

    A leaf carries base64 ``data``; a multipart node carries child parts. A
    node may also carry neither.
    """

    mime_type: str = ""
    data: str | None = None
    raw_parts: tuple[dict[str, Any], ...] = field(default_factory=tuple, repr=False)
    depth: int = 0
    max_depth: int = DEFAULT_MAX_DEPTH

    @property
    def is_multipart(self) -> bool:
        return bool(self.raw_parts)

    def children(self) -> Iterator[PayloadPart]:
        """Yield child parts in order.

        Raises:
            PayloadTooDeepError: When a yielded child would sit deeper than
                ``max_depth``.
        """
        for raw in self.raw_parts:
            yield self._build(raw, depth=self.depth + 1, max_depth=self.max_depth)

    @classmethod
    def from_api(cls, raw: dict[str, Any] | None, *, max_depth: int = DEFAULT_MAX_DEPTH) -> PayloadPart:
        """Wrap a Gmail API ``payload`` dict as the root node."""
        return cls._build(raw or {}, depth=0, max_depth=max_depth)

    @classmethod
    def _build(cls, raw: dict[str, Any], *, depth: int, max_depth: int) -> PayloadPart:
        if depth > max_depth:
            raise PayloadTooDeepError(f"Payload nesting exceeds {max_depth} levels")

        body = raw.get("body") or {}
        data = body.get("data")
        children = raw.get("parts") or []

        return cls(
            mime_type=str(raw.get("mimeType") or ""),
            data=data if isinstance(data, str) and data else None,
            raw_parts=tuple(child for child in children if isinstance(child, dict)),
            depth=depth,
            max_depth=max_depth,
        )
