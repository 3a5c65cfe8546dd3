"""Unsubscribe link extraction."""

from .links import extract_body_links, extract_header_links, extract_unsubscribe_links

__all__ = ["extract_body_links", "extract_header_links", "extract_unsubscribe_links"]
