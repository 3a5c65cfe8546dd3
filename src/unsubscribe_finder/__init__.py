"""Unsubscribe Finder - find and act on unsubscribe links in Gmail.

This package provides the unsubscribe-link extraction pipeline, a FastAPI
service exposing it to signed-in users, and a command-line interface for
scanning a locally authorized mailbox.
"""

__version__ = "0.1.0"

from unsubscribe_finder.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__"]
