"""HTTP API for Unsubscribe Finder."""

from .app import create_app

__all__ = ["create_app"]
