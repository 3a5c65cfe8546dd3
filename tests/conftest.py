"""Pytest configuration and shared fixtures."""

import pytest

from tests.fakes import FakeMailbox, StaticCredentialStore


@pytest.fixture
def mock_settings():
    """Provide mock settings for testing."""
    from unsubscribe_finder.config import Settings

    return Settings(
        log_level="DEBUG",
        debug=True,
        fetch_concurrency=4,
        rate_limit_max_requests=5,
    )


@pytest.fixture
def fake_mailbox() -> FakeMailbox:
    return FakeMailbox()


@pytest.fixture
def credential_store() -> StaticCredentialStore:
    return StaticCredentialStore({"user-1": object()})


@pytest.fixture
def newsletter_html() -> str:
    return (
        "<html><body><p>Weekly tips</p>"
        '<a href="https://news.example.com/unsubscribe?id=1">Unsubscribe</a>'
        '<a href="https://news.example.com/prefs">Preferences</a>'
        "</body></html>"
    )
