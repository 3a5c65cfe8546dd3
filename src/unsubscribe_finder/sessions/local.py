"""Credential store backed by a local OAuth token file.

Used by the command-line interface, where the only user is whoever owns the
token file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog

from unsubscribe_finder.config import Settings
from unsubscribe_finder.exceptions import AuthExpiredError, ConfigurationError

logger = structlog.get_logger()


class LocalTokenCredentialStore:
    """Load, refresh and persist credentials from ``token.json``."""

    def __init__(self, settings: Settings | None = None, *, allow_interactive: bool = True) -> None:
        """Initialize the store.

        Args:
            settings: Application settings. If None, uses default settings.
            allow_interactive: Run the browser OAuth flow when no valid token exists.
        """
        from unsubscribe_finder.config import get_settings

        self.settings = settings or get_settings()
        self.allow_interactive = allow_interactive
        self._credentials: Any | None = None

    def get_credentials(self, user_id: str) -> Any | None:
        if self._credentials is None:
            self._credentials = self._load()
        return self._credentials

    def _load(self) -> Any | None:
        # Imported lazily to keep import-time cost low and tests fast.
        from google.auth.exceptions import RefreshError
        from google.auth.transport.requests import Request
        from google.oauth2.credentials import Credentials
        from google_auth_oauthlib.flow import InstalledAppFlow

        credentials_path = Path(self.settings.gmail_credentials_path)
        token_path = Path(self.settings.gmail_token_path)
        scopes = [self.settings.gmail_scope]

        creds: Credentials | None = None
        if token_path.exists():
            creds = Credentials.from_authorized_user_file(str(token_path), scopes=scopes)

        if creds is not None and creds.expired and creds.refresh_token:
            try:
                creds.refresh(Request())
            except RefreshError as exc:
                raise AuthExpiredError(f"Stored Gmail token could not be refreshed: {exc}") from exc
            token_path.write_text(creds.to_json(), encoding="utf-8")

        if creds is not None and creds.valid:
            return creds

        if not self.allow_interactive:
            return None

        if not credentials_path.exists():
            raise ConfigurationError(
                f"Gmail credentials file not found: {credentials_path}. "
                "Download OAuth client credentials from the Google Cloud Console."
            )

        logger.info(
            "gmail_authentication_started",
            credentials_path=str(credentials_path),
            token_path=str(token_path),
        )
        flow = InstalledAppFlow.from_client_secrets_file(str(credentials_path), scopes=scopes)
        creds = flow.run_local_server(port=0)
        token_path.parent.mkdir(parents=True, exist_ok=True)
        token_path.write_text(creds.to_json(), encoding="utf-8")
        logger.info("gmail_authentication_completed")
        return creds
