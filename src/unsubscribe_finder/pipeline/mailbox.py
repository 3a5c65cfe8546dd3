"""Resolve a user's mailbox from their stored credentials."""

from __future__ import annotations

from unsubscribe_finder.exceptions import CredentialsMissingError
from unsubscribe_finder.gmail.client import MailboxFactory, MailboxGateway
from unsubscribe_finder.sessions import CredentialStore


def open_mailbox(
    credential_store: CredentialStore,
    mailbox_factory: MailboxFactory,
    user_id: str,
) -> MailboxGateway:
    """Return a mailbox gateway acting for ``user_id``.

    Raises:
        CredentialsMissingError: If the user has no stored delegated access.
    """
    credentials = credential_store.get_credentials(user_id)
    if credentials is None:
        raise CredentialsMissingError("User credentials not found. Please sign in again.")
    return mailbox_factory(credentials)
