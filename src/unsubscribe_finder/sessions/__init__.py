"""Signed-in sessions and the delegated credentials they carry."""

from .local import LocalTokenCredentialStore
from .store import CredentialStore, InMemorySessionStore, UserSession

__all__ = ["CredentialStore", "InMemorySessionStore", "LocalTokenCredentialStore", "UserSession"]
