"""
Credential storage and key resolution.
"""

from .store import CredentialStore, InMemoryCredentialStore, UserRecord
from .resolver import KeyResolver, ResolvedKey

__all__ = [
    "CredentialStore",
    "InMemoryCredentialStore",
    "UserRecord",
    "KeyResolver",
    "ResolvedKey",
]
