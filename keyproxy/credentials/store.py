"""
Per-user storage of encrypted provider keys.

The store is the only shared mutable state in the service. Callers talk to the
abstract :class:`CredentialStore` so a durable backend can replace the
in-memory one without touching them.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..crypto import KeyCipher
from ..exceptions import UserNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class UserRecord:
    """A user and their encrypted keys, keyed by provider name."""
    username: str
    api_keys: Dict[str, str] = field(default_factory=dict)

    @property
    def providers(self) -> List[str]:
        return sorted(self.api_keys)


class CredentialStore(ABC):
    """Abstract base class for credential stores."""

    @abstractmethod
    async def get_or_create_user(self, username: str) -> UserRecord:
        """
        Return the user record, creating an empty one on first sight.

        Args:
            username: Unique username

        Returns:
            Snapshot of the user record
        """
        pass

    @abstractmethod
    async def store_key(self, username: str, service_provider: str, plaintext_key: str) -> None:
        """
        Encrypt and upsert a key for a provider. Last write wins.

        Args:
            username: Owner of the key
            service_provider: Provider name (e.g. "openai")
            plaintext_key: API key value

        Raises:
            UserNotFoundError: If the user has never logged in
        """
        pass

    @abstractmethod
    async def lookup(self, username: str, service_provider: str) -> Optional[str]:
        """
        Get the encrypted key for a user and provider.

        Returns:
            Encrypted blob or None if absent
        """
        pass

    @abstractmethod
    async def user_exists(self, username: str) -> bool:
        pass


class InMemoryCredentialStore(CredentialStore):
    """
    Process-memory store.

    All reads and writes of the user map happen under one lock owned by the
    store. Contents are lost on restart.
    """

    def __init__(self, cipher: KeyCipher):
        self._cipher = cipher
        self._users: Dict[str, Dict[str, str]] = {}
        self._lock = threading.Lock()

    async def get_or_create_user(self, username: str) -> UserRecord:
        with self._lock:
            api_keys = self._users.get(username)
            if api_keys is None:
                api_keys = {}
                self._users[username] = api_keys
                created = True
            else:
                created = False
            record = UserRecord(username=username, api_keys=dict(api_keys))

        if created:
            logger.info(f"User {username} created")
        else:
            logger.debug(f"User {username} logged in with keys for {record.providers}")
        return record

    async def store_key(self, username: str, service_provider: str, plaintext_key: str) -> None:
        # Encrypt outside the lock; the cipher is stateless
        encrypted = self._cipher.encrypt(plaintext_key)

        with self._lock:
            api_keys = self._users.get(username)
            if api_keys is None:
                raise UserNotFoundError(username)
            api_keys[service_provider] = encrypted

        logger.info(f"API key stored for {username} for service {service_provider}")

    async def lookup(self, username: str, service_provider: str) -> Optional[str]:
        with self._lock:
            api_keys = self._users.get(username)
            if api_keys is None:
                return None
            return api_keys.get(service_provider)

    async def user_exists(self, username: str) -> bool:
        with self._lock:
            return username in self._users

    def user_count(self) -> int:
        with self._lock:
            return len(self._users)
