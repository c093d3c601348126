"""
Key resolver for completion requests.

Resolves the plaintext key for a (user, provider) pair:
1. The user's stored key (a stored key that fails to decrypt is an error)
2. The shared default key, for the one provider that has one
"""

import logging
from dataclasses import dataclass, field
from typing import Literal, Optional

from ..config.constants import DEFAULT_PROVIDER
from ..crypto import KeyCipher
from ..exceptions import DecryptionFailureError, KeyNotConfiguredError
from .store import CredentialStore

logger = logging.getLogger(__name__)


@dataclass
class ResolvedKey:
    """Result of key resolution."""
    key: str = field(repr=False)
    source: Literal["user", "default"]
    username: str
    service_provider: str


class KeyResolver:
    """
    Decides which key to use for a request.

    A user-supplied key always wins over the shared default, and a corrupted
    user key is never masked by the default.
    """

    def __init__(
        self,
        store: CredentialStore,
        cipher: KeyCipher,
        default_key: Optional[str] = None,
        default_provider: str = DEFAULT_PROVIDER,
    ):
        """
        Initialize key resolver.

        Args:
            store: Credential store holding encrypted user keys
            cipher: Cipher used to decrypt stored keys
            default_key: Shared key for the default provider
            default_provider: The one provider allowed to use the shared key
        """
        self.store = store
        self.cipher = cipher
        self.default_key = default_key or None
        self.default_provider = default_provider

    @property
    def has_default(self) -> bool:
        return self.default_key is not None

    async def resolve(self, username: str, service_provider: str) -> ResolvedKey:
        """
        Get the plaintext key for a user and provider.

        Raises:
            DecryptionFailureError: If the user's stored key cannot be decrypted
            KeyNotConfiguredError: If no stored key and no applicable default
        """
        encrypted = await self.store.lookup(username, service_provider)

        if encrypted is not None:
            result = self.cipher.decrypt(encrypted)
            if not result.ok:
                logger.error(
                    f"Stored key for {username}/{service_provider} could not be decrypted: "
                    f"{result.reason}"
                )
                raise DecryptionFailureError(service_provider, username, reason=result.reason)

            return ResolvedKey(
                key=result.plaintext,
                source="user",
                username=username,
                service_provider=service_provider,
            )

        if service_provider == self.default_provider and self.default_key:
            logger.info(
                f"No API key found for {username} for {service_provider}. "
                f"Using default {service_provider} API key."
            )
            return ResolvedKey(
                key=self.default_key,
                source="default",
                username=username,
                service_provider=service_provider,
            )

        raise KeyNotConfiguredError(service_provider, username)
