"""
Symmetric encryption of provider API keys.

Blobs have the form ``hex(iv):hex(ciphertext)`` where the ciphertext is
AES-256-CBC over the UTF-8 plaintext with PKCS#7 padding. A fresh random IV is
generated for every call to :meth:`KeyCipher.encrypt`.

Never log plaintext or ciphertext values.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..config.constants import LEGACY_ENCRYPTION_KEY_HEX
from ..config.validation import is_valid_encryption_key
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

IV_LENGTH_BYTES = 16
KEY_LENGTH_BYTES = 32
BLOCK_SIZE_BITS = 128
SEPARATOR = ":"


@dataclass(frozen=True)
class DecryptResult:
    """Outcome of a decryption attempt."""
    ok: bool
    plaintext: Optional[str] = None
    reason: str = ""

    @classmethod
    def success(cls, plaintext: str) -> "DecryptResult":
        return cls(ok=True, plaintext=plaintext)

    @classmethod
    def failure(cls, reason: str) -> "DecryptResult":
        return cls(ok=False, plaintext=None, reason=reason)


def load_encryption_key(key_hex: Optional[str], allow_legacy: bool = False) -> bytes:
    """Turn the configured hex key into 32 raw bytes.

    Args:
        key_hex: 64-character hex string from configuration
        allow_legacy: Substitute the publicly known legacy key instead of failing

    Returns:
        32-byte AES key

    Raises:
        ConfigurationError: If the key is absent or malformed and the legacy
            fallback has not been allowed
    """
    if key_hex and is_valid_encryption_key(key_hex):
        return bytes.fromhex(key_hex)

    if not allow_legacy:
        raise ConfigurationError(
            "ENCRYPTION_KEY is not set or is not a 32-byte hex string (64 characters)"
        )

    logger.critical(
        "ENCRYPTION_KEY is not set or malformed. Falling back to the PUBLICLY KNOWN "
        "legacy key. Stored API keys are NOT protected. Never run this in production."
    )
    return bytes.fromhex(LEGACY_ENCRYPTION_KEY_HEX)


class KeyCipher:
    """Encrypts and decrypts API keys with one process-wide key."""

    def __init__(self, key: bytes):
        if len(key) != KEY_LENGTH_BYTES:
            raise ConfigurationError(
                f"Encryption key must be {KEY_LENGTH_BYTES} bytes, got {len(key)}"
            )
        self._key = key

    @classmethod
    def from_hex(cls, key_hex: Optional[str], allow_legacy: bool = False) -> "KeyCipher":
        return cls(load_encryption_key(key_hex, allow_legacy))

    def encrypt(self, plaintext: str) -> str:
        """Encrypt plaintext under a fresh random IV.

        Args:
            plaintext: Value to protect

        Returns:
            ``hex(iv):hex(ciphertext)``
        """
        iv = os.urandom(IV_LENGTH_BYTES)

        padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
        padded = padder.update(plaintext.encode('utf-8')) + padder.finalize()

        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

        return iv.hex() + SEPARATOR + ciphertext.hex()

    def decrypt(self, blob: str) -> DecryptResult:
        """Decrypt a blob produced by :meth:`encrypt`.

        Never raises: malformed blobs, bad padding and wrong keys all come
        back as a failed :class:`DecryptResult`.
        """
        if not isinstance(blob, str):
            return DecryptResult.failure("blob is not a string")

        parts = blob.split(SEPARATOR)
        if len(parts) != 2:
            logger.error("Decryption error: invalid blob format")
            return DecryptResult.failure("invalid format")

        iv_hex, ciphertext_hex = parts
        try:
            iv = bytes.fromhex(iv_hex)
            ciphertext = bytes.fromhex(ciphertext_hex)

            decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()

            unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()

            return DecryptResult.success(plaintext.decode('utf-8'))

        except (ValueError, TypeError) as e:
            # ValueError covers bad hex, IV length, block alignment, padding and UTF-8
            logger.error(f"Decryption failed: {type(e).__name__}")
            return DecryptResult.failure(type(e).__name__)
