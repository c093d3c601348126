"""
Encryption of stored provider keys.
"""

from .cipher import KeyCipher, DecryptResult, load_encryption_key

__all__ = [
    "KeyCipher",
    "DecryptResult",
    "load_encryption_key",
]
