"""
Configuration validation for KeyProxy.
"""

import re
from typing import List

from .settings import ProxyConfig
from .constants import ENCRYPTION_KEY_HEX_LENGTH

_HEX_KEY_PATTERN = re.compile(r'^[0-9a-fA-F]+$')


def is_valid_encryption_key(value: str) -> bool:
    """Check that a key is exactly 64 hex characters (32 bytes)."""
    return bool(value) and len(value) == ENCRYPTION_KEY_HEX_LENGTH and bool(_HEX_KEY_PATTERN.match(value))


class ConfigValidator:
    """Validates configuration settings."""

    @staticmethod
    def validate_config(config: ProxyConfig) -> List[str]:
        """Validate the entire proxy configuration."""
        errors = []

        errors.extend(ConfigValidator._validate_jwt(config))
        errors.extend(ConfigValidator._validate_encryption_key(config))
        errors.extend(ConfigValidator._validate_server(config))

        if config.upstream_timeout <= 0:
            errors.append("Upstream timeout must be positive")

        return errors

    @staticmethod
    def _validate_jwt(config: ProxyConfig) -> List[str]:
        """Validate token signing settings."""
        errors = []

        if not config.jwt_secret:
            errors.append("JWT_SECRET is not set")

        if config.jwt_expiration_minutes <= 0:
            errors.append("JWT expiration must be positive")

        return errors

    @staticmethod
    def _validate_encryption_key(config: ProxyConfig) -> List[str]:
        """Validate the process-wide encryption key.

        A missing or malformed key is only tolerated when the legacy fallback
        has been explicitly allowed.
        """
        if config.allow_legacy_encryption_key:
            return []

        if not config.encryption_key:
            return ["ENCRYPTION_KEY is not set"]

        if not is_valid_encryption_key(config.encryption_key):
            return [
                f"ENCRYPTION_KEY must be a 32-byte hex string "
                f"({ENCRYPTION_KEY_HEX_LENGTH} characters)"
            ]

        return []

    @staticmethod
    def _validate_server(config: ProxyConfig) -> List[str]:
        """Validate listener settings."""
        errors = []

        if not (1 <= config.server.port <= 65535):
            errors.append(f"Port {config.server.port} is not in valid range (1-65535)")

        for origin in config.server.cors_origins:
            if not ConfigValidator._is_valid_url_or_wildcard(origin):
                errors.append(f"Invalid CORS origin: {origin}")

        return errors

    @staticmethod
    def _is_valid_url_or_wildcard(origin: str) -> bool:
        """Check if a CORS origin is a valid URL or wildcard."""
        if origin == '*':
            return True

        url_pattern = r'^https?://[a-zA-Z0-9.-]+(?::[0-9]+)?(?:/.*)?$'
        return bool(re.match(url_pattern, origin))
