"""
Environment variable handling for KeyProxy configuration.
"""

import os
from typing import List

from dotenv import load_dotenv

from .settings import LogLevel, ProxyConfig, ServerConfig
from .constants import DEFAULT_PORT, DEFAULT_UPSTREAM_TIMEOUT, TOKEN_LIFETIME_MINUTES


class EnvironmentLoader:
    """Loads configuration from environment variables."""

    @staticmethod
    def load_config(load_env_file: bool = True) -> ProxyConfig:
        """Load configuration from environment variables."""
        if load_env_file:
            load_dotenv()

        server_config = ServerConfig(
            host=os.getenv('HOST', '0.0.0.0'),
            port=int(os.getenv('PORT', str(DEFAULT_PORT))),
            cors_origins=EnvironmentLoader._parse_list(os.getenv('CORS_ORIGINS', '')),
        )

        log_level_str = os.getenv('LOG_LEVEL', 'INFO').upper()
        log_level = LogLevel.INFO
        try:
            log_level = LogLevel(log_level_str)
        except ValueError:
            pass

        return ProxyConfig(
            jwt_secret=os.getenv('JWT_SECRET', ''),
            encryption_key=os.getenv('ENCRYPTION_KEY') or None,
            default_openai_key=os.getenv('OPENAI_API_KEY') or None,
            allow_legacy_encryption_key=os.getenv('ALLOW_LEGACY_ENCRYPTION_KEY', 'false').lower() == 'true',
            jwt_expiration_minutes=int(os.getenv('JWT_EXPIRATION_MINUTES', str(TOKEN_LIFETIME_MINUTES))),
            upstream_timeout=float(os.getenv('UPSTREAM_TIMEOUT', str(DEFAULT_UPSTREAM_TIMEOUT))),
            server=server_config,
            log_level=log_level,
        )

    @staticmethod
    def _parse_list(value: str, delimiter: str = ',') -> List[str]:
        """Parse a comma-separated string into a list."""
        if not value:
            return []
        return [item.strip() for item in value.split(delimiter) if item.strip()]
