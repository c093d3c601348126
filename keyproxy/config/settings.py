"""
Configuration data classes for KeyProxy.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .constants import (
    DEFAULT_PORT,
    DEFAULT_UPSTREAM_TIMEOUT,
    TOKEN_LIFETIME_MINUTES,
)


class LogLevel(str, Enum):
    """Supported log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class ServerConfig:
    """HTTP listener settings."""
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    cors_origins: List[str] = field(default_factory=list)


@dataclass
class ProxyConfig:
    """Top-level configuration for the proxy service."""
    jwt_secret: str
    encryption_key: Optional[str]
    default_openai_key: Optional[str] = None
    allow_legacy_encryption_key: bool = False
    jwt_expiration_minutes: int = TOKEN_LIFETIME_MINUTES
    upstream_timeout: float = DEFAULT_UPSTREAM_TIMEOUT
    server: ServerConfig = field(default_factory=ServerConfig)
    log_level: LogLevel = LogLevel.INFO

    @property
    def default_key_preview(self) -> Optional[str]:
        """Masked form of the default key, safe to log."""
        key = self.default_openai_key
        if not key:
            return None
        if len(key) > 10:
            return f"{key[:6]}...{key[-4:]}"
        return "***"
