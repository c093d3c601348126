"""
Configuration loading and validation.
"""

from .settings import ProxyConfig, ServerConfig, LogLevel
from .environment import EnvironmentLoader
from .validation import ConfigValidator, is_valid_encryption_key

__all__ = [
    "ProxyConfig",
    "ServerConfig",
    "LogLevel",
    "EnvironmentLoader",
    "ConfigValidator",
    "is_valid_encryption_key",
]
