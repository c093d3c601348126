"""
Exception hierarchy for KeyProxy.

Every error that can reach the HTTP boundary carries its own status code and
machine-readable error code so the server can render it without branching.
"""

from typing import Any, Dict, Optional


class KeyProxyError(Exception):
    """Base class for all KeyProxy errors."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code
        if status_code is not None:
            self.status_code = status_code
        self.context = context or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Render as the JSON body returned to API callers."""
        return {"error": self.message, "code": self.error_code}

    def to_log_string(self) -> str:
        """Render for log output, including context."""
        parts = [f"[{self.error_code}] {self.message}"]
        if self.context:
            parts.append(f"context={self.context}")
        if self.cause is not None:
            parts.append(f"cause={type(self.cause).__name__}: {self.cause}")
        return " ".join(parts)


# --- Authentication ---

class UnauthenticatedError(KeyProxyError):
    """No bearer token was presented."""
    status_code = 401
    error_code = "UNAUTHENTICATED"

    def __init__(self, message: str = "No token provided", **kwargs):
        super().__init__(message, **kwargs)


class ForbiddenError(KeyProxyError):
    """A bearer token was presented but is invalid or expired."""
    status_code = 403
    error_code = "FORBIDDEN"

    def __init__(self, message: str = "Failed to authenticate token", **kwargs):
        super().__init__(message, **kwargs)


# --- Request validation ---

class InvalidRequestError(KeyProxyError):
    """Request body is missing a required field."""
    status_code = 400
    error_code = "INVALID_REQUEST"


class UserNotFoundError(KeyProxyError):
    """Token names a user the vault does not know."""
    status_code = 404
    error_code = "USER_NOT_FOUND"

    def __init__(self, username: str, **kwargs):
        super().__init__("User not found", context={"username": username}, **kwargs)
        self.username = username


# --- Key resolution ---

class KeyNotConfiguredError(KeyProxyError):
    """No stored key and no applicable default key."""
    status_code = 403
    error_code = "KEY_NOT_CONFIGURED"

    def __init__(self, service_provider: str, username: str, **kwargs):
        super().__init__(
            f"API key for {service_provider} not found for user {username}. "
            "Please store it first.",
            context={"service_provider": service_provider, "username": username},
            **kwargs,
        )
        self.service_provider = service_provider
        self.username = username


class DecryptionFailureError(KeyProxyError):
    """A stored key exists but cannot be decrypted."""
    status_code = 500
    error_code = "DECRYPTION_FAILED"

    def __init__(self, service_provider: str, username: str, reason: str = "", **kwargs):
        super().__init__(
            "Failed to decrypt API key.",
            context={
                "service_provider": service_provider,
                "username": username,
                "reason": reason,
            },
            **kwargs,
        )
        self.service_provider = service_provider
        self.username = username


# --- Upstream ---

class UnsupportedProviderError(KeyProxyError):
    """No adapter is implemented for the requested provider."""
    status_code = 400
    error_code = "UNSUPPORTED_PROVIDER"

    def __init__(self, service_provider: str, message: Optional[str] = None, **kwargs):
        super().__init__(
            message or f"Unsupported service provider: {service_provider}",
            context={"service_provider": service_provider},
            **kwargs,
        )
        self.service_provider = service_provider


class UpstreamError(KeyProxyError):
    """The upstream provider call failed."""
    error_code = "UPSTREAM_ERROR"

    def __init__(self, message: str, status_code: int = 500, service_provider: str = "", **kwargs):
        super().__init__(
            message,
            status_code=status_code,
            context={"service_provider": service_provider, "upstream_status": status_code},
            **kwargs,
        )
        self.service_provider = service_provider


class InternalError(KeyProxyError):
    """Unexpected fault inside the service."""
    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str = "Internal server error", **kwargs):
        super().__init__(message, **kwargs)


# --- Startup ---

class ConfigurationError(KeyProxyError):
    """Configuration is unusable; raised at startup only."""
    error_code = "CONFIGURATION_ERROR"

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []


def handle_unexpected_error(error: Exception) -> KeyProxyError:
    """Wrap an arbitrary exception so it can be logged and rendered uniformly."""
    if isinstance(error, KeyProxyError):
        return error
    return InternalError(cause=error, context={"type": type(error).__name__})
