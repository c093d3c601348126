"""
API route modules.
"""

from typing import Optional

# Service references (set by the server)
_credential_store = None
_key_resolver = None
_completion_gateway = None


def set_services(
    credential_store=None,
    key_resolver=None,
    completion_gateway=None,
):
    """Set service references for route handlers."""
    global _credential_store, _key_resolver, _completion_gateway
    _credential_store = credential_store
    _key_resolver = key_resolver
    _completion_gateway = completion_gateway


def get_credential_store():
    """Get credential store."""
    if _credential_store is None:
        raise RuntimeError("Credential store not initialized")
    return _credential_store


def get_key_resolver():
    """Get key resolver."""
    if _key_resolver is None:
        raise RuntimeError("Key resolver not initialized")
    return _key_resolver


def get_completion_gateway():
    """Get completion gateway."""
    if _completion_gateway is None:
        raise RuntimeError("Completion gateway not initialized")
    return _completion_gateway


# Import routers
from .auth import router as auth_router
from .chat import router as chat_router

__all__ = [
    "auth_router",
    "chat_router",
    "set_services",
    "get_credential_store",
    "get_key_resolver",
    "get_completion_gateway",
]
