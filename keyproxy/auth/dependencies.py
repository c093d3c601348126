"""
FastAPI dependencies for bearer authentication.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..exceptions import UnauthenticatedError
from .session import SessionAuthority

# auto_error=False so a missing header is reported as 401 rather than 403
security = HTTPBearer(auto_error=False)

# Global authority instance (set by the server)
_authority_instance: Optional[SessionAuthority] = None


def set_session_authority(authority: SessionAuthority):
    """Set the global session authority."""
    global _authority_instance
    _authority_instance = authority


def get_session_authority() -> SessionAuthority:
    """Get the session authority."""
    if _authority_instance is None:
        raise RuntimeError("Session authority not initialized")
    return _authority_instance


async def get_current_username(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """FastAPI dependency resolving the bearer token to a username.

    Raises:
        UnauthenticatedError: If no token was presented
        ForbiddenError: If the token is invalid or expired
    """
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError()

    return get_session_authority().verify(credentials.credentials)
