"""
Session token issuance and verification.
"""

from .session import SessionAuthority
from .dependencies import (
    security,
    get_current_username,
    get_session_authority,
    set_session_authority,
)

__all__ = [
    "SessionAuthority",
    "security",
    "get_current_username",
    "get_session_authority",
    "set_session_authority",
]
