"""
Stateless bearer tokens carrying a username claim.

Tokens are HS256 JWTs. No server-side record exists: a token is valid when its
signature checks out and its expiry has not passed.
"""

import logging
from datetime import datetime, timedelta, timezone

from jose import jwt, JWTError, ExpiredSignatureError

from ..config.constants import JWT_ALGORITHM, TOKEN_LIFETIME_MINUTES
from ..exceptions import ForbiddenError

logger = logging.getLogger(__name__)


class SessionAuthority:
    """Issues and verifies signed session tokens."""

    def __init__(self, jwt_secret: str, lifetime_minutes: int = TOKEN_LIFETIME_MINUTES):
        """Initialize the authority.

        Args:
            jwt_secret: Secret for JWT signing
            lifetime_minutes: Token lifetime from issuance
        """
        if not jwt_secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = jwt_secret
        self.lifetime = timedelta(minutes=lifetime_minutes)

    def issue(self, username: str) -> str:
        """Create a signed token for a username.

        Args:
            username: Authenticated username

        Returns:
            JWT token string
        """
        now = datetime.now(timezone.utc)
        payload = {
            "username": username,
            "iat": now,
            "exp": now + self.lifetime,
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def verify(self, token: str) -> str:
        """Verify a token and return the username it carries.

        Does not check that the user exists.

        Raises:
            ForbiddenError: If the token is malformed, badly signed or expired
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[JWT_ALGORITHM])
        except ExpiredSignatureError:
            raise ForbiddenError("Token has expired", error_code="TOKEN_EXPIRED")
        except JWTError as e:
            logger.debug(f"Token verification failed: {e}")
            raise ForbiddenError()

        username = payload.get("username")
        if not isinstance(username, str) or not username:
            raise ForbiddenError()

        return username
