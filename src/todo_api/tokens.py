from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import jwt

from .errors import AuthError
from .settings import Settings

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"


# PUBLIC_INTERFACE
class TokenService:
    """Issues and verifies HS256 bearer tokens that carry a user id."""

    def __init__(self, secret: str, expires_in: int) -> None:
        self._secret = secret
        self._expires_in = expires_in

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(settings.jwt_secret, settings.jwt_expires_in)

    def issue(self, user_id: str) -> str:
        """Generate a signed token for a user."""
        now = datetime.now(timezone.utc)
        payload = {
            "id": str(user_id),
            "iat": now,
            "exp": now + timedelta(seconds=self._expires_in),
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def verify(self, token: str) -> str:
        """
        Return the user id bound to `token`.

        Raises:
            AuthError: if the token is malformed, badly signed, expired or has no id claim.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": ["exp", "id"]},
            )
        except jwt.InvalidTokenError as e:
            logger.debug("Rejected token: %s", e)
            raise AuthError("Invalid token") from e
        user_id = payload["id"]
        if not isinstance(user_id, str) or not user_id:
            raise AuthError("Invalid token")
        return user_id
