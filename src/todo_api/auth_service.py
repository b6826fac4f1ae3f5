from __future__ import annotations

import logging

import bcrypt

from .errors import AuthError, ConflictError
from .repositories import UserRepository
from .schemas import LoginIn, RegisterIn
from .tokens import TokenService

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 10
# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


# ---------------- PASSWORD HASHING ----------------

def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password hash. A malformed hash never matches."""
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        return False


# ---------------- AUTH FLOW ----------------

# PUBLIC_INTERFACE
class AuthService:
    """Registration and login against a UserRepository."""

    def __init__(self, users: UserRepository, tokens: TokenService) -> None:
        self._users = users
        self._tokens = tokens

    def register(self, payload: RegisterIn) -> str:
        """
        Create a user from an already validated payload and return a token for it.

        Raises:
            ConflictError: if the (normalized) email is already registered.
        """
        if self._users.get_by_email(payload.email) is not None:
            raise ConflictError("Email already in use")

        user = self._users.create(
            name=payload.name,
            email=payload.email,
            password_hash=hash_password(payload.password),
        )
        logger.info("User registered: %s", user["id"])
        return self._tokens.issue(user["id"])

    def login(self, payload: LoginIn) -> str:
        """
        Return a token for valid credentials.

        Raises:
            AuthError: with the same message whether the email or the password is wrong.
        """
        user = self._users.get_by_email(payload.email)
        if user is None or not verify_password(payload.password, user.get("password", "")):
            raise AuthError("Invalid credentials")
        logger.info("User logged in: %s", user["id"])
        return self._tokens.issue(user["id"])
