from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, Request

from .errors import AuthError
from .repositories import Repositories
from .tokens import TokenService

BEARER_PREFIX = "Bearer "


def get_repositories(request: Request) -> Repositories:
    """Repositories built for this application by create_app."""
    return request.app.state.repositories


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


# PUBLIC_INTERFACE
def extract_token(authorization: Optional[str]) -> str:
    """
    Return the token carried by an Authorization header value.

    A 'Bearer ' prefix is stripped when present; otherwise the raw value is
    taken as the token.

    Raises:
        AuthError: if no token is present.
    """
    value = authorization or ""
    if value.startswith(BEARER_PREFIX):
        value = value[len(BEARER_PREFIX):]
    value = value.strip()
    if not value:
        raise AuthError("Unauthorized")
    return value


# PUBLIC_INTERFACE
def get_current_user_id(
    authorization: Optional[str] = Header(default=None),
    tokens: TokenService = Depends(get_token_service),
    repos: Repositories = Depends(get_repositories),
) -> str:
    """
    FastAPI dependency that authenticates the request and returns the user id.

    Usage:
        @router.get("/")
        def handler(user_id: str = Depends(get_current_user_id)): ...

    Raises:
        AuthError(401) if the header is missing, the token does not verify, or
        the user it names no longer exists.
    """
    user_id = tokens.verify(extract_token(authorization))
    if repos.users.get_by_id(user_id) is None:
        raise AuthError("Unauthorized")
    return user_id
