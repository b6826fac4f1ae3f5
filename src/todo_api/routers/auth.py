from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, status

from ..auth import get_repositories, get_token_service
from ..auth_service import AuthService
from ..repositories import Repositories
from ..schemas import LoginIn, MessageOut, RegisterIn, TokenOut, parse_model
from ..tokens import TokenService

router = APIRouter(prefix="/api/auth", tags=["auth"])


def get_auth_service(
    repos: Repositories = Depends(get_repositories),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(repos.users, tokens)


# PUBLIC_INTERFACE
@router.post(
    "/register",
    response_model=TokenOut,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create an account and return a bearer token for it.",
    responses={
        201: {"description": "User registered"},
        400: {"model": MessageOut, "description": "Validation error or email already in use"},
    },
)
def register(
    payload: Optional[RegisterIn] = Body(default=None),
    service: AuthService = Depends(get_auth_service),
) -> TokenOut:
    # A missing body is treated as an empty object
    return TokenOut(token=service.register(payload or parse_model(RegisterIn, None)))


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=TokenOut,
    summary="Login",
    description="Exchange email and password for a bearer token.",
    responses={
        200: {"description": "Login successful"},
        400: {"model": MessageOut, "description": "Validation error"},
        401: {"model": MessageOut, "description": "Invalid credentials"},
    },
)
def login(
    payload: Optional[LoginIn] = Body(default=None),
    service: AuthService = Depends(get_auth_service),
) -> TokenOut:
    return TokenOut(token=service.login(payload or parse_model(LoginIn, None)))
