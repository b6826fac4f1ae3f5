from __future__ import annotations

import logging
import traceback
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import AppError, NotFoundError, ServerError, ValidationError
from .repositories import build_repositories
from .routers import auth as auth_router
from .routers import todos as todos_router
from .schemas import MessageOut, describe_validation_errors
from .settings import Settings, get_settings
from .tokens import TokenService

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "auth", "description": "Registration and login; both return a bearer token."},
    {
        "name": "todos",
        "description": "Owner-scoped CRUD operations for Todo items with search, sorting, and pagination.",
    },
]


def _error_response(error: AppError, stack: Optional[str] = None) -> JSONResponse:
    content: Dict[str, Any] = {"message": error.message}
    if stack is not None:
        content["stack"] = stack
    return JSONResponse(status_code=error.status_code, content=content)


def _register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        """Domain errors already carry their status and message."""
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return request validation failures as a 400 with a single message.

        Response format:
            {"message": "Title is required"}
        """
        return _error_response(ValidationError(describe_validation_errors(exc.errors())))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # Unknown paths and unsupported methods are both reported as not found
        if exc.status_code in (404, 405):
            url = request.url.path
            if request.url.query:
                url = f"{url}?{request.url.query}"
            return _error_response(NotFoundError(f"Not Found - {url}"))
        return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)}, headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        stack = None if settings.is_production else "".join(traceback.format_exception(exc))
        return _error_response(ServerError(), stack)


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    The settings are read once (from the environment unless given) and the
    token service and repositories built from them are stored on app.state,
    where the request dependencies pick them up.
    """
    settings = settings or get_settings()
    repositories = build_repositories(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if repositories.store is not None:
            repositories.store.ping()
            repositories.store.ensure_indexes()
        yield
        if repositories.store is not None:
            repositories.store.close()

    app = FastAPI(
        title="Todo API",
        description="Multi-user todo service with token authentication and owner-scoped CRUD.",
        version="1.0.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.tokens = TokenService.from_settings(settings)
    app.state.repositories = repositories

    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app, settings)

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"], response_model=MessageOut)
    def health_check() -> MessageOut:
        """
        Health check endpoint.

        Returns:
            A JSON object indicating the service is up.
        """
        return MessageOut(message="Todo API is running")

    app.include_router(auth_router.router)
    app.include_router(todos_router.router)
    return app
