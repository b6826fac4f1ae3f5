from __future__ import annotations


# PUBLIC_INTERFACE
class AppError(Exception):
    """
    Base class for errors that carry an HTTP status and a user-facing message.

    The exception handlers in main.py translate any AppError into a JSON body
    of the form {"message": <message>} with the subclass' status code.
    """

    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or out-of-range input."""

    status_code = 400
    default_message = "Invalid request"


class AuthError(AppError):
    """Missing or invalid token, or bad credentials."""

    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(AppError):
    """Authenticated, but the resource belongs to someone else."""

    status_code = 403
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class ConflictError(AppError):
    """Unique constraint violation (e.g. e-mail already registered)."""

    status_code = 400
    default_message = "Already exists"


class ServerError(AppError):
    status_code = 500
