from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000
NAME_MIN_LENGTH = 2
PASSWORD_MIN_LENGTH = 6

# local@domain.tld with ASCII word characters and single . or - separators
EMAIL_RE = re.compile(r"^\w+(?:[.-]\w+)*@\w+(?:[.-]\w+)*\.\w{2,3}$", re.ASCII)

ModelT = TypeVar("ModelT", bound=BaseModel)


# PUBLIC_INTERFACE
def describe_validation_errors(errors: Sequence[Mapping[str, Any]]) -> str:
    """
    Turn a list of pydantic/FastAPI error dicts into a single user-facing message.

    Messages raised by our own validators are returned as-is; other errors are
    prefixed with the offending field name.
    """
    if not errors:
        return ValidationError.default_message
    err = errors[0]
    err_type = err.get("type", "")
    ctx = err.get("ctx") or {}
    if err_type == "value_error" and "error" in ctx:
        return str(ctx["error"])
    if err_type == "json_invalid":
        return "Invalid JSON body"
    loc = [str(part) for part in err.get("loc", ()) if part != "body"]
    msg = err.get("msg", ValidationError.default_message)
    return f"{'.'.join(loc)}: {msg}" if loc else msg


# PUBLIC_INTERFACE
def parse_model(model: Type[ModelT], data: Optional[Mapping[str, Any]]) -> ModelT:
    """Validate raw request data into `model`, raising our ValidationError on failure."""
    try:
        return model.model_validate(data if data is not None else {})
    except PydanticValidationError as e:
        raise ValidationError(describe_validation_errors(e.errors())) from e


def _normalize_email(value: str) -> str:
    email = value.strip()
    if not EMAIL_RE.match(email):
        raise ValueError("Please enter a valid email address")
    return email.lower()


# PUBLIC_INTERFACE
class RegisterIn(BaseModel):
    """
    Registration payload. Checks run in a fixed order so the first problem is
    the one reported.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"name": "Ann", "email": "ann@example.com", "password": "secret1"}
        }
    )

    name: Optional[str] = Field(default=None, description="Display name (at least 2 characters)")
    email: Optional[str] = Field(default=None, description="E-mail address, stored lowercased")
    password: Optional[str] = Field(default=None, description="Password (at least 6 characters)")

    @model_validator(mode="after")
    def check_fields(self) -> "RegisterIn":
        if not self.name or not self.email or not self.password:
            raise ValueError("Name, email and password are required")
        if len(self.password) < PASSWORD_MIN_LENGTH:
            raise ValueError("Password must be at least 6 characters long")
        name = self.name.strip()
        if len(name) < NAME_MIN_LENGTH:
            raise ValueError("Name must be at least 2 characters long")
        self.name = name
        self.email = _normalize_email(self.email)
        return self


# PUBLIC_INTERFACE
class LoginIn(BaseModel):
    """Login payload."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"email": "ann@example.com", "password": "secret1"}}
    )

    email: Optional[str] = Field(default=None, description="Registered e-mail address")
    password: Optional[str] = Field(default=None, description="Account password")

    @model_validator(mode="after")
    def check_fields(self) -> "LoginIn":
        if not self.email or not self.password:
            raise ValueError("Email and password are required")
        self.email = _normalize_email(self.email)
        return self


class TokenOut(BaseModel):
    token: str = Field(..., description="Signed bearer token")


def _clean_title(value: Optional[str], empty_message: str) -> str:
    if value is None or not value.strip():
        raise ValueError(empty_message)
    title = value.strip()
    if len(title) > TITLE_MAX_LENGTH:
        raise ValueError("Title cannot exceed 200 characters")
    return title


def _clean_description(value: Optional[str]) -> str:
    if value is None:
        return ""
    description = value.strip()
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValueError("Description cannot exceed 1000 characters")
    return description


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.

    After validation `title` and `description` are trimmed strings and
    `completed` is a bool.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "completed": False,
            }
        }
    )

    title: Optional[str] = Field(default=None, description="Short title for the todo item (1..200 chars)")
    description: Optional[str] = Field(default=None, description="Optional detailed description (<=1000 chars)")
    completed: Any = Field(default=None, description="Completion status flag; any JSON value, read by truthiness")

    @model_validator(mode="after")
    def normalize(self) -> "TodoCreate":
        self.title = _clean_title(self.title, "Title is required")
        self.description = _clean_description(self.description)
        self.completed = bool(self.completed)
        return self


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Schema for updating an existing Todo item.
    All fields are optional; only provided fields will be updated, see changes().
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy groceries and supplies",
                "completed": True,
            }
        }
    )

    title: Optional[str] = Field(default=None, description="Short title for the todo item")
    description: Optional[str] = Field(default=None, description="Detailed description; null clears it")
    completed: Any = Field(default=None, description="Completion status flag; any JSON value, read by truthiness")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> str:
        return _clean_title(v, "Title cannot be empty")

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: Optional[str]) -> str:
        return _clean_description(v)

    @field_validator("completed")
    @classmethod
    def validate_completed(cls, v: Any) -> bool:
        return bool(v)

    def changes(self) -> Dict[str, Any]:
        """Return only the fields that were present in the input."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class _TodoOutBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Unique identifier of the todo item")
    title: str = Field(..., description="Short title for the todo item")
    description: str = Field(..., description="Detailed description")
    completed: bool = Field(..., description="Completion status flag")


# PUBLIC_INTERFACE
class TodoCreatedOut(_TodoOutBase):
    """Todo returned after creation."""

    created_at: datetime = Field(..., alias="createdAt", description="Creation timestamp")


# PUBLIC_INTERFACE
class TodoUpdatedOut(_TodoOutBase):
    """Todo returned after an update."""

    updated_at: datetime = Field(..., alias="updatedAt", description="Last update timestamp")


# PUBLIC_INTERFACE
class TodoOut(_TodoOutBase):
    """Todo as it appears in list responses."""

    created_at: datetime = Field(..., alias="createdAt", description="Creation timestamp")
    updated_at: datetime = Field(..., alias="updatedAt", description="Last update timestamp")


# PUBLIC_INTERFACE
class TodoPage(BaseModel):
    """
    Envelope for paginated list responses.
    """

    data: List[TodoOut] = Field(..., description="Todo items on this page")
    page: int = Field(..., description="Page number (1-based)")
    limit: int = Field(..., description="Page size")
    total: int = Field(..., description="Total number of items matching the query")


class MessageOut(BaseModel):
    message: str
