from __future__ import annotations

from datetime import datetime
from typing import TypedDict


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A lightweight domain model representing a Todo item as returned by the
    repositories.

    Fields:
    - id: ObjectId string assigned by the store
    - title: Short title (1..200 chars, trimmed on input via schemas)
    - description: Detailed description, empty string when not provided
    - completed: Boolean completion flag
    - user: Owner's user id; never changes after creation
    - created_at: UTC creation timestamp (datetime)
    - updated_at: UTC last update timestamp (datetime)
    """

    id: str
    title: str
    description: str
    completed: bool
    user: str
    created_at: datetime
    updated_at: datetime


# PUBLIC_INTERFACE
class UserEntity(TypedDict, total=False):
    """
    A registered user. `password` holds the bcrypt hash and is omitted when
    the user is loaded for identity checks.
    """

    id: str
    name: str
    email: str
    password: str
    created_at: datetime
    updated_at: datetime
