from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import RLock
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple

from bson import ObjectId

from .errors import ConflictError
from .models import TodoEntity, UserEntity
from .schemas import TodoCreate
from .settings import Settings

if TYPE_CHECKING:
    from .mongo import MongoStore

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "createdAt": "created_at",
    "created_at": "created_at",
    "updatedAt": "updated_at",
    "updated_at": "updated_at",
    "title": "title",
    "completed": "completed",
}


# PUBLIC_INTERFACE
def resolve_sort_field(value: Optional[str]) -> str:
    """Map a client-supplied sort key onto a stored field, defaulting to created_at."""
    if not value:
        return "created_at"
    return SORT_FIELDS.get(value.strip(), "created_at")


# PUBLIC_INTERFACE
def is_valid_id(value: str) -> bool:
    """True if `value` is a well-formed store identifier (24-char hex ObjectId)."""
    return isinstance(value, str) and len(value) == 24 and ObjectId.is_valid(value)


@dataclass(frozen=True)
class ListQuery:
    """
    Query parameters for listing one user's todos.
    """
    user: str
    page: int = 1
    limit: int = 10
    search: Optional[str] = None
    sort: str = "created_at"  # any value of SORT_FIELDS
    ascending: bool = False

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


# PUBLIC_INTERFACE
class TodoRepository(ABC):
    """Abstract repository contract for todo storage backends."""

    @abstractmethod
    def create(self, user_id: str, data: TodoCreate) -> TodoEntity:
        """Create and return a new TodoEntity owned by user_id."""

    @abstractmethod
    def get(self, todo_id: str) -> Optional[TodoEntity]:
        """Return a TodoEntity by id, or None if not found."""

    @abstractmethod
    def update(self, todo_id: str, user_id: str, changes: Mapping[str, Any]) -> Optional[TodoEntity]:
        """
        Apply `changes` to the todo only if it exists and is owned by user_id,
        as a single store operation. Return the updated entity or None.
        """

    @abstractmethod
    def delete(self, todo_id: str, user_id: str) -> bool:
        """Delete the todo if it is owned by user_id. Return True if deleted."""

    @abstractmethod
    def list(self, query: ListQuery) -> Tuple[List[TodoEntity], int]:
        """
        Return a page of the owner's TodoEntities and the total count matching filters.
        - Case-insensitive substring search on title
        - Sorting by any SORT_FIELDS value, ties broken by id
        - skip/limit pagination
        """


# PUBLIC_INTERFACE
class UserRepository(ABC):
    """Abstract repository contract for user storage backends."""

    @abstractmethod
    def create(self, name: str, email: str, password_hash: str) -> UserEntity:
        """Create a user. Raises ConflictError if the email is already taken."""

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[UserEntity]:
        """Return the user including the password hash, or None."""

    @abstractmethod
    def get_by_id(self, user_id: str) -> Optional[UserEntity]:
        """Return the user without the password hash, or None."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryTodoRepository(TodoRepository):
    """
    Thread-safe in-memory repository suitable for testing and local runs.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[str, TodoEntity] = {}

    def create(self, user_id: str, data: TodoCreate) -> TodoEntity:
        now = _now()
        entity: TodoEntity = {
            "id": str(ObjectId()),
            "title": data.title,
            "description": data.description,
            "completed": data.completed,
            "user": user_id,
            "created_at": now,
            "updated_at": now,
        }
        with self._lock:
            self._items[entity["id"]] = entity
            return entity.copy()

    def get(self, todo_id: str) -> Optional[TodoEntity]:
        with self._lock:
            item = self._items.get(todo_id)
            return None if item is None else item.copy()

    def update(self, todo_id: str, user_id: str, changes: Mapping[str, Any]) -> Optional[TodoEntity]:
        with self._lock:
            existing = self._items.get(todo_id)
            if existing is None or existing["user"] != user_id:
                return None
            updated = existing.copy()
            for key in ("title", "description", "completed"):
                if key in changes:
                    updated[key] = changes[key]  # type: ignore[literal-required]
            updated["updated_at"] = _now()
            self._items[todo_id] = updated
            return updated.copy()

    def delete(self, todo_id: str, user_id: str) -> bool:
        with self._lock:
            existing = self._items.get(todo_id)
            if existing is None or existing["user"] != user_id:
                return False
            del self._items[todo_id]
            return True

    def list(self, query: ListQuery) -> Tuple[List[TodoEntity], int]:
        with self._lock:
            items = [t for t in self._items.values() if t["user"] == query.user]

            if query.search:
                s = query.search.lower()
                items = [t for t in items if s in t["title"].lower()]

            total = len(items)

            field = query.sort if query.sort in SORT_FIELDS.values() else "created_at"
            items.sort(key=lambda t: (t[field], t["id"]), reverse=not query.ascending)  # type: ignore[literal-required]

            page = items[query.skip:query.skip + query.limit]
            # Return copies to avoid external mutation
            return [t.copy() for t in page], total


class InMemoryUserRepository(UserRepository):
    """Thread-safe in-memory user store keyed by id, with a unique email index."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._users: Dict[str, UserEntity] = {}
        self._by_email: Dict[str, str] = {}

    def create(self, name: str, email: str, password_hash: str) -> UserEntity:
        now = _now()
        with self._lock:
            if email in self._by_email:
                raise ConflictError("Email already in use")
            user: UserEntity = {
                "id": str(ObjectId()),
                "name": name,
                "email": email,
                "password": password_hash,
                "created_at": now,
                "updated_at": now,
            }
            self._users[user["id"]] = user
            self._by_email[email] = user["id"]
            return user.copy()

    def get_by_email(self, email: str) -> Optional[UserEntity]:
        with self._lock:
            user_id = self._by_email.get(email)
            return None if user_id is None else self._users[user_id].copy()

    def get_by_id(self, user_id: str) -> Optional[UserEntity]:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            public = user.copy()
            public.pop("password", None)
            return public


@dataclass
class Repositories:
    """The stores an application instance works against."""

    users: UserRepository
    todos: TodoRepository
    store: Optional["MongoStore"] = None


# PUBLIC_INTERFACE
def build_repositories(settings: Settings) -> Repositories:
    """
    Factory to return the configured repositories based on settings.
    - memory: InMemoryUserRepository / InMemoryTodoRepository
    - mongo: MongoUserRepository / MongoTodoRepository sharing one MongoClient
    """
    if settings.persistence_backend == "memory":
        logger.info("Using in-memory persistence backend")
        return Repositories(users=InMemoryUserRepository(), todos=InMemoryTodoRepository())

    from .mongo import MongoStore, MongoTodoRepository, MongoUserRepository

    store = MongoStore.from_url(settings.mongo_url)
    logger.info("Using MongoDB persistence backend (database %s)", store.db.name)
    return Repositories(
        users=MongoUserRepository(store.db),
        todos=MongoTodoRepository(store.db),
        store=store,
    )
