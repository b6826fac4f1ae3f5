from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from .errors import ConflictError
from .models import TodoEntity, UserEntity
from .repositories import ListQuery, TodoRepository, UserRepository, is_valid_id
from .schemas import TodoCreate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Collections:
    users: str = "users"
    todos: str = "todos"


_COLLECTIONS = _Collections()


class MongoStore:
    """
    Owns the MongoClient shared by both repositories of an application.

    The client connects lazily; `ping` and `ensure_indexes` are called from the
    application's startup hook so a bad MONGO_URL fails the boot.
    """

    def __init__(self, client: MongoClient, db_name: Optional[str] = None) -> None:
        self.client = client
        self.db: Database = (
            client.get_database(db_name) if db_name else client.get_default_database(default="todo-api")
        )

    @classmethod
    def from_url(cls, url: str) -> "MongoStore":
        return cls(MongoClient(url, tz_aware=True))

    def ping(self) -> None:
        self.client.admin.command("ping")
        logger.info("Connected to MongoDB")

    def ensure_indexes(self) -> None:
        self.db[_COLLECTIONS.users].create_index("email", unique=True)
        self.db[_COLLECTIONS.todos].create_index([("user", ASCENDING), ("created_at", DESCENDING)])

    def close(self) -> None:
        self.client.close()


def _now() -> datetime:
    # BSON dates have millisecond precision
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def _doc_to_todo(doc: Mapping[str, Any]) -> TodoEntity:
    return {
        "id": str(doc["_id"]),
        "title": doc["title"],
        "description": doc.get("description", ""),
        "completed": bool(doc.get("completed", False)),
        "user": str(doc["user"]),
        "created_at": _as_utc(doc["created_at"]),
        "updated_at": _as_utc(doc["updated_at"]),
    }


def _doc_to_user(doc: Mapping[str, Any]) -> UserEntity:
    user: UserEntity = {
        "id": str(doc["_id"]),
        "name": doc["name"],
        "email": doc["email"],
        "created_at": _as_utc(doc["created_at"]),
        "updated_at": _as_utc(doc["updated_at"]),
    }
    if "password" in doc:
        user["password"] = doc["password"]
    return user


class MongoTodoRepository(TodoRepository):
    """
    MongoDB repository implementing the TodoRepository interface.

    Owner checks are part of the write filter, so an update or delete never
    touches a document owned by someone else even under concurrent requests.
    """

    def __init__(self, db: Database) -> None:
        self._todos: Collection = db[_COLLECTIONS.todos]

    def create(self, user_id: str, data: TodoCreate) -> TodoEntity:
        now = _now()
        doc: Dict[str, Any] = {
            "title": data.title,
            "description": data.description,
            "completed": data.completed,
            "user": ObjectId(user_id),
            "created_at": now,
            "updated_at": now,
        }
        result = self._todos.insert_one(doc)
        doc["_id"] = result.inserted_id
        return _doc_to_todo(doc)

    def get(self, todo_id: str) -> Optional[TodoEntity]:
        if not is_valid_id(todo_id):
            return None
        doc = self._todos.find_one({"_id": ObjectId(todo_id)})
        return _doc_to_todo(doc) if doc else None

    def update(self, todo_id: str, user_id: str, changes: Mapping[str, Any]) -> Optional[TodoEntity]:
        if not (is_valid_id(todo_id) and is_valid_id(user_id)):
            return None
        fields = {k: v for k, v in changes.items() if k in ("title", "description", "completed")}
        fields["updated_at"] = _now()
        doc = self._todos.find_one_and_update(
            {"_id": ObjectId(todo_id), "user": ObjectId(user_id)},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )
        return _doc_to_todo(doc) if doc else None

    def delete(self, todo_id: str, user_id: str) -> bool:
        if not (is_valid_id(todo_id) and is_valid_id(user_id)):
            return False
        result = self._todos.delete_one({"_id": ObjectId(todo_id), "user": ObjectId(user_id)})
        return result.deleted_count > 0

    def list(self, query: ListQuery) -> Tuple[List[TodoEntity], int]:
        if not is_valid_id(query.user):
            return [], 0
        filter_: Dict[str, Any] = {"user": ObjectId(query.user)}
        if query.search:
            # Literal substring match on title
            filter_["title"] = {"$regex": re.escape(query.search), "$options": "i"}

        total = self._todos.count_documents(filter_)

        direction = ASCENDING if query.ascending else DESCENDING
        cursor = (
            self._todos.find(filter_)
            .sort([(query.sort, direction), ("_id", direction)])
            .skip(query.skip)
            .limit(query.limit)
        )
        return [_doc_to_todo(doc) for doc in cursor], total


class MongoUserRepository(UserRepository):
    """MongoDB repository implementing the UserRepository interface."""

    def __init__(self, db: Database) -> None:
        self._users: Collection = db[_COLLECTIONS.users]

    def create(self, name: str, email: str, password_hash: str) -> UserEntity:
        now = _now()
        doc: Dict[str, Any] = {
            "name": name,
            "email": email,
            "password": password_hash,
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = self._users.insert_one(doc)
        except DuplicateKeyError as e:
            raise ConflictError("Email already in use") from e
        doc["_id"] = result.inserted_id
        return _doc_to_user(doc)

    def get_by_email(self, email: str) -> Optional[UserEntity]:
        doc = self._users.find_one({"email": email})
        return _doc_to_user(doc) if doc else None

    def get_by_id(self, user_id: str) -> Optional[UserEntity]:
        if not is_valid_id(user_id):
            return None
        doc = self._users.find_one({"_id": ObjectId(user_id)}, projection={"password": 0})
        return _doc_to_user(doc) if doc else None
