from __future__ import annotations

from typing import Any, List, Mapping, Tuple

from .errors import ForbiddenError, NotFoundError, ValidationError
from .models import TodoEntity
from .repositories import ListQuery, TodoRepository, is_valid_id
from .schemas import TodoCreate, TodoUpdate, parse_model


# PUBLIC_INTERFACE
class TodoService:
    """
    Owner-scoped todo operations.

    `user_id` always comes from the authenticated request, never from the
    request body.
    """

    def __init__(self, todos: TodoRepository) -> None:
        self._todos = todos

    def create(self, user_id: str, payload: TodoCreate) -> TodoEntity:
        return self._todos.create(user_id, payload)

    def list(self, query: ListQuery) -> Tuple[List[TodoEntity], int]:
        return self._todos.list(query)

    def _get_owned(self, user_id: str, todo_id: str) -> TodoEntity:
        if not is_valid_id(todo_id):
            raise ValidationError("Invalid ID")
        todo = self._todos.get(todo_id)
        if todo is None:
            raise NotFoundError("Not found")
        if todo["user"] != user_id:
            raise ForbiddenError("Forbidden")
        return todo

    def update(self, user_id: str, todo_id: str, payload: Any) -> TodoEntity:
        """
        Apply the fields present in `payload` to one of the user's todos.

        The id, existence and ownership are checked before the payload (and
        its shape) is validated. The write itself is conditional on the owner;
        if the todo disappeared in between, NotFoundError is raised.
        """
        self._get_owned(user_id, todo_id)
        if payload is not None and not isinstance(payload, Mapping):
            raise ValidationError("Request body must be a JSON object")
        patch = parse_model(TodoUpdate, payload)
        updated = self._todos.update(todo_id, user_id, patch.changes())
        if updated is None:
            raise NotFoundError("Not found")
        return updated

    def delete(self, user_id: str, todo_id: str) -> None:
        self._get_owned(user_id, todo_id)
        if not self._todos.delete(todo_id, user_id):
            raise NotFoundError("Not found")
