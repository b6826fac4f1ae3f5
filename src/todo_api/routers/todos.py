from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Path, Query, status

from ..auth import get_current_user_id, get_repositories
from ..repositories import ListQuery, Repositories, resolve_sort_field
from ..schemas import MessageOut, TodoCreate, TodoCreatedOut, TodoOut, TodoPage, TodoUpdatedOut, parse_model
from ..todo_service import TodoService
from ..utils import pagination_envelope, parse_positive_int

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

router = APIRouter(
    prefix="/api/todos",
    tags=["todos"],
    responses={401: {"model": MessageOut, "description": "Missing or invalid token"}},
)


def get_todo_service(repos: Repositories = Depends(get_repositories)) -> TodoService:
    return TodoService(repos.todos)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoCreatedOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo item owned by the caller and return it.",
    responses={
        201: {"description": "Todo created successfully"},
        400: {"model": MessageOut, "description": "Validation error"},
    },
)
def create_todo(
    payload: Optional[TodoCreate] = Body(default=None),
    user_id: str = Depends(get_current_user_id),
    service: TodoService = Depends(get_todo_service),
) -> TodoCreatedOut:
    """
    Create a new Todo for the authenticated user.
    """
    created = service.create(user_id, payload or parse_model(TodoCreate, None))
    return TodoCreatedOut(**created)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=TodoPage,
    summary="List Todos",
    description=(
        "List the caller's todos with optional search, sorting and pagination.\n\n"
        "Query parameters:\n"
        "- page: 1-based page number (default 1)\n"
        "- limit: page size (default 10)\n"
        "- search: case-insensitive substring to look for in titles\n"
        "- sort: one of createdAt, updatedAt, title, completed (default createdAt)\n"
        "- order: 'asc' for ascending, anything else is descending\n\n"
        "Returns the page together with the total number of matching todos."
    ),
    responses={
        200: {"description": "List retrieved successfully"},
    },
)
def list_todos(
    page: Optional[str] = Query(None, description="Page number, starting at 1"),
    limit: Optional[str] = Query(None, description="Maximum number of items per page"),
    search: Optional[str] = Query(None, description="Search text for the title"),
    sort: Optional[str] = Query(None, description="Sort field"),
    order: Optional[str] = Query(None, description="'asc' or 'desc'"),
    user_id: str = Depends(get_current_user_id),
    service: TodoService = Depends(get_todo_service),
) -> TodoPage:
    """
    List todos with pagination and filters.
    """
    query = ListQuery(
        user=user_id,
        page=parse_positive_int(page, DEFAULT_PAGE),
        limit=parse_positive_int(limit, DEFAULT_LIMIT),
        search=search.strip() if search else None,
        sort=resolve_sort_field(sort),
        ascending=(order or "").strip().lower() == "asc",
    )
    items, total = service.list(query)
    envelope = pagination_envelope(
        items=[TodoOut(**it) for it in items],
        total=total,
        page=query.page,
        limit=query.limit,
    )
    return TodoPage(**envelope)


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}",
    response_model=TodoUpdatedOut,
    summary="Update Todo",
    description=(
        "Partially update a Todo item. Only title, description and completed fields "
        "present in the body are changed."
    ),
    responses={
        200: {"description": "Todo updated"},
        400: {"model": MessageOut, "description": "Invalid id or validation error"},
        403: {"model": MessageOut, "description": "Todo belongs to another user"},
        404: {"model": MessageOut, "description": "Todo not found"},
    },
)
def update_todo(
    todo_id: str = Path(..., description="Todo id"),
    payload: Any = Body(
        default=None,
        examples=[{"title": "Buy groceries and supplies", "completed": True}],
    ),
    user_id: str = Depends(get_current_user_id),
    service: TodoService = Depends(get_todo_service),
) -> TodoUpdatedOut:
    """
    Partial update of a Todo item.
    """
    updated = service.update(user_id, todo_id, payload)
    return TodoUpdatedOut(**updated)


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Todo",
    description="Delete a Todo item by ID.",
    responses={
        204: {"description": "Todo deleted"},
        400: {"model": MessageOut, "description": "Invalid id"},
        403: {"model": MessageOut, "description": "Todo belongs to another user"},
        404: {"model": MessageOut, "description": "Todo not found"},
    },
)
def delete_todo(
    todo_id: str = Path(..., description="Todo id"),
    user_id: str = Depends(get_current_user_id),
    service: TodoService = Depends(get_todo_service),
) -> None:
    """
    Delete a Todo. Returns 204 on success.
    """
    service.delete(user_id, todo_id)
    return None
