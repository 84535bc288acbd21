from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..auth import get_current_user_id, get_todo_cache
from ..errors import NotFound
from ..schemas import OkResponse, TodoCreate, TodoOut, TodoPage, TodoUpdate
from ..store import TodoCache
from ..utils import DEFAULT_PAGE_LIMIT, page_envelope, parse_todo_id

router = APIRouter(
    prefix="/api/todos",
    tags=["todos"],
)

_AUTH_RESPONSES = {401: {"description": "Missing or rejected session"}}


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=TodoPage,
    summary="List Todos",
    description=(
        "List the caller's cached todos, most recent first.\n\n"
        "Query parameters:\n"
        "- page: 1-based page number (values below 1 are treated as 1)\n"
        "- limit: page size, clamped to 1..50\n"
    ),
    responses={200: {"description": "Page retrieved"}, **_AUTH_RESPONSES},
)
def list_todos(
    page: int = Query(1, description="1-based page number"),
    limit: int = Query(DEFAULT_PAGE_LIMIT, description="Page size, clamped to 1..50"),
    user_id: int = Depends(get_current_user_id),
    cache: TodoCache = Depends(get_todo_cache),
) -> TodoPage:
    envelope = page_envelope(cache.list(user_id), page, limit)
    return TodoPage(**envelope)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a todo in the caller's bucket. It is placed first in the list.",
    responses={
        201: {"description": "Todo created"},
        400: {"description": "Missing todo text"},
        **_AUTH_RESPONSES,
    },
)
def create_todo(
    payload: TodoCreate,
    user_id: int = Depends(get_current_user_id),
    cache: TodoCache = Depends(get_todo_cache),
) -> TodoOut:
    created = cache.create(user_id, payload)
    return TodoOut(**created)


# PUBLIC_INTERFACE
@router.get(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Get Todo",
    description="Get a single todo from the caller's bucket.",
    responses={
        200: {"description": "Todo found"},
        400: {"description": "Invalid id"},
        404: {"description": "Todo not found"},
        **_AUTH_RESPONSES,
    },
)
def get_todo(
    todo_id: str,
    user_id: int = Depends(get_current_user_id),
    cache: TodoCache = Depends(get_todo_cache),
) -> TodoOut:
    item = cache.get(user_id, parse_todo_id(todo_id))
    if item is None:
        raise NotFound()
    return TodoOut(**item)


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}",
    response_model=TodoOut,
    summary="Update Todo",
    description="Merge the provided fields into a todo. Omitted fields are left unchanged.",
    responses={
        200: {"description": "Todo updated"},
        400: {"description": "Invalid id"},
        404: {"description": "Todo not found"},
        **_AUTH_RESPONSES,
    },
)
def update_todo(
    todo_id: str,
    payload: Optional[TodoUpdate] = None,
    user_id: int = Depends(get_current_user_id),
    cache: TodoCache = Depends(get_todo_cache),
) -> TodoOut:
    updated = cache.update(user_id, parse_todo_id(todo_id), payload or TodoUpdate())
    if updated is None:
        raise NotFound()
    return TodoOut(**updated)


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    response_model=OkResponse,
    summary="Delete Todo",
    description="Delete a todo from the caller's bucket.",
    responses={
        200: {"description": "Todo deleted"},
        400: {"description": "Invalid id"},
        404: {"description": "Todo not found"},
        **_AUTH_RESPONSES,
    },
)
def delete_todo(
    todo_id: str,
    user_id: int = Depends(get_current_user_id),
    cache: TodoCache = Depends(get_todo_cache),
) -> OkResponse:
    if not cache.delete(user_id, parse_todo_id(todo_id)):
        raise NotFound()
    return OkResponse(ok=True)
