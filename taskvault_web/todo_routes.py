"""
FastAPI routes for todos.

Prefix: /api/todos. Every route requires a bearer token and only ever
sees the caller's own todos.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status

from taskvault.auth.models import Principal

from .deps import get_app, require_principal
from .schemas import (
    TodoCreateRequest,
    TodoListOut,
    TodoOut,
    TodoStatusRequest,
    page_to_out,
    todo_to_out,
)

router = APIRouter(prefix="/api/todos", tags=["todos"])


def _parse_int(value: Optional[str]) -> Optional[int]:
    """Lenient query int: anything unparsable counts as absent."""
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


@router.post("", response_model=TodoOut, status_code=status.HTTP_201_CREATED)
def create_todo(
    body: TodoCreateRequest,
    request: Request,
    principal: Principal = Depends(require_principal),
) -> TodoOut:
    todo = get_app(request).todos.create(principal, body.title, body.description)
    return todo_to_out(todo)


@router.get("", response_model=TodoListOut)
def list_todos(
    request: Request,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    principal: Principal = Depends(require_principal),
) -> TodoListOut:
    """
    Paginated list, newest first.

    Query:
        page: 1-based page number (default 1)
        limit: page size (default 10)
    """
    result = get_app(request).todos.list(principal, _parse_int(page), _parse_int(limit))
    return page_to_out(result)


@router.get("/{todo_id}", response_model=TodoOut)
def get_todo(
    todo_id: str,
    request: Request,
    principal: Principal = Depends(require_principal),
) -> TodoOut:
    return todo_to_out(get_app(request).todos.get(principal, todo_id))


@router.patch("/{todo_id}", response_model=TodoOut)
def update_todo_status(
    todo_id: str,
    body: TodoStatusRequest,
    request: Request,
    principal: Principal = Depends(require_principal),
) -> TodoOut:
    todo = get_app(request).todos.update_status(principal, todo_id, body.status)
    return todo_to_out(todo)


@router.delete("/{todo_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_todo(
    todo_id: str,
    request: Request,
    principal: Principal = Depends(require_principal),
) -> Response:
    get_app(request).todos.delete(principal, todo_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
