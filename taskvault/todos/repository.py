"""
Ownership-scoped todo repository.

Every query carries the principal's account id next to the todo id, so a
todo owned by someone else is indistinguishable from one that does not
exist. Mutations are single find-and-modify calls on the store.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from ..auth.models import Principal
from ..storage import DocumentStore
from ..utils.exceptions import NotFoundError, ValidationError
from ..utils.logger import get_logger
from .models import Todo, TodoPage, TodoStatus

logger = get_logger(__name__)

TODOS = "todos"
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

VALID_STATUSES = {s.value for s in TodoStatus}


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _positive_or(value: Optional[int], default: int) -> int:
    if value is None or value <= 0:
        return default
    return value


class TodoRepository:
    def __init__(self, store: DocumentStore):
        self.store = store

    @staticmethod
    def _scope(principal: Principal, todo_id: str) -> dict:
        return {"id": todo_id, "owner": principal.id}

    def create(
        self, principal: Principal, title: Optional[str], description: Optional[str] = None
    ) -> Todo:
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("Title is required")
        if description is not None and not isinstance(description, str):
            raise ValidationError("Description must be text")
        now = _timestamp()
        todo = Todo(
            id=uuid4().hex,
            title=title.strip(),
            description=description,
            status=TodoStatus.PENDING,
            owner=principal.id,
            created_at=now,
            updated_at=now,
        )
        self.store.insert_one(TODOS, todo.model_dump(mode="json"))
        logger.info("Todo created", todo_id=todo.id, owner=principal.id)
        return todo

    def list(
        self, principal: Principal, page: Optional[int] = None, limit: Optional[int] = None
    ) -> TodoPage:
        """
        One page of the principal's todos, newest first.

        Offset-based: concurrent inserts or deletes between two page requests
        can shift items across page boundaries.
        """
        page = _positive_or(page, DEFAULT_PAGE)
        limit = _positive_or(limit, DEFAULT_LIMIT)
        query = {"owner": principal.id}
        docs = self.store.find(
            TODOS,
            query,
            sort_key="created_at",
            descending=True,
            skip=(page - 1) * limit,
            limit=limit,
        )
        total = self.store.count(TODOS, query)
        return TodoPage(
            items=[Todo(**d) for d in docs],
            page=page,
            limit=limit,
            total=total,
            total_pages=max(1, math.ceil(total / limit)),
        )

    def get(self, principal: Principal, todo_id: str) -> Todo:
        doc = self.store.find_one(TODOS, self._scope(principal, todo_id))
        if doc is None:
            raise NotFoundError("Todo not found")
        return Todo(**doc)

    def update_status(self, principal: Principal, todo_id: str, new_status: Optional[str]) -> Todo:
        """
        Move a todo to a new status.

        Raises:
            ValidationError: status is not pending/completed
            NotFoundError: no todo with this id belongs to the principal
        """
        if not isinstance(new_status, str) or new_status not in VALID_STATUSES:
            raise ValidationError("Status must be pending or completed")
        doc = self.store.find_one_and_update(
            TODOS,
            self._scope(principal, todo_id),
            {"status": new_status, "updated_at": _timestamp()},
        )
        if doc is None:
            raise NotFoundError("Todo not found")
        logger.info("Todo status changed", todo_id=todo_id, status=new_status)
        return Todo(**doc)

    def delete(self, principal: Principal, todo_id: str) -> None:
        doc = self.store.find_one_and_delete(TODOS, self._scope(principal, todo_id))
        if doc is None:
            raise NotFoundError("Todo not found")
        logger.info("Todo deleted", todo_id=todo_id, owner=principal.id)
