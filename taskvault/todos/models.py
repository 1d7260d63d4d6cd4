"""Todo records and list pages."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TodoStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class Todo(BaseModel):
    """
    A todo owned by exactly one account.

    Timestamps are ISO-8601 UTC strings with microseconds so that string
    order matches time order.
    """

    model_config = ConfigDict(use_enum_values=True)

    id: str
    title: str
    description: Optional[str] = None
    status: TodoStatus = TodoStatus.PENDING
    owner: str
    created_at: str
    updated_at: str


class TodoPage(BaseModel):
    items: List[Todo] = Field(default_factory=list)
    page: int
    limit: int
    total: int
    total_pages: int
