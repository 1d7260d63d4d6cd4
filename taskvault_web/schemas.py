"""Request and response bodies for the HTTP API."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from taskvault.auth.models import AccountPublic, Principal
from taskvault.todos.models import Todo, TodoPage


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserPublic(BaseModel):
    id: str
    name: str
    email: str


class AuthResponse(BaseModel):
    token: str
    user: UserPublic


class TodoCreateRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None


class TodoStatusRequest(BaseModel):
    status: Optional[str] = None


class TodoOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: Optional[str] = None
    status: str
    owner: str
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")


class TodoListOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int = Field(alias="totalPages")
    data: List[TodoOut]


def user_to_public(account: AccountPublic | Principal) -> UserPublic:
    return UserPublic(id=account.id, name=account.name, email=account.email)


def todo_to_out(todo: Todo) -> TodoOut:
    return TodoOut(**todo.model_dump())


def page_to_out(page: TodoPage) -> TodoListOut:
    return TodoListOut(
        page=page.page,
        limit=page.limit,
        total=page.total,
        total_pages=page.total_pages,
        data=[todo_to_out(t) for t in page.items],
    )
