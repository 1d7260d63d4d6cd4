"""
FastAPI routes for authentication.

Prefix: /api/auth
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from taskvault.auth.models import Principal

from .deps import auth_rate_limit, get_app, require_principal
from .schemas import AuthResponse, LoginRequest, RegisterRequest, UserPublic, user_to_public

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(auth_rate_limit)],
)
def register(body: RegisterRequest, request: Request) -> AuthResponse:
    """
    Register a new account.

    Response:
        {
          "token": "<bearer_token>",
          "user": { "id": "...", "name": "...", "email": "..." }
        }
    """
    tv = get_app(request)
    account = tv.credentials.register(body.name, body.email, body.password)
    token = tv.tokens.issue(account.id)
    return AuthResponse(token=token, user=user_to_public(account))


@router.post("/login", response_model=AuthResponse, dependencies=[Depends(auth_rate_limit)])
def login(body: LoginRequest, request: Request) -> AuthResponse:
    """Log in an existing account. Same response shape as /register."""
    tv = get_app(request)
    account = tv.credentials.authenticate(body.email, body.password)
    token = tv.tokens.issue(account.id)
    return AuthResponse(token=token, user=user_to_public(account))


@router.get("/profile", response_model=UserPublic)
@router.get("/user/profile", response_model=UserPublic, include_in_schema=False)
def profile(principal: Principal = Depends(require_principal)) -> UserPublic:
    """Return the authenticated account."""
    return user_to_public(principal)
