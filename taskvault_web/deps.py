"""
FastAPI dependencies for authentication and throttling.

require_principal() resolves the Authorization header to a Principal via
the IdentityResolver; failures propagate as typed errors and are turned
into 401 responses by the exception handlers in taskvault_web.main.
"""

from __future__ import annotations

from fastapi import Request

from taskvault.app import TaskVaultApp
from taskvault.auth.models import Principal


def get_app(request: Request) -> TaskVaultApp:
    return request.app.state.taskvault


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def require_principal(request: Request) -> Principal:
    """Dependency for protected routes."""
    tv = get_app(request)
    principal = tv.resolver.resolve(request.headers.get("Authorization"))
    request.state.principal_id = principal.id
    return principal


def auth_rate_limit(request: Request) -> None:
    """Dependency throttling register/login per client address."""
    throttler = get_app(request).auth_throttler
    if throttler is not None:
        throttler.check(client_key(request))
