"""Turns an Authorization header into a Principal."""

from __future__ import annotations

from typing import Optional

from ..utils.exceptions import MissingCredentialsError, NotFoundError, UnauthorizedError
from .credentials import CredentialStore
from .models import Principal
from .tokens import TokenService

BEARER_PREFIX = "bearer "


def extract_bearer_token(auth_header: Optional[str]) -> Optional[str]:
    """Return the token from 'Bearer <token>', or None for any other shape."""
    if not auth_header:
        return None
    if auth_header[: len(BEARER_PREFIX)].lower() != BEARER_PREFIX:
        return None
    token = auth_header[len(BEARER_PREFIX):].strip()
    if not token or " " in token:
        return None
    return token


class IdentityResolver:
    def __init__(self, tokens: TokenService, credentials: CredentialStore):
        self.tokens = tokens
        self.credentials = credentials

    def resolve(self, raw_auth_header: Optional[str]) -> Principal:
        """
        Resolve the principal behind a request.

        Raises:
            MissingCredentialsError: header absent or not a bearer token
            InvalidTokenError / ExpiredTokenError: from token verification
            UnauthorizedError: token is valid but the account is gone
        """
        token = extract_bearer_token(raw_auth_header)
        if token is None:
            raise MissingCredentialsError()
        account_id = self.tokens.verify(token)
        try:
            account = self.credentials.find_by_id(account_id)
        except NotFoundError:
            raise UnauthorizedError()
        return Principal(id=account.id, name=account.name, email=account.email)
