"""
Stateless bearer tokens.

We sign the account id with itsdangerous (HMAC + timestamp) so:
- Tokens can't be forged/tampered
- Tokens expire after the configured TTL (max_age)

No server-side session table; verification never touches storage.
"""

from __future__ import annotations

from typing import Any

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ..utils.exceptions import ConfigError, ExpiredTokenError, InvalidTokenError

TOKEN_SALT = "taskvault-auth-token"


class TokenService:
    def __init__(self, secret_key: str, ttl_seconds: int):
        if not secret_key:
            raise ConfigError("TOKEN_SECRET must be set to sign auth tokens.")
        if ttl_seconds <= 0:
            raise ConfigError("Token TTL must be positive.")
        self.ttl_seconds = ttl_seconds
        self._serializer = URLSafeTimedSerializer(secret_key=secret_key, salt=TOKEN_SALT)

    def issue(self, account_id: str) -> str:
        """Mint a token for account_id, valid for ttl_seconds from now."""
        return self._serializer.dumps({"id": account_id})

    def verify(self, token: str) -> str:
        """
        Return the account id carried by a token.

        Raises:
            ExpiredTokenError: token older than the TTL
            InvalidTokenError: bad signature or malformed payload
        """
        if not token:
            raise InvalidTokenError()
        try:
            data: Any = self._serializer.loads(token, max_age=self.ttl_seconds)
        except SignatureExpired:
            raise ExpiredTokenError()
        except BadSignature:
            raise InvalidTokenError()
        account_id = data.get("id") if isinstance(data, dict) else None
        if not isinstance(account_id, str) or not account_id:
            raise InvalidTokenError()
        return account_id
