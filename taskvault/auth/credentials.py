"""
Credential store: accounts with bcrypt-hashed secrets.

- Email is unique (compared after stripping and lower-casing)
- The raw secret is stored only as a bcrypt hash (per-record salt)
- Nothing returned from this module outside of find_by_email carries the hash
"""

from __future__ import annotations

from typing import Optional

import bcrypt
from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..storage import DocumentStore
from ..storage.document_store import DuplicateKeyError
from ..utils.exceptions import (
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from ..utils.logger import get_logger
from .models import Account, AccountPublic

logger = get_logger(__name__)

ACCOUNTS = "accounts"
BCRYPT_ROUNDS = 12
# bcrypt only considers the first 72 bytes and rejects longer input
MAX_SECRET_BYTES = 72

_email_adapter = TypeAdapter(EmailStr)


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a password with bcrypt."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class CredentialStore:
    """Persists accounts and checks secrets against their stored hash."""

    def __init__(self, store: DocumentStore, bcrypt_rounds: int = BCRYPT_ROUNDS):
        self.store = store
        self.bcrypt_rounds = bcrypt_rounds

    def register(
        self, name: Optional[str], email: Optional[str], raw_secret: Optional[str]
    ) -> AccountPublic:
        """
        Create a new account.

        Raises:
            ValidationError: a field is empty or the email is malformed
            ConflictError: the email is already registered
        """
        name = (name or "").strip()
        email = normalize_email(email)
        if not name or not email or not raw_secret:
            raise ValidationError("Name, email and password are required")
        try:
            _email_adapter.validate_python(email)
        except PydanticValidationError:
            raise ValidationError("Email address is not valid")
        if len(raw_secret.encode("utf-8")) > MAX_SECRET_BYTES:
            raise ValidationError("Password is too long")

        account = Account(
            name=name,
            email=email,
            password_hash=hash_password(raw_secret, self.bcrypt_rounds),
        )
        try:
            self.store.insert_one(ACCOUNTS, account.model_dump(mode="json"), unique="email")
        except DuplicateKeyError:
            raise ConflictError("Email already in use")

        logger.info("Account registered", account_id=account.id)
        return account.public()

    def find_by_email(self, email: Optional[str]) -> Account:
        doc = self.store.find_one(ACCOUNTS, {"email": normalize_email(email)})
        if doc is None:
            raise NotFoundError("Account not found")
        return Account(**doc)

    def find_by_id(self, account_id: str) -> AccountPublic:
        doc = self.store.find_one(ACCOUNTS, {"id": account_id}, exclude=("password_hash",))
        if doc is None:
            raise NotFoundError("Account not found")
        return AccountPublic(**doc)

    @staticmethod
    def verify_secret(account: Account, raw_secret: Optional[str]) -> bool:
        """Check a raw secret against the account's hash. Never raises."""
        if not raw_secret:
            return False
        try:
            return bcrypt.checkpw(
                raw_secret.encode("utf-8"), account.password_hash.encode("utf-8")
            )
        except ValueError:
            # Malformed stored hash
            return False

    def authenticate(self, email: Optional[str], raw_secret: Optional[str]) -> AccountPublic:
        """
        Return the account for valid credentials.

        Unknown email and wrong password raise the same error.
        """
        if not normalize_email(email) or not raw_secret:
            raise ValidationError("Email and password are required")
        try:
            account = self.find_by_email(email)
        except NotFoundError:
            raise InvalidCredentialsError("Invalid credentials")
        if not self.verify_secret(account, raw_secret):
            logger.info("Login rejected", account_id=account.id)
            raise InvalidCredentialsError("Invalid credentials")
        return account.public()
