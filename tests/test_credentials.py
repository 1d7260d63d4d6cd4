import pytest

from taskvault.auth.credentials import CredentialStore
from taskvault.auth.models import Account
from taskvault.utils.exceptions import (
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)


@pytest.fixture
def credentials(taskvault) -> CredentialStore:
    return taskvault.credentials


def test_register_returns_public_fields_only(credentials):
    account = credentials.register("Alice", "Alice@Example.com ", "secret123")
    dumped = account.model_dump()
    assert set(dumped) == {"id", "name", "email"}
    assert dumped["email"] == "alice@example.com"


def test_secret_is_stored_hashed(credentials, taskvault):
    account = credentials.register("Alice", "alice@example.com", "secret123")
    raw = taskvault.store.find_one("accounts", {"id": account.id})
    assert raw["password_hash"] != "secret123"
    assert raw["password_hash"].startswith("$2")


@pytest.mark.parametrize(
    "name,email,password",
    [
        ("", "a@x.com", "secret123"),
        ("Alice", "", "secret123"),
        ("Alice", "a@x.com", ""),
        (None, None, None),
        ("   ", "a@x.com", "secret123"),
    ],
)
def test_register_requires_every_field(credentials, name, email, password):
    with pytest.raises(ValidationError, match="required"):
        credentials.register(name, email, password)


def test_register_rejects_malformed_email(credentials):
    with pytest.raises(ValidationError, match="not valid"):
        credentials.register("Alice", "not-an-email", "secret123")


def test_register_rejects_overlong_password(credentials):
    with pytest.raises(ValidationError, match="too long"):
        credentials.register("Alice", "a@x.com", "x" * 73)


def test_duplicate_email_conflicts_case_insensitively(credentials):
    credentials.register("Alice", "a@x.com", "secret123")
    with pytest.raises(ConflictError):
        credentials.register("Other Alice", "A@X.COM", "different")


def test_find_by_email(credentials):
    created = credentials.register("Alice", "a@x.com", "secret123")
    account = credentials.find_by_email("A@x.com")
    assert isinstance(account, Account)
    assert account.id == created.id
    with pytest.raises(NotFoundError):
        credentials.find_by_email("nobody@x.com")


def test_find_by_id_excludes_hash(credentials):
    created = credentials.register("Alice", "a@x.com", "secret123")
    account = credentials.find_by_id(created.id)
    assert not hasattr(account, "password_hash")
    with pytest.raises(NotFoundError):
        credentials.find_by_id("missing")


def test_verify_secret(credentials):
    credentials.register("Alice", "a@x.com", "secret123")
    account = credentials.find_by_email("a@x.com")
    assert credentials.verify_secret(account, "secret123") is True
    assert credentials.verify_secret(account, "wrong") is False
    assert credentials.verify_secret(account, "") is False


def test_verify_secret_with_corrupt_hash_is_false(credentials):
    account = Account(name="A", email="a@x.com", password_hash="not-a-bcrypt-hash")
    assert credentials.verify_secret(account, "secret123") is False


def test_authenticate(credentials):
    created = credentials.register("Alice", "a@x.com", "secret123")
    assert credentials.authenticate("a@x.com", "secret123").id == created.id
    with pytest.raises(InvalidCredentialsError):
        credentials.authenticate("a@x.com", "wrong")
    with pytest.raises(InvalidCredentialsError):
        credentials.authenticate("nobody@x.com", "secret123")
    with pytest.raises(ValidationError):
        credentials.authenticate("a@x.com", None)
