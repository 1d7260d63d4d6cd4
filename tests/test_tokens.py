import time

import pytest
from itsdangerous import URLSafeTimedSerializer

from taskvault.auth.tokens import TOKEN_SALT, TokenService
from taskvault.utils.exceptions import ConfigError, ExpiredTokenError, InvalidTokenError


@pytest.fixture
def tokens() -> TokenService:
    return TokenService("test-secret", ttl_seconds=60)


def test_round_trip(tokens):
    token = tokens.issue("account-1")
    assert tokens.verify(token) == "account-1"


def test_valid_until_ttl(tokens, monkeypatch):
    now = time.time()
    token = tokens.issue("account-1")
    monkeypatch.setattr(time, "time", lambda: now + 30)
    assert tokens.verify(token) == "account-1"


def test_expires_after_ttl(tokens, monkeypatch):
    now = time.time()
    token = tokens.issue("account-1")
    monkeypatch.setattr(time, "time", lambda: now + 61)
    with pytest.raises(ExpiredTokenError):
        tokens.verify(token)


def test_foreign_signature_rejected(tokens):
    foreign = TokenService("another-secret", ttl_seconds=60).issue("account-1")
    with pytest.raises(InvalidTokenError):
        tokens.verify(foreign)


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c", "eyJpZCI6ImEifQ"])
def test_malformed_rejected(tokens, token):
    with pytest.raises(InvalidTokenError):
        tokens.verify(token)


def test_payload_without_id_rejected(tokens):
    forged = URLSafeTimedSerializer("test-secret", salt=TOKEN_SALT).dumps({"sub": "x"})
    with pytest.raises(InvalidTokenError):
        tokens.verify(forged)


def test_requires_secret():
    with pytest.raises(ConfigError):
        TokenService("", ttl_seconds=60)
