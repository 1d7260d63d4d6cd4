from pathlib import Path
from typing import Callable, Dict, Tuple

import pytest
from fastapi.testclient import TestClient

from taskvault.app import TaskVaultApp
from taskvault.auth.models import Principal
from taskvault.utils.config import Settings, load_settings
from taskvault_web.main import create_app


def make_settings(tmp_path: Path, **overrides: str) -> Settings:
    environ = {
        "TOKEN_SECRET": "test-secret",
        "STORE_PATH": str(tmp_path / "store"),
        # Cheap hashes keep the suite fast
        "BCRYPT_ROUNDS": "4",
        "LOG_LEVEL": "WARNING",
    }
    environ.update(overrides)
    return load_settings(environ)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def taskvault(settings: Settings) -> TaskVaultApp:
    return TaskVaultApp(settings).initialize(configure_logging=False)


@pytest.fixture
def client(taskvault: TaskVaultApp) -> TestClient:
    return TestClient(create_app(taskvault=taskvault))


def _principal(taskvault: TaskVaultApp, name: str, email: str) -> Principal:
    account = taskvault.credentials.register(name, email, "secret123")
    return Principal(id=account.id, name=account.name, email=account.email)


@pytest.fixture
def alice(taskvault: TaskVaultApp) -> Principal:
    return _principal(taskvault, "Alice", "alice@example.com")


@pytest.fixture
def bob(taskvault: TaskVaultApp) -> Principal:
    return _principal(taskvault, "Bob", "bob@example.com")


@pytest.fixture
def signup(client: TestClient) -> Callable[..., Tuple[str, Dict]]:
    """Register over HTTP and return (token, user)."""

    def _signup(name: str = "Alice", email: str = "a@x.com", password: str = "secret123"):
        res = client.post(
            "/api/auth/register", json={"name": name, "email": email, "password": password}
        )
        assert res.status_code == 201, res.text
        body = res.json()
        return body["token"], body["user"]

    return _signup


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
