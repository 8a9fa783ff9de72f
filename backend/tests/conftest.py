import os

# Cheap hashing and the in-memory backend unless a test asks otherwise.
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.pop("DATABASE_URL", None)

import typing as t

import pytest
from fastapi.testclient import TestClient

from planvault.main import create_app
from planvault.storage import DatabaseStorage, MemStorage, Storage

RECOVERY_KEY = "alpha-bravo-charlie-delta-echo-foxtrot-golf-hotel"
PASSWORD = "Secret123!"


@pytest.fixture(params=["memory", "sqlite"])
def storage(request) -> t.Iterator[Storage]:
    """Every storage-backed test runs against both backends."""
    if request.param == "memory":
        backend: Storage = MemStorage()
    else:
        backend = DatabaseStorage.from_url("sqlite://")
    backend.init()
    yield backend
    if isinstance(backend, DatabaseStorage):
        backend.engine.dispose()


@pytest.fixture
def client(storage: Storage) -> t.Iterator[TestClient]:
    app = create_app(storage=storage)
    with TestClient(app) as test_client:
        yield test_client


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register(client: TestClient, username: str, password: str = PASSWORD) -> dict[str, t.Any]:
    response = client.post(
        "/api/auth/register",
        json={"username": username, "password": password, "recoveryKey": RECOVERY_KEY},
    )
    assert response.status_code == 200, response.text
    return response.json()


@pytest.fixture
def alice(client: TestClient) -> dict[str, str]:
    """Authorization headers for a freshly registered user."""
    return bearer(register(client, "alice")["sessionToken"])


@pytest.fixture
def bob(client: TestClient) -> dict[str, str]:
    return bearer(register(client, "bob")["sessionToken"])


@pytest.fixture
def make_event(client: TestClient) -> t.Callable[..., dict[str, t.Any]]:
    def _make(headers: dict[str, str], **fields: t.Any) -> dict[str, t.Any]:
        payload = {"title": "Standup", "startDate": "2024-01-10T09:00:00Z"}
        payload.update(fields)
        response = client.post("/api/events", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _make
