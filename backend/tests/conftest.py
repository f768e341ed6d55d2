"""Shared pytest fixtures.

The environment is pinned before ``app`` is imported so the module-level
settings and engine point at an in-memory database and a throwaway upload
directory.

Fixture overview
----------------
storage        local file storage rooted in the test's tmp_path
client         TestClient over a freshly created schema, storage overridden
register_user  factory posting to /api/auth/register
auth_headers   bearer header for the default user (ada@example.com)
other_headers  bearer header for a second user (grace@example.com)
"""

from __future__ import annotations

import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORAGE_BACKEND"] = "local"
os.environ.setdefault("UPLOAD_DIR", os.path.join(tempfile.mkdtemp(prefix="jobtracker-tests-"), "uploads"))
os.environ["ENV"] = "test"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.api.auth import login_limiter, register_limiter  # noqa: E402
from app.database import Base, engine  # noqa: E402
from app.main import app  # noqa: E402
from app.services.storage import LocalFileStorage, get_storage  # noqa: E402

STRONG_PASSWORD = "Sup3r$ecret!"


@pytest.fixture
def storage(tmp_path) -> LocalFileStorage:
    return LocalFileStorage(tmp_path / "storage")


@pytest.fixture
def client(storage):
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    register_limiter.reset()
    login_limiter.reset()
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def register_user(client):
    def _register(email: str = "ada@example.com", password: str = STRONG_PASSWORD, **extra):
        payload = {"email": email, "password": password, "firstName": "Ada", "lastName": "Lovelace", **extra}
        return client.post("/api/auth/register", json=payload)

    return _register


@pytest.fixture
def auth_headers(register_user) -> dict[str, str]:
    response = register_user()
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def other_headers(register_user) -> dict[str, str]:
    response = register_user(email="grace@example.com")
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}
