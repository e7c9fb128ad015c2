import os

import pytest
from fastapi.testclient import TestClient

# Tests run against the in-memory store unless a test injects its own repository
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from task_api.main import app  # noqa: E402
from task_api.repositories import InMemoryRepository, get_repository  # noqa: E402


@pytest.fixture
def repo():
    return InMemoryRepository()


@pytest.fixture
def client(repo):
    app.dependency_overrides[get_repository] = lambda: repo
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
