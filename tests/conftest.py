import os

import pytest
from fastapi.testclient import TestClient

# Keep the module-level app in todo_api.main off the filesystem
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from todo_api.main import create_app  # noqa: E402
from todo_api.settings import Settings  # noqa: E402


def make_settings(tmp_path, backend):
    return Settings(
        persistence_backend=backend,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'todos.db'}",
        log_level="WARNING",
    )


@pytest.fixture(params=["database", "memory"])
def client(request, tmp_path):
    """A TestClient over a fresh store; runs every API test on both backends."""
    app = create_app(make_settings(tmp_path, request.param))
    with TestClient(app) as c:
        yield c
