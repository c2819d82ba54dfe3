import asyncio

import pytest
from fastapi.testclient import TestClient

from todo_api.errors import StoreError
from todo_api.main import create_app
from todo_api.repositories import InMemoryRepository, Repository
from todo_api.schemas import TodoCreate, TodoUpdate
from todo_api.service import NotFound, Ok, StoreFailure, TodoService
from todo_api.settings import Settings


class BrokenRepository(Repository):
    """Every store call fails the way an unreachable database would."""

    def __init__(self):
        self.calls = []

    def _fail(self, operation):
        self.calls.append(operation)
        raise StoreError("connection refused", operation)

    async def ping(self):
        return False

    async def find_many(self):
        self._fail("find_many")

    async def find_unique(self, todo_id):
        self._fail("find_unique")

    async def create(self, fields):
        self._fail("create")

    async def update(self, todo_id, fields):
        self._fail("update")

    async def delete(self, todo_id):
        self._fail("delete")


def run(coro):
    return asyncio.run(coro)


class TestTodoServiceResults:
    def test_ok_results(self):
        service = TodoService(InMemoryRepository())
        created = run(service.create_todo(TodoCreate(title="Buy milk")))
        assert isinstance(created, Ok)
        todo_id = created.value["todo_id"]

        assert run(service.get_todo(todo_id)) == Ok(created.value)
        assert run(service.list_todos()) == Ok([created.value])

        updated = run(service.update_todo(todo_id, TodoUpdate(completed=True)))
        assert updated == Ok({**created.value, "completed": True})

        assert run(service.delete_todo(todo_id)) == updated

    def test_not_found_results(self):
        service = TodoService(InMemoryRepository())
        assert run(service.get_todo("missing")) == NotFound("missing")
        assert run(service.update_todo("missing", TodoUpdate(title="x"))) == NotFound("missing")
        assert run(service.delete_todo("missing")) == NotFound("missing")

    def test_store_errors_become_failures(self):
        repo = BrokenRepository()
        service = TodoService(repo)

        results = [
            run(service.list_todos()),
            run(service.get_todo("a")),
            run(service.create_todo(TodoCreate(title="t"))),
            run(service.update_todo("a", TodoUpdate(title="t"))),
            run(service.delete_todo("a")),
        ]

        assert all(isinstance(r, StoreFailure) for r in results)
        assert [r.operation for r in results] == ["find_many", "find_unique", "create", "update", "delete"]
        # one store call per operation, no retries
        assert repo.calls == ["find_many", "find_unique", "create", "update", "delete"]


class TestStoreFailureOverHttp:
    @pytest.fixture
    def broken_client(self):
        app = create_app(Settings(persistence_backend="memory", log_level="WARNING"), repository=BrokenRepository())
        with TestClient(app) as c:
            yield c

    @pytest.mark.parametrize(
        "method, path, body",
        [
            ("GET", "/todos/all", None),
            ("GET", "/todos/abc", None),
            ("POST", "/todos", {"title": "t"}),
            ("PATCH", "/todos/abc", {"completed": True}),
            ("DELETE", "/todos/abc", None),
        ],
    )
    def test_store_failure_is_500(self, broken_client, method, path, body):
        res = broken_client.request(method, path, json=body)
        assert res.status_code == 500
        data = res.json()
        assert data["error"] == "STORE_ERROR"
        assert "connection refused" not in data["message"]

    def test_health_reports_unavailable_store(self, broken_client):
        res = broken_client.get("/")
        assert res.status_code == 200
        assert res.json()["store"] == "unavailable"
