"""
Todo service: one operation per CRUD verb, one store call per operation.

Operations never raise for store failures. Each returns one of:
- Ok(value): the store call succeeded
- NotFound(todo_id): the targeted todo does not exist
- StoreFailure(operation, reason): the store failed; the cause has been logged
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, List, Optional, TypeVar, Union

import structlog

from .errors import RecordNotFoundError, StoreError
from .models import TodoEntity
from .repositories import Repository
from .schemas import TodoCreate, TodoUpdate

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class NotFound:
    todo_id: str


@dataclass(frozen=True)
class StoreFailure:
    operation: str
    reason: str


Result = Union[Ok[T], NotFound, StoreFailure]


def _failure(exc: StoreError, todo_id: Optional[str] = None) -> StoreFailure:
    logger.error(
        "store_call_failed",
        operation=exc.operation,
        todo_id=todo_id,
        error=exc.message,
        exc_info=exc,
    )
    return StoreFailure(operation=exc.operation, reason=exc.message)


# PUBLIC_INTERFACE
class TodoService:
    """Stateless façade over a Repository. Built once at startup and handed to the router."""

    def __init__(self, repository: Repository) -> None:
        self.repository = repository

    async def list_todos(self) -> Result[List[TodoEntity]]:
        try:
            return Ok(await self.repository.find_many())
        except StoreError as e:
            return _failure(e)

    async def get_todo(self, todo_id: str) -> Result[TodoEntity]:
        try:
            todo = await self.repository.find_unique(todo_id)
        except StoreError as e:
            return _failure(e, todo_id)
        if todo is None:
            return NotFound(todo_id)
        return Ok(todo)

    async def create_todo(self, payload: TodoCreate) -> Result[TodoEntity]:
        try:
            created = await self.repository.create(payload.model_dump())
        except StoreError as e:
            return _failure(e)
        logger.info("todo_created", todo_id=created["todo_id"])
        return Ok(created)

    async def update_todo(self, todo_id: str, payload: TodoUpdate) -> Result[TodoEntity]:
        try:
            return Ok(await self.repository.update(todo_id, payload.changes()))
        except RecordNotFoundError:
            return NotFound(todo_id)
        except StoreError as e:
            return _failure(e, todo_id)

    async def delete_todo(self, todo_id: str) -> Result[TodoEntity]:
        try:
            deleted = await self.repository.delete(todo_id)
        except RecordNotFoundError:
            return NotFound(todo_id)
        except StoreError as e:
            return _failure(e, todo_id)
        logger.info("todo_deleted", todo_id=todo_id)
        return Ok(deleted)
