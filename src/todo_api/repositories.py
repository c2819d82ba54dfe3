from __future__ import annotations

from abc import ABC, abstractmethod
from threading import RLock
from typing import Any, Dict, List, Mapping, Optional

from .errors import RecordNotFoundError
from .models import TodoEntity, new_todo_id
from .settings import Settings


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract data-store client contract for todo storage backends."""

    async def init(self) -> None:
        """Prepare the backend (create tables, open pools). No-op by default."""

    async def close(self) -> None:
        """Release backend resources. No-op by default."""

    @abstractmethod
    async def ping(self) -> bool:
        """Return True if the backend is reachable."""

    @abstractmethod
    async def find_many(self) -> List[TodoEntity]:
        """Return every stored TodoEntity, in backend order."""

    @abstractmethod
    async def find_unique(self, todo_id: str) -> Optional[TodoEntity]:
        """Return a TodoEntity by id, or None if not found."""

    @abstractmethod
    async def create(self, fields: Mapping[str, Any]) -> TodoEntity:
        """Create a TodoEntity, assigning its todo_id, and return it."""

    @abstractmethod
    async def update(self, todo_id: str, fields: Mapping[str, Any]) -> TodoEntity:
        """
        Apply the given fields to an existing TodoEntity and return it.
        Raises RecordNotFoundError if no todo has this id.
        """

    @abstractmethod
    async def delete(self, todo_id: str) -> TodoEntity:
        """
        Delete a TodoEntity by id and return it as it was before deletion.
        Raises RecordNotFoundError if no todo has this id.
        """


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and local runs.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[str, TodoEntity] = {}

    async def ping(self) -> bool:
        return True

    async def find_many(self) -> List[TodoEntity]:
        with self._lock:
            return [t.copy() for t in self._items.values()]

    async def find_unique(self, todo_id: str) -> Optional[TodoEntity]:
        with self._lock:
            item = self._items.get(todo_id)
            return None if item is None else item.copy()

    async def create(self, fields: Mapping[str, Any]) -> TodoEntity:
        entity: TodoEntity = {
            "todo_id": new_todo_id(),
            "title": fields["title"],
            "description": fields.get("description"),
            "completed": bool(fields.get("completed", False)),
        }
        with self._lock:
            self._items[entity["todo_id"]] = entity
            return entity.copy()

    async def update(self, todo_id: str, fields: Mapping[str, Any]) -> TodoEntity:
        with self._lock:
            existing = self._items.get(todo_id)
            if existing is None:
                raise RecordNotFoundError(todo_id, "update")

            # Update only provided fields
            updated = existing.copy()
            for key in ("title", "description", "completed"):
                if key in fields:
                    updated[key] = fields[key]  # type: ignore[literal-required]

            self._items[todo_id] = updated
            return updated.copy()

    async def delete(self, todo_id: str) -> TodoEntity:
        with self._lock:
            removed = self._items.pop(todo_id, None)
            if removed is None:
                raise RecordNotFoundError(todo_id, "delete")
            return removed


# PUBLIC_INTERFACE
def get_repository(settings: Settings) -> Repository:
    """
    Factory to return the configured repository based on settings.
    - database: SQLAlchemyRepository over settings.database_url
    - memory: InMemoryRepository
    """
    if settings.persistence_backend == "memory":
        return InMemoryRepository()

    from .db import SQLAlchemyRepository

    return SQLAlchemyRepository(settings.database_url, echo=settings.database_echo)
