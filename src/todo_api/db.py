from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, List, Mapping, Optional

import structlog
from sqlalchemy import select, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from .errors import RecordNotFoundError, StoreError
from .models import Base, TodoEntity, TodoRecord, new_todo_id
from .repositories import Repository

logger = structlog.get_logger(__name__)


def _ensure_sqlite_dir(database_url: str) -> None:
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        os.makedirs(os.path.dirname(url.database) or ".", exist_ok=True)


class SQLAlchemyRepository(Repository):
    """
    Repository backed by a relational database through the SQLAlchemy asyncio ORM.

    Every public call runs in its own session: one unit of work, committed on
    success and rolled back on any error. SQLAlchemy errors surface as
    StoreError; missing rows on update/delete surface as RecordNotFoundError.
    """

    def __init__(self, database_url: str, echo: bool = False) -> None:
        self._database_url = database_url
        self.engine = create_async_engine(database_url, echo=echo, pool_pre_ping=True)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncGenerator[AsyncSession, None]:
        """Provide a session with rollback and error mapping."""
        session = self._session_factory()
        try:
            yield session
        except IntegrityError as e:
            await session.rollback()
            raise StoreError(f"Integrity constraint violated: {e.orig}", operation) from e
        except OperationalError as e:
            await session.rollback()
            raise StoreError(f"Connection or operational error: {e.orig}", operation) from e
        except SQLAlchemyError as e:
            await session.rollback()
            raise StoreError(f"Database operation failed: {e}", operation) from e
        finally:
            await session.close()

    async def init(self) -> None:
        """Create the SQLite directory (if any) and the todos table if they do not exist yet."""
        _ensure_sqlite_dir(self._database_url)
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise StoreError(f"Could not initialize schema: {e}", "init") from e
        logger.info("database_ready", url=self.engine.url.render_as_string(hide_password=True))

    async def close(self) -> None:
        await self.engine.dispose()

    async def ping(self) -> bool:
        try:
            async with self._session("ping") as session:
                await session.execute(text("SELECT 1"))
            return True
        except StoreError as e:
            logger.warning("database_ping_failed", error=str(e))
            return False

    async def find_many(self) -> List[TodoEntity]:
        async with self._session("find_many") as session:
            result = await session.execute(select(TodoRecord))
            return [record.to_entity() for record in result.scalars().all()]

    async def find_unique(self, todo_id: str) -> Optional[TodoEntity]:
        async with self._session("find_unique") as session:
            record = await session.get(TodoRecord, todo_id)
            return None if record is None else record.to_entity()

    async def create(self, fields: Mapping[str, Any]) -> TodoEntity:
        async with self._session("create") as session:
            record = TodoRecord(
                todo_id=new_todo_id(),
                title=fields["title"],
                description=fields.get("description"),
                completed=bool(fields.get("completed", False)),
            )
            session.add(record)
            await session.commit()
            return record.to_entity()

    async def update(self, todo_id: str, fields: Mapping[str, Any]) -> TodoEntity:
        async with self._session("update") as session:
            record = await session.get(TodoRecord, todo_id)
            if record is None:
                raise RecordNotFoundError(todo_id, "update")
            for key in ("title", "description", "completed"):
                if key in fields:
                    setattr(record, key, fields[key])
            await session.commit()
            return record.to_entity()

    async def delete(self, todo_id: str) -> TodoEntity:
        async with self._session("delete") as session:
            record = await session.get(TodoRecord, todo_id)
            if record is None:
                raise RecordNotFoundError(todo_id, "delete")
            entity = record.to_entity()
            await session.delete(record)
            await session.commit()
            return entity
