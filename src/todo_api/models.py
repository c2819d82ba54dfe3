from __future__ import annotations

import uuid
from typing import Optional, TypedDict

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    Plain-dict representation of a Todo handed out by every store backend.

    Fields:
    - todo_id: UUID4 string assigned by the store, never reused
    - title: Short title (1..200 chars, trimmed on input via schemas)
    - description: Optional detailed description
    - completed: Boolean completion flag
    """

    todo_id: str
    title: str
    description: Optional[str]
    completed: bool


def new_todo_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Declarative base holding the table metadata."""


class TodoRecord(Base):
    """ORM mapping for the 'todos' table."""

    __tablename__ = "todos"

    todo_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_todo_id)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def to_entity(self) -> TodoEntity:
        return {
            "todo_id": self.todo_id,
            "title": self.title,
            "description": self.description,
            "completed": bool(self.completed),
        }
