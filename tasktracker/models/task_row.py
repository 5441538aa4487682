"""Persisted row for a task."""

from __future__ import annotations

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class TaskRow(Base):
    """Flat on-disk form of a Task.

    ``completed`` is stored as 0/1 and both timestamps as fixed-width UTC
    ISO 8601 text, which sorts chronologically.
    """

    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", server_default="")
    completed: Mapped[bool] = mapped_column(Boolean, default=False, server_default="0")
    created_at: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    due_date: Mapped[str | None] = mapped_column(String(32), default=None)

    def __repr__(self) -> str:
        return f"<TaskRow {self.id!r}>"
