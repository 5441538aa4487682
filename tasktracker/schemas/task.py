"""Pydantic request bodies for the task API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class TaskCreate(BaseModel):
    title: str | None = None
    description: str = ""
    due_date: datetime | None = None


class TaskUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    due_date: datetime | None = None
    completed: bool | None = None

    def changes(self) -> dict:
        """Fields the client actually sent.

        ``null`` clears the due date; for the other fields it means "leave
        unchanged".
        """
        data = self.model_dump(exclude_unset=True)
        return {key: value for key, value in data.items() if value is not None or key == "due_date"}
