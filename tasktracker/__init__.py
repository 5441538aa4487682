"""Single-user task tracker: task entity, SQLite-backed store and JSON API."""

from __future__ import annotations

from .errors import (
    DuplicateIdError,
    EmptyIdError,
    EmptyTitleError,
    NotFoundError,
    NotInitializedError,
    PastDueDateError,
    StorageFailureError,
    StoreClosedError,
    StoreError,
    TaskTrackerError,
    TitleTooLongError,
    ValidationError,
)
from .services.task_store import StoreState, TaskStats, TaskStore
from .task import MAX_TITLE_LENGTH, Task

__all__ = [
    "MAX_TITLE_LENGTH",
    "DuplicateIdError",
    "EmptyIdError",
    "EmptyTitleError",
    "NotFoundError",
    "NotInitializedError",
    "PastDueDateError",
    "StorageFailureError",
    "StoreClosedError",
    "StoreError",
    "StoreState",
    "Task",
    "TaskStats",
    "TaskStore",
    "TaskTrackerError",
    "TitleTooLongError",
    "ValidationError",
]
