"""Exception hierarchy shared by the task entity, the store and the API layer."""

from __future__ import annotations


class TaskTrackerError(Exception):
    """Base class for every error raised by tasktracker."""


# ---------------------------------------------------------------------------
# Validation (raised by the Task entity)
# ---------------------------------------------------------------------------


class ValidationError(TaskTrackerError):
    """A task field violates one of the entity invariants.

    ``code`` is stable and machine-readable so callers can branch on the kind
    of failure without parsing the message.
    """

    code = "invalid"
    default_message = "Invalid task"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class EmptyTitleError(ValidationError):
    code = "empty_title"
    default_message = "Task title cannot be empty"


class TitleTooLongError(ValidationError):
    code = "title_too_long"
    default_message = "Task title cannot exceed 255 characters"


class EmptyIdError(ValidationError):
    code = "empty_id"
    default_message = "Task ID cannot be empty"


class PastDueDateError(ValidationError):
    code = "past_due_date"
    default_message = "Due date cannot be in the past"


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class StoreError(TaskTrackerError):
    """Base class for failures raised by the task store."""


class NotInitializedError(StoreError):
    def __init__(self, message: str = "Database not initialized") -> None:
        super().__init__(message)


class StoreClosedError(NotInitializedError):
    def __init__(self, message: str = "Database connection is closed") -> None:
        super().__init__(message)


class NotFoundError(StoreError):
    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task with id {task_id} not found")


class DuplicateIdError(StoreError):
    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task with id {task_id} already exists")


class StorageFailureError(StoreError):
    """Underlying database fault (I/O, corruption, lost connection)."""
