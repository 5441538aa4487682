"""Task entity.

A ``Task`` guards its own invariants: the title is never blank and never
longer than 255 characters, the id is never blank, ``created_at`` never
changes, and a due date is never in the past at the moment it is set. The
entity knows nothing about persistence; see ``services.task_store`` for that.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from .errors import (
    EmptyIdError,
    EmptyTitleError,
    PastDueDateError,
    TitleTooLongError,
    ValidationError,
)

MAX_TITLE_LENGTH = 255


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normalise a datetime to UTC; naive values are taken to be UTC already."""
    if not isinstance(value, datetime):
        raise TypeError(f"expected datetime, got {type(value).__name__}")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Fixed-width UTC ISO 8601 text, so string order matches time order."""
    return as_utc(value).isoformat(timespec="microseconds")


def parse_timestamp(raw: str) -> datetime:
    return as_utc(datetime.fromisoformat(raw.strip().replace("Z", "+00:00")))


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def check_title(title: object) -> ValidationError | None:
    if not isinstance(title, str) or not title.strip():
        return EmptyTitleError()
    if len(title) > MAX_TITLE_LENGTH:
        return TitleTooLongError()
    return None


def check_id(task_id: object) -> ValidationError | None:
    if not isinstance(task_id, str) or not task_id.strip():
        return EmptyIdError()
    return None


def check_due_date(due_date: datetime | None, now: datetime | None = None) -> ValidationError | None:
    if due_date is None:
        return None
    if as_utc(due_date) < (now or utcnow()):
        return PastDueDateError()
    return None


def _raise_first(*failures: ValidationError | None) -> None:
    for failure in failures:
        if failure is not None:
            raise failure


# ---------------------------------------------------------------------------
# Entity
# ---------------------------------------------------------------------------


class Task:
    """One tracked task.

    Mutators validate before they assign, so a failed call leaves the task
    exactly as it was.
    """

    __slots__ = ("_id", "_created_at", "_title", "_description", "_completed", "_due_date")

    def __init__(
        self,
        id: str,
        title: str,
        description: str = "",
        completed: bool = False,
        due_date: datetime | None = None,
        created_at: datetime | None = None,
    ) -> None:
        _raise_first(check_title(title), check_id(id))
        if due_date is not None:
            due_date = as_utc(due_date)
        _raise_first(check_due_date(due_date))
        self._assign(id, title, description, completed, due_date, created_at)

    def _assign(
        self,
        id: str,
        title: str,
        description: str | None,
        completed: bool,
        due_date: datetime | None,
        created_at: datetime | None,
    ) -> None:
        self._id = id
        self._created_at = as_utc(created_at) if created_at is not None else utcnow()
        self._title = title
        self._description = description or ""
        self._completed = bool(completed)
        self._due_date = due_date

    @classmethod
    def restore(
        cls,
        id: str,
        title: str,
        description: str | None = "",
        completed: bool = False,
        due_date: datetime | None = None,
        created_at: datetime | None = None,
    ) -> Task:
        """Rebuild a task from values that were valid when they were stored.

        Title and id are checked again; the due date is not, because it was
        checked when it was set and is allowed to fall into the past since.
        """
        _raise_first(check_title(title), check_id(id))
        if due_date is not None:
            due_date = as_utc(due_date)
        task = cls.__new__(cls)
        task._assign(id, title, description, completed, due_date, created_at)
        return task

    @property
    def id(self) -> str:
        return self._id

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def title(self) -> str:
        return self._title

    @property
    def description(self) -> str:
        return self._description

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def due_date(self) -> datetime | None:
        return self._due_date

    # ---- state transitions ----

    def complete(self) -> None:
        self._completed = True

    def reopen(self) -> None:
        self._completed = False

    def update_title(self, title: str) -> None:
        _raise_first(check_title(title))
        self._title = title

    def update_description(self, description: str | None) -> None:
        self._description = description or ""

    def set_due_date(self, due_date: datetime | None) -> None:
        if due_date is not None:
            due_date = as_utc(due_date)
            _raise_first(check_due_date(due_date))
        self._due_date = due_date

    def is_overdue(self, now: datetime | None = None) -> bool:
        if self.due_date is None or self.completed:
            return False
        current = as_utc(now) if now is not None else utcnow()
        return self.due_date < current

    # ---- representations ----

    def serialize(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "completed": self.completed,
            "created_at": format_timestamp(self.created_at),
            "due_date": format_timestamp(self.due_date) if self.due_date else None,
        }

    @classmethod
    def deserialize(cls, data: dict[str, Any]) -> Task:
        """Inverse of ``serialize``. The due date is restored, not re-checked."""
        raw_due = data.get("due_date")
        raw_created = data.get("created_at")
        return cls.restore(
            data["id"],
            data["title"],
            data.get("description", ""),
            bool(data.get("completed", False)),
            parse_timestamp(raw_due) if raw_due else None,
            parse_timestamp(raw_created) if raw_created else None,
        )

    def describe(self) -> str:
        status = "[✓]" if self.completed else "[ ]"
        due = f" (Due: {self.due_date.isoformat()})" if self.due_date else ""
        return f"{status} {self.title}{due}"

    def copy(self) -> Task:
        return Task.restore(
            self.id,
            self.title,
            self.description,
            self.completed,
            self.due_date,
            self.created_at,
        )

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return f"<Task {self.title!r}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Task):
            return NotImplemented
        return (
            self.id == other.id
            and self.title == other.title
            and self.description == other.description
            and self.completed == other.completed
            and self.created_at == other.created_at
            and self.due_date == other.due_date
        )

    __hash__ = None  # mutable
