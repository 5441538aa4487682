"""Durable, keyed task collection backed by SQLAlchemy's asyncio ORM."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from sqlalchemy import delete, func, select, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from ..errors import (
    DuplicateIdError,
    NotFoundError,
    NotInitializedError,
    StorageFailureError,
    StoreClosedError,
    ValidationError,
)
from ..models import Base, TaskRow
from ..task import Task, format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"title", "description", "completed", "due_date"})


class StoreState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    CLOSED = "closed"


@dataclass(frozen=True)
class TaskStats:
    total: int
    completed: int

    @property
    def pending(self) -> int:
        return self.total - self.completed

    @property
    def completion_rate(self) -> float:
        """Completed share as a percentage, rounded to two decimals."""
        if self.total == 0:
            return 0.0
        return round(self.completed / self.total * 100, 2)


class TaskStore:
    """Task persistence with an explicit ``initialize``/``close`` lifecycle.

    The store holds a single database connection for its whole lifetime.
    Operations may be issued concurrently; they are serialised on that
    connection, and each one either completes fully or raises.

    Not-found handling differs per operation on purpose: ``get_by_id``
    returns ``None``, ``update`` raises ``NotFoundError`` and ``delete``
    treats a missing row as already deleted.
    """

    def __init__(self, database_url: str = "sqlite+aiosqlite:///:memory:", *, echo: bool = False) -> None:
        self._database_url = database_url
        self._echo = echo
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._lock = asyncio.Lock()
        self._state = StoreState.UNINITIALIZED

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def database_url(self) -> str:
        return self._database_url

    async def __aenter__(self) -> TaskStore:
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ---- lifecycle ----

    async def initialize(self) -> None:
        """Open the database and create the ``tasks`` table if it is missing."""
        if self._state is StoreState.CLOSED:
            raise StoreClosedError()
        if self._state is StoreState.READY:
            return

        self._ensure_parent_dir()
        engine = create_async_engine(self._database_url, echo=self._echo, poolclass=StaticPool)
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as exc:
            await engine.dispose()
            raise StorageFailureError(f"Failed to open database: {exc}") from exc

        self._engine = engine
        self._session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        self._state = StoreState.READY
        logger.info("Task store ready url=%s", self._database_url)

    async def close(self) -> None:
        """Release the connection. Safe to call repeatedly, or before ``initialize``."""
        if self._state is StoreState.CLOSED:
            return
        engine = self._engine
        self._engine = None
        self._session_factory = None
        self._state = StoreState.CLOSED
        if engine is None:
            return
        async with self._lock:
            try:
                await engine.dispose()
            except SQLAlchemyError as exc:
                raise StorageFailureError(f"Failed to close database: {exc}") from exc
        logger.info("Task store closed url=%s", self._database_url)

    def _ensure_parent_dir(self) -> None:
        url = make_url(self._database_url)
        if not url.get_backend_name().startswith("sqlite"):
            return
        database = url.database
        if not database or database == ":memory:" or database.startswith("file:"):
            return
        try:
            Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageFailureError(f"Failed to open database: {exc}") from exc

    def _require_ready(self) -> async_sessionmaker[AsyncSession]:
        if self._state is StoreState.CLOSED:
            raise StoreClosedError()
        if self._session_factory is None:
            raise NotInitializedError()
        return self._session_factory

    @asynccontextmanager
    async def _session(self, action: str) -> AsyncIterator[AsyncSession]:
        async with self._lock:
            factory = self._require_ready()
            try:
                async with factory() as session:
                    yield session
            except SQLAlchemyError as exc:
                logger.exception("Failed to %s", action)
                raise StorageFailureError(f"Failed to {action}: {exc}") from exc

    # ---- row mapping ----

    @staticmethod
    def _task_to_row(task: Task) -> TaskRow:
        return TaskRow(
            id=task.id,
            title=task.title,
            description=task.description,
            completed=task.completed,
            created_at=format_timestamp(task.created_at),
            due_date=format_timestamp(task.due_date) if task.due_date else None,
        )

    @staticmethod
    def _row_to_task(row: TaskRow) -> Task:
        try:
            return Task.restore(
                row.id,
                row.title,
                row.description or "",
                bool(row.completed),
                parse_timestamp(row.due_date) if row.due_date else None,
                parse_timestamp(row.created_at),
            )
        except (ValidationError, ValueError, TypeError) as exc:
            raise StorageFailureError(f"Failed to parse task {row.id!r}: {exc}") from exc

    @staticmethod
    def _merge(existing: Task, changes: Mapping[str, Any]) -> Task:
        values = {
            "title": existing.title,
            "description": existing.description,
            "completed": existing.completed,
            "due_date": existing.due_date,
        }
        # None means "leave unchanged", except for the due date where it clears.
        values.update({key: value for key, value in changes.items() if value is not None or key == "due_date"})
        # A due date carried over unchanged is not being set, so it is not re-checked.
        build = Task if "due_date" in changes else Task.restore
        return build(
            existing.id,
            values["title"],
            values["description"],
            bool(values["completed"]),
            values["due_date"],
            existing.created_at,
        )

    # ---- public API ----

    async def add(self, task: Task) -> None:
        async with self._session("add task") as session:
            session.add(self._task_to_row(task))
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise DuplicateIdError(task.id) from exc
        logger.debug("Task added id=%s", task.id)

    async def get_all(self) -> list[Task]:
        """Every task, most recently created first."""
        async with self._session("fetch tasks") as session:
            result = await session.execute(select(TaskRow).order_by(TaskRow.created_at.desc()))
            rows = list(result.scalars().all())
        return [self._row_to_task(row) for row in rows]

    async def get_by_id(self, task_id: str) -> Task | None:
        async with self._session("fetch task") as session:
            row = await session.get(TaskRow, task_id)
        return self._row_to_task(row) if row is not None else None

    async def update(self, task_id: str, changes: Mapping[str, Any] | None = None, **fields: Any) -> Task:
        """Apply a partial update and return the stored result.

        The existing task is merged with ``changes`` and rebuilt through the
        entity, so an invalid value rejects the whole update.
        """
        merged = {**(changes or {}), **fields}
        unknown = set(merged) - UPDATABLE_FIELDS
        if unknown:
            raise TypeError(f"Unknown task field(s): {', '.join(sorted(unknown))}")

        async with self._session("update task") as session:
            row = await session.get(TaskRow, task_id)
            if row is None:
                raise NotFoundError(task_id)
            task = self._merge(self._row_to_task(row), merged)
            updated = self._task_to_row(task)
            row.title = updated.title
            row.description = updated.description
            row.completed = updated.completed
            row.due_date = updated.due_date
            await session.commit()
        logger.debug("Task updated id=%s fields=%s", task_id, sorted(merged))
        return task

    async def delete(self, task_id: str) -> bool:
        """Remove a task. Returns whether a row existed; absence is not an error."""
        async with self._session("delete task") as session:
            result = await session.execute(delete(TaskRow).where(TaskRow.id == task_id))
            await session.commit()
        removed = bool(result.rowcount)
        logger.debug("Task delete id=%s removed=%s", task_id, removed)
        return removed

    async def count(self) -> int:
        async with self._session("count tasks") as session:
            result = await session.execute(select(func.count()).select_from(TaskRow))
            return int(result.scalar_one())

    async def completed_count(self) -> int:
        async with self._session("count completed tasks") as session:
            stmt = select(func.count()).select_from(TaskRow).where(TaskRow.completed.is_(True))
            result = await session.execute(stmt)
            return int(result.scalar_one())

    async def stats(self) -> TaskStats:
        async with self._session("fetch stats") as session:
            total = (await session.execute(select(func.count()).select_from(TaskRow))).scalar_one()
            completed = (
                await session.execute(
                    select(func.count()).select_from(TaskRow).where(TaskRow.completed.is_(True))
                )
            ).scalar_one()
        return TaskStats(total=int(total), completed=int(completed))

    async def clear(self) -> None:
        async with self._session("clear tasks") as session:
            await session.execute(delete(TaskRow))
            await session.commit()
        logger.info("Task store cleared")

    async def ping(self) -> None:
        """Round-trip a trivial query; used by health checks."""
        async with self._session("ping database") as session:
            await session.execute(text("SELECT 1"))
