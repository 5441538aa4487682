"""Task JSON API."""

from __future__ import annotations

import secrets
import string
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..database import get_store
from ..schemas.task import TaskCreate, TaskUpdate
from ..services.task_store import TaskStore
from ..task import Task

router = APIRouter(prefix="/tasks", tags=["tasks"])

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_task_id() -> str:
    """``task-<epoch ms>-<9 random base36 chars>``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"task-{int(time.time() * 1000)}-{suffix}"


def _not_found() -> JSONResponse:
    return JSONResponse({"success": False, "error": "Task not found"}, status_code=404)


@router.get("")
async def list_tasks(store: TaskStore = Depends(get_store)):
    tasks = [task.serialize() for task in await store.get_all()]
    return {"success": True, "data": tasks, "count": len(tasks)}


@router.get("/stats/summary")
async def task_stats(store: TaskStore = Depends(get_store)):
    stats = await store.stats()
    rate = f"{stats.completion_rate:.2f}%" if stats.total else "0%"
    return {
        "success": True,
        "data": {
            "total": stats.total,
            "completed": stats.completed,
            "pending": stats.pending,
            "completionRate": rate,
        },
    }


@router.get("/{task_id}")
async def get_task(task_id: str, store: TaskStore = Depends(get_store)):
    task = await store.get_by_id(task_id)
    if task is None:
        return _not_found()
    return {"success": True, "data": task.serialize()}


@router.post("", status_code=201)
async def create_task(data: TaskCreate, store: TaskStore = Depends(get_store)):
    task = Task(
        generate_task_id(),
        data.title,
        description=data.description,
        due_date=data.due_date,
    )
    await store.add(task)
    return {"success": True, "data": task.serialize(), "message": "Task created successfully"}


@router.patch("/{task_id}")
async def update_task(task_id: str, data: TaskUpdate, store: TaskStore = Depends(get_store)):
    task = await store.update(task_id, data.changes())
    return {"success": True, "data": task.serialize(), "message": "Task updated successfully"}


@router.patch("/{task_id}/complete")
async def complete_task(task_id: str, store: TaskStore = Depends(get_store)):
    task = await store.update(task_id, completed=True)
    return {"success": True, "data": task.serialize(), "message": "Task marked as completed"}


@router.delete("/{task_id}")
async def delete_task(task_id: str, store: TaskStore = Depends(get_store)):
    # The store treats a missing id as already deleted; the API reports it.
    if not await store.delete(task_id):
        return _not_found()
    return {"success": True, "message": "Task deleted successfully"}
