"""Store access for request handlers."""

from __future__ import annotations

from fastapi import Request

from .services.task_store import TaskStore


def get_store(request: Request) -> TaskStore:
    """FastAPI dependency returning the store owned by the running app."""
    return request.app.state.store
