"""Health and readiness checks."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..database import get_store
from ..services.task_store import StoreState, TaskStore

router = APIRouter()


@router.get("/health")
async def health_check(store: TaskStore = Depends(get_store)):
    await store.ping()
    return {
        "status": "healthy",
        "service": "tasks",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/ready")
async def readiness_check(store: TaskStore = Depends(get_store)):
    if store.state is not StoreState.READY:
        return JSONResponse({"status": store.state.value, "service": "tasks"}, status_code=503)
    return {"status": "ready", "service": "tasks"}
