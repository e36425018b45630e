"""System endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from stockdash.api.deps import app_state

router = APIRouter()


@router.get("/system/health")
def health() -> dict:
    """Liveness plus a database round trip. Public."""
    db = app_state.db
    db_ok = db.health_check() if db is not None else False
    return {"status": "ok" if db_ok else "degraded", "database": db_ok}
