"""Health check: no auth required."""

from __future__ import annotations

from fastapi import APIRouter
from loguru import logger
from pydantic import BaseModel
from sqlalchemy import text

from src.api.registry import registry
from src.db.database import engine

router = APIRouter(prefix="/api/v1", tags=["health"])


class HealthResponse(BaseModel):
    status: str
    version: str
    db_ok: bool
    engine_ready: bool


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check DB connectivity and pipeline wiring."""
    db_ok = False
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        db_ok = True
    except Exception as e:
        logger.warning(f"[HEALTH] DB check failed: {e}")

    engine_ready = registry.engine is not None
    return HealthResponse(
        status="ok" if db_ok and engine_ready else "degraded",
        version="0.1.0",
        db_ok=db_ok,
        engine_ready=engine_ready,
    )
