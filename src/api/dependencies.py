"""FastAPI dependency injection: auth, DB session, enrichment engine."""

from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.auth import COOKIE_NAME, decode_token, extract_token
from src.api.registry import registry
from src.db.database import async_session_factory
from src.services.transactions import EnrichmentEngine


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async DB session (auto-closes)."""
    async with async_session_factory() as session:
        yield session


def get_engine() -> EnrichmentEngine:
    if registry.engine is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Enrichment engine not ready",
        )
    return registry.engine


async def get_current_user(request: Request) -> str:
    """Return the authenticated user id from the request's JWT."""
    token = extract_token(
        request.cookies.get(COOKIE_NAME), request.headers.get("Authorization")
    )
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return decode_token(token)["sub"]
