"""Verified sender directory."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_current_user, get_session
from src.services.metadata import list_verified_senders

router = APIRouter(prefix="/api/v1/verified-senders", tags=["verified-senders"])


@router.get("")
async def list_senders(
    session: AsyncSession = Depends(get_session),
    _user: str = Depends(get_current_user),
    chain_id: int | None = Query(None, gt=0),
) -> dict[str, Any]:
    senders = await list_verified_senders(session, chain_id)
    return {
        "verified_senders": [
            {
                "id": s.id,
                "address": s.address,
                "chain_id": s.chain_id,
                "company_name": s.company_name,
                "official_label": s.official_label,
                "logo_url": s.logo_url,
            }
            for s in senders
        ]
    }
