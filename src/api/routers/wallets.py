"""Wallet endpoints: linked wallets and transfer cache refresh."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_current_user, get_engine, get_session
from src.parsers.alchemy.chains import get_chain_label, is_chain_supported
from src.services.transactions import EnrichmentEngine
from src.services.wallets import list_user_wallets

router = APIRouter(prefix="/api/v1/wallets", tags=["wallets"])


@router.get("")
async def list_wallets(
    session: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user),
) -> dict[str, Any]:
    wallets = await list_user_wallets(session, user_id)
    return {
        "wallets": [
            {
                "id": w.id,
                "address": w.address,
                "chain_id": w.chain_id,
                "chain_label": get_chain_label(w.chain_id),
                "supported": is_chain_supported(w.chain_id),
                "label": w.label,
                "verified_at": w.verified_at.isoformat() if w.verified_at else None,
                "created_at": w.created_at.isoformat() if w.created_at else None,
            }
            for w in wallets
        ]
    }


@router.post("/{wallet_id}/refresh")
async def refresh_wallet(
    wallet_id: str,
    user_id: str = Depends(get_current_user),
    engine: EnrichmentEngine = Depends(get_engine),
) -> dict[str, bool]:
    """Drop cached transfers so the next list call hits the indexer."""
    await engine.refresh_wallet(user_id, wallet_id)
    return {"ok": True}
