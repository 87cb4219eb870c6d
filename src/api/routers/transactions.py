"""Transaction endpoints: enriched list, label edits, sender links."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.api.dependencies import get_current_user, get_engine, get_session
from src.services.metadata import link_verified_sender, set_transaction_label
from src.services.summary import summarize_transactions
from src.services.transactions import EnrichmentEngine

router = APIRouter(prefix="/api/v1/transactions", tags=["transactions"])


class LabelRequest(BaseModel):
    tx_hash: str = Field(min_length=1, max_length=80)
    chain_id: int = Field(gt=0)
    wallet_id: str = Field(min_length=1, max_length=32)
    user_label: str = Field(max_length=500)


class SenderLinkRequest(BaseModel):
    tx_hash: str = Field(min_length=1, max_length=80)
    chain_id: int = Field(gt=0)
    wallet_id: str = Field(min_length=1, max_length=32)
    verified_sender_id: str = Field(min_length=1, max_length=32)


class MetaResponse(BaseModel):
    ok: bool = True
    meta_id: str
    user_label: str | None = None
    verified_sender_id: str | None = None


@router.get("")
async def list_transactions(
    user_id: str = Depends(get_current_user),
    engine: EnrichmentEngine = Depends(get_engine),
    wallet_id: str | None = Query(None, max_length=32),
    refresh: bool = Query(False),
    limit: int = Query(settings.default_max_count, ge=1, le=1000),
    page_key: str | None = Query(None, max_length=500),
) -> dict[str, Any]:
    """Enriched transactions for one wallet, or every wallet when none is given."""
    next_page_key: str | None = None
    from_cache = False
    if wallet_id:
        result = await engine.get_wallet_transactions(
            user_id, wallet_id, max_count=limit, page_key=page_key, skip_cache=refresh
        )
        transactions = result.transactions
        next_page_key = result.page_key
        from_cache = result.from_cache
    else:
        transactions = await engine.get_all_user_transactions(
            user_id, max_count_per_wallet=limit, skip_cache=refresh
        )

    summary = summarize_transactions(transactions)
    return {
        "transactions": [tx.model_dump(mode="json") for tx in transactions],
        "summary": summary.model_dump(),
        "total": len(transactions),
        "page_key": next_page_key,
        "from_cache": from_cache,
    }


@router.patch("/label", response_model=MetaResponse)
async def update_label(
    body: LabelRequest,
    user_id: str = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> MetaResponse:
    """Set or clear the user's label on a transaction."""
    meta = await set_transaction_label(
        session, user_id, body.tx_hash, body.chain_id, body.wallet_id, body.user_label
    )
    await session.commit()
    return MetaResponse(
        meta_id=meta.id,
        user_label=meta.user_label,
        verified_sender_id=meta.verified_sender_id,
    )


@router.post("/verified-sender", response_model=MetaResponse)
async def link_sender(
    body: SenderLinkRequest,
    user_id: str = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> MetaResponse:
    """Attach a verified sender to a transaction."""
    meta = await link_verified_sender(
        session, user_id, body.tx_hash, body.chain_id, body.wallet_id, body.verified_sender_id
    )
    await session.commit()
    return MetaResponse(
        meta_id=meta.id,
        user_label=meta.user_label,
        verified_sender_id=meta.verified_sender_id,
    )
