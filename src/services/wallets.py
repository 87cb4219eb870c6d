"""Wallet lookups scoped to the requesting user."""

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.user import Wallet
from src.services.exceptions import WalletNotFoundError


async def get_user_wallet(session: AsyncSession, user_id: str, wallet_id: str) -> Wallet:
    """Return the wallet if it exists and belongs to ``user_id``."""
    wallet = await session.get(Wallet, wallet_id)
    if wallet is None or wallet.user_id != user_id:
        raise WalletNotFoundError(f"Wallet not found: {wallet_id}")
    return wallet


async def list_user_wallets(session: AsyncSession, user_id: str) -> list[Wallet]:
    result = await session.execute(
        select(Wallet).where(Wallet.user_id == user_id).order_by(desc(Wallet.created_at))
    )
    return list(result.scalars().all())
