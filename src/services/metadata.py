"""User metadata for transfers: labels and verified-sender links.

Writes are upserts keyed by ``(tx_hash, chain_id)`` that only touch the
column being written, so a label edit never clears a sender link and vice
versa. Hashes are stored lowercase. A row belongs to the user who created
it; another user writing the same hash gets UnauthorizedError. Functions
flush; the caller owns the commit.
"""

from dataclasses import dataclass
from typing import Any

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.base import new_id
from src.models.transaction import TransactionMeta, VerifiedSender
from src.models.user import Wallet
from src.services.exceptions import UnauthorizedError, VerifiedSenderNotFoundError


@dataclass
class MetaRecord:
    meta: TransactionMeta
    sender: VerifiedSender | None


def _sanitize(val: str | None) -> str | None:
    """Strip null bytes and whitespace; empty becomes None."""
    if val is None:
        return None
    return val.replace("\x00", "").strip() or None


def _insert_for(session: AsyncSession):
    if session.bind is not None and session.bind.dialect.name == "sqlite":
        return sqlite_insert
    return pg_insert


async def _ensure_wallet_owner(session: AsyncSession, user_id: str, wallet_id: str) -> None:
    wallet = await session.get(Wallet, wallet_id)
    if wallet is None or wallet.user_id != user_id:
        raise UnauthorizedError("Unauthorized")


async def _upsert_meta(
    session: AsyncSession,
    *,
    user_id: str,
    tx_hash: str,
    chain_id: int,
    wallet_id: str,
    fields: dict[str, Any],
) -> TransactionMeta:
    tx_hash = tx_hash.lower()
    insert = _insert_for(session)
    stmt = (
        insert(TransactionMeta)
        .values(
            id=new_id(),
            tx_hash=tx_hash,
            chain_id=chain_id,
            user_id=user_id,
            wallet_id=wallet_id,
            **fields,
        )
        .on_conflict_do_update(
            index_elements=["tx_hash", "chain_id"],
            set_={**fields, "updated_at": func.now()},
            # A row owned by another user is left untouched and returns nothing
            where=TransactionMeta.user_id == user_id,
        )
        .returning(TransactionMeta)
    )
    # populate_existing refreshes a row already in the identity map
    result = await session.execute(
        select(TransactionMeta)
        .from_statement(stmt)
        .execution_options(populate_existing=True)
    )
    meta = result.scalar_one_or_none()
    if meta is None:
        logger.warning(f"[META] {tx_hash} (chain {chain_id}) already belongs to another user")
        raise UnauthorizedError("Unauthorized")
    await session.flush()
    return meta


async def set_transaction_label(
    session: AsyncSession,
    user_id: str,
    tx_hash: str,
    chain_id: int,
    wallet_id: str,
    label: str,
) -> TransactionMeta:
    """Create or update the label; an empty label clears it."""
    await _ensure_wallet_owner(session, user_id, wallet_id)
    meta = await _upsert_meta(
        session,
        user_id=user_id,
        tx_hash=tx_hash,
        chain_id=chain_id,
        wallet_id=wallet_id,
        fields={"user_label": _sanitize(label)},
    )
    logger.debug(f"[META] Label set on {tx_hash} (chain {chain_id})")
    return meta


async def link_verified_sender(
    session: AsyncSession,
    user_id: str,
    tx_hash: str,
    chain_id: int,
    wallet_id: str,
    verified_sender_id: str,
) -> TransactionMeta:
    """Create or update the sender link, keeping any existing label."""
    await _ensure_wallet_owner(session, user_id, wallet_id)
    if await session.get(VerifiedSender, verified_sender_id) is None:
        raise VerifiedSenderNotFoundError(f"Verified sender not found: {verified_sender_id}")
    meta = await _upsert_meta(
        session,
        user_id=user_id,
        tx_hash=tx_hash,
        chain_id=chain_id,
        wallet_id=wallet_id,
        fields={"verified_sender_id": verified_sender_id},
    )
    logger.debug(f"[META] {tx_hash} linked to sender {verified_sender_id}")
    return meta


async def get_transaction_meta(
    session: AsyncSession,
    tx_hashes: list[str],
    chain_id: int,
    user_id: str,
) -> dict[str, MetaRecord]:
    """Metadata rows for ``tx_hashes`` keyed by lowercase hash, linked sender included."""
    if not tx_hashes:
        return {}
    result = await session.execute(
        select(TransactionMeta, VerifiedSender)
        .outerjoin(VerifiedSender, TransactionMeta.verified_sender_id == VerifiedSender.id)
        .where(
            TransactionMeta.tx_hash.in_({h.lower() for h in tx_hashes}),
            TransactionMeta.chain_id == chain_id,
            TransactionMeta.user_id == user_id,
        )
    )
    return {meta.tx_hash: MetaRecord(meta=meta, sender=sender) for meta, sender in result.all()}


async def get_active_senders_by_address(
    session: AsyncSession,
    addresses: set[str],
    chain_id: int,
) -> dict[str, VerifiedSender]:
    """Active verified senders on ``chain_id`` keyed by lowercase address."""
    if not addresses:
        return {}
    lowered = {a.lower() for a in addresses}
    result = await session.execute(
        select(VerifiedSender).where(
            func.lower(VerifiedSender.address).in_(lowered),
            VerifiedSender.chain_id == chain_id,
            VerifiedSender.is_active.is_(True),
        )
    )
    return {s.address.lower(): s for s in result.scalars().all()}


async def list_verified_senders(
    session: AsyncSession, chain_id: int | None = None
) -> list[VerifiedSender]:
    query = select(VerifiedSender).where(VerifiedSender.is_active.is_(True))
    if chain_id is not None:
        query = query.where(VerifiedSender.chain_id == chain_id)
    result = await session.execute(query.order_by(VerifiedSender.company_name))
    return list(result.scalars().all())
