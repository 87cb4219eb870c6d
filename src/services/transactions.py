"""Enrichment engine: indexer transfers merged with user metadata and USD values.

Transfer data is fetched on demand and cached per ``(address, chain_id)``;
only labels and sender links live in the database. Upstream failures are
absorbed into the data (empty list, ``amount_usd=None``); only wallet
ownership violations raise.
"""

import asyncio
from datetime import datetime

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.models.transaction import VerifiedSender
from src.models.user import Wallet
from src.parsers.alchemy.chains import get_chain_label
from src.parsers.alchemy.models import NormalizedTransfer
from src.services.enrichment_types import (
    EnrichedTransaction,
    VerifiedSenderInfo,
    WalletInfo,
    WalletTransactionsResult,
)
from src.services.metadata import MetaRecord, get_active_senders_by_address, get_transaction_meta
from src.services.prices import PriceResolver, convert_to_usd
from src.services.sources import TransferSource
from src.services.wallets import get_user_wallet, list_user_wallets
from src.utils.concurrency import gather_bounded
from src.utils.ttl_cache import TTLCache

TRANSFER_CACHE_TTL_SEC = 300.0
DEFAULT_MAX_COUNT = 50

# History walks (reports) page through the indexer at its maximum page size
HISTORY_PAGE_SIZE = 1000
MAX_HISTORY_PAGES = 50


def transfer_cache_key(address: str, chain_id: int) -> str:
    return f"{address.lower()}-{chain_id}"


def _sender_info(sender: VerifiedSender) -> VerifiedSenderInfo:
    return VerifiedSenderInfo(
        id=sender.id,
        company_name=sender.company_name,
        official_label=sender.official_label,
        logo_url=sender.logo_url,
    )


def resolve_verified_sender(
    transfer: NormalizedTransfer,
    record: MetaRecord | None,
    senders_by_address: dict[str, VerifiedSender],
) -> VerifiedSender | None:
    """Explicit meta link first, then an active sender at the from address."""
    if record is not None and record.sender is not None:
        return record.sender
    return senders_by_address.get(transfer.from_address.lower())


class EnrichmentEngine:
    """Builds enriched transaction views for one wallet or all of a user's wallets.

    DB sessions are held only for the wallet lookup and the metadata reads,
    never across indexer or price calls, so wallets can run concurrently
    without pinning pool connections. Price lookups for a wallet's transfers
    are issued together, at most ``price_concurrency`` at a time (0 = no bound).
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        transfer_source: TransferSource,
        price_resolver: PriceResolver,
        cache: TTLCache[str, list[NormalizedTransfer]] | None = None,
        price_concurrency: int = 0,
    ) -> None:
        self._session_factory = session_factory
        self._transfers = transfer_source
        self._prices = price_resolver
        self._cache: TTLCache[str, list[NormalizedTransfer]] = (
            cache if cache is not None else TTLCache(TRANSFER_CACHE_TTL_SEC)
        )
        self._price_concurrency = price_concurrency

    async def get_wallet_transactions(
        self,
        user_id: str,
        wallet_id: str,
        *,
        max_count: int = DEFAULT_MAX_COUNT,
        page_key: str | None = None,
        skip_cache: bool = False,
        since: datetime | None = None,
    ) -> WalletTransactionsResult:
        """Enriched incoming transactions for one wallet, newest first.

        With ``since``, every transfer at or after that instant is collected
        by paging through the indexer (cache and ``page_key`` are ignored).

        Raises WalletNotFoundError if the wallet is missing or not owned by
        ``user_id``. Unsupported chains return an empty result.
        """
        async with self._session_factory() as session:
            wallet = await get_user_wallet(session, user_id, wallet_id)

        if not self._transfers.supports_chain(wallet.chain_id):
            logger.debug(f"[ENRICH] Wallet {wallet.id} on unsupported chain {wallet.chain_id}")
            return WalletTransactionsResult()

        if since is not None:
            transfers = await self._load_history(wallet, since)
            next_page_key, from_cache = None, False
        else:
            transfers, next_page_key, from_cache = await self._load_transfers(
                wallet, max_count=max_count, page_key=page_key, skip_cache=skip_cache
            )
        transactions = await self._enrich(user_id, wallet, transfers)

        logger.debug(
            f"[ENRICH] Wallet {wallet.id}: {len(transactions)} transactions"
            f"{' (cached)' if from_cache else ''}"
        )
        return WalletTransactionsResult(
            transactions=transactions,
            page_key=next_page_key,
            from_cache=from_cache,
        )

    async def get_all_user_transactions(
        self,
        user_id: str,
        *,
        max_count_per_wallet: int = DEFAULT_MAX_COUNT,
        skip_cache: bool = False,
        since: datetime | None = None,
    ) -> list[EnrichedTransaction]:
        """Every linked wallet enriched concurrently, merged newest first.

        ``since`` switches each wallet to a full history walk back to that
        instant. A wallet that fails is logged and skipped; the rest still
        appear.
        """
        async with self._session_factory() as session:
            wallets = await list_user_wallets(session, user_id)

        results = await asyncio.gather(
            *(
                self.get_wallet_transactions(
                    user_id,
                    w.id,
                    max_count=max_count_per_wallet,
                    skip_cache=skip_cache,
                    since=since,
                )
                for w in wallets
            ),
            return_exceptions=True,
        )

        merged: list[EnrichedTransaction] = []
        for wallet, result in zip(wallets, results):
            if isinstance(result, Exception):
                logger.error(f"[ENRICH] Wallet {wallet.id} failed: {result}")
                continue
            if isinstance(result, BaseException):
                raise result
            merged.extend(result.transactions)

        merged.sort(key=lambda tx: tx.timestamp, reverse=True)
        return merged

    async def refresh_wallet(self, user_id: str, wallet_id: str) -> None:
        """Drop the cached transfers of an owned wallet."""
        async with self._session_factory() as session:
            wallet = await get_user_wallet(session, user_id, wallet_id)
        self.clear_transaction_cache(wallet.address, wallet.chain_id)

    def clear_transaction_cache(self, address: str, chain_id: int) -> None:
        self._cache.delete(transfer_cache_key(address, chain_id))

    def clear_all_transaction_cache(self) -> None:
        self._cache.clear()

    async def _load_transfers(
        self,
        wallet: Wallet,
        *,
        max_count: int,
        page_key: str | None,
        skip_cache: bool,
    ) -> tuple[list[NormalizedTransfer], str | None, bool]:
        """Returns (transfers, next page key, served from cache)."""
        key = transfer_cache_key(wallet.address, wallet.chain_id)

        # Paginated requests always go to the indexer
        if not skip_cache and page_key is None:
            cached = self._cache.get(key)
            if cached is not None:
                return cached, None, True

        page = await self._transfers.fetch_incoming_transfers(
            wallet.address, wallet.chain_id, page_key=page_key, max_count=max_count
        )
        if page_key is None:
            self._cache.set(key, page.transfers)
        return page.transfers, page.page_key, False

    async def _load_history(self, wallet: Wallet, since: datetime) -> list[NormalizedTransfer]:
        """Newest-first transfers back to ``since``, across as many pages as needed."""
        collected: list[NormalizedTransfer] = []
        page_key: str | None = None
        for _ in range(MAX_HISTORY_PAGES):
            page = await self._transfers.fetch_incoming_transfers(
                wallet.address, wallet.chain_id, page_key=page_key, max_count=HISTORY_PAGE_SIZE
            )
            collected.extend(page.transfers)
            if not page.page_key or not page.transfers or page.transfers[-1].timestamp < since:
                break
            page_key = page.page_key
        else:
            logger.warning(
                f"[ENRICH] Wallet {wallet.id}: history truncated after "
                f"{MAX_HISTORY_PAGES} pages"
            )
        return [t for t in collected if t.timestamp >= since]

    async def _load_metadata(
        self, user_id: str, wallet: Wallet, transfers: list[NormalizedTransfer]
    ) -> tuple[dict[str, MetaRecord], dict[str, VerifiedSender]]:
        async with self._session_factory() as session:
            metas = await get_transaction_meta(
                session, [t.tx_hash for t in transfers], wallet.chain_id, user_id
            )
            senders = await get_active_senders_by_address(
                session, {t.from_address for t in transfers}, wallet.chain_id
            )
        return metas, senders

    async def _enrich(
        self,
        user_id: str,
        wallet: Wallet,
        transfers: list[NormalizedTransfer],
    ) -> list[EnrichedTransaction]:
        if not transfers:
            return []

        metas, senders = await self._load_metadata(user_id, wallet, transfers)
        wallet_info = WalletInfo(id=wallet.id, label=wallet.label, address=wallet.address)

        async def _enrich_one(transfer: NormalizedTransfer) -> EnrichedTransaction:
            record = metas.get(transfer.tx_hash.lower())
            sender = resolve_verified_sender(transfer, record, senders)
            return EnrichedTransaction(
                **transfer.model_dump(),
                chain_label=get_chain_label(transfer.chain_id),
                amount_usd=await self._resolve_usd(transfer),
                meta_id=record.meta.id if record else None,
                user_label=record.meta.user_label if record else None,
                verified_sender=_sender_info(sender) if sender else None,
                wallet=wallet_info,
            )

        return await gather_bounded(transfers, _enrich_one, self._price_concurrency)

    async def _resolve_usd(self, transfer: NormalizedTransfer) -> float | None:
        try:
            price = await self._prices.get_historical_price(
                transfer.token_symbol, transfer.timestamp
            )
            if not price:
                return None
            return convert_to_usd(transfer.amount, transfer.token_decimals, price)
        except Exception as e:
            logger.warning(f"[ENRICH] USD value failed for {transfer.tx_hash}: {e}")
            return None
