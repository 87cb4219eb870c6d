"""Types produced by the enrichment pipeline.

Pydantic models so the API can return them with ``model_dump(mode="json")``.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class VerifiedSenderInfo(BaseModel):
    id: str
    company_name: str
    official_label: str
    logo_url: str | None = None


class WalletInfo(BaseModel):
    id: str
    label: str | None = None
    address: str


class EnrichedTransaction(BaseModel):
    """Transfer + user metadata + USD value for one wallet.

    ``amount_usd`` is None when no price could be resolved; sums treat it
    as zero but the UI shows it as unknown, not "$0".
    """

    # From the indexer
    tx_hash: str
    chain_id: int
    chain_label: str
    from_address: str
    to_address: str
    amount: str
    token_address: str
    token_symbol: str
    token_decimals: int
    timestamp: datetime
    category: str

    # Computed
    amount_usd: float | None = None

    # From transaction_meta / verified_senders
    meta_id: str | None = None
    user_label: str | None = None
    verified_sender: VerifiedSenderInfo | None = None

    wallet: WalletInfo


class WalletTransactionsResult(BaseModel):
    transactions: list[EnrichedTransaction] = []
    page_key: str | None = None
    from_cache: bool = False


class TransactionSummary(BaseModel):
    total_transactions: int = 0
    verified_transactions: int = 0
    labeled_transactions: int = 0
    total_income: float = 0.0
    verified_income: float = 0.0
