"""Provider seams for the enrichment pipeline.

``AlchemyClient`` and ``CoinGeckoClient`` satisfy these structurally;
tests substitute AsyncMock doubles.
"""

from datetime import date
from typing import Protocol

from src.parsers.alchemy.models import TransferPage


class TransferSource(Protocol):
    def supports_chain(self, chain_id: int) -> bool: ...

    async def fetch_incoming_transfers(
        self,
        address: str,
        chain_id: int,
        *,
        from_block: str = "0x0",
        to_block: str = "latest",
        page_key: str | None = None,
        max_count: int = 100,
    ) -> TransferPage:
        """Must not raise: failures come back as an empty page."""
        ...


class PriceSource(Protocol):
    async def get_current_price(self, coin_id: str) -> float | None: ...

    async def get_historical_price(self, coin_id: str, day: date) -> float | None: ...
