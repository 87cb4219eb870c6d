"""Registry for runtime objects shared by the API routers.

Populated once by ``src.main`` before the server starts. Routers read these
references directly; everything runs in one asyncio event loop.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.parsers.alchemy.client import AlchemyClient
    from src.parsers.coingecko.client import CoinGeckoClient
    from src.services.prices import PriceResolver
    from src.services.transactions import EnrichmentEngine


class ServiceRegistry:
    """Holds the enrichment pipeline and its provider clients."""

    engine: EnrichmentEngine | None = None
    price_resolver: PriceResolver | None = None
    alchemy: AlchemyClient | None = None
    coingecko: CoinGeckoClient | None = None

    async def close(self) -> None:
        if self.alchemy is not None:
            await self.alchemy.close()
        if self.coingecko is not None:
            await self.coingecko.close()


registry = ServiceRegistry()
