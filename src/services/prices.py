"""USD price resolution for transfer valuation.

Stablecoins resolve to 1 without a network call, unknown symbols resolve to
None with a warning, and current prices are cached for the cache TTL.
Historical prices are not cached; when the history endpoint errors or
rate-limits, the current price is used instead.
"""

from datetime import UTC, datetime

import httpx
from loguru import logger

from src.parsers.coingecko.exceptions import CoinGeckoHttpError
from src.services.sources import PriceSource
from src.utils.ttl_cache import TTLCache

STABLECOINS = frozenset({"USDC", "USDT", "DAI", "BUSD", "TUSD"})

# Symbol → CoinGecko coin id
TOKEN_IDS: dict[str, str] = {
    "ETH": "ethereum",
    "WETH": "weth",
    "MATIC": "matic-network",
    "USDC": "usd-coin",
    "USDT": "tether",
    "DAI": "dai",
    "WBTC": "wrapped-bitcoin",
    "LINK": "chainlink",
    "UNI": "uniswap",
    "AAVE": "aave",
    "ARB": "arbitrum",
    "OP": "optimism",
}

PRICE_CACHE_TTL_SEC = 300.0


class PriceResolver:
    """Resolves USD unit prices; never raises for provider failures."""

    def __init__(
        self,
        source: PriceSource,
        cache: TTLCache[str, float] | None = None,
    ) -> None:
        self._source = source
        self._cache: TTLCache[str, float] = (
            cache if cache is not None else TTLCache(PRICE_CACHE_TTL_SEC)
        )

    def _coin_id(self, symbol: str) -> str | None:
        coin_id = TOKEN_IDS.get(symbol.upper())
        if coin_id is None:
            logger.warning(f"[PRICE] Unknown token: {symbol}")
        return coin_id

    async def get_token_price(self, symbol: str) -> float | None:
        """Current USD price for ``symbol``."""
        key = symbol.upper()
        if key in STABLECOINS:
            return 1.0

        cached = self._cache.get(key)
        if cached is not None:
            return cached

        coin_id = self._coin_id(symbol)
        if coin_id is None:
            return None

        try:
            price = await self._source.get_current_price(coin_id)
        except CoinGeckoHttpError as e:
            logger.error(f"[PRICE] CoinGecko error for {key}: {e}")
            return None
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[PRICE] Fetch error for {key}: {e}")
            return None

        if price is None:
            return None
        self._cache.set(key, price)
        return price

    async def get_historical_price(self, symbol: str, when: datetime) -> float | None:
        """USD price on the UTC day of ``when``."""
        key = symbol.upper()
        if key in STABLECOINS:
            return 1.0

        coin_id = self._coin_id(symbol)
        if coin_id is None:
            return None

        day = (when.astimezone(UTC) if when.tzinfo else when).date()
        try:
            price = await self._source.get_historical_price(coin_id, day)
        except CoinGeckoHttpError as e:
            logger.warning(f"[PRICE] Historical price unavailable for {key} ({e}), using current")
            return await self.get_token_price(symbol)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[PRICE] Historical fetch error for {key}: {e}")
            return None

        return price or None

    def clear_cache(self) -> None:
        self._cache.clear()


def convert_to_usd(amount: str, decimals: int, price_usd: float) -> float:
    """Base-unit amount → USD, in floating point (reporting, not accounting)."""
    return float(amount) / (10**decimals) * price_usd


def format_usd(amount: float) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"
