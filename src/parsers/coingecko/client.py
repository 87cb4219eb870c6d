"""CoinGecko REST client: current and historical USD prices by coin id."""

from datetime import date

import httpx
from loguru import logger

from src.parsers.coingecko.exceptions import CoinGeckoHttpError
from src.parsers.coingecko.models import CoinGeckoCurrentPrice, CoinGeckoHistory
from src.parsers.rate_limiter import RateLimiter

BASE_URL = "https://api.coingecko.com/api/v3"


def format_history_date(day: date) -> str:
    """CoinGecko history endpoints expect dd-mm-yyyy."""
    return day.strftime("%d-%m-%Y")


class CoinGeckoClient:
    """Thin async client; callers own fallback and caching policy.

    Both methods raise ``CoinGeckoHttpError`` on a non-200 status and let
    ``httpx.HTTPError`` / ``ValueError`` escape on network or parse failure.
    """

    def __init__(
        self,
        api_key: str = "",
        base_url: str = BASE_URL,
        rate_limiter: RateLimiter | None = None,
        timeout: float = 10.0,
    ) -> None:
        headers = {"Accept": "application/json"}
        if api_key:
            headers["x-cg-demo-api-key"] = api_key
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, headers=headers)
        self._rate_limiter = rate_limiter or RateLimiter(0)

    async def close(self) -> None:
        await self._client.aclose()

    async def _get_json(self, path: str, params: dict[str, str]) -> dict:
        await self._rate_limiter.acquire()
        resp = await self._client.get(path, params=params)
        if resp.status_code != 200:
            logger.debug(f"[COINGECKO] HTTP {resp.status_code} for {path}")
            raise CoinGeckoHttpError(resp.status_code)
        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError(f"unexpected CoinGecko payload for {path}")
        return data

    async def get_current_price(self, coin_id: str) -> float | None:
        data = await self._get_json(
            "/simple/price", {"ids": coin_id, "vs_currencies": "usd"}
        )
        entry = data.get(coin_id)
        if not isinstance(entry, dict):
            return None
        return CoinGeckoCurrentPrice.model_validate(entry).usd

    async def get_historical_price(self, coin_id: str, day: date) -> float | None:
        data = await self._get_json(
            f"/coins/{coin_id}/history",
            {"date": format_history_date(day), "localization": "false"},
        )
        return CoinGeckoHistory.model_validate(data).usd
