"""Pydantic models for CoinGecko price responses."""

from pydantic import BaseModel


class CoinGeckoCurrentPrice(BaseModel):
    usd: float | None = None

    model_config = {"extra": "ignore"}


class CoinGeckoMarketData(BaseModel):
    current_price: CoinGeckoCurrentPrice | None = None

    model_config = {"extra": "ignore"}


class CoinGeckoHistory(BaseModel):
    """``/coins/{id}/history`` payload (only the USD price is used)."""

    id: str = ""
    market_data: CoinGeckoMarketData | None = None

    model_config = {"extra": "ignore"}

    @property
    def usd(self) -> float | None:
        if self.market_data and self.market_data.current_price:
            return self.market_data.current_price.usd
        return None
