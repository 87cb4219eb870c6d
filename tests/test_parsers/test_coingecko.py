"""Tests for the CoinGecko price client."""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.parsers.coingecko.client import CoinGeckoClient, format_history_date
from src.parsers.coingecko.exceptions import CoinGeckoHttpError


def _response(status_code: int, payload=None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    return resp


def test_format_history_date() -> None:
    assert format_history_date(date(2026, 3, 7)) == "07-03-2026"


def test_api_key_header() -> None:
    client = CoinGeckoClient(api_key="demo-key")
    assert client._client.headers["x-cg-demo-api-key"] == "demo-key"
    assert "x-cg-demo-api-key" not in CoinGeckoClient()._client.headers


class TestCurrentPrice:
    @pytest.mark.asyncio
    async def test_parses_usd(self) -> None:
        client = CoinGeckoClient()
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=_response(200, {"ethereum": {"usd": 3120.5}}))

        price = await client.get_current_price("ethereum")

        assert price == 3120.5
        path = client._client.get.call_args.args[0]
        params = client._client.get.call_args.kwargs["params"]
        assert path == "/simple/price"
        assert params == {"ids": "ethereum", "vs_currencies": "usd"}

    @pytest.mark.asyncio
    async def test_missing_coin_is_none(self) -> None:
        client = CoinGeckoClient()
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=_response(200, {}))

        assert await client.get_current_price("ethereum") is None

    @pytest.mark.asyncio
    async def test_non_200_raises(self) -> None:
        client = CoinGeckoClient()
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=_response(429))

        with pytest.raises(CoinGeckoHttpError) as exc_info:
            await client.get_current_price("ethereum")
        assert exc_info.value.status_code == 429


class TestHistoricalPrice:
    @pytest.mark.asyncio
    async def test_parses_market_data(self) -> None:
        client = CoinGeckoClient()
        client._client = AsyncMock()
        client._client.get = AsyncMock(
            return_value=_response(
                200,
                {"id": "ethereum", "market_data": {"current_price": {"usd": 2500.0, "eur": 2300.0}}},
            )
        )

        price = await client.get_historical_price("ethereum", date(2026, 1, 15))

        assert price == 2500.0
        path = client._client.get.call_args.args[0]
        params = client._client.get.call_args.kwargs["params"]
        assert path == "/coins/ethereum/history"
        assert params["date"] == "15-01-2026"

    @pytest.mark.asyncio
    async def test_no_market_data_is_none(self) -> None:
        client = CoinGeckoClient()
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=_response(200, {"id": "ethereum"}))

        assert await client.get_historical_price("ethereum", date(2015, 1, 1)) is None

    @pytest.mark.asyncio
    async def test_non_dict_payload_raises_value_error(self) -> None:
        client = CoinGeckoClient()
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=_response(200, ["unexpected"]))

        with pytest.raises(ValueError):
            await client.get_historical_price("ethereum", date(2026, 1, 15))
