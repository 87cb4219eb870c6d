"""Tests for the Alchemy transfers client and transfer normalization."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from src.parsers.alchemy.chains import ZERO_ADDRESS, get_chain_label, get_native_symbol
from src.parsers.alchemy.client import AlchemyClient, normalize_transfer
from src.parsers.alchemy.models import AlchemyTransfer

WALLET = "0x1111111111111111111111111111111111111111"


def _raw_transfer(**overrides) -> dict:
    raw = {
        "blockNum": "0x10",
        "hash": "0xAbC",
        "from": "0xABCDEFabcdefABCDEFabcdefABCDEFabcdefABCD",
        "to": WALLET,
        "value": 1.5,
        "asset": "ETH",
        "category": "external",
        "rawContract": {"value": "0x14d1120d7b160000", "address": None, "decimal": "0x12"},
        "metadata": {"blockTimestamp": "2026-03-01T12:00:00.000Z"},
    }
    raw.update(overrides)
    return raw


def _ok_response(result: dict) -> MagicMock:
    resp = MagicMock()
    resp.status_code = 200
    resp.json.return_value = {"jsonrpc": "2.0", "id": 1, "result": result}
    return resp


class TestChains:
    def test_labels(self) -> None:
        assert get_chain_label(1) == "Ethereum"
        assert get_chain_label(8453) == "Base"
        assert get_chain_label(999) == "Chain 999"

    def test_native_symbol(self) -> None:
        assert get_native_symbol(137) == "MATIC"
        assert get_native_symbol(42161) == "ETH"
        assert get_native_symbol(999) == "ETH"


class TestNormalizeTransfer:
    def test_native_transfer(self) -> None:
        t = normalize_transfer(AlchemyTransfer.model_validate(_raw_transfer()), 1)
        assert t.tx_hash == "0xabc"
        assert t.chain_id == 1
        assert t.from_address == "0xabcdefabcdefabcdefabcdefabcdefabcdefabcd"
        assert t.token_address == ZERO_ADDRESS
        assert t.token_symbol == "ETH"
        assert t.token_decimals == 18
        assert t.amount == "1500000000000000000"
        assert t.timestamp == datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
        assert t.category == "external"

    def test_erc20_uses_contract_decimals(self) -> None:
        raw = _raw_transfer(
            value=1.0,
            asset="USDC",
            category="erc20",
            rawContract={
                "value": "0xf4240",
                "address": "0xA0B86991C6218B36C1D19D4A2E9EB0CE3606EB48",
                "decimal": "0x6",
            },
        )
        t = normalize_transfer(AlchemyTransfer.model_validate(raw), 1)
        assert t.token_decimals == 6
        assert t.amount == "1000000"
        assert t.token_symbol == "USDC"
        assert t.token_address == "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"

    def test_raw_hex_value_when_value_missing(self) -> None:
        raw = _raw_transfer(value=None)
        t = normalize_transfer(AlchemyTransfer.model_validate(raw), 1)
        assert t.amount == str(0x14D1120D7B160000)

    def test_amount_zero_when_nothing_reported(self) -> None:
        raw = _raw_transfer(value=None, rawContract={})
        t = normalize_transfer(AlchemyTransfer.model_validate(raw), 1)
        assert t.amount == "0"
        assert t.token_decimals == 18

    def test_missing_native_asset_uses_chain_symbol(self) -> None:
        raw = _raw_transfer(asset=None)
        t = normalize_transfer(AlchemyTransfer.model_validate(raw), 137)
        assert t.token_symbol == "MATIC"

    def test_missing_token_asset_is_unknown(self) -> None:
        raw = _raw_transfer(asset=None, category="erc20")
        t = normalize_transfer(AlchemyTransfer.model_validate(raw), 1)
        assert t.token_symbol == "UNKNOWN"


class TestAlchemyClient:
    @pytest.mark.asyncio
    async def test_fetch_parses_page(self) -> None:
        client = AlchemyClient("test-key")
        client._client = AsyncMock()
        client._client.post = AsyncMock(
            return_value=_ok_response({"transfers": [_raw_transfer()], "pageKey": "next-1"})
        )

        page = await client.fetch_incoming_transfers(WALLET, 1, max_count=100)

        assert len(page.transfers) == 1
        assert page.page_key == "next-1"
        url = client._client.post.call_args.args[0]
        assert url == "https://eth-mainnet.g.alchemy.com/v2/test-key"
        params = client._client.post.call_args.kwargs["json"]["params"][0]
        assert params["toAddress"] == WALLET
        assert params["category"] == ["external", "erc20"]
        assert params["maxCount"] == "0x64"
        assert params["order"] == "desc"
        assert params["withMetadata"] is True
        assert "pageKey" not in params

    @pytest.mark.asyncio
    async def test_page_key_forwarded(self) -> None:
        client = AlchemyClient("test-key")
        client._client = AsyncMock()
        client._client.post = AsyncMock(return_value=_ok_response({"transfers": []}))

        page = await client.fetch_incoming_transfers(WALLET, 1, page_key="abc")

        params = client._client.post.call_args.kwargs["json"]["params"][0]
        assert params["pageKey"] == "abc"
        assert page.transfers == []
        assert page.page_key is None

    @pytest.mark.asyncio
    async def test_unsupported_chain_returns_empty_without_request(self) -> None:
        client = AlchemyClient("test-key")
        client._client = AsyncMock()

        page = await client.fetch_incoming_transfers(WALLET, 56)

        assert page.transfers == []
        client._client.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_api_key_returns_empty(self) -> None:
        client = AlchemyClient("")
        client._client = AsyncMock()

        page = await client.fetch_incoming_transfers(WALLET, 1)

        assert page.transfers == []
        client._client.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_http_error_status_returns_empty(self) -> None:
        client = AlchemyClient("test-key")
        resp = MagicMock()
        resp.status_code = 429
        client._client = AsyncMock()
        client._client.post = AsyncMock(return_value=resp)

        page = await client.fetch_incoming_transfers(WALLET, 1)

        assert page.transfers == []

    @pytest.mark.asyncio
    async def test_rpc_error_returns_empty(self) -> None:
        client = AlchemyClient("test-key")
        resp = MagicMock()
        resp.status_code = 200
        resp.json.return_value = {"jsonrpc": "2.0", "id": 1, "error": {"code": -32600}}
        client._client = AsyncMock()
        client._client.post = AsyncMock(return_value=resp)

        page = await client.fetch_incoming_transfers(WALLET, 1)

        assert page.transfers == []

    @pytest.mark.asyncio
    async def test_missing_transfers_returns_empty(self) -> None:
        client = AlchemyClient("test-key")
        client._client = AsyncMock()
        client._client.post = AsyncMock(return_value=_ok_response({"pageKey": "x"}))

        page = await client.fetch_incoming_transfers(WALLET, 1)

        assert page.transfers == []

    @pytest.mark.asyncio
    async def test_network_error_returns_empty(self) -> None:
        client = AlchemyClient("test-key")
        client._client = AsyncMock()
        client._client.post = AsyncMock(side_effect=httpx.ConnectError("boom"))

        page = await client.fetch_incoming_transfers(WALLET, 1)

        assert page.transfers == []

    @pytest.mark.asyncio
    async def test_fetch_all_merges_newest_first(self) -> None:
        client = AlchemyClient("test-key")
        older = _raw_transfer(hash="0xold", metadata={"blockTimestamp": "2026-01-01T00:00:00Z"})
        newer = _raw_transfer(hash="0xnew", metadata={"blockTimestamp": "2026-02-01T00:00:00Z"})

        async def _post(url, json):
            if url.startswith("https://eth-mainnet"):
                return _ok_response({"transfers": [older]})
            return _ok_response({"transfers": [newer]})

        client._client = AsyncMock()
        client._client.post = AsyncMock(side_effect=_post)

        merged = await client.fetch_all_incoming_transfers(WALLET, [1, 8453, 56])

        assert [t.tx_hash for t in merged] == ["0xnew", "0xold"]
        assert merged[0].chain_id == 8453
        assert client._client.post.call_count == 2
