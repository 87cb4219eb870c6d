"""Alchemy Transfers API client: incoming transfer history across EVM chains."""

import asyncio
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx
from loguru import logger

from src.parsers.alchemy.chains import (
    ALCHEMY_CHAINS,
    DEFAULT_TOKEN_DECIMALS,
    ZERO_ADDRESS,
    get_native_symbol,
    is_chain_supported,
)
from src.parsers.alchemy.models import (
    AlchemyTransfer,
    AlchemyTransfersResult,
    NormalizedTransfer,
    TransferPage,
)
from src.parsers.rate_limiter import RateLimiter

TRANSFER_CATEGORIES = ["external", "erc20"]
DEFAULT_MAX_COUNT = 100


class AlchemyClient:
    """Async JSON-RPC client for ``alchemy_getAssetTransfers``.

    Every failure mode (unsupported chain, missing key, HTTP/RPC error,
    malformed payload) is logged and returned as an empty page so one bad
    chain cannot abort a multi-chain fetch.
    """

    def __init__(
        self,
        api_key: str,
        rate_limiter: RateLimiter | None = None,
        timeout: float = 15.0,
    ) -> None:
        self._api_key = api_key
        self._rate_limiter = rate_limiter or RateLimiter(0)
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )

    async def close(self) -> None:
        await self._client.aclose()

    def supports_chain(self, chain_id: int) -> bool:
        return is_chain_supported(chain_id)

    def _url(self, chain_id: int) -> str | None:
        if not self._api_key:
            logger.error("[ALCHEMY] Missing ALCHEMY_API_KEY")
            return None
        chain = ALCHEMY_CHAINS.get(chain_id)
        if chain is None:
            logger.error(f"[ALCHEMY] Unsupported chain: {chain_id}")
            return None
        return f"https://{chain.network}.g.alchemy.com/v2/{self._api_key}"

    async def fetch_incoming_transfers(
        self,
        address: str,
        chain_id: int,
        *,
        from_block: str = "0x0",
        to_block: str = "latest",
        page_key: str | None = None,
        max_count: int = DEFAULT_MAX_COUNT,
    ) -> TransferPage:
        """Fetch transfers into ``address`` on one chain, newest first."""
        url = self._url(chain_id)
        if url is None:
            return TransferPage()

        params: dict[str, Any] = {
            "fromBlock": from_block,
            "toBlock": to_block,
            "toAddress": address,
            "category": TRANSFER_CATEGORIES,
            "withMetadata": True,
            "excludeZeroValue": True,
            "maxCount": hex(max_count),
            "order": "desc",
        }
        if page_key:
            params["pageKey"] = page_key
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "alchemy_getAssetTransfers",
            "params": [params],
        }

        try:
            await self._rate_limiter.acquire()
            resp = await self._client.post(url, json=payload)
            if resp.status_code != 200:
                logger.error(f"[ALCHEMY] HTTP {resp.status_code} for chain {chain_id}")
                return TransferPage()

            data = resp.json()
            if "error" in data:
                logger.error(f"[ALCHEMY] RPC error on chain {chain_id}: {data['error']}")
                return TransferPage()
            if not isinstance(data.get("result"), dict) or "transfers" not in data["result"]:
                logger.error(f"[ALCHEMY] No transfers in response for chain {chain_id}")
                return TransferPage()

            result = AlchemyTransfersResult.model_validate(data["result"])
            transfers = [normalize_transfer(t, chain_id) for t in result.transfers]
        except (httpx.HTTPError, ValueError, InvalidOperation) as e:
            # ValueError covers JSON decode and pydantic ValidationError
            logger.error(f"[ALCHEMY] Fetch failed for {address} on chain {chain_id}: {e}")
            return TransferPage()

        logger.debug(f"[ALCHEMY] {len(transfers)} transfers for {address} on chain {chain_id}")
        return TransferPage(transfers=transfers, page_key=result.pageKey)

    async def fetch_all_incoming_transfers(
        self,
        address: str,
        chain_ids: list[int],
        *,
        from_block: str = "0x0",
        to_block: str = "latest",
        max_count_per_chain: int = DEFAULT_MAX_COUNT,
    ) -> list[NormalizedTransfer]:
        """Fetch every chain concurrently and merge newest first."""
        pages = await asyncio.gather(
            *(
                self.fetch_incoming_transfers(
                    address,
                    chain_id,
                    from_block=from_block,
                    to_block=to_block,
                    max_count=max_count_per_chain,
                )
                for chain_id in chain_ids
            )
        )
        merged = [t for page in pages for t in page.transfers]
        merged.sort(key=lambda t: t.timestamp, reverse=True)
        return merged


def _parse_amount(transfer: AlchemyTransfer, decimals: int) -> str:
    """Amount in base units as an integer string."""
    if transfer.value is not None:
        scaled = Decimal(str(transfer.value)) * (Decimal(10) ** decimals)
        return str(int(scaled.to_integral_value()))
    if transfer.rawContract.value:
        return str(int(transfer.rawContract.value, 16))
    return "0"


def normalize_transfer(transfer: AlchemyTransfer, chain_id: int) -> NormalizedTransfer:
    """Map an Alchemy transfer to the chain-agnostic shape."""
    is_native = transfer.category == "external"
    token_address = ZERO_ADDRESS if is_native else (transfer.rawContract.address or "")
    token_symbol = transfer.asset or (get_native_symbol(chain_id) if is_native else "UNKNOWN")
    decimals = (
        int(transfer.rawContract.decimal, 16)
        if transfer.rawContract.decimal
        else DEFAULT_TOKEN_DECIMALS
    )

    return NormalizedTransfer(
        tx_hash=transfer.hash.lower(),
        chain_id=chain_id,
        from_address=transfer.from_.lower(),
        to_address=(transfer.to or "").lower(),
        amount=_parse_amount(transfer, decimals),
        token_address=token_address.lower(),
        token_symbol=token_symbol,
        token_decimals=decimals,
        timestamp=transfer.metadata.blockTimestamp,
        category=transfer.category,
    )
