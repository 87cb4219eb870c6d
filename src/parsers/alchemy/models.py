"""Pydantic models for alchemy_getAssetTransfers responses."""

from datetime import datetime

from pydantic import BaseModel, Field


class AlchemyRawContract(BaseModel):
    value: str | None = None  # hex big integer, base units
    address: str | None = None
    decimal: str | None = None  # hex

    model_config = {"extra": "ignore"}


class AlchemyTransferMetadata(BaseModel):
    blockTimestamp: datetime

    model_config = {"extra": "ignore"}


class AlchemyTransfer(BaseModel):
    blockNum: str = ""
    hash: str
    from_: str = Field(alias="from")
    to: str | None = None
    value: float | None = None  # decimal-adjusted by Alchemy
    asset: str | None = None
    category: str  # "external", "erc20", ...
    rawContract: AlchemyRawContract = AlchemyRawContract()
    metadata: AlchemyTransferMetadata

    model_config = {"extra": "ignore", "populate_by_name": True}


class AlchemyTransfersResult(BaseModel):
    transfers: list[AlchemyTransfer]
    pageKey: str | None = None

    model_config = {"extra": "ignore"}


class NormalizedTransfer(BaseModel):
    """Incoming transfer in chain-agnostic form.

    ``amount`` is an integer string in token base units.
    """

    tx_hash: str
    chain_id: int
    from_address: str
    to_address: str
    amount: str
    token_address: str
    token_symbol: str
    token_decimals: int
    timestamp: datetime
    category: str


class TransferPage(BaseModel):
    transfers: list[NormalizedTransfer] = []
    page_key: str | None = None
