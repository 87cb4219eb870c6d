"""EVM networks served by Alchemy's Transfers API."""

from dataclasses import dataclass

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
DEFAULT_NATIVE_SYMBOL = "ETH"
DEFAULT_TOKEN_DECIMALS = 18


@dataclass(frozen=True)
class AlchemyChain:
    network: str  # subdomain in https://<network>.g.alchemy.com/v2/<key>
    label: str
    native_symbol: str = DEFAULT_NATIVE_SYMBOL


ALCHEMY_CHAINS: dict[int, AlchemyChain] = {
    # Mainnets
    1: AlchemyChain("eth-mainnet", "Ethereum"),
    137: AlchemyChain("polygon-mainnet", "Polygon", native_symbol="MATIC"),
    42161: AlchemyChain("arb-mainnet", "Arbitrum"),
    10: AlchemyChain("opt-mainnet", "Optimism"),
    8453: AlchemyChain("base-mainnet", "Base"),
    # Testnets
    11155111: AlchemyChain("eth-sepolia", "Sepolia"),
    84532: AlchemyChain("base-sepolia", "Base Sepolia"),
    421614: AlchemyChain("arb-sepolia", "Arbitrum Sepolia"),
    11155420: AlchemyChain("opt-sepolia", "Optimism Sepolia"),
}


def is_chain_supported(chain_id: int) -> bool:
    return chain_id in ALCHEMY_CHAINS


def get_chain_label(chain_id: int) -> str:
    chain = ALCHEMY_CHAINS.get(chain_id)
    return chain.label if chain else f"Chain {chain_id}"


def get_native_symbol(chain_id: int) -> str:
    chain = ALCHEMY_CHAINS.get(chain_id)
    return chain.native_symbol if chain else DEFAULT_NATIVE_SYMBOL
