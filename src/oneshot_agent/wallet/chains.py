"""Chain definitions for the EVM networks the local wallet can use."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Chain:
    """An EVM-compatible blockchain network."""

    name: str
    chain_id: int
    rpc_url: str
    native_symbol: str
    explorer_url: str

    @property
    def is_mainnet(self) -> bool:
        return self.chain_id == 1


CHAINS: dict[str, Chain] = {
    "ethereum": Chain(
        name="ethereum",
        chain_id=1,
        rpc_url="https://eth.llamarpc.com",
        native_symbol="ETH",
        explorer_url="https://etherscan.io",
    ),
    "ethereum-sepolia": Chain(
        name="ethereum-sepolia",
        chain_id=11155111,
        rpc_url="https://ethereum-sepolia-rpc.publicnode.com",
        native_symbol="ETH",
        explorer_url="https://sepolia.etherscan.io",
    ),
    "base": Chain(
        name="base",
        chain_id=8453,
        rpc_url="https://mainnet.base.org",
        native_symbol="ETH",
        explorer_url="https://basescan.org",
    ),
    "base-sepolia": Chain(
        name="base-sepolia",
        chain_id=84532,
        rpc_url="https://sepolia.base.org",
        native_symbol="ETH",
        explorer_url="https://sepolia.basescan.org",
    ),
    "arbitrum": Chain(
        name="arbitrum",
        chain_id=42161,
        rpc_url="https://arb1.arbitrum.io/rpc",
        native_symbol="ETH",
        explorer_url="https://arbiscan.io",
    ),
    "polygon": Chain(
        name="polygon",
        chain_id=137,
        rpc_url="https://polygon-rpc.com",
        native_symbol="POL",
        explorer_url="https://polygonscan.com",
    ),
}


def get_chain(name: str) -> Chain:
    """Get a chain by name. Raises ``KeyError`` if not found."""
    if name not in CHAINS:
        raise KeyError(
            f"Unknown chain '{name}'. Available: {list_chain_names()}"
        )
    return CHAINS[name]


def list_chain_names() -> list[str]:
    """Return the names of all supported chains."""
    return list(CHAINS.keys())
