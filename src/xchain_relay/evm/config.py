"""Configuration containers for the relay's EVM layer."""

from __future__ import annotations

from dataclasses import dataclass

ZETACHAIN_ATHENS_CHAIN_ID = 7001
ZETACHAIN_ATHENS_RPC = "https://zetachain-athens-evm.blockpi.network/v1/rpc/public"

DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_RECEIPT_TIMEOUT = 120.0
DEFAULT_RECEIPT_POLL_INTERVAL = 1.0
DEFAULT_CONFIRMATIONS = 1


@dataclass(frozen=True)
class NativeCurrency:
    """Metadata of a chain's base currency."""

    name: str
    symbol: str
    decimals: int = 18


@dataclass(frozen=True)
class ChainDescriptor:
    """Static description of the chain all calls are sent to."""

    chain_id: int
    rpc_url: str
    native_currency: NativeCurrency

    def __post_init__(self) -> None:
        if self.chain_id <= 0:
            raise ValueError(f"Chain id must be positive, got {self.chain_id}")
        if not self.rpc_url:
            raise ValueError("Chain RPC URL must not be empty")


ZETACHAIN_ATHENS = ChainDescriptor(
    chain_id=ZETACHAIN_ATHENS_CHAIN_ID,
    rpc_url=ZETACHAIN_ATHENS_RPC,
    native_currency=NativeCurrency(name="ZETA", symbol="ZETA", decimals=18),
)


@dataclass(frozen=True)
class EngineConfig:
    """Wait policy and transport settings for the submission and query engines."""

    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    receipt_poll_interval: float = DEFAULT_RECEIPT_POLL_INTERVAL
    confirmations: int = DEFAULT_CONFIRMATIONS

    def __post_init__(self) -> None:
        if self.confirmations < 1:
            raise ValueError("At least one confirmation is required")
        if self.receipt_timeout <= 0 or self.request_timeout <= 0:
            raise ValueError("Timeouts must be positive")
