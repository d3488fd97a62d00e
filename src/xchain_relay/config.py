"""Relay configuration and environment loading."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from web3 import Web3
from web3.types import ChecksumAddress

from .evm.config import (
    DEFAULT_CONFIRMATIONS,
    DEFAULT_RECEIPT_POLL_INTERVAL,
    DEFAULT_RECEIPT_TIMEOUT,
    DEFAULT_REQUEST_TIMEOUT,
    ZETACHAIN_ATHENS,
    ChainDescriptor,
    EngineConfig,
    NativeCurrency,
)
from .exceptions import ConfigurationError, ConfigurationMissingError
from .utils import normalise_destination, parse_fee_table, to_base_units

DEFAULT_TRANSFER_FEE = "0.1"
DEFAULT_TOKEN_QUERY_INDEX = 0

BASE_REQUIRED_ENV = ("WALLET_PRIVATE_KEY", "THIRDWEB_SECRET_KEY", "CONTRACT_ADDRESS")
MINT_REQUIRED_ENV = ("TO_ADDRESS", "TOKEN_URI")


@dataclass(frozen=True)
class MintConfig:
    """Recipient and metadata used by the mint step."""

    to_address: ChecksumAddress
    token_uri: str


@dataclass(frozen=True)
class FeeSchedule:
    """Native value attached to ``transferCrossChain`` per destination."""

    default: int = 10**17
    per_destination: Mapping[str, int] = field(default_factory=dict)

    def fee_for(self, destination: str) -> int:
        return self.per_destination.get(normalise_destination(destination), self.default)


@dataclass(frozen=True)
class RelayConfig:
    """Everything the relay needs, resolved once at start-up."""

    private_key: str
    service_credential: str
    contract_address: ChecksumAddress
    chain: ChainDescriptor = ZETACHAIN_ATHENS
    engine: EngineConfig = EngineConfig()
    include_mint_step: bool = True
    mint: MintConfig | None = None
    fees: FeeSchedule = FeeSchedule()
    token_query_index: int = DEFAULT_TOKEN_QUERY_INDEX

    def __post_init__(self) -> None:
        missing = [
            name
            for name, value in (
                ("WALLET_PRIVATE_KEY", self.private_key),
                ("THIRDWEB_SECRET_KEY", self.service_credential),
                ("CONTRACT_ADDRESS", self.contract_address),
            )
            if not value
        ]
        if self.include_mint_step and self.mint is None:
            missing.extend(MINT_REQUIRED_ENV)
        if missing:
            raise ConfigurationMissingError(missing)
        if self.token_query_index < 0:
            raise ConfigurationError(
                "Token query index cannot be negative",
                details={"value": self.token_query_index},
            )

    def __repr__(self) -> str:
        return (
            f"RelayConfig(contract_address={self.contract_address!r}, "
            f"chain_id={self.chain.chain_id}, include_mint_step={self.include_mint_step})"
        )


def load_config(environ: Mapping[str, str] | None = None) -> RelayConfig:
    """Build a :class:`RelayConfig` from environment variables.

    Every missing required variable is reported at once, before any network
    access happens.
    """

    env = os.environ if environ is None else environ
    include_mint_step = _env_flag(env, "INCLUDE_MINT_STEP", default=True)

    required = BASE_REQUIRED_ENV + (MINT_REQUIRED_ENV if include_mint_step else ())
    missing = [name for name in required if not env.get(name)]
    if missing:
        raise ConfigurationMissingError(missing)

    chain = _load_chain(env)
    decimals = chain.native_currency.decimals

    mint = None
    if include_mint_step:
        mint = MintConfig(
            to_address=_checksum(env["TO_ADDRESS"], "TO_ADDRESS"),
            token_uri=env["TOKEN_URI"],
        )

    fees = FeeSchedule(
        default=to_base_units(env.get("TRANSFER_FEE") or DEFAULT_TRANSFER_FEE, decimals),
        per_destination=parse_fee_table(env.get("TRANSFER_FEES", ""), decimals),
    )

    try:
        engine = EngineConfig(
            request_timeout=_env_number(env, "REQUEST_TIMEOUT", float, DEFAULT_REQUEST_TIMEOUT),
            receipt_timeout=_env_number(env, "RECEIPT_TIMEOUT", float, DEFAULT_RECEIPT_TIMEOUT),
            receipt_poll_interval=_env_number(
                env, "RECEIPT_POLL_INTERVAL", float, DEFAULT_RECEIPT_POLL_INTERVAL
            ),
            confirmations=_env_number(env, "CONFIRMATIONS", int, DEFAULT_CONFIRMATIONS),
        )
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc

    return RelayConfig(
        private_key=env["WALLET_PRIVATE_KEY"],
        service_credential=env["THIRDWEB_SECRET_KEY"],
        contract_address=_checksum(env["CONTRACT_ADDRESS"], "CONTRACT_ADDRESS"),
        chain=chain,
        engine=engine,
        include_mint_step=include_mint_step,
        mint=mint,
        fees=fees,
        token_query_index=_env_number(env, "TOKEN_QUERY_INDEX", int, DEFAULT_TOKEN_QUERY_INDEX),
    )


def _load_chain(env: Mapping[str, str]) -> ChainDescriptor:
    default = ZETACHAIN_ATHENS
    currency = NativeCurrency(
        name=env.get("NATIVE_CURRENCY_NAME") or default.native_currency.name,
        symbol=env.get("NATIVE_CURRENCY_SYMBOL") or default.native_currency.symbol,
        decimals=_env_number(
            env, "NATIVE_CURRENCY_DECIMALS", int, default.native_currency.decimals
        ),
    )
    try:
        return ChainDescriptor(
            chain_id=_env_number(env, "CHAIN_ID", int, default.chain_id),
            rpc_url=env.get("RPC_URL") or default.rpc_url,
            native_currency=currency,
        )
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc


def _checksum(value: str, name: str) -> ChecksumAddress:
    if not Web3.is_address(value):
        raise ConfigurationError(f"{name} is not a valid EVM address", details={"value": value})
    return Web3.to_checksum_address(value)


def _env_flag(env: Mapping[str, str], name: str, *, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    lowered = raw.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"{name} must be a boolean flag", details={"value": raw})


def _env_number(env: Mapping[str, str], name: str, kind: type, default):
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return kind(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(
            f"{name} must be a {kind.__name__}", details={"value": raw}
        ) from exc
