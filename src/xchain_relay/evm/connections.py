"""Connection helpers: web3 provider wiring and contract handles."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import requests
from web3 import HTTPProvider, Web3
from web3.types import ChecksumAddress

from ..exceptions import ConfigurationError, RpcUnavailableError
from .config import ChainDescriptor, EngineConfig

logger = logging.getLogger(__name__)

SECRET_KEY_HEADER = "x-secret-key"


@dataclass(frozen=True)
class ContractHandle:
    """A deployed contract bound to the chain and client that reach it."""

    address: ChecksumAddress
    chain: ChainDescriptor
    web3: Web3

    @property
    def endpoint(self) -> str:
        return self.chain.rpc_url


def resolve_contract(address: str, chain: ChainDescriptor, web3: Web3) -> ContractHandle:
    """Bind ``address`` on ``chain`` into a :class:`ContractHandle`."""

    try:
        checksum = Web3.to_checksum_address(address)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(
            "Contract address is not a valid EVM address",
            details={"field": "contract_address", "value": address, "error": str(exc)},
        ) from exc
    return ContractHandle(address=checksum, chain=chain, web3=web3)


class Web3Connections:
    """Manage the web3 provider and the relay contract handle."""

    def __init__(
        self,
        chain: ChainDescriptor,
        contract_address: str,
        *,
        engine: EngineConfig,
        service_credential: str | None = None,
    ) -> None:
        self.chain = chain
        self.engine = engine
        self._contract_address = contract_address
        self._service_credential = service_credential
        self._web3: Web3 | None = None
        self._contract: ContractHandle | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def connect(self) -> None:
        """Initialise the provider and verify it serves the configured chain."""

        web3 = self._build_web3()
        if not web3.is_connected():
            raise RpcUnavailableError("Unable to connect to chain RPC", endpoint=self.chain.rpc_url)

        try:
            remote_chain_id = web3.eth.chain_id
        except Exception as exc:
            raise RpcUnavailableError(
                "Failed to read chain id from RPC",
                endpoint=self.chain.rpc_url,
                details={"error": str(exc)},
            ) from exc

        if remote_chain_id != self.chain.chain_id:
            raise ConfigurationError(
                "RPC endpoint serves a different chain than configured",
                details={"expected": self.chain.chain_id, "actual": remote_chain_id},
            )

        self._contract = resolve_contract(self._contract_address, self.chain, web3)
        self._web3 = web3
        logger.info(
            "Connected to chain %s at %s (contract %s)",
            self.chain.chain_id,
            self.chain.rpc_url,
            self._contract.address,
        )

    def disconnect(self) -> None:
        self._web3 = None
        self._contract = None

    def is_connected(self) -> bool:
        return self._web3 is not None and self._contract is not None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def web3(self) -> Web3:
        if self._web3 is None:
            raise RpcUnavailableError(
                "Chain RPC provider not connected; call connect() first",
                endpoint=self.chain.rpc_url,
            )
        return self._web3

    @property
    def contract(self) -> ContractHandle:
        if self._contract is None:
            raise RpcUnavailableError(
                "Contract handle not available; call connect() first",
                endpoint=self.chain.rpc_url,
            )
        return self._contract

    # ------------------------------------------------------------------
    # Internal wiring
    # ------------------------------------------------------------------
    def _build_web3(self) -> Web3:
        request_kwargs: dict = {"timeout": self.engine.request_timeout}
        if self._service_credential:
            request_kwargs["headers"] = {SECRET_KEY_HEADER: self._service_credential}
        provider = HTTPProvider(
            self.chain.rpc_url,
            request_kwargs=request_kwargs,
            exception_retry_configuration=None,
        )
        return Web3(provider)


def is_transport_error(exc: BaseException) -> bool:
    """Return True when ``exc`` means the RPC endpoint could not be reached."""

    return isinstance(
        exc,
        requests.exceptions.ConnectionError | requests.exceptions.Timeout | ConnectionError,
    )
