"""Tests for xchain_relay.evm.connections."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, cast

import pytest
from web3 import Web3

from xchain_relay.evm.config import ZETACHAIN_ATHENS, EngineConfig
from xchain_relay.evm.connections import Web3Connections, resolve_contract
from xchain_relay.exceptions import ConfigurationError, RpcUnavailableError

CONTRACT = "0x" + "ab" * 20


class DummyWeb3:
    def __init__(self, *, connected: bool = True, chain_id: int = 7001) -> None:
        self._connected = connected
        self.eth = SimpleNamespace(chain_id=chain_id)

    def is_connected(self) -> bool:
        return self._connected


def _connections(monkeypatch: pytest.MonkeyPatch, web3: Any) -> Web3Connections:
    connections = Web3Connections(
        ZETACHAIN_ATHENS,
        CONTRACT,
        engine=EngineConfig(),
        service_credential="secret",
    )
    monkeypatch.setattr(connections, "_build_web3", lambda: cast(Web3, web3))
    return connections


def test_resolve_contract_checksums_address() -> None:
    handle = resolve_contract(CONTRACT, ZETACHAIN_ATHENS, cast(Web3, SimpleNamespace()))

    assert handle.address == Web3.to_checksum_address(CONTRACT)
    assert handle.endpoint == ZETACHAIN_ATHENS.rpc_url


def test_resolve_contract_rejects_invalid_address() -> None:
    with pytest.raises(ConfigurationError):
        resolve_contract("0x1234", ZETACHAIN_ATHENS, cast(Web3, SimpleNamespace()))


def test_connect_binds_contract(monkeypatch: pytest.MonkeyPatch) -> None:
    web3 = DummyWeb3()
    connections = _connections(monkeypatch, web3)

    connections.connect()

    assert connections.is_connected()
    assert connections.web3 is web3
    assert connections.contract.address == Web3.to_checksum_address(CONTRACT)
    assert connections.contract.web3 is web3

    connections.disconnect()
    assert not connections.is_connected()


def test_connect_fails_when_rpc_unreachable(monkeypatch: pytest.MonkeyPatch) -> None:
    connections = _connections(monkeypatch, DummyWeb3(connected=False))

    with pytest.raises(RpcUnavailableError):
        connections.connect()
    assert not connections.is_connected()


def test_connect_rejects_wrong_chain(monkeypatch: pytest.MonkeyPatch) -> None:
    connections = _connections(monkeypatch, DummyWeb3(chain_id=1))

    with pytest.raises(ConfigurationError) as excinfo:
        connections.connect()

    assert excinfo.value.details == {"expected": 7001, "actual": 1}


def test_accessors_require_connection() -> None:
    connections = Web3Connections(ZETACHAIN_ATHENS, CONTRACT, engine=EngineConfig())

    with pytest.raises(RpcUnavailableError):
        _ = connections.web3
    with pytest.raises(RpcUnavailableError):
        _ = connections.contract


def test_provider_sends_service_credential_without_retries() -> None:
    connections = Web3Connections(
        ZETACHAIN_ATHENS,
        CONTRACT,
        engine=EngineConfig(request_timeout=3.0),
        service_credential="secret",
    )

    provider = connections._build_web3().provider

    assert provider.endpoint_uri == ZETACHAIN_ATHENS.rpc_url
    request_kwargs = dict(provider.get_request_kwargs())
    assert request_kwargs["headers"]["x-secret-key"] == "secret"
    assert request_kwargs["timeout"] == 3.0
    assert provider.exception_retry_configuration is None
