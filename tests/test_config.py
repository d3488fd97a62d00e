"""Tests for xchain_relay.config."""

from __future__ import annotations

import pytest
from web3 import Web3

from xchain_relay.config import RelayConfig, load_config
from xchain_relay.evm.config import ZETACHAIN_ATHENS
from xchain_relay.exceptions import ConfigurationError, ConfigurationMissingError

CONTRACT = "0x" + "ab" * 20
TO_ADDRESS = "0x" + "cd" * 20


def _env(**overrides: str) -> dict[str, str]:
    env = {
        "WALLET_PRIVATE_KEY": "0x" + "01" * 32,
        "THIRDWEB_SECRET_KEY": "secret",
        "CONTRACT_ADDRESS": CONTRACT,
        "TO_ADDRESS": TO_ADDRESS,
        "TOKEN_URI": "ipfs://token",
    }
    env.update(overrides)
    return env


def test_load_config_defaults() -> None:
    config = load_config(_env())

    assert config.contract_address == Web3.to_checksum_address(CONTRACT)
    assert config.chain == ZETACHAIN_ATHENS
    assert config.include_mint_step
    assert config.mint is not None
    assert config.mint.to_address == Web3.to_checksum_address(TO_ADDRESS)
    assert config.mint.token_uri == "ipfs://token"
    assert config.fees.fee_for("anything") == 10**17
    assert config.token_query_index == 0
    assert config.engine.confirmations == 1


def test_load_config_reports_every_missing_variable() -> None:
    with pytest.raises(ConfigurationMissingError) as excinfo:
        load_config({"CONTRACT_ADDRESS": CONTRACT})

    assert excinfo.value.missing == [
        "WALLET_PRIVATE_KEY",
        "THIRDWEB_SECRET_KEY",
        "TO_ADDRESS",
        "TOKEN_URI",
    ]
    assert str(excinfo.value).startswith("Missing env vars: WALLET_PRIVATE_KEY")


def test_transfer_only_variant_does_not_need_mint_settings() -> None:
    env = _env(INCLUDE_MINT_STEP="false")
    del env["TO_ADDRESS"]
    del env["TOKEN_URI"]

    config = load_config(env)

    assert not config.include_mint_step
    assert config.mint is None


def test_fee_table_and_overrides() -> None:
    config = load_config(
        _env(
            TRANSFER_FEE="0.25",
            TRANSFER_FEES="0xDEST=0.5, 7000 = 1",
            CHAIN_ID="7000",
            RPC_URL="https://rpc.example",
            CONFIRMATIONS="3",
            RECEIPT_TIMEOUT="30",
            TOKEN_QUERY_INDEX="2",
        )
    )

    assert config.fees.fee_for("unknown") == 25 * 10**16
    assert config.fees.fee_for("0xdest") == 5 * 10**17
    assert config.fees.fee_for("7000") == 10**18
    assert config.chain.chain_id == 7000
    assert config.chain.rpc_url == "https://rpc.example"
    assert config.engine.confirmations == 3
    assert config.engine.receipt_timeout == 30.0
    assert config.token_query_index == 2


@pytest.mark.parametrize(
    "overrides",
    [
        {"CONTRACT_ADDRESS": "0x1234"},
        {"TO_ADDRESS": "nope"},
        {"INCLUDE_MINT_STEP": "maybe"},
        {"TRANSFER_FEE": "-1"},
        {"TRANSFER_FEES": "7000"},
        {"CONFIRMATIONS": "zero"},
        {"CONFIRMATIONS": "0"},
        {"CHAIN_ID": "-1"},
    ],
)
def test_invalid_values_raise_configuration_error(overrides: dict[str, str]) -> None:
    with pytest.raises(ConfigurationError):
        load_config(_env(**overrides))


def test_relay_config_requires_mint_settings_when_enabled() -> None:
    with pytest.raises(ConfigurationMissingError) as excinfo:
        RelayConfig(
            private_key="0x01",
            service_credential="secret",
            contract_address=Web3.to_checksum_address(CONTRACT),
        )

    assert excinfo.value.missing == ["TO_ADDRESS", "TOKEN_URI"]


def test_relay_config_repr_hides_secrets() -> None:
    config = load_config(_env())

    assert "secret" not in repr(config)
    assert config.private_key not in repr(config)
