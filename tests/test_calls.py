"""Tests for xchain_relay.evm.calls."""

from __future__ import annotations

from types import SimpleNamespace
from typing import cast

import pytest
from eth_abi import encode as abi_encode
from web3 import Web3

from xchain_relay.evm.calls import CallBuilder, coerce_argument
from xchain_relay.evm.config import ZETACHAIN_ATHENS
from xchain_relay.evm.connections import ContractHandle
from xchain_relay.evm.signatures import parse_signature
from xchain_relay.exceptions import InvalidCallArgumentsError

CONTRACT = Web3.to_checksum_address("0x" + "11" * 20)
RECEIVER = "0x" + "aa" * 20
DESTINATION = "0x" + "bb" * 20
TRANSFER = "function transferCrossChain(uint256 tokenId, address receiver, address destination) payable"


def _handle() -> ContractHandle:
    return ContractHandle(address=CONTRACT, chain=ZETACHAIN_ATHENS, web3=cast(Web3, SimpleNamespace()))


def test_build_encodes_selector_and_arguments() -> None:
    call = CallBuilder().build(_handle(), TRANSFER, ["42", RECEIVER, DESTINATION], native_value=10**17)

    expected_args = (42, Web3.to_checksum_address(RECEIVER), Web3.to_checksum_address(DESTINATION))
    selector = parse_signature("transferCrossChain(uint256,address,address)").selector

    assert call.to == CONTRACT
    assert call.signature.name == "transferCrossChain"
    assert call.args == expected_args
    assert call.value == 10**17
    assert call.data == selector + abi_encode(["uint256", "address", "address"], list(expected_args))


def test_build_call_params_omit_zero_value() -> None:
    call = CallBuilder().build(
        _handle(), "function safeMint(address toAddress, string uri)", [RECEIVER, "ipfs://meta"]
    )

    params = call.as_call_params()

    assert params["to"] == CONTRACT
    assert "value" not in params
    assert bytes(params["data"]) == call.data


def test_build_rejects_argument_count_mismatch() -> None:
    with pytest.raises(InvalidCallArgumentsError) as excinfo:
        CallBuilder().build(_handle(), TRANSFER, ["42", RECEIVER])

    assert excinfo.value.field == "args"


def test_build_rejects_non_address_destination() -> None:
    with pytest.raises(InvalidCallArgumentsError) as excinfo:
        CallBuilder().build(_handle(), TRANSFER, ["42", RECEIVER, "7000"])

    assert excinfo.value.field == "args[2]"
    assert excinfo.value.value == "7000"


def test_build_rejects_value_on_non_payable_signature() -> None:
    with pytest.raises(InvalidCallArgumentsError) as excinfo:
        CallBuilder().build(
            _handle(),
            "safeMint(address,string)",
            [RECEIVER, "ipfs://meta"],
            native_value=1,
        )

    assert excinfo.value.field == "native_value"


def test_build_accepts_zero_value_on_non_payable_signature() -> None:
    call = CallBuilder().build(_handle(), "safeMint(address,string)", [RECEIVER, "uri"], native_value=0)

    assert call.value == 0


@pytest.mark.parametrize("value", [-1, 1.5, True, "100"])
def test_build_rejects_invalid_native_values(value: object) -> None:
    with pytest.raises(InvalidCallArgumentsError):
        CallBuilder().build(_handle(), TRANSFER, ["1", RECEIVER, DESTINATION], native_value=value)  # type: ignore[arg-type]


def test_build_rejects_plain_string_as_argument_list() -> None:
    with pytest.raises(InvalidCallArgumentsError):
        CallBuilder().build(_handle(), "foo(string)", "abc")  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("abi_type", "raw", "expected"),
    [
        ("uint256", "42", 42),
        ("uint256", "0x2a", 42),
        ("int256", "-5", -5),
        ("bool", "true", True),
        ("bytes32", "0x" + "00" * 32, bytes(32)),
        ("uint256[]", ["1", 2], [1, 2]),
    ],
)
def test_coerce_argument_converts_caller_values(abi_type: str, raw: object, expected: object) -> None:
    assert coerce_argument(abi_type, raw) == expected


@pytest.mark.parametrize(
    ("abi_type", "raw"),
    [
        ("uint256", "-1"),
        ("uint8", 256),
        ("uint256", "twelve"),
        ("uint256", True),
        ("string", 12),
        ("uint256[2]", ["1"]),
    ],
)
def test_coerce_argument_rejects_invalid_values(abi_type: str, raw: object) -> None:
    with pytest.raises(InvalidCallArgumentsError):
        coerce_argument(abi_type, raw)
