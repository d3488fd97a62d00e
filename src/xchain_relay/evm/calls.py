"""Encoding of contract calls into unsigned, submission-ready payloads."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from eth_abi import encode as abi_encode
from eth_abi import is_encodable
from eth_typing import HexStr
from hexbytes import HexBytes
from web3 import Web3
from web3.types import ChecksumAddress

from ..exceptions import InvalidCallArgumentsError
from .connections import ContractHandle
from .signatures import FunctionSignature, parse_signature

logger = logging.getLogger(__name__)

_ARRAY_RE = re.compile(r"^(?P<base>.+)\[(?P<size>\d*)\]$")


@dataclass(frozen=True)
class PreparedCall:
    """An unsigned, fully-encoded contract call."""

    contract: ContractHandle
    signature: FunctionSignature
    args: tuple[Any, ...]
    data: bytes
    value: int = 0

    @property
    def to(self) -> ChecksumAddress:
        return self.contract.address

    def as_call_params(self) -> dict[str, Any]:
        """Return the ``eth_call``/transaction fields shared by reads and writes."""

        params: dict[str, Any] = {"to": self.to, "data": HexBytes(self.data)}
        if self.value:
            params["value"] = self.value
        return params


class CallBuilder:
    """Build :class:`PreparedCall` objects from signatures and ordered arguments."""

    def build(
        self,
        contract: ContractHandle,
        signature: str | FunctionSignature,
        args: Sequence[Any],
        native_value: int | None = None,
    ) -> PreparedCall:
        parsed = parse_signature(signature)

        if isinstance(args, str | bytes) or not isinstance(args, Sequence):
            raise InvalidCallArgumentsError(
                "Call arguments must be an ordered sequence", field="args", value=args
            )
        if len(args) != len(parsed.inputs):
            raise InvalidCallArgumentsError(
                f"{parsed.canonical} expects {len(parsed.inputs)} arguments, got {len(args)}",
                field="args",
                value=list(args),
            )

        values = tuple(
            coerce_argument(abi_type, arg, position=index)
            for index, (abi_type, arg) in enumerate(zip(parsed.inputs, args))
        )
        value = _validate_native_value(parsed, native_value)

        data = parsed.selector + abi_encode(list(parsed.inputs), list(values))
        logger.debug("Prepared %s for %s (value=%s)", parsed.canonical, contract.address, value)
        return PreparedCall(
            contract=contract,
            signature=parsed,
            args=values,
            data=data,
            value=value,
        )


def coerce_argument(abi_type: str, value: Any, *, position: int = 0) -> Any:
    """Convert a caller-supplied value into the Python type eth_abi expects."""

    try:
        coerced = _coerce(abi_type, value)
    except (TypeError, ValueError) as exc:
        raise InvalidCallArgumentsError(
            f"Argument {position} is not a valid {abi_type}",
            field=f"args[{position}]",
            value=value,
            details={"error": str(exc)},
        ) from exc

    if not is_encodable(abi_type, coerced):
        raise InvalidCallArgumentsError(
            f"Argument {position} is out of range for {abi_type}",
            field=f"args[{position}]",
            value=value,
        )
    return coerced


def _coerce(abi_type: str, value: Any) -> Any:
    array = _ARRAY_RE.match(abi_type)
    if array is not None:
        if isinstance(value, str | bytes) or not isinstance(value, Sequence):
            raise TypeError(f"expected a sequence for {abi_type}")
        size = array.group("size")
        if size and len(value) != int(size):
            raise ValueError(f"expected {size} items, got {len(value)}")
        return [_coerce(array.group("base"), item) for item in value]

    if abi_type.startswith(("uint", "int")):
        return _to_int(value)
    if abi_type == "address":
        return _to_address(value)
    if abi_type == "bool":
        return _to_bool(value)
    if abi_type == "string":
        if not isinstance(value, str):
            raise TypeError("expected a string")
        return value
    if abi_type.startswith("bytes"):
        return _to_bytes(value)
    return value


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("booleans are not integers")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.lower().startswith(("0x", "-0x")):
            return int(text, 16)
        return int(text, 10)
    raise TypeError(f"unsupported integer value of type {type(value).__name__}")


def _to_address(value: Any) -> ChecksumAddress:
    if not isinstance(value, str):
        raise TypeError("expected a hex address string")
    if not Web3.is_address(value):
        raise ValueError(f"'{value}' is not a valid EVM address")
    return Web3.to_checksum_address(value)


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise TypeError("expected a boolean")


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, bytes | bytearray):
        return bytes(value)
    if isinstance(value, str) and value.lower().startswith("0x"):
        return Web3.to_bytes(hexstr=HexStr(value))
    raise TypeError("expected bytes or a 0x-prefixed hex string")


def _validate_native_value(signature: FunctionSignature, native_value: int | None) -> int:
    if native_value is None:
        return 0
    if isinstance(native_value, bool) or not isinstance(native_value, int):
        raise InvalidCallArgumentsError(
            "Native value must be an integer amount in the smallest unit",
            field="native_value",
            value=native_value,
        )
    if native_value < 0:
        raise InvalidCallArgumentsError(
            "Native value cannot be negative", field="native_value", value=native_value
        )
    if native_value and not signature.is_payable:
        raise InvalidCallArgumentsError(
            f"{signature.canonical} is not payable", field="native_value", value=native_value
        )
    return native_value
