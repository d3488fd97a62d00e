"""Parsing of human-readable contract function signatures."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

from eth_abi import is_encodable_type
from web3 import Web3

from ..exceptions import InvalidCallArgumentsError

_SIGNATURE_RE = re.compile(
    r"^\s*(?:function\s+)?(?P<name>[A-Za-z_$][A-Za-z0-9_$]*)\s*"
    r"\((?P<params>[^()]*)\)\s*(?P<tail>.*?)\s*$"
)
_RETURNS_RE = re.compile(r"\breturns\s*\((?P<outputs>[^()]*)\)")

_MUTABILITIES = ("pure", "view", "payable", "nonpayable")
_IGNORED_MODIFIERS = ("external", "public")
_TYPE_ALIASES = {"uint": "uint256", "int": "int256"}


@dataclass(frozen=True)
class FunctionSignature:
    """Parsed function prototype: name, parameter types and mutability."""

    name: str
    inputs: tuple[str, ...]
    outputs: tuple[str, ...] = ()
    mutability: str = "nonpayable"

    @property
    def canonical(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"

    @property
    def selector(self) -> bytes:
        return bytes(Web3.keccak(text=self.canonical)[:4])

    @property
    def is_payable(self) -> bool:
        return self.mutability == "payable"

    @property
    def is_read_only(self) -> bool:
        return self.mutability in ("view", "pure")

    def __str__(self) -> str:
        return self.canonical


def parse_signature(signature: str | FunctionSignature) -> FunctionSignature:
    """Parse ``signature`` into a :class:`FunctionSignature`.

    Accepts the canonical form ``transfer(address,uint256)`` as well as the
    declaration form ``function balanceOf(address owner) view returns (uint256)``.
    Tuple (struct) parameters are not supported.
    """

    if isinstance(signature, FunctionSignature):
        return signature
    if not isinstance(signature, str):
        raise InvalidCallArgumentsError(
            "Function signature must be a string", field="signature", value=signature
        )
    return _parse_cached(signature)


@lru_cache(maxsize=128)
def _parse_cached(signature: str) -> FunctionSignature:
    match = _SIGNATURE_RE.match(signature)
    if match is None:
        raise InvalidCallArgumentsError(
            "Unable to parse function signature", field="signature", value=signature
        )

    tail = match.group("tail")
    outputs: tuple[str, ...] = ()
    returns = _RETURNS_RE.search(tail)
    if returns is not None:
        outputs = _parse_params(returns.group("outputs"), signature)
        tail = tail[: returns.start()] + tail[returns.end() :]

    mutability = "nonpayable"
    for token in tail.split():
        if token in _MUTABILITIES:
            mutability = token
        elif token not in _IGNORED_MODIFIERS:
            raise InvalidCallArgumentsError(
                f"Unexpected modifier '{token}' in function signature",
                field="signature",
                value=signature,
            )

    return FunctionSignature(
        name=match.group("name"),
        inputs=_parse_params(match.group("params"), signature),
        outputs=outputs,
        mutability=mutability,
    )


def _parse_params(params: str, signature: str) -> tuple[str, ...]:
    if not params.strip():
        return ()

    types: list[str] = []
    for raw in params.split(","):
        parts = raw.split()
        if not parts:
            raise InvalidCallArgumentsError(
                "Empty parameter in function signature", field="signature", value=signature
            )
        abi_type = _TYPE_ALIASES.get(parts[0], parts[0])
        if not is_encodable_type(abi_type):
            raise InvalidCallArgumentsError(
                f"Unsupported ABI type '{parts[0]}'", field="signature", value=signature
            )
        types.append(abi_type)
    return tuple(types)
