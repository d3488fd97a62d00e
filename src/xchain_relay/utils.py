"""Utility functions for the cross-chain relay."""

from collections.abc import Mapping, Sequence
from decimal import Decimal, InvalidOperation
from typing import Any

from hexbytes import HexBytes

from .exceptions import ConfigurationError


def serialise_receipt(receipt: Any) -> Any:
    """Serialise web3 receipt objects into JSON-friendly structures."""
    if receipt is None:
        return None
    if isinstance(receipt, Mapping):
        return {key: serialise_receipt(value) for key, value in receipt.items()}
    if isinstance(receipt, Sequence) and not isinstance(
        receipt, str | bytes | bytearray | HexBytes
    ):
        return [serialise_receipt(item) for item in receipt]
    if isinstance(receipt, bytes | bytearray | HexBytes):
        return HexBytes(receipt).to_0x_hex()
    return receipt


def to_base_units(amount: str | Decimal | int | float, decimals: int = 18) -> int:
    """Convert a whole-currency amount into the chain's smallest unit."""
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation as exc:
        raise ConfigurationError(
            f"Invalid native amount: {amount!r}", details={"value": amount}
        ) from exc

    if value < 0:
        raise ConfigurationError("Native amount cannot be negative", details={"value": amount})

    scaled = value * (Decimal(10) ** decimals)
    if scaled != scaled.to_integral_value():
        raise ConfigurationError(
            f"Native amount {amount} has more than {decimals} decimals",
            details={"value": amount},
        )
    return int(scaled)


def parse_fee_table(raw: str, decimals: int = 18) -> dict[str, int]:
    """Parse ``dest=amount,dest=amount`` into smallest-unit fees keyed by destination."""
    table: dict[str, int] = {}
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        destination, sep, amount = entry.partition("=")
        if not sep or not destination.strip() or not amount.strip():
            raise ConfigurationError(
                f"Malformed fee entry '{entry}', expected destination=amount",
                details={"entry": entry},
            )
        table[normalise_destination(destination)] = to_base_units(amount, decimals)
    return table


def normalise_destination(destination: str) -> str:
    """Return the lookup key used for per-destination settings."""
    return destination.strip().lower()
