"""Read-only contract calls."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from eth_abi import decode as abi_decode
from web3.exceptions import ContractLogicError
from web3.types import BlockIdentifier

from ..exceptions import InvalidCallArgumentsError, QueryRevertedError, RpcUnavailableError
from .calls import CallBuilder
from .connections import ContractHandle, is_transport_error
from .signatures import FunctionSignature, parse_signature

logger = logging.getLogger(__name__)


class QueryEngine:
    """Execute ``eth_call`` against current chain state and decode the result."""

    def __init__(self, builder: CallBuilder | None = None) -> None:
        self._builder = builder or CallBuilder()

    def query(
        self,
        contract: ContractHandle,
        signature: str | FunctionSignature,
        args: Sequence[Any],
        block_identifier: BlockIdentifier = "latest",
    ) -> Any:
        parsed = parse_signature(signature)
        if not parsed.is_read_only:
            raise InvalidCallArgumentsError(
                f"{parsed.canonical} is not declared view or pure",
                field="signature",
                value=str(signature),
            )
        call =self._builder.build(contract, parsed, args)
        endpoint = contract.endpoint

        try:
            raw = contract.web3.eth.call(call.as_call_params(), block_identifier)  # type: ignore[arg-type]
        except ContractLogicError as exc:
            raise QueryRevertedError(
                f"{parsed.canonical} reverted",
                endpoint=endpoint,
                details={"error": str(exc), "args": list(call.args)},
            ) from exc
        except Exception as exc:
            if is_transport_error(exc):
                raise RpcUnavailableError(
                    "Chain RPC unreachable for read call",
                    endpoint=endpoint,
                    details={"function": parsed.canonical, "error": str(exc)},
                ) from exc
            if "revert" in str(exc).lower():
                raise QueryRevertedError(
                    f"{parsed.canonical} reverted",
                    endpoint=endpoint,
                    details={"error": str(exc), "args": list(call.args)},
                ) from exc
            raise RpcUnavailableError(
                f"Read call {parsed.canonical} failed",
                endpoint=endpoint,
                details={"error": str(exc)},
            ) from exc

        if not parsed.outputs:
            return bytes(raw)

        if not raw:
            raise QueryRevertedError(
                f"{parsed.canonical} returned no data; is {contract.address} a contract?",
                endpoint=endpoint,
            )

        try:
            decoded = abi_decode(list(parsed.outputs), bytes(raw))
        except Exception as exc:
            raise QueryRevertedError(
                f"Failed to decode {parsed.canonical} response",
                endpoint=endpoint,
                details={"error": str(exc)},
            ) from exc

        logger.debug("Read %s -> %s", parsed.canonical, decoded)
        if len(decoded) == 1:
            return decoded[0]
        return tuple(decoded)
