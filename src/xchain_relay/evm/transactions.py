"""Transaction submission and confirmation for the relay contract."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Any

from eth_account.signers.local import LocalAccount
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted

from ..exceptions import (
    ConfirmationTimeoutError,
    RpcUnavailableError,
    SubmissionRejectedError,
)
from ..types import Receipt
from ..utils import serialise_receipt
from .calls import PreparedCall
from .config import EngineConfig
from .connections import is_transport_error

logger = logging.getLogger(__name__)


class NonceTracker:
    """Hand out strictly increasing nonces per (chain, account).

    Callers must hold the engine lock between :meth:`reserve` and
    :meth:`commit`.
    """

    def __init__(self) -> None:
        self._last_used: dict[tuple[int, str], int] = {}

    def reserve(self, web3: Web3, chain_id: int, address: str) -> int:
        pending = web3.eth.get_transaction_count(address, "pending")
        last = self._last_used.get((chain_id, address))
        if last is not None and last + 1 > pending:
            return last + 1
        return pending

    def commit(self, chain_id: int, address: str, nonce: int) -> None:
        self._last_used[(chain_id, address)] = nonce

    def reset(self, chain_id: int, address: str) -> None:
        self._last_used.pop((chain_id, address), None)


class SubmissionEngine:
    """Sign, broadcast and wait for confirmation of prepared calls."""

    def __init__(
        self,
        config: EngineConfig,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._config = config
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._nonces = NonceTracker()

    def submit(self, call: PreparedCall, account: LocalAccount) -> Receipt:
        """Submit ``call`` signed by ``account`` and block until it is confirmed."""

        web3 = call.contract.web3
        endpoint = call.contract.endpoint
        action = call.signature.name

        with self._lock:
            tx_hash = self._sign_and_broadcast(web3, call, account)

        tx_hex = tx_hash.to_0x_hex()
        logger.info("Transaction sent for action=%s hash=%s", action, tx_hex)

        try:
            receipt = self._wait_for_receipt(web3, tx_hash, endpoint)
        except ConfirmationTimeoutError:
            # The transaction may have been dropped; fall back to the node's pending count.
            with self._lock:
                self._nonces.reset(call.contract.chain.chain_id, account.address)
            raise
        block_number = int(receipt["blockNumber"])
        serialised = serialise_receipt(receipt)
        if int(receipt.get("status", 0)) != 1:
            logger.error("Transaction reverted for action=%s hash=%s", action, tx_hex)
            raise SubmissionRejectedError(
                f"Transaction {tx_hex} reverted on-chain",
                endpoint=endpoint,
                tx_hash=tx_hex,
                details={"receipt": serialised},
            )

        confirmations = self._wait_for_depth(web3, tx_hex, block_number, endpoint)

        logger.info(
            "Transaction confirmed for action=%s hash=%s block=%s",
            action,
            tx_hex,
            block_number,
        )
        block_hash = receipt.get("blockHash")
        return Receipt(
            transaction_hash=tx_hex,
            success=True,
            block_number=block_number,
            block_hash=HexBytes(block_hash).to_0x_hex() if block_hash is not None else None,
            gas_used=receipt.get("gasUsed"),
            confirmations=confirmations,
            raw=serialised,
        )

    # ------------------------------------------------------------------
    # Broadcast
    # ------------------------------------------------------------------
    def _sign_and_broadcast(
        self, web3: Web3, call: PreparedCall, account: LocalAccount
    ) -> HexBytes:
        chain_id = call.contract.chain.chain_id
        endpoint = call.contract.endpoint
        address = account.address

        try:
            nonce = self._nonces.reserve(web3, chain_id, address)
            tx: dict[str, Any] = {
                "from": address,
                "to": call.to,
                "data": HexBytes(call.data),
                "value": call.value,
                "chainId": chain_id,
                "nonce": nonce,
            }
            tx["gas"] = web3.eth.estimate_gas(tx)  # type: ignore[arg-type]
            tx["gasPrice"] = web3.eth.gas_price
        except ContractLogicError as exc:
            raise SubmissionRejectedError(
                f"Transaction simulation reverted for {call.signature.canonical}",
                endpoint=endpoint,
                details={"error": str(exc), "args": [str(arg) for arg in call.args]},
            ) from exc
        except Exception as exc:
            raise self._broadcast_failure(exc, call, "Failed to prepare transaction") from exc

        try:
            signed = account.sign_transaction(tx)
            tx_hash = web3.eth.send_raw_transaction(signed.raw_transaction)
        except Exception as exc:
            # A nonce conflict means the local view is stale; resync on next use.
            self._nonces.reset(chain_id, address)
            raise self._broadcast_failure(exc, call, "Failed to submit transaction") from exc

        self._nonces.commit(chain_id, address, nonce)
        return HexBytes(tx_hash)

    def _broadcast_failure(
        self, exc: Exception, call: PreparedCall, message: str
    ) -> SubmissionRejectedError | RpcUnavailableError:
        endpoint = call.contract.endpoint
        details = {"error": str(exc), "function": call.signature.canonical}
        if is_transport_error(exc):
            return RpcUnavailableError(
                f"{message}: chain RPC unreachable", endpoint=endpoint, details=details
            )
        return SubmissionRejectedError(f"{message}: {exc}", endpoint=endpoint, details=details)

    # ------------------------------------------------------------------
    # Confirmation
    # ------------------------------------------------------------------
    def _wait_for_receipt(self, web3: Web3, tx_hash: HexBytes, endpoint: str) -> Any:
        tx_hex = tx_hash.to_0x_hex()
        try:
            return web3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=self._config.receipt_timeout,
                poll_latency=self._config.receipt_poll_interval,
            )
        except TimeExhausted as exc:
            raise ConfirmationTimeoutError(
                f"Transaction {tx_hex} not included within {self._config.receipt_timeout}s",
                endpoint=endpoint,
                tx_hash=tx_hex,
            ) from exc
        except Exception as exc:
            details = {"tx_hash": tx_hex, "error": str(exc)}
            if is_transport_error(exc):
                raise RpcUnavailableError(
                    f"Lost connection while waiting for {tx_hex}",
                    endpoint=endpoint,
                    details=details,
                ) from exc
            raise RpcUnavailableError(
                f"Receipt lookup for {tx_hex} failed: {exc}",
                endpoint=endpoint,
                details=details,
            ) from exc

    def _wait_for_depth(self, web3: Web3, tx_hex: str, block_number: int, endpoint: str) -> int:
        required = self._config.confirmations
        if required == 1:
            return 1

        target = block_number + required - 1
        deadline = self._clock() + self._config.receipt_timeout

        while True:
            head = self._read_head(web3, tx_hex, endpoint)
            if head >= target:
                return head - block_number + 1
            if self._clock() >= deadline:
                raise ConfirmationTimeoutError(
                    f"Transaction {tx_hex} did not reach {required} confirmations",
                    endpoint=endpoint,
                    tx_hash=tx_hex,
                    details={"block_number": block_number, "head": head},
                )
            self._sleep(self._config.receipt_poll_interval)

    @staticmethod
    def _read_head(web3: Web3, tx_hex: str, endpoint: str) -> int:
        try:
            return int(web3.eth.block_number)
        except Exception as exc:
            message = (
                f"Lost connection while confirming {tx_hex}"
                if is_transport_error(exc)
                else f"Block height lookup failed while confirming {tx_hex}: {exc}"
            )
            raise RpcUnavailableError(
                message,
                endpoint=endpoint,
                details={"tx_hash": tx_hex, "error": str(exc)},
            ) from exc
