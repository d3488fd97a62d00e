"""Type definitions and data models for the cross-chain relay."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .exceptions import InvalidCallArgumentsError


class Step(str, Enum):
    """Workflow stage reported in failure responses."""

    MINT = "mint"
    QUERY = "query"
    TRANSFER = "transfer"
    HANDLER = "handler"


class WorkflowState(str, Enum):
    """States of the mint → query → transfer sequence."""

    IDLE = "idle"
    MINT_PENDING = "mint_pending"
    MINT_CONFIRMED = "mint_confirmed"
    QUERY_PENDING = "query_pending"
    QUERY_RESOLVED = "query_resolved"
    TRANSFER_PENDING = "transfer_pending"
    TRANSFER_CONFIRMED = "transfer_confirmed"
    MINT_FAILED = "mint_failed"
    QUERY_FAILED = "query_failed"
    TRANSFER_FAILED = "transfer_failed"


@dataclass(frozen=True)
class Receipt:
    """Confirmed inclusion of a submitted transaction."""

    transaction_hash: str
    success: bool
    block_number: int
    block_hash: str | None = None
    gas_used: int | None = None
    confirmations: int = 1
    raw: dict[str, Any] | None = None


@dataclass(frozen=True)
class OrchestrationRequest:
    """Caller-supplied parameters of one cross-chain transfer."""

    receiver: str
    destination: str
    token_id: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "OrchestrationRequest":
        """Validate a parsed JSON body and build a request from it."""

        if not isinstance(payload, Mapping):
            raise InvalidCallArgumentsError("Request body must be a JSON object", field="body")

        receiver = _required_text(payload, "receiver")
        destination = _required_text(payload, "destination")

        token_id = payload.get("tokenId")
        if token_id is None or token_id == "":
            return cls(receiver=receiver, destination=destination)

        if isinstance(token_id, bool) or not isinstance(token_id, int | str):
            raise InvalidCallArgumentsError(
                "tokenId must be an integer string", field="tokenId", value=token_id
            )
        token_text = str(token_id).strip()
        if not (token_text.isascii() and token_text.isdigit()):
            raise InvalidCallArgumentsError(
                "tokenId must be a non-negative integer", field="tokenId", value=token_id
            )
        return cls(receiver=receiver, destination=destination, token_id=token_text)


def _required_text(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidCallArgumentsError(f"Missing required field '{key}'", field=key)
    if not isinstance(value, str):
        raise InvalidCallArgumentsError(f"Field '{key}' must be a string", field=key, value=value)
    return value.strip()


@dataclass(frozen=True)
class OrchestrationResult:
    """Outcome of one workflow run."""

    success: bool
    transfer_tx: str | None = None
    step: Step | None = None
    error: str | None = None
    mint_tx: str | None = None
    token_id: str | None = None
    states: tuple[WorkflowState, ...] = ()

    @classmethod
    def succeeded(
        cls,
        transfer_tx: str,
        *,
        mint_tx: str | None = None,
        token_id: str | None = None,
        states: tuple[WorkflowState, ...] = (),
    ) -> "OrchestrationResult":
        if not transfer_tx:
            raise ValueError("A successful result requires a transfer transaction hash")
        return cls(
            success=True,
            transfer_tx=transfer_tx,
            mint_tx=mint_tx,
            token_id=token_id,
            states=states,
        )

    @classmethod
    def failed(
        cls,
        step: Step,
        error: str,
        *,
        mint_tx: str | None = None,
        states: tuple[WorkflowState, ...] = (),
    ) -> "OrchestrationResult":
        return cls(success=False, step=Step(step), error=error, mint_tx=mint_tx, states=states)

    def to_response(self) -> dict[str, Any]:
        """Return the JSON body handed back to the caller."""

        if self.success:
            return {"success": True, "transferTx": self.transfer_tx}

        response: dict[str, Any] = {
            "success": False,
            "step": Step(self.step).value if self.step is not None else Step.HANDLER.value,
            "error": self.error or "",
        }
        if self.mint_tx:
            response["mintTx"] = self.mint_tx
        return response
