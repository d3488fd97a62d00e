"""Mint → read token id → cross-chain transfer sequencing."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from eth_account.signers.local import LocalAccount

from .config import FeeSchedule, MintConfig
from .evm.calls import CallBuilder
from .evm.connections import ContractHandle
from .evm.queries import QueryEngine
from .evm.signatures import parse_signature
from .evm.transactions import SubmissionEngine
from .exceptions import ChainInteractionError, InvalidCallArgumentsError, as_handler_error
from .types import OrchestrationRequest, OrchestrationResult, Step, WorkflowState

logger = logging.getLogger(__name__)

MINT_SIGNATURE = parse_signature("function safeMint(address toAddress, string uri)")
TOKEN_QUERY_SIGNATURE = parse_signature(
    "function tokenByIndex(uint256 index) view returns (uint256)"
)
TRANSFER_SIGNATURE = parse_signature(
    "function transferCrossChain(uint256 tokenId, address receiver, address destination) payable"
)

_ALLOWED_TRANSITIONS: dict[WorkflowState, frozenset[WorkflowState]] = {
    WorkflowState.IDLE: frozenset({WorkflowState.MINT_PENDING, WorkflowState.TRANSFER_PENDING}),
    WorkflowState.MINT_PENDING: frozenset(
        {WorkflowState.MINT_CONFIRMED, WorkflowState.MINT_FAILED}
    ),
    WorkflowState.MINT_CONFIRMED: frozenset({WorkflowState.QUERY_PENDING}),
    WorkflowState.QUERY_PENDING: frozenset(
        {WorkflowState.QUERY_RESOLVED, WorkflowState.QUERY_FAILED}
    ),
    WorkflowState.QUERY_RESOLVED: frozenset({WorkflowState.TRANSFER_PENDING}),
    WorkflowState.TRANSFER_PENDING: frozenset(
        {WorkflowState.TRANSFER_CONFIRMED, WorkflowState.TRANSFER_FAILED}
    ),
}


@dataclass
class _Run:
    """Per-request progress; never shared between requests."""

    state: WorkflowState = WorkflowState.IDLE
    history: list[WorkflowState] = field(default_factory=lambda: [WorkflowState.IDLE])
    mint_tx: str | None = None

    def advance(self, target: WorkflowState) -> None:
        if target not in _ALLOWED_TRANSITIONS.get(self.state, frozenset()):
            raise RuntimeError(f"Illegal workflow transition {self.state.value} -> {target.value}")
        logger.info("Workflow %s -> %s", self.state.value, target.value)
        self.state = target
        self.history.append(target)

    def fail(self, target: WorkflowState, step: Step, exc: Exception) -> OrchestrationResult:
        self.advance(target)
        logger.error("%s step failed: %s", step.value, exc)
        return OrchestrationResult.failed(
            step, str(exc), mint_tx=self.mint_tx, states=tuple(self.history)
        )


class CrossChainTransferWorkflow:
    """Run the relay's on-chain steps in strict order for one request."""

    def __init__(
        self,
        contract: ContractHandle,
        account: LocalAccount,
        *,
        builder: CallBuilder,
        submitter: SubmissionEngine,
        querier: QueryEngine,
        fees: FeeSchedule,
        include_mint_step: bool = True,
        mint: MintConfig | None = None,
        token_query_index: int = 0,
    ) -> None:
        if include_mint_step and mint is None:
            raise ValueError("Mint configuration is required when the mint step is enabled")
        self._contract = contract
        self._account = account
        self._builder = builder
        self._submitter = submitter
        self._querier = querier
        self._fees = fees
        self._include_mint_step = include_mint_step
        self._mint = mint
        self._token_query_index = token_query_index

    def run(self, request: OrchestrationRequest) -> OrchestrationResult:
        """Execute the workflow; every outcome is returned, never raised."""

        run = _Run()
        try:
            return self._execute(run, request)
        except Exception as exc:
            logger.exception("Handler failed in state %s", run.state.value)
            error = as_handler_error(exc)
            return OrchestrationResult.failed(
                Step.HANDLER, error.message, mint_tx=run.mint_tx, states=tuple(run.history)
            )

    def _execute(self, run: _Run, request: OrchestrationRequest) -> OrchestrationResult:
        if self._include_mint_step:
            if request.token_id is not None:
                logger.warning(
                    "Ignoring caller tokenId %s; the token id is read after minting",
                    request.token_id,
                )

            run.advance(WorkflowState.MINT_PENDING)
            try:
                mint_tx = self._mint_token()
            except ChainInteractionError as exc:
                return run.fail(WorkflowState.MINT_FAILED, Step.MINT, exc)
            run.mint_tx = mint_tx
            run.advance(WorkflowState.MINT_CONFIRMED)

            run.advance(WorkflowState.QUERY_PENDING)
            try:
                token_id = self._read_token_id()
            except ChainInteractionError as exc:
                return run.fail(WorkflowState.QUERY_FAILED, Step.QUERY, exc)
            run.advance(WorkflowState.QUERY_RESOLVED)
        else:
            if request.token_id is None:
                raise InvalidCallArgumentsError(
                    "tokenId is required when the mint step is disabled", field="tokenId"
                )
            token_id = request.token_id

        run.advance(WorkflowState.TRANSFER_PENDING)
        try:
            transfer_tx = self._transfer(token_id, request)
        except ChainInteractionError as exc:
            return run.fail(WorkflowState.TRANSFER_FAILED, Step.TRANSFER, exc)
        run.advance(WorkflowState.TRANSFER_CONFIRMED)

        return OrchestrationResult.succeeded(
            transfer_tx,
            mint_tx=run.mint_tx,
            token_id=token_id,
            states=tuple(run.history),
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------
    def _mint_token(self) -> str:
        assert self._mint is not None
        logger.info("Preparing %s [1/2]", MINT_SIGNATURE.name)
        call = self._builder.build(
            self._contract,
            MINT_SIGNATURE,
            [self._mint.to_address, self._mint.token_uri],
        )
        logger.info("Sending %s and waiting for confirmation [1/2]", MINT_SIGNATURE.name)
        receipt = self._submitter.submit(call, self._account)
        logger.info("%s confirmed: %s", MINT_SIGNATURE.name, receipt.transaction_hash)
        return receipt.transaction_hash

    def _read_token_id(self) -> str:
        value = self._querier.query(
            self._contract, TOKEN_QUERY_SIGNATURE, [self._token_query_index]
        )
        token_id = str(value)
        logger.info("Resolved token id %s via %s", token_id, TOKEN_QUERY_SIGNATURE.name)
        return token_id

    def _transfer(self, token_id: str, request: OrchestrationRequest) -> str:
        fee = self._fees.fee_for(request.destination)
        logger.info(
            "Preparing %s [2/2] token=%s receiver=%s destination=%s fee=%s",
            TRANSFER_SIGNATURE.name,
            token_id,
            request.receiver,
            request.destination,
            fee,
        )
        call = self._builder.build(
            self._contract,
            TRANSFER_SIGNATURE,
            [token_id, request.receiver, request.destination],
            native_value=fee,
        )
        logger.info("Sending %s and waiting for confirmation [2/2]", TRANSFER_SIGNATURE.name)
        receipt = self._submitter.submit(call, self._account)
        logger.info("%s confirmed: %s", TRANSFER_SIGNATURE.name, receipt.transaction_hash)
        return receipt.transaction_hash
