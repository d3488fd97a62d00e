"""Request-level entry point wrapping the transfer workflow."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any

from .config import RelayConfig
from .evm.accounts import derive_signing_account
from .evm.calls import CallBuilder
from .evm.connections import Web3Connections
from .evm.queries import QueryEngine
from .evm.transactions import SubmissionEngine
from .exceptions import as_handler_error
from .types import OrchestrationRequest, OrchestrationResult, Step
from .workflow import CrossChainTransferWorkflow

logger = logging.getLogger(__name__)

WorkflowFactory = Callable[[RelayConfig], CrossChainTransferWorkflow]


def build_workflow(config: RelayConfig) -> CrossChainTransferWorkflow:
    """Derive the signer, connect to the chain and wire the workflow."""

    account = derive_signing_account(config.private_key)
    connections = Web3Connections(
        config.chain,
        config.contract_address,
        engine=config.engine,
        service_credential=config.service_credential,
    )
    connections.connect()

    builder = CallBuilder()
    logger.info("Relay signer %s ready for contract %s", account.address, config.contract_address)
    return CrossChainTransferWorkflow(
        connections.contract,
        account,
        builder=builder,
        submitter=SubmissionEngine(config.engine),
        querier=QueryEngine(builder),
        fees=config.fees,
        include_mint_step=config.include_mint_step,
        mint=config.mint,
        token_query_index=config.token_query_index,
    )


class RelayService:
    """Turn raw request bodies into workflow runs and tagged results.

    The configuration and the chain wiring are resolved on first use and then
    shared by all requests; a failed resolution is retried on the next request.
    """

    def __init__(
        self,
        config_source: Callable[[], RelayConfig],
        *,
        workflow_factory: WorkflowFactory = build_workflow,
    ) -> None:
        self._config_source = config_source
        self._workflow_factory = workflow_factory
        self._workflow: CrossChainTransferWorkflow | None = None
        self._init_lock = threading.Lock()

    @classmethod
    def from_config(
        cls, config: RelayConfig, *, workflow_factory: WorkflowFactory = build_workflow
    ) -> RelayService:
        return cls(lambda: config, workflow_factory=workflow_factory)

    def workflow(self) -> CrossChainTransferWorkflow:
        with self._init_lock:
            if self._workflow is None:
                config = self._config_source()
                self._workflow = self._workflow_factory(config)
            return self._workflow

    def handle(self, payload: Any) -> OrchestrationResult:
        if isinstance(payload, Mapping):
            logger.info(
                "Incoming transferCrossChain request receiver=%s destination=%s",
                payload.get("receiver"),
                payload.get("destination"),
            )

        try:
            workflow = self.workflow()
            request = OrchestrationRequest.from_payload(payload)
        except Exception as exc:
            error = as_handler_error(exc)
            logger.error("Handler failed: %s", error.message)
            return OrchestrationResult.failed(Step.HANDLER, error.message)

        return workflow.run(request)
