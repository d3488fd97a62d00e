"""xchain-relay - mint and bridge NFTs through a cross-chain contract.

Drives a wallet-controlled account through mint, token-id lookup and
``transferCrossChain`` against one contract, and reports which step failed.
"""

from .config import FeeSchedule, MintConfig, RelayConfig, load_config
from .exceptions import (
    ChainInteractionError,
    ConfigurationError,
    ConfigurationMissingError,
    ConfirmationTimeoutError,
    InvalidCallArgumentsError,
    QueryRevertedError,
    RelayError,
    RpcUnavailableError,
    SubmissionRejectedError,
    UnclassifiedHandlerError,
)
from .service import RelayService, build_workflow
from .types import OrchestrationRequest, OrchestrationResult, Receipt, Step, WorkflowState
from .version import __version__
from .workflow import CrossChainTransferWorkflow

__all__ = [
    # Configuration
    "FeeSchedule",
    "MintConfig",
    "RelayConfig",
    "load_config",
    # Orchestration
    "CrossChainTransferWorkflow",
    "RelayService",
    "build_workflow",
    # Types
    "OrchestrationRequest",
    "OrchestrationResult",
    "Receipt",
    "Step",
    "WorkflowState",
    # Exceptions
    "RelayError",
    "ConfigurationError",
    "ConfigurationMissingError",
    "InvalidCallArgumentsError",
    "ChainInteractionError",
    "SubmissionRejectedError",
    "ConfirmationTimeoutError",
    "QueryRevertedError",
    "RpcUnavailableError",
    "UnclassifiedHandlerError",
    "__version__",
]
