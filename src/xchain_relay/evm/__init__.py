"""EVM building blocks: chain description, signer, calls, submission and reads."""

from .accounts import derive_signing_account
from .calls import CallBuilder, PreparedCall
from .config import ZETACHAIN_ATHENS, ChainDescriptor, EngineConfig, NativeCurrency
from .connections import ContractHandle, Web3Connections, resolve_contract
from .queries import QueryEngine
from .signatures import FunctionSignature, parse_signature
from .transactions import NonceTracker, SubmissionEngine

__all__ = [
    "CallBuilder",
    "ChainDescriptor",
    "ContractHandle",
    "EngineConfig",
    "FunctionSignature",
    "NativeCurrency",
    "NonceTracker",
    "PreparedCall",
    "QueryEngine",
    "SubmissionEngine",
    "Web3Connections",
    "ZETACHAIN_ATHENS",
    "derive_signing_account",
    "parse_signature",
    "resolve_contract",
]
