"""Exception hierarchy for the cross-chain relay."""

from typing import Any


class RelayError(Exception):
    """Base exception for all relay errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(RelayError):
    """Raised when configuration values are unusable."""

    pass


class ConfigurationMissingError(ConfigurationError):
    """Raised when required configuration values are absent."""

    def __init__(self, missing: list[str], details: dict | None = None):
        super().__init__(f"Missing env vars: {', '.join(missing)}", details)
        self.missing = list(missing)


class InvalidCallArgumentsError(RelayError):
    """Raised when caller input does not match the expected call shape."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class ChainInteractionError(RelayError):
    """Base class for failures reported by the chain engines."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint


class SubmissionRejectedError(ChainInteractionError):
    """Raised when a transaction is rejected before inclusion or reverts on-chain."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        tx_hash: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, endpoint, details)
        self.tx_hash = tx_hash


class ConfirmationTimeoutError(ChainInteractionError):
    """Raised when a broadcast transaction is not confirmed in time."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        tx_hash: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, endpoint, details)
        self.tx_hash = tx_hash


class QueryRevertedError(ChainInteractionError):
    """Raised when a read-only contract call reverts."""

    pass


class RpcUnavailableError(ChainInteractionError):
    """Raised when the chain endpoint cannot be reached."""

    pass


class UnclassifiedHandlerError(RelayError):
    """Raised for failures that escape every step boundary."""

    pass


def as_handler_error(exc: Exception) -> RelayError:
    """Return ``exc`` as a relay error, wrapping anything unclassified."""

    if isinstance(exc, RelayError):
        return exc
    wrapped = UnclassifiedHandlerError(str(exc) or type(exc).__name__, {"type": type(exc).__name__})
    wrapped.__cause__ = exc
    return wrapped
