"""Signing account derivation."""

from __future__ import annotations

import logging
from typing import cast

from eth_account import Account
from eth_account.signers.local import LocalAccount

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def derive_signing_account(private_key: str) -> LocalAccount:
    """Return the local signer controlled by ``private_key``."""

    if not private_key:
        raise ConfigurationError("Private key must not be empty", details={"field": "private_key"})

    try:
        account = cast(LocalAccount, Account.from_key(private_key))
    except Exception as exc:
        raise ConfigurationError(
            "Failed to derive signer account from provided private key",
            details={"field": "private_key", "error": type(exc).__name__},
        ) from exc

    logger.debug("Derived signing account %s", account.address)
    return account
