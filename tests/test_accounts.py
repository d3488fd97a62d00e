"""Tests for xchain_relay.evm.accounts."""

import pytest

from xchain_relay.evm.accounts import derive_signing_account
from xchain_relay.exceptions import ConfigurationError

GANACHE_KEY = "0x4f3edf983ac636a65a842ce7c78d9aa706d3b113bce9c46f30d7d21715b23b1d"


def test_derive_signing_account() -> None:
    account = derive_signing_account(GANACHE_KEY)

    assert account.address == "0x90F8bf6A479f320ead074411a4B0e7944Ea8c9C1"


@pytest.mark.parametrize("key", ["", "0x1234", "not-a-key"])
def test_invalid_key_raises_without_leaking_it(key: str) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        derive_signing_account(key)

    if key:
        assert key not in str(excinfo.value)
        assert key not in str(excinfo.value.details)
