from typing import Dict, List, Optional

import pytest

from ixdecoder.errors import AccountFetchError
from ixdecoder.models import AccountKey
from ixdecoder.schema import SchemaRegistry

from builders import key


class FakeFetcher:
    """In-memory account source."""

    def __init__(self, accounts: Optional[Dict[str, bytes]] = None, fail: bool = False):
        self.accounts = accounts or {}
        self.fail = fail
        self.requested: List[str] = []

    async def get_account_data(self, address: str) -> Optional[bytes]:
        self.requested.append(address)
        if self.fail:
            raise AccountFetchError("connection refused")
        return self.accounts.get(address)


@pytest.fixture
def registry():
    return SchemaRegistry()


@pytest.fixture
def accounts():
    """Four distinct account keys; the first signs."""
    return [
        AccountKey(key(1), is_signer=True, is_writable=True),
        AccountKey(key(2), is_writable=True),
        AccountKey(key(3)),
        AccountKey(key(4)),
    ]


@pytest.fixture
def fake_fetcher_cls():
    return FakeFetcher
