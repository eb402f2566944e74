"""
conftest.py - Shared pytest fixtures for fee auction tests

Provides common fixtures used across unit and functional tests:
- A funded ledger with two tokens and a handful of wallets
- Hooks bound to that ledger, and an initialized resource with two LPs
- Fee strategies for delegation tests

Conformance tests build their ledgers through tests.helpers directly,
since hypothesis examples cannot share function-scoped fixtures.
"""

import pytest
from typing import Dict, Tuple

from feeauction import Ledger, FeeAuctionHooks, PoolKey, lp_symbol, DYNAMIC_FEE_FLAG

from tests.helpers import make_funded_ledger, make_resource, FixedFee, DirectionalFee


@pytest.fixture
def ledger() -> Ledger:
    return make_funded_ledger()


@pytest.fixture
def pool_key() -> PoolKey:
    return PoolKey("ETH", "USDC", DYNAMIC_FEE_FLAG)


@pytest.fixture
def hooks_and_resource(ledger, pool_key) -> Tuple[FeeAuctionHooks, str]:
    return make_resource(ledger, pool_key)


@pytest.fixture
def hooks(hooks_and_resource) -> FeeAuctionHooks:
    return hooks_and_resource[0]


@pytest.fixture
def resource(hooks_and_resource) -> str:
    return hooks_and_resource[1]


@pytest.fixture
def lp_unit(resource) -> str:
    return lp_symbol(resource)


@pytest.fixture
def strategies(hooks) -> Dict[str, object]:
    registered = {"fixed": FixedFee(5000), "directional": DirectionalFee()}
    for strategy_id, strategy in registered.items():
        hooks.register_strategy(strategy_id, strategy)
    return registered
