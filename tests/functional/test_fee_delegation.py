"""
test_fee_delegation.py - Trades against a resource with and without a fee strategy

Scenarios:
- No strategy: default LP fee, nothing redirected
- Strategy attached: fee charged on the correct side and paid to the fee recipient
- Repeated identical trades are each charged
- Invalid strategy output fails the trade atomically
- Swaps settle rent first; eviction detaches the strategy
"""

import pytest

from tests.helpers import advance_blocks, balance, compare_ledger_states, FixedFee
from feeauction import (
    SwapParams, InvalidFee, InsufficientFunds, UnknownStrategy, DEFAULT_SWAP_FEE,
)


@pytest.fixture
def delegated(hooks, resource, strategies):
    hooks.deposit_collateral(resource, "alice", 1_000_000)
    hooks.modify_bid(resource, "alice", "fixed", "carol", 1000)
    return resource


class TestDefaultFee:

    def test_vacant_resource_uses_default_fee(self, ledger, hooks, pool_key, resource):
        fee = hooks.before_swap(pool_key, "trader", SwapParams(True, -1_000_000))

        assert fee.lp_fee == DEFAULT_SWAP_FEE
        assert not fee.delegated
        assert balance(ledger, "trader", "ETH") == 10 ** 12

    def test_holder_without_strategy_uses_default_fee(self, hooks, pool_key, resource):
        hooks.deposit_collateral(resource, "alice", 100_000)
        hooks.modify_bid(resource, "alice", None, None, 1000)
        assert hooks.before_swap(pool_key, "trader", SwapParams(False, 500)).lp_fee == DEFAULT_SWAP_FEE


class TestDelegatedFee:

    def test_exact_input_fee_in_sold_currency(self, ledger, hooks, pool_key, delegated):
        fee = hooks.before_swap(pool_key, "trader", SwapParams(True, -1_000_000))

        assert fee.lp_fee == 0
        assert fee.fee == 5000
        assert fee.fee_amount == 5000
        assert fee.fee_currency == "ETH"
        assert balance(ledger, "carol", "ETH") == 10 ** 12 + 5000
        assert balance(ledger, "trader", "ETH") == 10 ** 12 - 5000

    def test_exact_output_fee_in_bought_currency(self, ledger, hooks, pool_key, delegated):
        fee = hooks.before_swap(pool_key, "trader", SwapParams(True, 1_000_000))

        assert fee.fee_currency == "USDC"
        assert balance(ledger, "carol", "USDC") == 10 ** 12 + 5000
        assert balance(ledger, "trader", "USDC") == 10 ** 12 - 5000

    def test_strategy_sees_trade_parameters(self, hooks, pool_key, delegated, strategies):
        params = SwapParams(False, -42_000)
        hooks.before_swap(pool_key, "trader", params)
        assert strategies["fixed"].calls == [(delegated, params)]

    def test_identical_trades_each_charged(self, ledger, hooks, pool_key, delegated):
        for _ in range(3):
            hooks.before_swap(pool_key, "trader", SwapParams(True, -1_000_000))
        assert balance(ledger, "carol", "ETH") == 10 ** 12 + 15_000

    def test_directional_strategy(self, ledger, hooks, pool_key, delegated):
        hooks.modify_bid(delegated, "alice", "directional", "carol", 1000)
        assert hooks.before_swap(pool_key, "trader", SwapParams(True, -100_000)).fee_amount == 500
        assert hooks.before_swap(pool_key, "trader", SwapParams(False, -100_000)).fee_amount == 100

    def test_trader_must_afford_fee(self, ledger, hooks, pool_key, delegated):
        hooks.register_strategy("greedy", FixedFee(1_000_000))
        hooks.modify_bid(delegated, "alice", "greedy", "carol", 1000)
        with pytest.raises(InsufficientFunds):
            hooks.before_swap(pool_key, "trader", SwapParams(True, -(10 ** 12 + 1)))

    def test_invalid_fee_fails_trade_atomically(self, ledger, hooks, pool_key, delegated):
        hooks.register_strategy("broken", FixedFee(1_000_001))
        hooks.modify_bid(delegated, "alice", "broken", "carol", 1000)
        advance_blocks(ledger, 5)
        snapshot = ledger.clone()

        with pytest.raises(InvalidFee):
            hooks.before_swap(pool_key, "trader", SwapParams(True, -1_000_000))

        assert compare_ledger_states(ledger, snapshot)["equal"]

    def test_strategy_removed_from_registry(self, hooks, pool_key, delegated):
        del hooks.strategies["fixed"]
        with pytest.raises(UnknownStrategy):
            hooks.before_swap(pool_key, "trader", SwapParams(True, -1))


class TestSwapSettlesRent:

    def test_swap_pays_accrued_rent(self, ledger, hooks, pool_key, delegated):
        lp_before = balance(ledger, "lp1", "ETH")
        advance_blocks(ledger, 10)
        hooks.before_swap(pool_key, "trader", SwapParams(True, -1))

        assert balance(ledger, "lp1", "ETH") - lp_before == 6000
        assert hooks.get_owed_rent(delegated) == 0

    def test_eviction_restores_default_fee(self, ledger, hooks, pool_key, delegated):
        advance_blocks(ledger, 1001)
        fee = hooks.before_swap(pool_key, "trader", SwapParams(True, -1_000_000))

        assert fee.lp_fee == DEFAULT_SWAP_FEE
        assert hooks.get_auction_state(delegated).is_vacant


class TestStrategyRegistry:

    def test_duplicate_registration(self, hooks, strategies):
        with pytest.raises(ValueError, match="already registered"):
            hooks.register_strategy("fixed", FixedFee(1))

    def test_object_without_compute_fee(self, hooks):
        with pytest.raises(TypeError):
            hooks.register_strategy("bad", object())
