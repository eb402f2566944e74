"""
Auction Invariant Conformance Tests

INVARIANTS, after every call in any sequence of calls:

    ∀ bidder b: deposit(b) >= 0
    last_settled_at <= now, and last_settled_at never decreases
    holder = none ⟹ rent_rate = 0 ∧ strategy = none ∧ fee_recipient = none
    Σ deposits = escrow balance of the rent asset
    Σ_{w ∈ wallets} balance(w, u) = 0 for every unit (everything issued from SYSTEM_WALLET)

    settlement debits at most the holder's pre-settlement deposit
    usurpation ⟹ new rent >= floor(previous rent × MIN_USURP_FACTOR)
"""

from hypothesis import given, settings, HealthCheck
from hypothesis import strategies as st

from feeauction import AUCTION_ESCROW_WALLET, DYNAMIC_FEE_FLAG, PoolKey
from feeauction.units.fee_auction import settle_for_call, usurp_threshold

from tests.helpers import make_funded_ledger, make_resource, balance
from tests.conformance._operations import operations, apply_operation, BIDDERS


KEY = PoolKey("ETH", "USDC", DYNAMIC_FEE_FLAG)


def check_invariants(ledger, hooks, resource, previous):
    state = hooks.get_auction_state(resource)
    now = hooks.current_block(resource)

    assert all(amount >= 0 for amount in state.deposits.values())
    assert state.last_settled_at <= now
    assert state.last_settled_at >= previous.last_settled_at

    if state.holder is None:
        assert state.rent_rate == 0
        assert state.strategy is None
        assert state.fee_recipient is None

    assert sum(state.deposits.values()) == balance(ledger, AUCTION_ESCROW_WALLET, "ETH")

    report = ledger.verify_double_entry()
    assert all(supply == 0 for supply in report["supplies"].values())
    return state


class TestAuctionInvariants:

    @given(operations)
    @settings(max_examples=60, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_invariants_hold_after_every_call(self, ops):
        ledger = make_funded_ledger()
        hooks, resource = make_resource(ledger, KEY)
        previous = hooks.get_auction_state(resource)

        for op in ops:
            apply_operation(ledger, hooks, KEY, resource, op)
            previous = check_invariants(ledger, hooks, resource, previous)

    @given(operations, st.sampled_from(BIDDERS), st.integers(min_value=0, max_value=5000))
    @settings(max_examples=60, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_usurpation_clears_premium(self, ops, bidder, rent):
        ledger = make_funded_ledger()
        hooks, resource = make_resource(ledger, KEY)
        for op in ops:
            apply_operation(ledger, hooks, KEY, resource, op)
        hooks.deposit_collateral(resource, bidder, 500_000)

        terms, settlement, _ = settle_for_call(ledger, resource)
        incumbent = settlement.state

        if apply_operation(ledger, hooks, KEY, resource, ("bid", bidder, rent)):
            state = hooks.get_auction_state(resource)
            assert state.holder == bidder
            if incumbent.holder not in (None, bidder):
                assert state.rent_rate >= usurp_threshold(incumbent.rent_rate, terms.min_usurp_factor)

    @given(operations, st.integers(min_value=0, max_value=2000))
    @settings(max_examples=60, deadline=None, suppress_health_check=[HealthCheck.too_slow])
    def test_settlement_never_overdraws(self, ops, elapsed):
        ledger = make_funded_ledger()
        hooks, resource = make_resource(ledger, KEY)
        for op in ops:
            apply_operation(ledger, hooks, KEY, resource, op)
        apply_operation(ledger, hooks, KEY, resource, ("advance", elapsed))

        before = hooks.get_auction_state(resource)
        settlement = hooks.settle_rent(resource)
        after = hooks.get_auction_state(resource)

        assert settlement.paid <= before.holder_deposit
        assert settlement.paid <= settlement.owed
        assert sum(before.deposits.values()) - sum(after.deposits.values()) == settlement.paid
        assert settlement.evicted == (settlement.paid < settlement.owed)
        if settlement.evicted:
            assert after.is_vacant
            assert after.last_acquired_at == after.last_settled_at
