"""
test_bids.py - Unit tests for bid admission, withdrawals and liquidation

Tests:
- Collateral requirement for bids
- Usurpation premium (rounded toward zero)
- Cooldown on rent cuts by the holder
- Holder-only withdrawal reserve
- Liquidation threshold
"""

import pytest
from decimal import Decimal

from feeauction import (
    InsufficientCollateral, RentTooLow, RentTooLowDuringCooldown, NotLiquidatable,
    ArithmeticOverflow, MAX_AMOUNT,
)
from feeauction.units.fee_auction import (
    AuctionTerms, AuctionState, RentSettlement,
    calculate_bid, calculate_deposit, calculate_withdrawal, calculate_liquidation,
    calculate_min_collateral, usurp_threshold, meets_usurp_threshold, is_liquidatable,
)


TERMS = AuctionTerms(resource="R", currency0="ETH", currency1="USDC", rent_asset="ETH")


def vacant(**deposits) -> AuctionState:
    return AuctionState(last_settled_at=0, last_acquired_at=0, deposits=deposits)


def held_by_alice(rent=1000, acquired_at=0, **deposits) -> AuctionState:
    return AuctionState(
        holder="alice",
        fee_recipient="alice",
        rent_rate=rent,
        last_settled_at=acquired_at,
        last_acquired_at=acquired_at,
        deposits=deposits,
    )


class TestBidCollateral:

    def test_vacant_resource_taken_with_collateral(self):
        state = calculate_bid(TERMS, vacant(alice=100_000), 7, "alice", "fixed", "carol", 1000)

        assert state.holder == "alice"
        assert state.rent_rate == 1000
        assert state.strategy == "fixed"
        assert state.fee_recipient == "carol"
        assert state.last_acquired_at == 7

    def test_collateral_below_window_rejected(self):
        with pytest.raises(InsufficientCollateral):
            calculate_bid(TERMS, vacant(alice=99_999), 7, "alice", None, "alice", 1000)

    def test_unknown_bidder_has_no_collateral(self):
        with pytest.raises(InsufficientCollateral):
            calculate_bid(TERMS, vacant(), 7, "alice", None, "alice", 1)

    def test_zero_rent_bid_on_vacant_resource(self):
        state = calculate_bid(TERMS, vacant(), 7, "alice", None, "alice", 0)
        assert state.holder == "alice"
        assert state.rent_rate == 0

    def test_min_collateral_overflow(self):
        with pytest.raises(ArithmeticOverflow):
            calculate_min_collateral(MAX_AMOUNT // 50, 100)


class TestUsurpation:

    def test_threshold_is_twenty_percent_premium(self):
        assert usurp_threshold(1000, Decimal("1.2")) == 1200

    def test_threshold_rounds_toward_zero(self):
        assert usurp_threshold(1001, Decimal("1.2")) == 1201
        assert meets_usurp_threshold(1201, 1001, Decimal("1.2"))

    def test_threshold_against_vacant_is_zero(self):
        assert meets_usurp_threshold(0, 0, Decimal("1.2"))

    def test_just_below_premium_rejected(self):
        state = held_by_alice(alice=100_000, bob=1_000_000)
        with pytest.raises(RentTooLow):
            calculate_bid(TERMS, state, 10, "bob", None, "bob", 1199)

    def test_exact_premium_usurps(self):
        state = held_by_alice(alice=100_000, bob=1_000_000)
        new = calculate_bid(TERMS, state, 10, "bob", None, "bob", 1200)

        assert new.holder == "bob"
        assert new.rent_rate == 1200
        assert new.last_acquired_at == 10
        assert new.deposits == state.deposits

    def test_collateral_checked_before_premium(self):
        state = held_by_alice(alice=100_000, bob=10)
        with pytest.raises(InsufficientCollateral):
            calculate_bid(TERMS, state, 10, "bob", None, "bob", 1)


class TestCooldown:

    def test_holder_cannot_cut_rent_inside_cooldown(self):
        state = held_by_alice(acquired_at=50, alice=1_000_000)
        with pytest.raises(RentTooLowDuringCooldown):
            calculate_bid(TERMS, state, 150, "alice", None, "alice", 999)

    def test_holder_cuts_rent_after_cooldown(self):
        state = held_by_alice(acquired_at=50, alice=1_000_000)
        new = calculate_bid(TERMS, state, 151, "alice", None, "alice", 500)
        assert new.rent_rate == 500
        assert new.last_acquired_at == 50

    def test_holder_may_raise_rent_inside_cooldown(self):
        state = held_by_alice(acquired_at=50, alice=1_000_000)
        new = calculate_bid(TERMS, state, 60, "alice", "fixed", "carol", 2000)
        assert new.rent_rate == 2000
        assert new.strategy == "fixed"
        assert new.fee_recipient == "carol"
        assert new.last_acquired_at == 50

    def test_holder_changes_strategy_at_same_rent(self):
        state = held_by_alice(acquired_at=50, alice=1_000_000)
        new = calculate_bid(TERMS, state, 60, "alice", "directional", "alice", 1000)
        assert new.strategy == "directional"


class TestDepositWithdrawal:

    def test_deposit_creates_account(self):
        assert calculate_deposit(vacant(), "bob", 5).deposits == {"bob": 5}

    def test_deposit_must_be_positive(self):
        with pytest.raises(ValueError):
            calculate_deposit(vacant(), "bob", 0)

    def test_deposit_overflow(self):
        with pytest.raises(ArithmeticOverflow):
            calculate_deposit(vacant(bob=MAX_AMOUNT), "bob", 1)

    def test_holder_keeps_reserve(self):
        state = held_by_alice(alice=150_000)
        with pytest.raises(InsufficientCollateral):
            calculate_withdrawal(TERMS, state, "alice", 50_001)
        assert calculate_withdrawal(TERMS, state, "alice", 50_000).deposits["alice"] == 100_000

    def test_non_holder_withdraws_everything(self):
        """Reserve applies to the holder only; other bidders have no reserve."""
        state = held_by_alice(alice=150_000, bob=5000)
        assert calculate_withdrawal(TERMS, state, "bob", 5000).deposits["bob"] == 0

    def test_withdraw_more_than_balance(self):
        with pytest.raises(InsufficientCollateral):
            calculate_withdrawal(TERMS, vacant(bob=10), "bob", 11)

    def test_withdraw_must_be_positive(self):
        with pytest.raises(ValueError):
            calculate_withdrawal(TERMS, vacant(bob=10), "bob", 0)


class TestLiquidation:

    def test_liquidatable_at_window_boundary(self):
        assert is_liquidatable(TERMS, held_by_alice(alice=20_000))
        assert not is_liquidatable(TERMS, held_by_alice(alice=20_001))

    def test_vacant_is_not_liquidatable(self):
        assert not is_liquidatable(TERMS, vacant())

    def test_liquidation_evicts(self):
        settlement = RentSettlement(state=held_by_alice(alice=20_000), owed=0, paid=0, evicted=False)
        state = calculate_liquidation(TERMS, settlement, 99)
        assert state.holder is None
        assert state.rent_rate == 0
        assert state.last_acquired_at == 99
        assert state.deposits["alice"] == 20_000

    def test_funded_holder_not_liquidatable(self):
        settlement = RentSettlement(state=held_by_alice(alice=20_001), owed=0, paid=0, evicted=False)
        with pytest.raises(NotLiquidatable):
            calculate_liquidation(TERMS, settlement, 99)

    def test_vacant_raises(self):
        settlement = RentSettlement(state=vacant(), owed=0, paid=0, evicted=False)
        with pytest.raises(NotLiquidatable, match="no holder"):
            calculate_liquidation(TERMS, settlement, 99)

    def test_eviction_during_settlement_counts_as_liquidation(self):
        evicted = AuctionState(last_settled_at=99, last_acquired_at=99)
        settlement = RentSettlement(state=evicted, owed=10, paid=5, evicted=True, evicted_holder="alice")
        assert calculate_liquidation(TERMS, settlement, 99) == evicted
