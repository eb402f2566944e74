"""
test_keeper_lifecycle.py - Keeper liquidations driven by the LifecycleEngine

Scenarios:
- Funded holder survives polling
- Holder is liquidated on the first step where its buffer is exhausted
- Insolvent holder is evicted by the keeper
- Polling is stable (one liquidation, then nothing)
"""

import pytest

from tests.helpers import T0, advance_blocks
from feeauction import (
    LifecycleEngine, LedgerError, UNIT_TYPE_FEE_AUCTION, DEFAULT_BLOCK_TIME,
    fee_auction_contract, empty_pending_transaction, OriginType,
)


@pytest.fixture
def engine(ledger, hooks):
    engine = LifecycleEngine(ledger)
    engine.register(UNIT_TYPE_FEE_AUCTION, fee_auction_contract)
    return engine


@pytest.fixture
def alice_holds(hooks, resource):
    hooks.deposit_collateral(resource, "alice", 100_000)
    hooks.modify_bid(resource, "alice", None, None, 1000)
    return resource


def at_block(blocks):
    return T0 + blocks * DEFAULT_BLOCK_TIME


class TestKeeper:

    def test_funded_holder_survives(self, engine, hooks, alice_holds):
        assert engine.step(at_block(79)) == []
        assert hooks.get_auction_state(alice_holds).holder == "alice"

    def test_liquidated_when_buffer_exhausted(self, engine, hooks, alice_holds):
        executed = engine.run([at_block(b) for b in (10, 40, 79, 80, 81)])

        assert len(executed) == 1
        assert executed[0].origin.event_type == "LIQUIDATE"
        assert executed[0].origin.origin_type == OriginType.LIFECYCLE
        state = hooks.get_auction_state(alice_holds)
        assert state.is_vacant
        assert state.last_acquired_at == state.last_settled_at
        assert hooks.get_deposit(alice_holds, "alice") == 20_000

    def test_insolvent_holder_evicted(self, engine, hooks, alice_holds):
        executed = engine.step(at_block(5000))
        assert len(executed) == 1
        assert hooks.get_deposit(alice_holds, "alice") == 0

    def test_vacant_resource_not_polled_into_transactions(self, engine, resource):
        assert engine.step(at_block(500)) == []

    def test_object_contracts_supported(self, ledger, hooks, alice_holds):
        class Keeper:
            def check_lifecycle(self, view, symbol, timestamp):
                return fee_auction_contract(view, symbol, timestamp)

        engine = LifecycleEngine(ledger, {UNIT_TYPE_FEE_AUCTION: Keeper()})
        assert len(engine.step(at_block(100))) == 1

    def test_contract_must_return_pending_transaction(self, ledger, alice_holds):
        engine = LifecycleEngine(ledger, {UNIT_TYPE_FEE_AUCTION: lambda view, symbol, ts: None})
        with pytest.raises(LedgerError, match="must return PendingTransaction"):
            engine.step(at_block(1))

    def test_idle_contract(self, ledger, alice_holds):
        engine = LifecycleEngine(
            ledger, {UNIT_TYPE_FEE_AUCTION: lambda view, symbol, ts: empty_pending_transaction(view)}
        )
        assert engine.step(at_block(1)) == []

    def test_time_cannot_go_backwards(self, ledger, engine, alice_holds):
        advance_blocks(ledger, 10)
        with pytest.raises(ValueError):
            engine.step(at_block(5))
