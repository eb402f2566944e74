"""
helpers.py - Test Helpers for fee auction tests

Ledger construction, clock movement and comparison utilities shared by the
unit, functional and conformance tests.
"""

from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import Tuple

from feeauction import (
    Ledger, Move, FeeAuctionHooks, PoolKey, TransactionOrigin, OriginType,
    build_transaction, token,
    SYSTEM_WALLET, DEFAULT_BLOCK_TIME,
)


# Block aligned (1735689600 is a multiple of 12)
T0 = datetime(2025, 1, 1)

WALLETS = ("alice", "bob", "carol", "lp1", "lp2", "trader")
INITIAL_FUNDING = 10 ** 12

LP_SHARES = {"lp1": 600, "lp2": 400}


def advance_blocks(ledger: Ledger, blocks: int) -> datetime:
    """Move the ledger clock forward by a whole number of blocks."""
    new_time = ledger.current_time + blocks * DEFAULT_BLOCK_TIME
    ledger.advance_time(new_time)
    return new_time


def balance(ledger: Ledger, wallet: str, unit: str) -> int:
    return int(ledger.get_balance(wallet, unit))


def escrowed_total(ledger: Ledger, resource: str) -> int:
    """Sum of all collateral accounts of a resource."""
    return sum(ledger.get_unit_state(resource)["deposits"].values())


def compare_ledger_states(ledger1: Ledger, ledger2: Ledger) -> dict:
    """Compare balances and unit states of two ledgers."""
    balance_diffs = []
    state_diffs = []

    all_wallets = ledger1.registered_wallets | ledger2.registered_wallets
    all_units = set(ledger1.units.keys()) | set(ledger2.units.keys())

    for wallet in all_wallets:
        for unit in all_units:
            bal1 = ledger1.balances.get(wallet, {}).get(unit, Decimal("0"))
            bal2 = ledger2.balances.get(wallet, {}).get(unit, Decimal("0"))
            if bal1 != bal2:
                balance_diffs.append({"wallet": wallet, "unit": unit, "ledger1": bal1, "ledger2": bal2})

    for unit_sym in all_units:
        if unit_sym in ledger1.units and unit_sym in ledger2.units:
            state1 = ledger1.get_unit_state(unit_sym)
            state2 = ledger2.get_unit_state(unit_sym)
            if state1 != state2:
                state_diffs.append({"unit": unit_sym, "ledger1": state1, "ledger2": state2})
        else:
            state_diffs.append({"unit": unit_sym, "missing": True})

    return {
        "equal": not balance_diffs and not state_diffs,
        "balance_diffs": balance_diffs,
        "state_diffs": state_diffs,
    }


def make_funded_ledger() -> Ledger:
    """Ledger at T0 with ETH and USDC issued to every test wallet."""
    ledger = Ledger("test", initial_time=T0, verbose=False)
    ledger.register_unit(token("ETH", "Ether"))
    ledger.register_unit(token("USDC", "USD Coin"))
    for wallet in WALLETS:
        ledger.register_wallet(wallet)

    moves = [
        Move(Decimal(INITIAL_FUNDING), symbol, SYSTEM_WALLET, wallet, f"initial_{symbol}_{wallet}")
        for wallet in WALLETS
        for symbol in ("ETH", "USDC")
    ]
    ledger.execute(build_transaction(
        ledger, moves, origin=TransactionOrigin(OriginType.SYSTEM, "issuance")
    ))
    return ledger


def make_resource(ledger: Ledger, key: PoolKey, **term_overrides) -> Tuple[FeeAuctionHooks, str]:
    """Initialize key on a fresh hooks facade and seed the LP positions."""
    hooks = FeeAuctionHooks(ledger)
    resource = hooks.before_initialize(key, **term_overrides)
    for provider, shares in LP_SHARES.items():
        hooks.before_add_liquidity(key, provider, shares)
    return hooks, resource


class FixedFee:
    """Fee strategy charging the same fee on every trade."""

    def __init__(self, fee: int):
        self.fee = fee
        self.calls = []

    def compute_fee(self, resource, params) -> int:
        self.calls.append((resource, params))
        return self.fee


class DirectionalFee:
    """Fee strategy charging more when selling currency0."""

    def compute_fee(self, resource, params) -> int:
        return 5000 if params.zero_for_one else 1000
