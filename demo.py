#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Learn the Fee Auction Step by Step

A pedagogical walk through a single resource's fee auction. Each step builds
on the previous one. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-3:   Foundation   - The ledger, the resource, liquidity providers
  4-6:   Bidding      - Collateral, winning the auction, streaming rent
  7-9:   Competition  - Usurping, fee delegation, the cooldown
  10-11: Keepers      - Liquidation by the LifecycleEngine, conservation proof

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
import sys

from feeauction import (
    Ledger, Move, TransactionOrigin, OriginType, build_transaction, token,
    FeeAuctionHooks, LifecycleEngine, PoolKey, SwapParams,
    fee_auction_contract, lp_symbol,
    InsufficientCollateral, RentTooLow, RentTooLowDuringCooldown,
    SYSTEM_WALLET, AUCTION_ESCROW_WALLET, UNIT_TYPE_FEE_AUCTION,
    DYNAMIC_FEE_FLAG, DEFAULT_BLOCK_TIME, MIN_RESERVE_WINDOW, LIQUIDATION_WINDOW,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    start_time: datetime = datetime(2025, 1, 1)
    initial_funding: int = 10_000_000

    lp_shares: tuple = (("lp1", 600), ("lp2", 400))

    alice_rent: int = 1_000
    bob_rent: int = 1_200
    bob_deposit: int = 200_000

    trade_size: int = 1_000_000


CONFIG = DemoConfig()

QUICK_MODE = "--quick" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    print(f"\n--- {text} ---\n")


def advance_blocks(ledger: Ledger, blocks: int) -> datetime:
    new_time = ledger.current_time + blocks * DEFAULT_BLOCK_TIME
    ledger.advance_time(new_time)
    return new_time


class DirectionalFee:
    """Charges sellers of currency0 more than buyers."""

    def compute_fee(self, resource, params) -> int:
        return 5000 if params.zero_for_one else 1000


# ============================================================================
# PHASE 1: FOUNDATION (Steps 1-3)
# ============================================================================

def step_01_ledger():
    """Create a ledger holding two tokens and fund the participants."""
    step_header(1, "The Ledger",
        "Every asset the auction touches lives in one double-entry ledger.")

    ledger = Ledger("tutorial", initial_time=CONFIG.start_time, verbose=False)
    ledger.register_unit(token("ETH", "Ether"))
    ledger.register_unit(token("USDC", "USD Coin"))

    wallets = ("alice", "bob", "lp1", "lp2", "trader")
    for wallet in wallets:
        ledger.register_wallet(wallet)

    ledger.execute(build_transaction(ledger, [
        Move(Decimal(CONFIG.initial_funding), symbol, SYSTEM_WALLET, wallet, f"initial_{symbol}_{wallet}")
        for wallet in wallets
        for symbol in ("ETH", "USDC")
    ], origin=TransactionOrigin(OriginType.SYSTEM, "issuance")))

    section_header("Balances")
    for wallet in wallets:
        print(f"  {wallet:8} ETH={ledger.get_balance(wallet, 'ETH'):>12}  USDC={ledger.get_balance(wallet, 'USDC'):>12}")

    print("""
    Tokens never go below zero. Value enters through the SYSTEM wallet,
    so the sum of every wallet's balance is always zero.
    """)
    return ledger


def step_02_initialize(ledger: Ledger):
    """Register a resource with the auction."""
    step_header(2, "Initializing a Resource",
        "A resource with a dynamic fee gets a vacant auction and an LP share unit.")

    hooks = FeeAuctionHooks(ledger)
    key = PoolKey("ETH", "USDC", DYNAMIC_FEE_FLAG)
    print(">>> resource = hooks.before_initialize(PoolKey('ETH', 'USDC', DYNAMIC_FEE_FLAG))")
    resource = hooks.before_initialize(key)

    state = hooks.get_auction_state(resource)
    section_header("Auction State")
    print(f"Resource:     {resource}")
    print(f"Holder:       {state.holder}")
    print(f"Rent rate:    {state.rent_rate}")
    print(f"Block:        {hooks.current_block(resource)}")

    fee = hooks.before_swap(key, "trader", SwapParams(True, -CONFIG.trade_size))
    print(f"\nWith nobody holding the resource, a swap pays the default fee: {fee.lp_fee}")
    return hooks, key, resource


def step_03_liquidity(ledger: Ledger, hooks: FeeAuctionHooks, key: PoolKey, resource: str):
    """Liquidity providers receive the rent."""
    step_header(3, "Liquidity Providers",
        "Rent streams to LP share holders, pro rata to their shares.")

    for provider, shares in CONFIG.lp_shares:
        print(f">>> hooks.before_add_liquidity(key, {provider!r}, {shares})")
        hooks.before_add_liquidity(key, provider, shares)

    section_header("LP Positions")
    for wallet, qty in sorted(ledger.get_positions(lp_symbol(resource)).items()):
        print(f"  {wallet:8} {qty}")


# ============================================================================
# PHASE 2: BIDDING (Steps 4-6)
# ============================================================================

def step_04_collateral(ledger: Ledger, hooks: FeeAuctionHooks, resource: str):
    """Bids must be backed by deposited collateral."""
    step_header(4, "Collateral",
        f"A bid needs {MIN_RESERVE_WINDOW} blocks of rent on deposit.")

    try:
        hooks.modify_bid(resource, "alice", None, None, CONFIG.alice_rent)
    except InsufficientCollateral as e:
        print(f"Rejected as expected: {e}")

    required = CONFIG.alice_rent * MIN_RESERVE_WINDOW
    print(f"\n>>> hooks.deposit_collateral(resource, 'alice', {required})")
    hooks.deposit_collateral(resource, "alice", required)
    print(f"Escrow holds {ledger.get_balance(AUCTION_ESCROW_WALLET, 'ETH')} ETH")


def step_05_win(hooks: FeeAuctionHooks, resource: str):
    """A collateralized bid wins a vacant resource."""
    step_header(5, "Winning the Auction",
        "Any collateralized bid takes a vacant resource.")

    state = hooks.modify_bid(resource, "alice", None, None, CONFIG.alice_rent)
    print(f"Holder:           {state.holder}")
    print(f"Rent per block:   {state.rent_rate}")
    print(f"Acquired at:      block {state.last_acquired_at}")


def step_06_rent(ledger: Ledger, hooks: FeeAuctionHooks, resource: str):
    """Rent accrues every block and is settled on demand."""
    step_header(6, "Streaming Rent",
        "Rent accrues per block and is paid out whenever anyone settles.")

    advance_blocks(ledger, 10)
    print(f"Owed after 10 blocks: {hooks.get_owed_rent(resource)}")
    settlement = hooks.settle_rent(resource)
    print(f"Paid: {settlement.paid}")
    for move in settlement.moves:
        print(f"  {move}")
    print(f"alice's deposit is now {hooks.get_deposit(resource, 'alice')}")


# ============================================================================
# PHASE 3: COMPETITION (Steps 7-9)
# ============================================================================

def step_07_usurp(hooks: FeeAuctionHooks, resource: str):
    """Taking the resource requires a premium over the current rent."""
    step_header(7, "Usurping",
        "A challenger must bid at least 1.2x the current rent.")

    hooks.deposit_collateral(resource, "bob", CONFIG.bob_deposit)
    try:
        hooks.modify_bid(resource, "bob", None, None, CONFIG.alice_rent + 1)
    except RentTooLow as e:
        print(f"Rejected as expected: {e}")

    hooks.register_strategy("directional", DirectionalFee())
    state = hooks.modify_bid(resource, "bob", "directional", None, CONFIG.bob_rent)
    print(f"\nNew holder: {state.holder} at {state.rent_rate}/block")
    print(f"alice keeps its collateral: {hooks.get_deposit(resource, 'alice')}")


def step_08_delegation(ledger: Ledger, hooks: FeeAuctionHooks, key: PoolKey):
    """The holder's strategy sets the fee and collects it."""
    step_header(8, "Fee Delegation",
        "The holder's strategy prices each trade; the fee goes to the holder.")

    before = ledger.get_balance("bob", "ETH")
    fee = hooks.before_swap(key, "trader", SwapParams(True, -CONFIG.trade_size))
    print(f"LP fee:        {fee.lp_fee}")
    print(f"Strategy fee:  {fee.fee} ({fee.fee_amount} {fee.fee_currency})")
    print(f"bob received:  {ledger.get_balance('bob', 'ETH') - before} ETH")


def step_09_cooldown(hooks: FeeAuctionHooks, resource: str):
    """A new holder cannot cut its rent right away."""
    step_header(9, "Cooldown",
        "The holder may not lower rent until the cooldown has passed.")

    try:
        hooks.modify_bid(resource, "bob", "directional", None, CONFIG.alice_rent)
    except RentTooLowDuringCooldown as e:
        print(f"Rejected as expected: {e}")


# ============================================================================
# PHASE 4: KEEPERS (Steps 10-11)
# ============================================================================

def step_10_keeper(ledger: Ledger, hooks: FeeAuctionHooks, resource: str):
    """The LifecycleEngine liquidates holders running out of collateral."""
    step_header(10, "Keeper Liquidation",
        f"A holder with {LIQUIDATION_WINDOW} or fewer blocks of rent left is evicted.")

    engine = LifecycleEngine(ledger)
    engine.register(UNIT_TYPE_FEE_AUCTION, fee_auction_contract)

    later = ledger.current_time + 160 * DEFAULT_BLOCK_TIME
    executed = engine.step(later)
    state = hooks.get_auction_state(resource)
    print(f"Keeper transactions: {len(executed)}")
    print(f"Holder after step:   {state.holder}")
    print(f"bob's remaining collateral: {hooks.get_deposit(resource, 'bob')}")


def step_11_conservation(ledger: Ledger, hooks: FeeAuctionHooks, resource: str):
    """Nothing was created or destroyed."""
    step_header(11, "Conservation",
        "Total supply of every unit is unchanged and escrow matches the deposits.")

    result = ledger.verify_double_entry({"ETH": Decimal("0"), "USDC": Decimal("0")})
    print(f"Double entry valid: {result['valid']}")
    deposits = hooks.get_auction_state(resource).deposits
    print(f"Escrow balance:     {ledger.get_balance(AUCTION_ESCROW_WALLET, 'ETH')}")
    print(f"Sum of deposits:    {sum(deposits.values())}")
    print(f"Transactions:       {len(ledger.transaction_log)}")


def main():
    print("=" * 70)
    print("       FEE AUCTION TUTORIAL")
    print("=" * 70)

    ledger = step_01_ledger()
    wait_for_enter()

    hooks, key, resource = step_02_initialize(ledger)
    wait_for_enter()

    step_03_liquidity(ledger, hooks, key, resource)
    wait_for_enter()

    step_04_collateral(ledger, hooks, resource)
    wait_for_enter()

    step_05_win(hooks, resource)
    wait_for_enter()

    step_06_rent(ledger, hooks, resource)
    wait_for_enter()

    step_07_usurp(hooks, resource)
    wait_for_enter()

    step_08_delegation(ledger, hooks, key)
    wait_for_enter()

    step_09_cooldown(hooks, resource)
    wait_for_enter()

    step_10_keeper(ledger, hooks, resource)
    wait_for_enter()

    step_11_conservation(ledger, hooks, resource)

    print("\n" + "=" * 70)
    print("       TUTORIAL COMPLETE!")
    print("=" * 70)
    print("""
    Next steps:
      - See feeauction/units/fee_auction.py for the auction rules
      - Run tests: pytest tests/
    """)


if __name__ == "__main__":
    main()
