"""
pool.py - Custodian-side primitives for auctioned fee resources

The exchange that owns a resource is an external collaborator; this module
holds the small part of its surface the auction depends on:

1. PoolKey / resource_id(): identity of a resource (asset pair + configuration)
2. SwapParams: trade parameters handed to fee strategies
3. fee_currency() / calculate_fee_amount(): which side of a trade pays the fee
4. calculate_pro_rata() / distribution_moves(): the proportional distribution
   primitive that routes an amount to the resource's liquidity providers

All functions are pure.
"""

from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Mapping, Tuple

from .core import Move, content_hash


# Fee field value marking a resource whose fee is set per trade.
DYNAMIC_FEE_FLAG = 0x800000

# Fees are expressed in hundredths of a basis point; 1_000_000 == 100%.
MAX_LP_FEE = 1_000_000


@dataclass(frozen=True, slots=True)
class PoolKey:
    """
    Configuration that identifies a resource.

    Attributes:
        currency0: Lower-sorted asset of the pair
        currency1: Higher-sorted asset of the pair
        fee: Static fee in pips, or DYNAMIC_FEE_FLAG for per-trade fees
        tick_spacing: Exchange-specific granularity, only part of the identity
        hooks: Identifier of the hook contract bound to the resource
    """
    currency0: str
    currency1: str
    fee: int
    tick_spacing: int = 60
    hooks: str = "fee_auction"

    def __post_init__(self):
        if not self.currency0 or not self.currency1:
            raise ValueError("PoolKey currencies cannot be empty")
        if self.currency0 >= self.currency1:
            raise ValueError(
                f"PoolKey currencies must be sorted: {self.currency0!r} >= {self.currency1!r}"
            )
        if self.tick_spacing <= 0:
            raise ValueError(f"tick_spacing must be positive, got {self.tick_spacing}")

    @property
    def is_dynamic_fee(self) -> bool:
        return self.fee == DYNAMIC_FEE_FLAG


def resource_id(key: PoolKey) -> str:
    """Deterministic resource identifier derived from every PoolKey field."""
    return content_hash(
        "pool", key.currency0, key.currency1, key.fee, key.tick_spacing, key.hooks
    )


def lp_symbol(resource: str) -> str:
    """Symbol of the LP share unit of a resource."""
    return f"LP-{resource}"


def pool_wallet(resource: str) -> str:
    """Wallet holding the resource's normal fee pool and undistributable rent."""
    return f"pool:{resource}"


@dataclass(frozen=True, slots=True)
class SwapParams:
    """
    Parameters of one trade.

    amount_specified follows the exchange's sign convention: negative means
    exact input (the trader sells exactly that amount), positive means exact
    output (the trader buys exactly that amount).
    """
    zero_for_one: bool
    amount_specified: int

    def __post_init__(self):
        if isinstance(self.amount_specified, bool) or not isinstance(self.amount_specified, int):
            raise ValueError(f"amount_specified must be an integer, got {self.amount_specified!r}")
        if self.amount_specified == 0:
            raise ValueError("amount_specified cannot be zero")

    @property
    def exact_input(self) -> bool:
        return self.amount_specified < 0


def fee_currency(key: PoolKey, params: SwapParams) -> str:
    """
    Currency the fee is charged in.

    Exact input trades pay in the currency being sold, exact output trades
    in the currency being bought.
    """
    if params.exact_input:
        return key.currency0 if params.zero_for_one else key.currency1
    return key.currency1 if params.zero_for_one else key.currency0


def calculate_fee_amount(params: SwapParams, fee: int) -> int:
    """Fee owed on the specified side of a trade, rounded down."""
    if fee < 0 or fee > MAX_LP_FEE:
        raise ValueError(f"fee must be within [0, {MAX_LP_FEE}], got {fee}")
    return abs(params.amount_specified) * fee // MAX_LP_FEE


def calculate_pro_rata(positions: Mapping[str, Decimal], amount: int) -> List[Tuple[str, int]]:
    """
    Split amount across holders proportionally to their positions. Pure function.

    Each holder receives floor(amount * shares / total). The rounding
    remainder goes to the largest holder (lowest wallet ID on ties), so the
    parts always sum to amount. Returns [] when there are no holders.
    """
    holders = sorted(
        (wallet, int(qty)) for wallet, qty in positions.items() if qty > 0
    )
    total = sum(qty for _, qty in holders)
    if amount <= 0 or total == 0:
        return []

    parts = {wallet: amount * qty // total for wallet, qty in holders}
    remainder = amount - sum(parts.values())
    if remainder:
        largest = min(holders, key=lambda h: (-h[1], h[0]))[0]
        parts[largest] += remainder

    return [(wallet, parts[wallet]) for wallet, _ in holders if parts[wallet] > 0]


def distribution_moves(
    positions: Mapping[str, Decimal],
    amount: int,
    asset: str,
    source: str,
    fallback: str,
    contract_id: str,
) -> List[Move]:
    """
    Moves distributing amount of asset from source to liquidity providers.

    With no liquidity providers the whole amount goes to fallback.
    """
    if amount <= 0:
        return []
    parts = calculate_pro_rata(positions, amount)
    if not parts:
        parts = [(fallback, amount)]
    return [
        Move(
            quantity=Decimal(qty),
            unit_symbol=asset,
            source=source,
            dest=wallet,
            contract_id=contract_id,
        )
        for wallet, qty in parts
    ]
