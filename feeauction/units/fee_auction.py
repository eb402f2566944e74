"""
fee_auction.py - Continuous Auction for the Right to Set a Resource's Fee

Whoever holds a resource's fee auction sets (and collects) the fee charged on
every trade of that resource. The right is rented, not bought: the holder
streams rent every block to the resource's liquidity providers out of
collateral it deposited, and anyone may take the right over by bidding
enough more rent.

ARCHITECTURE (Pure Function Pattern):
=====================================

1. FROZEN DATACLASSES (explicit inputs):
   - AuctionTerms: configuration fixed when the resource is initialized
   - AuctionState: holder, rent, clocks and collateral accounts
   - RentSettlement: result of settling rent at a block

2. PURE CALCULATION FUNCTIONS (calculate_*):
   - All inputs explicit, no LedgerView
   - Raise the auction errors (InsufficientCollateral, RentTooLow, ...)

3. ADAPTER FUNCTIONS (load_fee_auction / to_state_dict):
   - The ONLY place that converts between unit state dicts and dataclasses

4. CONVENIENCE FUNCTIONS (compute_*):
   - Take (view, symbol, ...) and return a PendingTransaction
   - Every one of them settles rent first (see settles_rent), and the
     settlement is part of the same transaction as the operation

Key Formulas:
    owed           = rent_rate * (now - last_settled_at)
    paid           = min(owed, holder_deposit)            (paid < owed => eviction)
    min_collateral = rent * min_reserve_window            (bids; holder withdrawals)
    usurp requires   new_rent >= rent_rate * min_usurp_factor
    liquidatable   = holder_deposit <= rent_rate * liquidation_window
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_DOWN
from functools import wraps
from typing import Dict, Any, List, Optional, Tuple, Mapping, Callable

from ..core import (
    LedgerView, Move, PendingTransaction, Unit, UnitStateChange,
    TransactionOrigin, OriginType, FeeStrategy,
    AUCTION_ESCROW_WALLET, UNIT_TYPE_FEE_AUCTION,
    LedgerError, InsufficientCollateral, RentTooLow, RentTooLowDuringCooldown,
    NotLiquidatable, ResourceMustSupportVariableFee, UnknownStrategy, InvalidFee,
    build_transaction, empty_pending_transaction,
    checked_add, checked_mul, to_amount, non_transferable_rule,
    _freeze_state,
)
from ..pool import (
    PoolKey, SwapParams, MAX_LP_FEE,
    resource_id, lp_symbol, pool_wallet,
    fee_currency, calculate_fee_amount, distribution_moves,
)


# Blocks of rent a bid must be collateralized for, and a holder must keep.
MIN_RESERVE_WINDOW = 100

# Blocks after acquisition during which the holder may not lower its rent.
COOLDOWN = 100

# A holder with at most this many blocks of rent left can be liquidated.
LIQUIDATION_WINDOW = 20

# A usurping bid must be at least this multiple of the incumbent's rent.
MIN_USURP_FACTOR = Decimal("1.2")

DEFAULT_BLOCK_TIME = timedelta(seconds=12)
GENESIS = datetime(1970, 1, 1)

# Fee applied when no strategy is attached: 0.30%.
DEFAULT_SWAP_FEE = 3000


# ============================================================================
# FROZEN DATACLASSES
# ============================================================================

@dataclass(frozen=True, slots=True)
class AuctionTerms:
    """
    Immutable configuration of a resource's fee auction.

    Set once by the initialization hook and stored alongside the auction
    state. rent_asset is one of the resource's two currencies.
    """
    resource: str
    currency0: str
    currency1: str
    rent_asset: str
    default_fee: int = DEFAULT_SWAP_FEE
    min_reserve_window: int = MIN_RESERVE_WINDOW
    cooldown: int = COOLDOWN
    liquidation_window: int = LIQUIDATION_WINDOW
    min_usurp_factor: Decimal = MIN_USURP_FACTOR
    block_time: timedelta = DEFAULT_BLOCK_TIME
    genesis: datetime = GENESIS
    escrow_wallet: str = AUCTION_ESCROW_WALLET

    def __post_init__(self):
        if not isinstance(self.min_usurp_factor, Decimal):
            object.__setattr__(self, 'min_usurp_factor', Decimal(str(self.min_usurp_factor)))
        if self.rent_asset not in (self.currency0, self.currency1):
            raise ValueError(
                f"rent_asset {self.rent_asset!r} must be {self.currency0!r} or {self.currency1!r}"
            )
        if not 0 <= self.default_fee <= MAX_LP_FEE:
            raise ValueError(f"default_fee must be within [0, {MAX_LP_FEE}], got {self.default_fee}")
        for name in ('min_reserve_window', 'cooldown', 'liquidation_window'):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative, got {getattr(self, name)}")
        if self.min_usurp_factor < Decimal("1"):
            raise ValueError(f"min_usurp_factor must be at least 1, got {self.min_usurp_factor}")
        if self.block_time <= timedelta(0):
            raise ValueError(f"block_time must be positive, got {self.block_time}")

    @property
    def lp_unit(self) -> str:
        return lp_symbol(self.resource)

    @property
    def pool_wallet(self) -> str:
        return pool_wallet(self.resource)


@dataclass(frozen=True, slots=True)
class AuctionState:
    """
    Snapshot of a resource's auction at a block.

    holder is None when the resource is vacant; a vacant resource always has
    rent_rate == 0, strategy None and fee_recipient None. deposits maps every
    bidder that ever deposited to its collateral balance in rent_asset.
    """
    holder: Optional[str] = None
    strategy: Optional[str] = None
    fee_recipient: Optional[str] = None
    rent_rate: int = 0
    last_settled_at: int = 0
    last_acquired_at: int = 0
    deposits: Mapping[str, int] = field(default_factory=dict)

    @property
    def is_vacant(self) -> bool:
        return self.holder is None

    def deposit_of(self, bidder: Optional[str]) -> int:
        if bidder is None:
            return 0
        return self.deposits.get(bidder, 0)

    @property
    def holder_deposit(self) -> int:
        return self.deposit_of(self.holder)


@dataclass(frozen=True, slots=True)
class RentSettlement:
    """
    Result of settling rent up to a block.

    state: auction state after settlement (possibly evicted)
    owed: rent accrued since the previous settlement
    paid: rent actually taken from the holder's deposit (<= owed)
    evicted: True when paid < owed and the holder lost the resource
    moves: escrow -> liquidity provider transfers of paid
    """
    state: AuctionState
    owed: int
    paid: int
    evicted: bool
    evicted_holder: Optional[str] = None
    moves: Tuple[Move, ...] = ()


@dataclass(frozen=True, slots=True)
class SwapFee:
    """
    Fee decision for one trade.

    lp_fee is the fee the exchange applies for its liquidity providers.
    When a strategy is attached, lp_fee is 0 and fee_amount of fee_currency
    goes to fee_recipient instead.
    """
    lp_fee: int
    fee: int
    fee_amount: int = 0
    fee_currency: Optional[str] = None
    fee_recipient: Optional[str] = None

    @property
    def delegated(self) -> bool:
        return self.fee_recipient is not None


# ============================================================================
# ADAPTER FUNCTIONS
# ============================================================================

_TERM_FIELDS = (
    'resource', 'currency0', 'currency1', 'rent_asset', 'default_fee',
    'min_reserve_window', 'cooldown', 'liquidation_window', 'min_usurp_factor',
    'block_time', 'genesis', 'escrow_wallet',
)


def to_state_dict(terms: AuctionTerms, state: AuctionState) -> Dict[str, Any]:
    """Flatten terms and state into a unit state dict."""
    result = {name: getattr(terms, name) for name in _TERM_FIELDS}
    result.update({
        'holder': state.holder,
        'strategy': state.strategy,
        'fee_recipient': state.fee_recipient,
        'rent_rate': state.rent_rate,
        'last_settled_at': state.last_settled_at,
        'last_acquired_at': state.last_acquired_at,
        'deposits': dict(state.deposits),
    })
    return result


def terms_from_state(unit_state: Mapping[str, Any]) -> AuctionTerms:
    return AuctionTerms(**{name: unit_state[name] for name in _TERM_FIELDS})


def auction_state_from_state(unit_state: Mapping[str, Any]) -> AuctionState:
    return AuctionState(
        holder=unit_state.get('holder'),
        strategy=unit_state.get('strategy'),
        fee_recipient=unit_state.get('fee_recipient'),
        rent_rate=unit_state.get('rent_rate', 0),
        last_settled_at=unit_state.get('last_settled_at', 0),
        last_acquired_at=unit_state.get('last_acquired_at', 0),
        deposits=dict(unit_state.get('deposits', {})),
    )


def load_fee_auction(view: LedgerView, symbol: str) -> Tuple[AuctionTerms, AuctionState]:
    """
    Read a fee auction from the ledger.

    The only place that touches LedgerView for auction reads.

    Raises:
        UnitNotRegistered: If the resource was never initialized
        ValueError: If the unit is not a fee auction
    """
    unit = view.get_unit(symbol)
    if unit.unit_type != UNIT_TYPE_FEE_AUCTION:
        raise ValueError(f"{symbol} is not a fee auction (unit_type={unit.unit_type})")
    unit_state = view.get_unit_state(symbol)
    return terms_from_state(unit_state), auction_state_from_state(unit_state)


def current_block(terms: AuctionTerms, timestamp: datetime) -> int:
    """Whole blocks elapsed between the auction's genesis and timestamp."""
    if timestamp < terms.genesis:
        raise ValueError(f"timestamp {timestamp} precedes genesis {terms.genesis}")
    return (timestamp - terms.genesis) // terms.block_time


# ============================================================================
# PURE CALCULATION FUNCTIONS
# ============================================================================

def calculate_min_collateral(rent: int, window: int) -> int:
    """Collateral needed to cover window blocks of rent."""
    return checked_mul(rent, window)


def calculate_rent_owed(state: AuctionState, now: int) -> int:
    """
    Rent accrued since the last settlement.

    Raises:
        LedgerError: If now precedes the last settlement
        ArithmeticOverflow: If rent_rate * elapsed exceeds MAX_AMOUNT
    """
    if now < state.last_settled_at:
        raise LedgerError(
            f"block {now} precedes last settlement at block {state.last_settled_at}"
        )
    return checked_mul(state.rent_rate, now - state.last_settled_at)


def evict(state: AuctionState, now: int) -> AuctionState:
    """
    Reset the resource to vacant.

    last_acquired_at is set to now so the vacancy restarts the cooldown clock.
    Deposits are untouched; the former holder keeps whatever it has left.
    """
    return replace(
        state,
        holder=None,
        strategy=None,
        fee_recipient=None,
        rent_rate=0,
        last_acquired_at=now,
    )


def calculate_rent_settlement(
    terms: AuctionTerms,
    state: AuctionState,
    now: int,
    lp_positions: Mapping[str, Decimal],
) -> RentSettlement:
    """
    Settle rent owed by the holder up to block now. Pure function.

    The holder pays min(owed, deposit). Paying less than owed evicts the
    holder in the same settlement. Settling twice at the same block is a
    no-op the second time.

    Args:
        terms: Auction configuration
        state: Auction state before settlement
        now: Current block
        lp_positions: LP share positions used to distribute the rent

    Returns:
        RentSettlement with the new state and the distribution moves
    """
    owed = calculate_rent_owed(state, now)
    if owed == 0 or state.holder is None:
        return RentSettlement(
            state=replace(state, last_settled_at=now),
            owed=0,
            paid=0,
            evicted=False,
        )

    holder = state.holder
    available = state.deposit_of(holder)
    paid = min(owed, available)

    deposits = dict(state.deposits)
    deposits[holder] = available - paid
    settled = replace(state, deposits=deposits, last_settled_at=now)

    moves = distribution_moves(
        lp_positions,
        paid,
        asset=terms.rent_asset,
        source=terms.escrow_wallet,
        fallback=terms.pool_wallet,
        contract_id=f"fee_auction_rent_{terms.resource}",
    )

    evicted = paid < owed
    if evicted:
        settled = evict(settled, now)

    return RentSettlement(
        state=settled,
        owed=owed,
        paid=paid,
        evicted=evicted,
        evicted_holder=holder if evicted else None,
        moves=tuple(moves),
    )


def calculate_deposit(state: AuctionState, bidder: str, amount: int) -> AuctionState:
    """Credit amount to bidder's collateral account."""
    if amount <= 0:
        raise ValueError(f"deposit amount must be positive, got {amount}")
    deposits = dict(state.deposits)
    deposits[bidder] = checked_add(deposits.get(bidder, 0), amount)
    return replace(state, deposits=deposits)


def calculate_withdrawal(
    terms: AuctionTerms,
    state: AuctionState,
    bidder: str,
    amount: int,
) -> AuctionState:
    """
    Debit amount from bidder's collateral account.

    The holder must keep min_reserve_window blocks of rent deposited;
    any other bidder may withdraw everything.

    Raises:
        InsufficientCollateral: If balance < amount + reserve
    """
    if amount <= 0:
        raise ValueError(f"withdrawal amount must be positive, got {amount}")
    reserve = 0
    if bidder == state.holder:
        reserve = calculate_min_collateral(state.rent_rate, terms.min_reserve_window)
    balance = state.deposit_of(bidder)
    if balance < checked_add(amount, reserve):
        raise InsufficientCollateral(
            f"{bidder} has {balance} deposited, cannot withdraw {amount} "
            f"keeping a reserve of {reserve}"
        )
    deposits = dict(state.deposits)
    deposits[bidder] = balance - amount
    return replace(state, deposits=deposits)


def usurp_threshold(current_rent: int, factor: Decimal) -> int:
    """Smallest rent that usurps current_rent: current_rent * factor rounded toward zero."""
    return int((Decimal(current_rent) * factor).to_integral_value(rounding=ROUND_DOWN))


def meets_usurp_threshold(new_rent: int, current_rent: int, factor: Decimal) -> bool:
    return new_rent >= usurp_threshold(current_rent, factor)


def calculate_bid(
    terms: AuctionTerms,
    state: AuctionState,
    now: int,
    bidder: str,
    strategy: Optional[str],
    fee_recipient: Optional[str],
    new_rent: int,
) -> AuctionState:
    """
    Apply a bid to a settled auction state. Pure function.

    The holder modifying its own bid keeps last_acquired_at, but may not lower
    its rent until cooldown blocks after acquiring. Anyone else usurps the
    holder by bidding at least min_usurp_factor times the current rent; a
    vacant resource has rent 0, so any collateralized bid wins it.

    Raises:
        InsufficientCollateral: If bidder's deposit < new_rent * min_reserve_window
        RentTooLowDuringCooldown: If the holder lowers rent inside the cooldown
        RentTooLow: If a usurping bid misses the premium
    """
    min_collateral = calculate_min_collateral(new_rent, terms.min_reserve_window)
    balance = state.deposit_of(bidder)
    if balance < min_collateral:
        raise InsufficientCollateral(
            f"{bidder} has {balance} deposited, bid of {new_rent} needs {min_collateral}"
        )

    if bidder == state.holder:
        if new_rent < state.rent_rate and now <= state.last_acquired_at + terms.cooldown:
            raise RentTooLowDuringCooldown(
                f"cannot lower rent from {state.rent_rate} to {new_rent} before block "
                f"{state.last_acquired_at + terms.cooldown + 1}"
            )
        return replace(
            state,
            rent_rate=new_rent,
            strategy=strategy,
            fee_recipient=fee_recipient,
        )

    if not meets_usurp_threshold(new_rent, state.rent_rate, terms.min_usurp_factor):
        raise RentTooLow(
            f"bid of {new_rent} is below {usurp_threshold(state.rent_rate, terms.min_usurp_factor)} "
            f"({terms.min_usurp_factor} x current rent {state.rent_rate})"
        )
    return replace(
        state,
        holder=bidder,
        strategy=strategy,
        fee_recipient=fee_recipient,
        rent_rate=new_rent,
        last_acquired_at=now,
    )


def is_liquidatable(terms: AuctionTerms, state: AuctionState) -> bool:
    """True if the holder has at most liquidation_window blocks of rent left."""
    if state.holder is None:
        return False
    buffer = calculate_min_collateral(state.rent_rate, terms.liquidation_window)
    return state.holder_deposit <= buffer


def calculate_liquidation(
    terms: AuctionTerms,
    settlement: RentSettlement,
    now: int,
) -> AuctionState:
    """
    Evict an under-collateralized holder after settlement.

    A settlement that already evicted the holder counts as a successful
    liquidation.

    Raises:
        NotLiquidatable: If the resource is vacant or the holder still has
                         more than liquidation_window blocks of rent deposited
    """
    if settlement.evicted:
        return settlement.state
    state = settlement.state
    if state.holder is None:
        raise NotLiquidatable(f"{terms.resource} has no holder")
    if not is_liquidatable(terms, state):
        raise NotLiquidatable(
            f"{state.holder} has {state.holder_deposit} deposited, above "
            f"{terms.liquidation_window} blocks of rent at {state.rent_rate}"
        )
    return evict(state, now)


def calculate_swap_fee(
    terms: AuctionTerms,
    state: AuctionState,
    key: PoolKey,
    params: SwapParams,
    strategy: Optional[FeeStrategy],
) -> SwapFee:
    """
    Price one trade.

    Without a strategy the default fee goes to the liquidity providers as
    usual. With one, the strategy's fee is charged on the specified side of
    the trade and redirected to the holder's fee recipient; the LP fee is 0.

    Raises:
        InvalidFee: If the strategy returns a non-integer or a fee outside [0, MAX_LP_FEE]
    """
    if strategy is None:
        return SwapFee(lp_fee=terms.default_fee, fee=terms.default_fee)

    fee = strategy.compute_fee(terms.resource, params)
    if isinstance(fee, bool) or not isinstance(fee, int):
        raise InvalidFee(f"strategy {state.strategy} returned non-integer fee {fee!r}")
    if fee < 0 or fee > MAX_LP_FEE:
        raise InvalidFee(f"strategy {state.strategy} returned fee {fee} outside [0, {MAX_LP_FEE}]")

    return SwapFee(
        lp_fee=0,
        fee=fee,
        fee_amount=calculate_fee_amount(params, fee),
        fee_currency=fee_currency(key, params),
        fee_recipient=state.fee_recipient,
    )


# ============================================================================
# FACTORY
# ============================================================================

def create_fee_auction(
    key: PoolKey,
    initialized_at: datetime,
    rent_asset: Optional[str] = None,
    default_fee: int = DEFAULT_SWAP_FEE,
    **term_overrides,
) -> Unit:
    """
    Create the auction record for a resource.

    Args:
        key: Resource configuration; must carry DYNAMIC_FEE_FLAG
        initialized_at: Time of initialization (starts both clocks)
        rent_asset: Currency rent is paid in (default: key.currency0)
        default_fee: Fee applied while no strategy is attached, in pips
        **term_overrides: Any other AuctionTerms field (cooldown, block_time, ...)

    Returns:
        A non-transferable Unit whose state is a vacant auction

    Raises:
        ResourceMustSupportVariableFee: If key.fee is not DYNAMIC_FEE_FLAG
    """
    if not key.is_dynamic_fee:
        raise ResourceMustSupportVariableFee(
            f"resource {key.currency0}/{key.currency1} has static fee {key.fee}"
        )
    terms = AuctionTerms(
        resource=resource_id(key),
        currency0=key.currency0,
        currency1=key.currency1,
        rent_asset=rent_asset or key.currency0,
        default_fee=default_fee,
        **term_overrides,
    )
    now = current_block(terms, initialized_at)
    state = AuctionState(last_settled_at=now, last_acquired_at=now)

    return Unit(
        symbol=terms.resource,
        name=f"Fee auction {key.currency0}/{key.currency1}",
        unit_type=UNIT_TYPE_FEE_AUCTION,
        decimal_places=0,
        transfer_rule=non_transferable_rule,
        _frozen_state=_freeze_state(to_state_dict(terms, state)),
    )


# ============================================================================
# FORCED SETTLEMENT
# ============================================================================

def settle_for_call(view: LedgerView, symbol: str) -> Tuple[AuctionTerms, RentSettlement, int]:
    """Load an auction and settle its rent at the view's current block."""
    terms, state = load_fee_auction(view, symbol)
    now = current_block(terms, view.current_time)
    settlement = calculate_rent_settlement(
        terms, state, now, view.get_positions(terms.lp_unit)
    )
    return terms, settlement, now


def build_auction_transaction(
    view: LedgerView,
    symbol: str,
    terms: AuctionTerms,
    settlement: RentSettlement,
    new_state: AuctionState,
    moves: List[Move],
    event_type: str,
    origin_type: OriginType = OriginType.CONTRACT,
    operation_id: Optional[str] = None,
) -> PendingTransaction:
    """
    One transaction holding the rent settlement and the operation.

    operation_id, when given, becomes part of the origin so that two equal
    calls in the same block are distinct transactions rather than one
    deduplicated intent.

    Returns an empty transaction when neither state nor balances change.
    """
    old_state = view.get_unit_state(symbol)
    new_state_dict = to_state_dict(terms, new_state)
    all_moves = list(settlement.moves) + list(moves)
    if new_state_dict == old_state and not all_moves:
        return empty_pending_transaction(view)

    origin = TransactionOrigin(
        origin_type=origin_type,
        source_id=f"fee_auction:{operation_id}" if operation_id else "fee_auction",
        unit_symbol=symbol,
        event_type=event_type,
    )
    state_changes = [UnitStateChange(unit=symbol, old_state=old_state, new_state=new_state_dict)]
    return build_transaction(view, all_moves, state_changes, origin=origin)


AuctionOperation = Callable[..., Tuple[AuctionState, List[Move]]]


def settles_rent(
    event_type: str,
    origin_type: OriginType = OriginType.CONTRACT,
) -> Callable[[AuctionOperation], Callable[..., PendingTransaction]]:
    """
    Decorate an auction operation so that it always runs on settled rent.

    The decorated function is called as f(view, symbol, *args) and receives
    (view, terms, settlement, now, *args); it returns the new AuctionState and
    its own moves. The wrapper folds the settlement moves and the new state
    into a single PendingTransaction, so a failing operation leaves no
    settlement behind either.

    The wrapper also accepts the keyword arguments operation_id (see
    build_auction_transaction) and origin_type, which overrides the default
    origin of the event.
    """
    default_origin = origin_type

    def decorator(func: AuctionOperation) -> Callable[..., PendingTransaction]:
        @wraps(func)
        def wrapper(
            view: LedgerView,
            symbol: str,
            *args,
            operation_id: Optional[str] = None,
            origin_type: Optional[OriginType] = None,
            **kwargs,
        ) -> PendingTransaction:
            terms, settlement, now = settle_for_call(view, symbol)
            new_state, moves = func(view, terms, settlement, now, *args, **kwargs)
            return build_auction_transaction(
                view, symbol, terms, settlement, new_state, moves, event_type,
                origin_type or default_origin, operation_id,
            )
        return wrapper
    return decorator


# ============================================================================
# CONVENIENCE FUNCTIONS (LedgerView -> PendingTransaction)
# ============================================================================

@settles_rent("SETTLE_RENT")
def compute_settle_rent(view, terms, settlement, now):
    """
    Settle outstanding rent of a resource.

    Called as compute_settle_rent(view, symbol). Idempotent within a block.
    """
    return settlement.state, []


@settles_rent("DEPOSIT", OriginType.USER_ACTION)
def compute_deposit(view, terms, settlement, now, bidder: str, amount: int):
    """
    Deposit collateral into bidder's account.

    Called as compute_deposit(view, symbol, bidder, amount). Moves amount of
    the rent asset from bidder into escrow.
    """
    amount = to_amount(amount)
    new_state = calculate_deposit(settlement.state, bidder, amount)
    moves = [Move(
        quantity=Decimal(amount),
        unit_symbol=terms.rent_asset,
        source=bidder,
        dest=terms.escrow_wallet,
        contract_id=f"fee_auction_deposit_{terms.resource}",
    )]
    return new_state, moves


@settles_rent("WITHDRAW", OriginType.USER_ACTION)
def compute_withdrawal(view, terms, settlement, now, bidder: str, amount: int):
    """
    Withdraw collateral from bidder's account back to bidder.

    Called as compute_withdrawal(view, symbol, bidder, amount).
    """
    amount = to_amount(amount)
    new_state = calculate_withdrawal(terms, settlement.state, bidder, amount)
    moves = [Move(
        quantity=Decimal(amount),
        unit_symbol=terms.rent_asset,
        source=terms.escrow_wallet,
        dest=bidder,
        contract_id=f"fee_auction_withdraw_{terms.resource}",
    )]
    return new_state, moves


@settles_rent("MODIFY_BID", OriginType.USER_ACTION)
def compute_modify_bid(
    view, terms, settlement, now,
    bidder: str,
    strategy: Optional[str],
    fee_recipient: Optional[str],
    rent: int,
):
    """
    Place or modify a bid for the resource.

    Called as compute_modify_bid(view, symbol, bidder, strategy, fee_recipient, rent).
    fee_recipient defaults to the bidder.
    """
    if not bidder or not bidder.strip():
        raise ValueError("bidder cannot be empty")
    rent = to_amount(rent, "rent")
    new_state = calculate_bid(
        terms, settlement.state, now, bidder, strategy, fee_recipient or bidder, rent
    )
    return new_state, []


@settles_rent("LIQUIDATE")
def compute_liquidation(view, terms, settlement, now):
    """
    Evict an under-collateralized holder. Callable by anyone.

    Called as compute_liquidation(view, symbol).
    """
    return calculate_liquidation(terms, settlement, now), []


def compute_swap_fee(
    view: LedgerView,
    symbol: str,
    key: PoolKey,
    trader: str,
    params: SwapParams,
    strategies: Mapping[str, FeeStrategy],
    trade_id: str,
) -> Tuple[PendingTransaction, SwapFee]:
    """
    Settle rent and price a trade on the resource.

    Built from the same two steps as settles_rent (settle_for_call and
    build_auction_transaction), and additionally returns the SwapFee so the
    exchange can apply lp_fee.

    Args:
        view: Read-only ledger access
        symbol: Resource ID
        key: Resource configuration (selects the fee currency)
        trader: Wallet paying the delegated fee
        params: Trade parameters
        strategies: Registered strategies by ID
        trade_id: Unique trade identifier (distinguishes identical trades)

    Raises:
        UnknownStrategy: If the holder's strategy ID is not registered
        InvalidFee: If the strategy returns an invalid fee
    """
    terms, settlement, now = settle_for_call(view, symbol)
    state = settlement.state

    strategy = None
    if state.strategy is not None:
        if state.strategy not in strategies:
            raise UnknownStrategy(f"strategy {state.strategy} is not registered")
        strategy = strategies[state.strategy]

    fee = calculate_swap_fee(terms, state, key, params, strategy)

    moves: List[Move] = []
    if fee.delegated and fee.fee_amount > 0 and trader != fee.fee_recipient:
        moves.append(Move(
            quantity=Decimal(fee.fee_amount),
            unit_symbol=fee.fee_currency,
            source=trader,
            dest=fee.fee_recipient,
            contract_id=f"fee_auction_swap_fee_{terms.resource}_{trade_id}",
            metadata={'fee': fee.fee},
        ))

    pending = build_auction_transaction(
        view, symbol, terms, settlement, state, moves, "SWAP", OriginType.HOOK, trade_id,
    )
    return pending, fee


# ============================================================================
# TRANSACTION INTERFACE
# ============================================================================

def transact(
    view: LedgerView,
    symbol: str,
    event_type: str,
    **kwargs
) -> PendingTransaction:
    """
    Route a fee auction event to its compute function.

    Event types:
        - SETTLE_RENT: no parameters
        - DEPOSIT: requires 'bidder', 'amount'
        - WITHDRAW: requires 'bidder', 'amount'
        - MODIFY_BID: requires 'bidder', 'rent'; optional 'strategy', 'fee_recipient'
        - LIQUIDATE: no parameters

    Example:
        result = transact(view, resource, "DEPOSIT", bidder="alice", amount=150_000)
        result = transact(view, resource, "MODIFY_BID", bidder="alice", rent=1000)
    """
    if event_type == 'SETTLE_RENT':
        return compute_settle_rent(view, symbol)

    elif event_type in ('DEPOSIT', 'WITHDRAW'):
        bidder = kwargs.get('bidder')
        amount = kwargs.get('amount')
        if bidder is None:
            raise ValueError(f"Missing 'bidder' parameter for {event_type} event on {symbol}")
        if amount is None:
            raise ValueError(f"Missing 'amount' parameter for {event_type} event on {symbol}")
        if event_type == 'DEPOSIT':
            return compute_deposit(view, symbol, bidder, amount)
        return compute_withdrawal(view, symbol, bidder, amount)

    elif event_type == 'MODIFY_BID':
        bidder = kwargs.get('bidder')
        rent = kwargs.get('rent')
        if bidder is None:
            raise ValueError(f"Missing 'bidder' parameter for MODIFY_BID event on {symbol}")
        if rent is None:
            raise ValueError(f"Missing 'rent' parameter for MODIFY_BID event on {symbol}")
        return compute_modify_bid(
            view, symbol, bidder, kwargs.get('strategy'), kwargs.get('fee_recipient'), rent
        )

    elif event_type == 'LIQUIDATE':
        return compute_liquidation(view, symbol)

    else:
        raise ValueError(f"Unknown event type '{event_type}' for fee auction {symbol}")


# ============================================================================
# SMART CONTRACT
# ============================================================================

def fee_auction_contract(
    view: LedgerView,
    symbol: str,
    timestamp: datetime,
) -> PendingTransaction:
    """
    SmartContract keeper for the LifecycleEngine.

    Liquidates the holder as soon as it is liquidatable (including when the
    pending rent alone would evict it); otherwise does nothing.
    """
    terms, settlement, now = settle_for_call(view, symbol)
    if settlement.evicted or is_liquidatable(terms, settlement.state):
        return compute_liquidation(view, symbol, origin_type=OriginType.LIFECYCLE)
    return empty_pending_transaction(view)
