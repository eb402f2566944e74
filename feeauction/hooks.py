"""
hooks.py - Fee auction entry points bound to a Ledger

FeeAuctionHooks is what the exchange and the bidders talk to. It owns no
auction state itself: every call loads the auction from the ledger, builds a
PendingTransaction with the pure functions in units.fee_auction and executes
it atomically. A call either applies completely or raises and leaves the
ledger untouched.

Custodian triggers (called by the exchange):
    before_initialize        - create the auction and LP share unit of a resource
    before_add_liquidity     - settle rent, then mint LP shares
    before_remove_liquidity  - settle rent, then burn LP shares
    before_swap              - settle rent, then price the trade

Bidder operations:
    deposit_collateral, withdraw_collateral, modify_bid

Permissionless:
    liquidate, settle_rent

Reads:
    get_deposit, get_auction_state, get_owed_rent, current_block
"""

from __future__ import annotations
from decimal import Decimal
from typing import Dict, Optional, Union

from .core import (
    Move, PendingTransaction, TransactionOrigin, OriginType, FeeStrategy,
    ExecuteResult, SYSTEM_WALLET, AUCTION_ESCROW_WALLET,
    UnknownStrategy, WalletNotRegistered, TransactionRejected,
    build_transaction, lp_share, to_amount,
)
from .ledger import Ledger
from .pool import PoolKey, SwapParams, resource_id, lp_symbol, pool_wallet
from .units.fee_auction import (
    AuctionState, RentSettlement, SwapFee, DEFAULT_SWAP_FEE,
    create_fee_auction, load_fee_auction, settle_for_call, build_auction_transaction,
    calculate_rent_owed, compute_settle_rent, compute_deposit, compute_withdrawal,
    compute_modify_bid, compute_liquidation, compute_swap_fee,
)
from .units.fee_auction import current_block as block_at


ResourceRef = Union[str, PoolKey]


class FeeAuctionHooks:
    """
    Stateful facade over the fee auctions held in a ledger.

    Example:
        ledger = Ledger("main", verbose=False)
        hooks = FeeAuctionHooks(ledger)
        key = PoolKey("ETH", "USDC", DYNAMIC_FEE_FLAG)
        resource = hooks.before_initialize(key)
        hooks.deposit_collateral(resource, "alice", 100_000)
        hooks.modify_bid(resource, "alice", None, None, 1000)
    """

    def __init__(self, ledger: Ledger, verbose: Optional[bool] = None):
        self.ledger = ledger
        self.verbose = ledger.verbose if verbose is None else verbose
        self.strategies: Dict[str, FeeStrategy] = {}
        if not ledger.is_registered(AUCTION_ESCROW_WALLET):
            ledger.register_wallet(AUCTION_ESCROW_WALLET)

    def _log(self, message: str) -> None:
        if self.verbose:
            print(f"[AUCTION] {message}")

    @staticmethod
    def _resolve(resource: ResourceRef) -> str:
        if isinstance(resource, PoolKey):
            return resource_id(resource)
        return resource

    def _execute(self, pending: PendingTransaction) -> ExecuteResult:
        result = self.ledger.execute_or_raise(pending)
        if result == ExecuteResult.ALREADY_APPLIED:
            raise TransactionRejected(
                f"intent {pending.intent_id} was already applied; the call would have no effect"
            )
        return result

    def _operation_id(self) -> str:
        """Distinguishes otherwise identical operations within one block."""
        return str(len(self.ledger.transaction_log))

    # ========================================================================
    # STRATEGIES
    # ========================================================================

    def register_strategy(self, strategy_id: str, strategy: FeeStrategy) -> None:
        """
        Make a fee strategy available to bidders under strategy_id.

        Raises:
            TypeError: If strategy has no compute_fee method
            ValueError: If strategy_id is empty or already registered
        """
        if not strategy_id or not strategy_id.strip():
            raise ValueError("strategy_id cannot be empty")
        if not isinstance(strategy, FeeStrategy):
            raise TypeError(f"{strategy!r} does not implement compute_fee(resource, params)")
        if strategy_id in self.strategies:
            raise ValueError(f"Strategy {strategy_id} already registered")
        self.strategies[strategy_id] = strategy
        self._log(f"registered strategy {strategy_id}")

    # ========================================================================
    # CUSTODIAN TRIGGERS
    # ========================================================================

    def before_initialize(
        self,
        key: PoolKey,
        default_fee: int = DEFAULT_SWAP_FEE,
        rent_asset: Optional[str] = None,
        **term_overrides,
    ) -> str:
        """
        Register a resource with the auction.

        Creates the auction record (vacant) and the resource's LP share unit in
        one transaction, and registers the resource's pool wallet.

        Returns:
            The resource ID

        Raises:
            ResourceMustSupportVariableFee: If key.fee is not DYNAMIC_FEE_FLAG
            UnitNotRegistered: If either currency is not a registered unit
            ValueError: If the resource is already initialized
        """
        auction = create_fee_auction(
            key, self.ledger.current_time, rent_asset, default_fee, **term_overrides
        )
        resource = auction.symbol
        if resource in self.ledger.units:
            raise ValueError(f"Resource {resource} already initialized")
        self.ledger.get_unit(key.currency0)
        self.ledger.get_unit(key.currency1)

        for wallet in (pool_wallet(resource), auction.state['escrow_wallet']):
            if not self.ledger.is_registered(wallet):
                self.ledger.register_wallet(wallet)

        shares = lp_share(lp_symbol(resource), f"LP {key.currency0}/{key.currency1}", resource)
        pending = build_transaction(
            self.ledger,
            [],
            origin=TransactionOrigin(OriginType.HOOK, "before_initialize", resource, "INITIALIZE"),
            units_to_create=(auction, shares),
        )
        self._execute(pending)
        self._log(f"initialized {resource} ({key.currency0}/{key.currency1})")
        return resource

    def _settle_and_move_shares(
        self,
        key: PoolKey,
        provider: str,
        shares: int,
        mint: bool,
    ) -> None:
        resource = resource_id(key)
        shares = to_amount(shares, "shares")
        if shares == 0:
            raise ValueError("shares must be positive")
        terms, settlement, _ = settle_for_call(self.ledger, resource)
        source, dest = (SYSTEM_WALLET, provider) if mint else (provider, SYSTEM_WALLET)
        move = Move(
            quantity=Decimal(shares),
            unit_symbol=terms.lp_unit,
            source=source,
            dest=dest,
            contract_id=f"lp_{'mint' if mint else 'burn'}_{resource}_{self._operation_id()}",
        )
        pending = build_auction_transaction(
            self.ledger, resource, terms, settlement, settlement.state, [move],
            "ADD_LIQUIDITY" if mint else "REMOVE_LIQUIDITY",
            OriginType.HOOK, self._operation_id(),
        )
        self._execute(pending)

    def before_add_liquidity(self, key: PoolKey, provider: str, shares: int) -> None:
        """
        Settle rent, then credit provider with shares of the resource's LP unit.

        Rent accrued so far is distributed to the liquidity providers that
        were present while it accrued.
        """
        self._settle_and_move_shares(key, provider, shares, mint=True)
        self._log(f"{provider} added {shares} LP shares to {resource_id(key)}")

    def before_remove_liquidity(self, key: PoolKey, provider: str, shares: int) -> None:
        """Settle rent, then burn shares of provider's LP position."""
        self._settle_and_move_shares(key, provider, shares, mint=False)
        self._log(f"{provider} removed {shares} LP shares from {resource_id(key)}")

    def before_swap(
        self,
        key: PoolKey,
        trader: str,
        params: SwapParams,
        trade_id: Optional[str] = None,
    ) -> SwapFee:
        """
        Settle rent and decide the fee of one trade.

        When a strategy is attached, the delegated fee is transferred from
        trader to the holder's fee recipient in the same transaction as the
        settlement, and the returned SwapFee has lp_fee == 0.

        Raises:
            UnknownStrategy: If the holder's strategy is no longer registered
            InvalidFee: If the strategy returns an invalid fee
            InsufficientFunds: If trader cannot pay the delegated fee
        """
        resource = resource_id(key)
        pending, fee = compute_swap_fee(
            self.ledger, resource, key, trader, params, self.strategies,
            trade_id or self._operation_id(),
        )
        self._execute(pending)
        if fee.delegated:
            self._log(
                f"swap on {resource}: {fee.fee_amount} {fee.fee_currency} "
                f"from {trader} to {fee.fee_recipient} (fee={fee.fee})"
            )
        return fee

    # ========================================================================
    # BIDDER OPERATIONS
    # ========================================================================

    def deposit_collateral(self, resource: ResourceRef, bidder: str, amount: int) -> int:
        """
        Move amount of the rent asset from bidder into its collateral account.

        Returns:
            bidder's collateral balance after the deposit

        Raises:
            ValueError: If amount is not positive
            InsufficientFunds: If bidder does not hold amount
        """
        resource = self._resolve(resource)
        self._execute(compute_deposit(
            self.ledger, resource, bidder, amount, operation_id=self._operation_id()
        ))
        self._log(f"{bidder} deposited {amount} into {resource}")
        return self.get_deposit(resource, bidder)

    def withdraw_collateral(self, resource: ResourceRef, bidder: str, amount: int) -> int:
        """
        Return amount of bidder's collateral to bidder.

        The holder must leave min_reserve_window blocks of rent behind.

        Returns:
            bidder's collateral balance after the withdrawal

        Raises:
            InsufficientCollateral: If the balance does not cover amount plus reserve
        """
        resource = self._resolve(resource)
        self._execute(compute_withdrawal(
            self.ledger, resource, bidder, amount, operation_id=self._operation_id()
        ))
        self._log(f"{bidder} withdrew {amount} from {resource}")
        return self.get_deposit(resource, bidder)

    def modify_bid(
        self,
        resource: ResourceRef,
        bidder: str,
        strategy: Optional[str],
        fee_recipient: Optional[str],
        rent: int,
    ) -> AuctionState:
        """
        Bid rent per block for the resource, or change the holder's bid.

        Args:
            resource: Resource ID or PoolKey
            bidder: Wallet placing the bid
            strategy: Registered strategy ID, or None for the default fee
            fee_recipient: Wallet receiving delegated fees (default: bidder)
            rent: Rent per block in the rent asset

        Returns:
            The auction state after the bid

        Raises:
            UnknownStrategy: If strategy is not registered
            WalletNotRegistered: If fee_recipient is not a registered wallet
            InsufficientCollateral, RentTooLow, RentTooLowDuringCooldown
        """
        resource = self._resolve(resource)
        if strategy is not None and strategy not in self.strategies:
            raise UnknownStrategy(f"strategy {strategy} is not registered")
        recipient = fee_recipient or bidder
        if not self.ledger.is_registered(recipient):
            raise WalletNotRegistered(f"Wallet {recipient} not registered")
        self._execute(compute_modify_bid(
            self.ledger, resource, bidder, strategy, recipient, rent,
            operation_id=self._operation_id(),
        ))
        self._log(f"{bidder} bid {rent}/block on {resource} (strategy={strategy})")
        return self.get_auction_state(resource)

    # ========================================================================
    # PERMISSIONLESS
    # ========================================================================

    def liquidate(self, resource: ResourceRef) -> None:
        """
        Evict a holder whose collateral covers at most liquidation_window blocks.

        Raises:
            NotLiquidatable: If the resource is vacant or the holder is funded
        """
        resource = self._resolve(resource)
        holder = self.get_auction_state(resource).holder
        self._execute(compute_liquidation(
            self.ledger, resource, operation_id=self._operation_id()
        ))
        self._log(f"liquidated {holder} on {resource}")

    def settle_rent(self, resource: ResourceRef) -> RentSettlement:
        """
        Settle outstanding rent now. Anyone may call it.

        Returns:
            The settlement that was applied (owed == 0 on a repeated call)
        """
        resource = self._resolve(resource)
        _, settlement, _ = settle_for_call(self.ledger, resource)
        self._execute(compute_settle_rent(
            self.ledger, resource, operation_id=self._operation_id()
        ))
        if settlement.paid:
            self._log(f"settled {settlement.paid}/{settlement.owed} rent on {resource}")
        if settlement.evicted:
            self._log(f"evicted {settlement.evicted_holder} from {resource}")
        return settlement

    # ========================================================================
    # READS
    # ========================================================================

    def get_deposit(self, resource: ResourceRef, bidder: str) -> int:
        """bidder's stored collateral balance (0 if it never deposited)."""
        return self.get_auction_state(resource).deposit_of(bidder)

    def get_auction_state(self, resource: ResourceRef) -> AuctionState:
        """Stored auction state; a vacant state for an unknown resource."""
        resource = self._resolve(resource)
        if resource not in self.ledger.units:
            return AuctionState()
        _, state = load_fee_auction(self.ledger, resource)
        return state

    def get_owed_rent(self, resource: ResourceRef) -> int:
        """Rent the next settlement would charge, before truncation to the deposit."""
        resource = self._resolve(resource)
        terms, state = load_fee_auction(self.ledger, resource)
        return calculate_rent_owed(state, block_at(terms, self.ledger.current_time))

    def current_block(self, resource: ResourceRef) -> int:
        terms, _ = load_fee_auction(self.ledger, self._resolve(resource))
        return block_at(terms, self.ledger.current_time)
