"""
feeauction - Continuous Auction for the Right to Set a Market's Fee

A double-entry ledger holding every asset, and a fee auction per resource
recorded in that ledger. The holder of a resource's auction sets and collects
its trading fee and streams rent to the resource's liquidity providers.

Usage:
    from feeauction import (
        Ledger, FeeAuctionHooks, PoolKey, SwapParams, token,
        Move, build_transaction, SYSTEM_WALLET, DYNAMIC_FEE_FLAG,
    )

    ledger = Ledger("main", verbose=False)
    ledger.register_unit(token("ETH", "Ether"))
    ledger.register_unit(token("USDC", "USD Coin"))
    ledger.register_wallet("alice")

    # Fund wallets via SYSTEM_WALLET (proper issuance)
    ledger.execute(build_transaction(ledger, [
        Move(Decimal("1000000"), "ETH", SYSTEM_WALLET, "alice", "initial_balance")
    ]))

    hooks = FeeAuctionHooks(ledger)
    resource = hooks.before_initialize(PoolKey("ETH", "USDC", DYNAMIC_FEE_FLAG))
    hooks.deposit_collateral(resource, "alice", 100_000)
    hooks.modify_bid(resource, "alice", None, None, 1000)
"""

# Core types
from .core import (
    LedgerView,
    SmartContract,
    FeeStrategy,
    Move,
    Transaction,
    PendingTransaction,
    TransactionOrigin,
    OriginType,
    build_transaction,
    empty_pending_transaction,
    content_hash,
    Unit,
    UnitStateChange,
    ExecuteResult,
    LedgerError,
    InsufficientFunds,
    BalanceConstraintViolation,
    TransferRuleViolation,
    UnitNotRegistered,
    WalletNotRegistered,
    TransactionRejected,
    AuctionError,
    InsufficientCollateral,
    RentTooLow,
    RentTooLowDuringCooldown,
    NotLiquidatable,
    ArithmeticOverflow,
    ResourceMustSupportVariableFee,
    UnknownStrategy,
    InvalidFee,
    checked_add,
    checked_mul,
    to_amount,
    non_transferable_rule,
    token,
    lp_share,
    SYSTEM_WALLET,
    AUCTION_ESCROW_WALLET,
    UNIT_TYPE_TOKEN,
    UNIT_TYPE_LP_SHARE,
    UNIT_TYPE_FEE_AUCTION,
    MAX_AMOUNT,
)

# Ledger
from .ledger import Ledger

# Custodian primitives
from .pool import (
    DYNAMIC_FEE_FLAG,
    MAX_LP_FEE,
    PoolKey,
    SwapParams,
    resource_id,
    lp_symbol,
    pool_wallet,
    fee_currency,
    calculate_fee_amount,
    calculate_pro_rata,
    distribution_moves,
)

# Fee auction
from .units import (
    MIN_RESERVE_WINDOW,
    COOLDOWN,
    LIQUIDATION_WINDOW,
    MIN_USURP_FACTOR,
    DEFAULT_BLOCK_TIME,
    DEFAULT_SWAP_FEE,
    AuctionTerms,
    AuctionState,
    RentSettlement,
    SwapFee,
    create_fee_auction,
    load_fee_auction,
    current_block,
    compute_settle_rent,
    compute_deposit,
    compute_withdrawal,
    compute_modify_bid,
    compute_liquidation,
    compute_swap_fee,
    fee_auction_contract,
    fee_auction_transact,
)

# Entry points and lifecycle
from .hooks import FeeAuctionHooks
from .lifecycle_engine import LifecycleEngine


__all__ = [
    # Core
    'LedgerView', 'SmartContract', 'FeeStrategy', 'Move', 'Transaction', 'PendingTransaction',
    'TransactionOrigin', 'OriginType', 'build_transaction', 'empty_pending_transaction',
    'content_hash', 'Unit', 'UnitStateChange', 'ExecuteResult',
    'checked_add', 'checked_mul', 'to_amount', 'non_transferable_rule', 'token', 'lp_share',
    'SYSTEM_WALLET', 'AUCTION_ESCROW_WALLET',
    'UNIT_TYPE_TOKEN', 'UNIT_TYPE_LP_SHARE', 'UNIT_TYPE_FEE_AUCTION', 'MAX_AMOUNT',
    # Exceptions
    'LedgerError', 'InsufficientFunds', 'BalanceConstraintViolation', 'TransferRuleViolation',
    'UnitNotRegistered', 'WalletNotRegistered', 'TransactionRejected',
    'AuctionError', 'InsufficientCollateral', 'RentTooLow', 'RentTooLowDuringCooldown',
    'NotLiquidatable', 'ArithmeticOverflow', 'ResourceMustSupportVariableFee',
    'UnknownStrategy', 'InvalidFee',
    # Ledger
    'Ledger',
    # Custodian primitives
    'DYNAMIC_FEE_FLAG', 'MAX_LP_FEE', 'PoolKey', 'SwapParams', 'resource_id', 'lp_symbol',
    'pool_wallet', 'fee_currency', 'calculate_fee_amount', 'calculate_pro_rata',
    'distribution_moves',
    # Fee auction
    'MIN_RESERVE_WINDOW', 'COOLDOWN', 'LIQUIDATION_WINDOW', 'MIN_USURP_FACTOR',
    'DEFAULT_BLOCK_TIME', 'DEFAULT_SWAP_FEE',
    'AuctionTerms', 'AuctionState', 'RentSettlement', 'SwapFee',
    'create_fee_auction', 'load_fee_auction', 'current_block',
    'compute_settle_rent', 'compute_deposit', 'compute_withdrawal', 'compute_modify_bid',
    'compute_liquidation', 'compute_swap_fee', 'fee_auction_contract', 'fee_auction_transact',
    # Entry points and lifecycle
    'FeeAuctionHooks', 'LifecycleEngine',
]

__version__ = '1.0.0'
