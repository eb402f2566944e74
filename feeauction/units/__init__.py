"""
Units module - Fee auction records.

Each auctioned resource is a FEE_AUCTION unit whose state carries the
auction, its collateral accounts and its frozen terms.

All public functions are re-exported here for convenience.
"""

from .fee_auction import (
    MIN_RESERVE_WINDOW,
    COOLDOWN,
    LIQUIDATION_WINDOW,
    MIN_USURP_FACTOR,
    DEFAULT_BLOCK_TIME,
    DEFAULT_SWAP_FEE,
    GENESIS,
    AuctionTerms,
    AuctionState,
    RentSettlement,
    SwapFee,
    create_fee_auction,
    load_fee_auction,
    to_state_dict,
    current_block,
    calculate_min_collateral,
    calculate_rent_owed,
    calculate_rent_settlement,
    calculate_deposit,
    calculate_withdrawal,
    calculate_bid,
    calculate_liquidation,
    calculate_swap_fee,
    usurp_threshold,
    meets_usurp_threshold,
    is_liquidatable,
    evict,
    settles_rent,
    compute_settle_rent,
    compute_deposit,
    compute_withdrawal,
    compute_modify_bid,
    compute_liquidation,
    compute_swap_fee,
    fee_auction_contract,
    transact as fee_auction_transact,
)

__all__ = [
    'MIN_RESERVE_WINDOW', 'COOLDOWN', 'LIQUIDATION_WINDOW', 'MIN_USURP_FACTOR',
    'DEFAULT_BLOCK_TIME', 'DEFAULT_SWAP_FEE', 'GENESIS',
    'AuctionTerms', 'AuctionState', 'RentSettlement', 'SwapFee',
    'create_fee_auction', 'load_fee_auction', 'to_state_dict', 'current_block',
    'calculate_min_collateral', 'calculate_rent_owed', 'calculate_rent_settlement',
    'calculate_deposit', 'calculate_withdrawal', 'calculate_bid', 'calculate_liquidation',
    'calculate_swap_fee', 'usurp_threshold', 'meets_usurp_threshold', 'is_liquidatable', 'evict',
    'settles_rent', 'compute_settle_rent', 'compute_deposit', 'compute_withdrawal',
    'compute_modify_bid', 'compute_liquidation', 'compute_swap_fee',
    'fee_auction_contract', 'fee_auction_transact',
]
