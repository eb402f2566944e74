"""
Random call sequences against a fee auction, shared by the conformance tests.
"""

from hypothesis import strategies as st

from feeauction import LedgerError

from tests.helpers import advance_blocks


BIDDERS = ("alice", "bob", "carol")
PROVIDERS = ("lp1", "lp2", "carol")


operation = st.one_of(
    st.tuples(st.just("advance"), st.integers(min_value=0, max_value=150)),
    st.tuples(st.just("deposit"), st.sampled_from(BIDDERS), st.integers(min_value=1, max_value=300_000)),
    st.tuples(st.just("withdraw"), st.sampled_from(BIDDERS), st.integers(min_value=1, max_value=300_000)),
    st.tuples(st.just("bid"), st.sampled_from(BIDDERS), st.integers(min_value=0, max_value=3000)),
    st.tuples(st.just("settle")),
    st.tuples(st.just("liquidate")),
    st.tuples(st.just("add_liquidity"), st.sampled_from(PROVIDERS), st.integers(min_value=1, max_value=500)),
    st.tuples(st.just("remove_liquidity"), st.sampled_from(PROVIDERS), st.integers(min_value=1, max_value=500)),
)

operations = st.lists(operation, max_size=30)


def apply_operation(ledger, hooks, key, resource, op) -> bool:
    """Apply one call; returns False if the call was rejected."""
    kind = op[0]
    try:
        if kind == "advance":
            advance_blocks(ledger, op[1])
        elif kind == "deposit":
            hooks.deposit_collateral(resource, op[1], op[2])
        elif kind == "withdraw":
            hooks.withdraw_collateral(resource, op[1], op[2])
        elif kind == "bid":
            hooks.modify_bid(resource, op[1], None, None, op[2])
        elif kind == "settle":
            hooks.settle_rent(resource)
        elif kind == "liquidate":
            hooks.liquidate(resource)
        elif kind == "add_liquidity":
            hooks.before_add_liquidity(key, op[1], op[2])
        elif kind == "remove_liquidity":
            hooks.before_remove_liquidity(key, op[1], op[2])
    except LedgerError:
        return False
    return True
