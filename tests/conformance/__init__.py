"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the fee auction.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. auction_invariants.py - Collateral, clock and holder invariants under arbitrary call sequences
2. atomicity.py - Failed calls leave no trace
3. idempotency.py - Settlement and duplicate execution handling
4. determinism.py - Reproducible behavior
5. temporal.py - Time and call ordering

These tests use hypothesis for property-based testing.
"""
