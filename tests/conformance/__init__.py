"""
Conformance Test Suite

Property-based tests for the behavior every verifier node must agree on.

The tests are organized by invariant:
1. determinism.py - Same transaction, same verdict; same inputs, same premium
2. premium.py - Premium exactness, truncation and monotonicity
3. transfer.py - A transfer may change the owner and purchase spot and nothing else
4. temporal.py - Time-window rules on every command

These tests use hypothesis for property-based testing.
"""
