"""
Determinism Conformance Tests

INVARIANT: Verification is a pure function of the transaction.

    ∀ tx:
        verify(tx) on node 1 = verify(tx) on node 2

and the premium depends only on (spot, strike, volatility, type, config).
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from datetime import timedelta

from optionledger import (
    OptionContract, TimeWindow, ContractError, premium, build_move,
)
from .strategies import minor_amounts, volatilities, option_types
from ..factories import T0, BOB, make_option, make_oracle, cash


class TestPremiumDeterminism:
    """Property-based determinism of the premium."""

    @given(minor_amounts(), minor_amounts(), volatilities(), option_types)
    @settings(max_examples=100)
    def test_repeated_calls_agree(self, spot, strike, vol, option_type):
        """
        PROPERTY: Identical inputs give identical premiums.
        """
        first = premium(spot, strike, vol, option_type)
        second = premium(spot, strike, vol, option_type)
        assert first == second


class TestVerdictDeterminism:
    """Two independent verifiers reach the same verdict."""

    @given(st.integers(min_value=1, max_value=300), st.integers(min_value=0, max_value=1))
    @settings(max_examples=50)
    def test_independent_verifiers_agree(self, window_seconds, tamper):
        """
        PROPERTY: Two verifier instances accept or reject the same transaction alike.
        """
        option = make_option()
        tx = build_move(
            option, BOB, make_oracle(), [cash("10000", BOB)],
            TimeWindow.between(T0, T0 + timedelta(seconds=window_seconds)),
        )
        if tamper:
            tx = tx.__class__(tx.inputs, tx.outputs[:1] + tx.outputs[2:], tx.commands, tx.time_window)

        verdicts = []
        for contract in (OptionContract(), OptionContract()):
            try:
                contract.verify(tx)
                verdicts.append(None)
            except ContractError as e:
                verdicts.append((type(e), str(e)))

        assert verdicts[0] == verdicts[1]
        assert (verdicts[0] is None) == (window_seconds <= 120 and not tamper)
