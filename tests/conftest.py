"""
conftest.py - Shared pytest fixtures for option contract tests

Provides common fixtures used across unit and conformance tests:
- The default verifier
- An issued option and the transactions for each lifecycle step
"""

import pytest
from datetime import timedelta

from optionledger import (
    OptionContract, TimeWindow,
    build_issue, build_move, build_exercise, build_redeem,
)

from .factories import (
    T0, MATURITY, ALICE, BOB,
    make_option, make_oracle, cash, shares,
)


@pytest.fixture
def contract():
    return OptionContract()


@pytest.fixture
def oracle():
    return make_oracle(spot="95", volatility="0.3")


@pytest.fixture
def issued_option():
    """Call struck at 100 USD, issued and held by alice."""
    return make_option()


@pytest.fixture
def issue_tx(issued_option, oracle):
    return build_issue(issued_option, oracle, TimeWindow.until_only(T0 + timedelta(days=1)))


@pytest.fixture
def move_tx(issued_option, oracle):
    """Transfer from alice to bob; bob pays from 10,000 USD."""
    return build_move(
        issued_option, BOB, oracle, [cash("10000", BOB)],
        TimeWindow.between(T0, T0 + timedelta(seconds=60)),
    )


@pytest.fixture
def held_option(move_tx):
    """The option as held by bob after the transfer."""
    return move_tx.outputs[0]


@pytest.fixture
def exercise_tx(held_option):
    """Bob exercises the call: pays 10,000 USD, alice delivers 100 shares out of 150."""
    return build_exercise(
        held_option,
        TimeWindow.between(MATURITY + timedelta(days=1), MATURITY + timedelta(days=1, seconds=30)),
        cash_inputs=[cash("20000", BOB)],
        stock_inputs=[shares(150, ALICE)],
    )


@pytest.fixture
def redeem_tx(held_option):
    return build_redeem(held_option, TimeWindow.from_only(MATURITY))
