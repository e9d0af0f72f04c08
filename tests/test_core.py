"""
test_core.py - Unit tests for core data structures

Tests:
- Amount: minor-unit conversion, arithmetic, currency mismatch
- Party, TimeWindow: validation and bounds
- CashState, StockState: validation and summing by owner
- CommandWithSigners, LedgerTransaction: coercion and typed lookups
- require_single_command
- Exception hierarchy and messages
"""

import pytest
from dataclasses import FrozenInstanceError
from datetime import timedelta
from decimal import Decimal

from optionledger import (
    Amount, Party, TimeWindow, CashState, StockState,
    Issue, Move, CommandWithSigners, LedgerTransaction,
    sum_cash_by, sum_stock_by, require_single_command,
    ContractError, StructuralError, ConstraintViolation, AuthorizationError, DomainError,
)
from .factories import T0, ALICE, BOB, TICKER, cash, shares, usd


class TestAmount:
    """Tests for Amount."""

    def test_from_decimal(self):
        assert Amount.from_decimal(Decimal("95.50"), "USD") == Amount(9550, "USD")

    def test_from_decimal_truncates(self):
        assert Amount.from_decimal(Decimal("1.239"), "USD") == Amount(123, "USD")

    def test_zero_minor_unit_currency(self):
        assert Amount.from_decimal(Decimal("1500"), "JPY") == Amount(1500, "JPY")

    def test_three_minor_unit_currency(self):
        assert Amount.from_decimal(Decimal("1.5"), "BHD") == Amount(1500, "BHD")

    def test_to_decimal(self):
        assert Amount(9550, "USD").to_decimal() == Decimal("95.50")

    def test_non_finite_rejected(self):
        with pytest.raises(ValueError, match="finite"):
            Amount.from_decimal(Decimal("Infinity"), "USD")

    def test_quantity_must_be_int(self):
        with pytest.raises(ValueError, match="must be int"):
            Amount(1.5, "USD")
        with pytest.raises(ValueError, match="must be int"):
            Amount(True, "USD")

    def test_empty_currency_rejected(self):
        with pytest.raises(ValueError, match="currency cannot be empty"):
            Amount(1, " ")

    def test_add(self):
        assert Amount(100, "USD") + Amount(25, "USD") == Amount(125, "USD")

    def test_add_currency_mismatch(self):
        with pytest.raises(ValueError, match="Currency mismatch"):
            Amount(100, "USD") + Amount(100, "EUR")

    def test_subtract(self):
        assert Amount(100, "USD") - Amount(125, "USD") == Amount(-25, "USD")

    def test_subtract_currency_mismatch(self):
        with pytest.raises(ValueError, match="Currency mismatch"):
            Amount(100, "USD") - Amount(100, "EUR")

    def test_multiply(self):
        assert Amount(10000, "USD") * 100 == Amount(1000000, "USD")

    def test_repr(self):
        assert repr(Amount(9500, "USD")) == "95.00 USD"

    def test_immutable(self):
        with pytest.raises(FrozenInstanceError):
            Amount(1, "USD").quantity = 2


class TestParty:
    """Tests for Party."""

    def test_equality_by_name_and_key(self):
        assert Party("alice", "key-alice") == ALICE
        assert Party("alice", "other-key") != ALICE

    @pytest.mark.parametrize("name,key", [("", "k"), ("alice", ""), ("  ", "k")])
    def test_empty_fields_rejected(self, name, key):
        with pytest.raises(ValueError):
            Party(name, key)


class TestTimeWindow:
    """Tests for TimeWindow."""

    def test_between(self):
        window = TimeWindow.between(T0, T0 + timedelta(seconds=60))
        assert window.length == timedelta(seconds=60)

    def test_open_bounds_have_no_length(self):
        assert TimeWindow.from_only(T0).length is None
        assert TimeWindow.until_only(T0).length is None

    def test_needs_a_bound(self):
        with pytest.raises(ValueError, match="at least one bound"):
            TimeWindow()

    def test_reversed_bounds_rejected(self):
        with pytest.raises(ValueError, match="precedes"):
            TimeWindow.between(T0, T0 - timedelta(seconds=1))

    def test_instant_window(self):
        assert TimeWindow.between(T0, T0).length == timedelta(0)


class TestStates:
    """Tests for CashState, StockState and the summing helpers."""

    def test_cash_default_issuer(self):
        assert CashState(usd("1"), ALICE).issuer == "central_bank"

    def test_stock_quantity_must_be_positive(self):
        with pytest.raises(ValueError, match="positive int"):
            StockState(TICKER, 0, ALICE)

    def test_stock_ticker_required(self):
        with pytest.raises(ValueError, match="ticker cannot be empty"):
            StockState("", 1, ALICE)

    def test_sum_cash_by_owner_and_currency(self):
        states = [
            cash("10", ALICE),
            CashState(usd("5"), ALICE, "other_bank"),
            cash("7", BOB),
            CashState(Amount(300, "EUR"), ALICE),
            shares(3, ALICE),
        ]
        assert sum_cash_by(states, ALICE, "USD") == usd("15")
        assert sum_cash_by(states, ALICE, "EUR") == Amount(300, "EUR")

    def test_sum_cash_by_nothing(self):
        assert sum_cash_by([], ALICE, "USD") == Amount(0, "USD")

    def test_sum_stock_by(self):
        states = [shares(3, ALICE), shares(4, ALICE), shares(5, BOB), shares(9, ALICE, "MSFT"), cash("1", ALICE)]
        assert sum_stock_by(states, ALICE, TICKER) == 7
        assert sum_stock_by(states, BOB, "MSFT") == 0


class TestTransaction:
    """Tests for CommandWithSigners, LedgerTransaction and require_single_command."""

    def test_signers_coerced_to_frozenset(self):
        command = CommandWithSigners(Issue(), ["key-alice", "key-alice"])
        assert command.signers == frozenset({"key-alice"})

    def test_sequences_coerced_to_tuples(self):
        tx = LedgerTransaction(inputs=[cash("1", ALICE)], outputs=[], commands=[])
        assert isinstance(tx.inputs, tuple)
        assert isinstance(tx.outputs, tuple)

    def test_typed_lookups(self):
        tx = LedgerTransaction(
            inputs=[cash("1", ALICE), shares(2, ALICE)],
            outputs=[shares(2, BOB)],
            commands=[CommandWithSigners(Move(), {"key-alice"})],
        )
        assert tx.inputs_of_type(StockState) == (shares(2, ALICE),)
        assert tx.outputs_of_type(CashState) == ()
        assert len(tx.commands_of_type(Move)) == 1
        assert tx.commands_of_type(Issue) == ()

    def test_repr(self):
        tx = LedgerTransaction(inputs=[cash("1", ALICE)], commands=[CommandWithSigners(Issue())])
        assert repr(tx) == "LedgerTransaction(1 in, 0 out, [Issue])"

    def test_require_single_command(self):
        command = CommandWithSigners(Issue(), {"key-alice"})
        tx = LedgerTransaction(commands=[command])
        assert require_single_command(tx, Issue, "issue") is command

    def test_require_single_command_missing(self):
        with pytest.raises(StructuralError, match="Required issue command is missing"):
            require_single_command(LedgerTransaction(), Issue, "issue")

    def test_require_single_command_repeated(self):
        tx = LedgerTransaction(commands=[CommandWithSigners(Issue()), CommandWithSigners(Issue())])
        with pytest.raises(StructuralError, match="found 2"):
            require_single_command(tx, Issue, "issue")


class TestErrors:
    """Tests for the exception hierarchy."""

    def test_hierarchy(self):
        assert issubclass(StructuralError, ContractError)
        assert issubclass(ConstraintViolation, ContractError)
        assert issubclass(AuthorizationError, ConstraintViolation)
        assert issubclass(DomainError, ContractError)
        assert issubclass(DomainError, ValueError)

    def test_constraint_violation_message(self):
        error = ConstraintViolation("The owner has changed", {'owner': ALICE})
        assert error.description == "The owner has changed"
        assert str(error) == "The owner has changed (owner=Party(alice))"

    def test_constraint_violation_without_values(self):
        assert str(ConstraintViolation("The option is not exercised")) == "The option is not exercised"

    def test_authorization_error(self):
        error = AuthorizationError("Owner must sign", BOB, {"key-alice"})
        assert error.party == BOB
        assert error.values == {'party': 'bob', 'signers': ['key-alice']}
