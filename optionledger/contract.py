"""
contract.py - Verification of option state transitions

OptionContract.verify() is the single entry point. It requires exactly one
option command on the transaction and dispatches on it:

    Issue     no option  -> option
    Move      option     -> option (new owner, premium paid to the old owner)
    Exercise  option     -> nothing (physical delivery of the underlying)
    Redeem    option     -> nothing (no delivery)

Each validator checks shape, content, time and signers in order and raises on
the first rule that fails. verify() returns None when the transaction is valid.

Verification is pure: it reads the transaction only, never the system clock,
and keeps no state between calls.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import timedelta

from loguru import logger

from .config import DEFAULT_PREMIUM_CONFIG, PremiumConfig
from .core import (
    Amount, AuthorizationError, CashState, CommandWithSigners, ContractError,
    Exercise, Issue, LedgerTransaction, MAX_TIME_WINDOW, Move, OptionCommand,
    OracleCommand, Party, Redeem, StockState, StructuralError, TimeWindow,
    require_single_command, sum_cash_by, sum_stock_by,
)
from .shape import at_least_one, check, exactly, is_empty, none_of, only_of_types, require
from .units.option import OptionState, OptionType, calculate_premium, exercise_entitlement


OPTION_CONTRACT_ID = "optionledger.contract.OptionContract"


def require_signer(command: CommandWithSigners, party: Party, description: str) -> None:
    """
    Raise unless ``party`` signed ``command``.

    Raises:
        AuthorizationError: If the party's owning key is not among the signers.
    """
    if party.owning_key not in command.signers:
        raise AuthorizationError(description, party, command.signers)


def _require_time_window(tx: LedgerTransaction, description: str) -> TimeWindow:
    if tx.time_window is None:
        raise StructuralError(description)
    return tx.time_window


@dataclass(frozen=True, slots=True)
class OptionContract:
    """
    Verifier for option transactions.

    Attributes:
        premium_config: Constants used to price the option on transfer and
            to size the delivery on exercise
        max_time_window: Longest time window accepted on transfer and exercise
    """
    premium_config: PremiumConfig = field(default=DEFAULT_PREMIUM_CONFIG)
    max_time_window: timedelta = MAX_TIME_WINDOW

    def verify(self, tx: LedgerTransaction) -> None:
        """
        Accept or reject ``tx``.

        Raises:
            StructuralError: Missing, repeated or unknown option command, or a
                required time window / oracle attestation is absent
            ConstraintViolation: A business rule failed
            AuthorizationError: A required signer is absent
            DomainError: The premium could not be computed from the given values
        """
        command = require_single_command(tx, OptionCommand, "option")
        name = type(command.value).__name__
        logger.debug(f"{OPTION_CONTRACT_ID}: verifying {name}: {tx!r}")
        try:
            match command.value:
                case Issue():
                    self._verify_issue(tx, command)
                case Move():
                    self._verify_move(tx, command)
                case Exercise():
                    self._verify_exercise(tx, command)
                case Redeem():
                    self._verify_redeem(tx, command)
                case _:
                    raise StructuralError(f"Unknown command: {name}")
        except ContractError as e:
            logger.info(f"{OPTION_CONTRACT_ID}: rejected {name}: {e}")
            raise
        logger.debug(f"{OPTION_CONTRACT_ID}: accepted {name}")

    def is_valid(self, tx: LedgerTransaction) -> bool:
        """Return True if verify() accepts ``tx``."""
        try:
            self.verify(tx)
        except ContractError:
            return False
        return True

    # ------------------------------------------------------------------------
    # Issue
    # ------------------------------------------------------------------------

    def _verify_issue(self, tx: LedgerTransaction, command: CommandWithSigners) -> None:
        # Shape. Cash may be split or merged into change alongside the option.
        require(exactly(tx.outputs, OptionState, 1, "An option output is created"))
        require(only_of_types(tx.inputs, (CashState,), "No other states are consumed"))
        require(only_of_types(tx.outputs, (CashState, OptionState), "Only one state is created (option)"))
        window = _require_time_window(tx, "Option issuances must be timestamped")
        oracle: OracleCommand = require_single_command(tx, OracleCommand, "oracle").value

        # Content
        option = tx.outputs_of_type(OptionState)[0]
        check("The strike price must be non-negative",
              option.strike_price.quantity > 0, strike_price=option.strike_price)
        if window.until_time is None:
            raise StructuralError("Option issuances must have an upper time bound")
        check("The expiry date is not in the past",
              window.until_time < option.expiry_date,
              until_time=window.until_time, expiry_date=option.expiry_date)
        check("The option is not exercised", not option.exercised)
        check("The exercised-on date is null",
              option.exercised_on_date is None, exercised_on_date=option.exercised_on_date)
        check("The spot price at issuance matches the oracle's data",
              option.spot_price_at_issuance == oracle.spot_price.value,
              spot_price_at_issuance=option.spot_price_at_issuance, oracle=oracle.spot_price.value)

        # Signers. The oracle's signature is checked by the substrate.
        require_signer(command, option.issuer, "The issue command requires the issuer's signature")

    # ------------------------------------------------------------------------
    # Move
    # ------------------------------------------------------------------------

    def _verify_move(self, tx: LedgerTransaction, command: CommandWithSigners) -> None:
        # Shape
        require(at_least_one(tx.inputs, CashState, "Cash inputs are consumed"))
        require(at_least_one(tx.outputs, CashState, "Cash outputs are created"))
        require(exactly(tx.inputs, OptionState, 1, "An option input is consumed"))
        require(exactly(tx.outputs, OptionState, 1, "An option output is created"))
        require(only_of_types(tx.inputs, (CashState, OptionState), "No other states are consumed"))
        require(only_of_types(tx.outputs, (CashState, OptionState), "No other states are created"))
        window = _require_time_window(tx, "Option transfers must be timestamped")
        if window.length is None:
            raise StructuralError("Option transfers must have a bounded time window")
        oracle: OracleCommand = require_single_command(tx, OracleCommand, "oracle").value

        # Content
        input_option = tx.inputs_of_type(OptionState)[0]
        output_option = tx.outputs_of_type(OptionState)[0]
        check("The owner has changed",
              input_option.owner != output_option.owner, owner=input_option.owner)
        check("The spot price at purchase matches the oracle's data",
              output_option.spot_price_at_purchase == oracle.spot_price.value,
              spot_price_at_purchase=output_option.spot_price_at_purchase, oracle=oracle.spot_price.value)
        check("The options are otherwise identical",
              input_option == output_option.transfer(input_option.owner, input_option.spot_price_at_purchase),
              input=input_option, output=output_option)

        premium = calculate_premium(output_option, oracle.volatility, self.premium_config)
        paid = sum_cash_by(tx.outputs, input_option.owner, premium.currency)
        check("The amount of cash transferred matches the premium",
              paid == premium, premium=premium, paid=paid)
        check("The time-window is no longer than 120 seconds",
              window.length <= self.max_time_window, length=window.length)

        # Signers
        require_signer(command, input_option.owner, "The transfer command requires the old owner's signature")
        require_signer(command, output_option.owner, "The transfer command requires the new owner's signature")

    # ------------------------------------------------------------------------
    # Exercise
    # ------------------------------------------------------------------------

    def _verify_exercise(self, tx: LedgerTransaction, command: CommandWithSigners) -> None:
        # Shape. Cash and stock inputs fund the delivery legs.
        require(exactly(tx.inputs, OptionState, 1, "An option input is consumed"))
        require(only_of_types(tx.inputs, (OptionState, CashState, StockState),
                              "Only cash and stock are consumed besides the option"))
        require(none_of(tx.outputs, OptionState, "The option must be destroyed"))
        require(only_of_types(tx.outputs, (CashState, StockState), "Only delivery states are created"))
        window = _require_time_window(tx, "Exercises of options must be timestamped")
        if window.from_time is None:
            raise StructuralError("Exercises of options must have a lower time bound")
        if window.length is not None:
            check("The time-window is no longer than 120 seconds",
                  window.length <= self.max_time_window, length=window.length)

        # Content
        option = tx.inputs_of_type(OptionState)[0]
        check("The option must have matured",
              window.from_time >= option.maturity_date,
              from_time=window.from_time, maturity_date=option.maturity_date)
        check("The input option is not yet exercised", not option.exercised)
        check("The exercised-on date is null",
              option.exercised_on_date is None, exercised_on_date=option.exercised_on_date)

        # Delivery is netted against what each party put in. A self-held
        # option delivers nothing on balance.
        shares, strike_cash = exercise_entitlement(option, self.premium_config)
        if option.owner == option.issuer:
            shares, strike_cash = 0, Amount.zero(strike_cash.currency)
        if option.option_type == OptionType.CALL:
            stock_receiver, cash_receiver = option.owner, option.issuer
            stock_rule = "The option holder receives the underlying stock"
            cash_rule = "The issuer receives the strike payment"
        else:
            stock_receiver, cash_receiver = option.issuer, option.owner
            stock_rule = "The issuer receives the underlying stock"
            cash_rule = "The option holder receives the strike payment"
        delivered = (sum_stock_by(tx.outputs, stock_receiver, option.underlying_stock)
                     - sum_stock_by(tx.inputs, stock_receiver, option.underlying_stock))
        check(stock_rule, delivered == shares, expected=shares, delivered=delivered)
        paid = (sum_cash_by(tx.outputs, cash_receiver, strike_cash.currency)
                - sum_cash_by(tx.inputs, cash_receiver, strike_cash.currency))
        check(cash_rule, paid == strike_cash, expected=strike_cash, paid=paid)

        # Signers
        require_signer(command, option.owner, "The exercise command requires the owner's signature")

    # ------------------------------------------------------------------------
    # Redeem
    # ------------------------------------------------------------------------

    def _verify_redeem(self, tx: LedgerTransaction, command: CommandWithSigners) -> None:
        # Shape
        require(exactly(tx.inputs, OptionState, 1, "An option input is consumed"))
        require(only_of_types(tx.inputs, (OptionState,), "No other states are consumed"))
        require(is_empty(tx.outputs, "The option must be destroyed"))
        window = _require_time_window(tx, "Redemptions must be timestamped")
        if window.from_time is None:
            raise StructuralError("Redemptions must have a lower time bound")

        # Content
        option = tx.inputs_of_type(OptionState)[0]
        check("The option must have matured",
              window.from_time >= option.maturity_date,
              from_time=window.from_time, maturity_date=option.maturity_date)

        # Signers
        require_signer(command, option.owner, "The transaction is signed by the owner of the option")


DEFAULT_CONTRACT = OptionContract()


def verify(tx: LedgerTransaction, contract: OptionContract = DEFAULT_CONTRACT) -> None:
    """Verify ``tx`` with the default contract configuration."""
    contract.verify(tx)
