"""
builders.py - Assemble well-formed option transactions

Counterparts of the validators in contract.py: each builder produces a
LedgerTransaction that the default OptionContract accepts, computing premium
and delivery legs with the same functions the verifier uses. Builders are
for callers preparing a proposal; they do not verify anything themselves.

Example:
    tx = build_issue(option, oracle, TimeWindow.until_only(now + timedelta(days=1)))
    OptionContract().verify(tx)
"""

from __future__ import annotations
from typing import Any, Callable, List, Sequence

from .config import DEFAULT_PREMIUM_CONFIG, PremiumConfig
from .core import (
    Amount, CashState, CommandWithSigners, Exercise, Issue, LedgerTransaction, Move,
    OracleCommand, Party, Redeem, StockState, TimeWindow, sum_cash_by, sum_stock_by,
)
from .units.option import OptionState, OptionType, calculate_premium, exercise_entitlement


ORACLE_KEY = "oracle"


def _oracle_command(oracle: OracleCommand, oracle_key: str) -> CommandWithSigners:
    return CommandWithSigners(oracle, frozenset({oracle_key}))


def _cash_issuer(cash: Sequence[CashState]) -> str:
    return cash[0].issuer if cash else "central_bank"


def _require_funding(states: Sequence[Any], owner: Party, matches: Callable[[Any], bool], what: str) -> None:
    """Raise ValueError unless every state is owned by ``owner`` and accepted by ``matches``."""
    for state in states:
        if state.owner != owner or not matches(state):
            raise ValueError(f"{what} input {state!r} is not {owner.name}'s {what} for this transaction")


def build_issue(
    option: OptionState,
    oracle: OracleCommand,
    time_window: TimeWindow,
    oracle_key: str = ORACLE_KEY,
) -> LedgerTransaction:
    """Issue ``option``, signed by its issuer."""
    return LedgerTransaction(
        inputs=(),
        outputs=(option,),
        commands=(
            CommandWithSigners(Issue(), frozenset({option.issuer.owning_key})),
            _oracle_command(oracle, oracle_key),
        ),
        time_window=time_window,
    )


def build_move(
    option: OptionState,
    new_owner: Party,
    oracle: OracleCommand,
    buyer_cash: Sequence[CashState],
    time_window: TimeWindow,
    config: PremiumConfig = DEFAULT_PREMIUM_CONFIG,
    oracle_key: str = ORACLE_KEY,
) -> LedgerTransaction:
    """
    Transfer ``option`` to ``new_owner``, who pays the premium from ``buyer_cash``.

    The premium goes to the current owner; any remainder returns to the buyer.

    Raises:
        ValueError: If buyer_cash does not cover the premium, or holds cash that
            is not the buyer's in the premium currency
    """
    output = option.transfer(new_owner, oracle.spot_price.value)
    premium = calculate_premium(output, oracle.volatility, config)
    _require_funding(buyer_cash, new_owner, lambda s: s.amount.currency == premium.currency, "cash")
    available = sum_cash_by(buyer_cash, new_owner, premium.currency)
    if available.quantity < premium.quantity:
        raise ValueError(f"Buyer cash {available!r} does not cover premium {premium!r}")

    issuer = _cash_issuer(buyer_cash)
    outputs: List[object] = [output, CashState(premium, option.owner, issuer)]
    change = available.quantity - premium.quantity
    if change:
        outputs.append(CashState(Amount(change, premium.currency), new_owner, issuer))

    signers = frozenset({option.owner.owning_key, new_owner.owning_key})
    return LedgerTransaction(
        inputs=(option, *buyer_cash),
        outputs=tuple(outputs),
        commands=(CommandWithSigners(Move(), signers), _oracle_command(oracle, oracle_key)),
        time_window=time_window,
    )


def build_exercise(
    option: OptionState,
    time_window: TimeWindow,
    cash_inputs: Sequence[CashState],
    stock_inputs: Sequence[StockState],
    config: PremiumConfig = DEFAULT_PREMIUM_CONFIG,
) -> LedgerTransaction:
    """
    Exercise ``option`` with physical delivery.

    CALL: the owner pays strike * multiplier from cash_inputs and the issuer
    delivers multiplier shares from stock_inputs. PUT: the reverse. Remainders
    return to the paying and delivering parties.

    Raises:
        ValueError: If the inputs do not cover the delivery, or include states
            that do not belong to the delivering and paying parties
    """
    shares, strike_cash = exercise_entitlement(option, config)
    if option.option_type == OptionType.CALL:
        stock_from, stock_to, cash_from, cash_to = option.issuer, option.owner, option.owner, option.issuer
    else:
        stock_from, stock_to, cash_from, cash_to = option.owner, option.issuer, option.issuer, option.owner
    _require_funding(stock_inputs, stock_from, lambda s: s.ticker == option.underlying_stock, "stock")
    _require_funding(cash_inputs, cash_from, lambda s: s.amount.currency == strike_cash.currency, "cash")

    held_shares = sum_stock_by(stock_inputs, stock_from, option.underlying_stock)
    held_cash = sum_cash_by(cash_inputs, cash_from, strike_cash.currency)
    if held_shares < shares:
        raise ValueError(f"{stock_from.name} holds {held_shares} {option.underlying_stock}, needs {shares}")
    if held_cash.quantity < strike_cash.quantity:
        raise ValueError(f"{cash_from.name} holds {held_cash!r}, needs {strike_cash!r}")

    issuer = _cash_issuer(cash_inputs)
    outputs: List[object] = [
        StockState(option.underlying_stock, shares, stock_to),
        CashState(strike_cash, cash_to, issuer),
    ]
    if held_shares > shares:
        outputs.append(StockState(option.underlying_stock, held_shares - shares, stock_from))
    if held_cash.quantity > strike_cash.quantity:
        outputs.append(CashState(Amount(held_cash.quantity - strike_cash.quantity, strike_cash.currency), cash_from, issuer))

    signers = frozenset({option.owner.owning_key, option.issuer.owning_key})
    return LedgerTransaction(
        inputs=(option, *cash_inputs, *stock_inputs),
        outputs=tuple(outputs),
        commands=(CommandWithSigners(Exercise(), signers),),
        time_window=time_window,
    )


def build_redeem(option: OptionState, time_window: TimeWindow) -> LedgerTransaction:
    """Retire ``option`` without delivery, signed by its owner."""
    return LedgerTransaction(
        inputs=(option,),
        outputs=(),
        commands=(CommandWithSigners(Redeem(), frozenset({option.owner.owning_key})),),
        time_window=time_window,
    )
