"""
option_example.py - Step-by-Step Option Lifecycle Example

Demonstrates the complete lifecycle of a physically-settled call option:
1. Issue: Alice writes a call on AAPL, priced against the oracle's spot
2. Move: Bob buys the option and pays the Black-Scholes premium
3. Rejection: the same transfer without Bob's signature is refused
4. Exercise: at maturity Bob pays the strike and receives the shares

Every transaction is assembled with the builders and checked by OptionContract.

Run this file directly:
    python option_example.py
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from optionledger import (
    Amount, Party, TimeWindow, CashState, StockState,
    OptionState, OptionType, OracleCommand, SpotPrice, Volatility,
    OptionContract, ContractError, CommandWithSigners,
    build_issue, build_move, build_exercise,
    calculate_premium, sum_cash_by, sum_stock_by,
)


def usd(value: str) -> Amount:
    return Amount.from_decimal(Decimal(value), "USD")


def oracle_at(when: datetime, spot: str, volatility: str) -> OracleCommand:
    return OracleCommand(SpotPrice("AAPL", usd(spot), when), Volatility("AAPL", Decimal(volatility), when))


def show(title: str, tx) -> None:
    print(f"\n--- {title} ---")
    print(f"  {tx!r}")
    for state in tx.outputs:
        print(f"  -> {state}")


def main():
    print("=" * 70)
    print("CALL OPTION - COMPLETE LIFECYCLE EXAMPLE")
    print("=" * 70)

    contract = OptionContract()
    alice = Party("alice", "key-alice")   # writer
    bob = Party("bob", "key-bob")         # buyer
    now = datetime(2025, 6, 1, 9, 30, tzinfo=timezone.utc)

    # =========================================================================
    # STEP 1: ISSUE
    # =========================================================================
    oracle = oracle_at(now, spot="95", volatility="0.3")
    option = OptionState(
        strike_price=usd("100"),
        expiry_date=now + timedelta(days=30),
        maturity_date=now + timedelta(days=20),
        underlying_stock="AAPL",
        issuer=alice,
        owner=alice,
        option_type=OptionType.CALL,
        spot_price_at_issuance=oracle.spot_price.value,
    )
    issue_tx = build_issue(option, oracle, TimeWindow.until_only(now + timedelta(days=1)))
    contract.verify(issue_tx)
    show("Issue accepted", issue_tx)

    # =========================================================================
    # STEP 2: MOVE
    # =========================================================================
    trade_time = now + timedelta(days=2)
    oracle = oracle_at(trade_time, spot="97.50", volatility="0.28")
    move_tx = build_move(
        option, bob, oracle, [CashState(usd("25000"), bob)],
        TimeWindow.between(trade_time, trade_time + timedelta(seconds=30)),
    )
    contract.verify(move_tx)
    held = move_tx.outputs[0]
    print(f"\nPremium at spot {oracle.spot_price.value!r}: "
          f"{calculate_premium(held, oracle.volatility, contract.premium_config)!r}")
    show("Move accepted", move_tx)

    # =========================================================================
    # STEP 3: REJECTED MOVE
    # =========================================================================
    unsigned = move_tx.__class__(
        move_tx.inputs,
        move_tx.outputs,
        (CommandWithSigners(move_tx.commands[0].value, {alice.owning_key}),) + move_tx.commands[1:],
        move_tx.time_window,
    )
    try:
        contract.verify(unsigned)
    except ContractError as e:
        print(f"\n--- Move without the buyer's signature rejected ---\n  {type(e).__name__}: {e}")

    # =========================================================================
    # STEP 4: EXERCISE
    # =========================================================================
    exercise_time = held.maturity_date + timedelta(hours=1)
    exercise_tx = build_exercise(
        held,
        TimeWindow.between(exercise_time, exercise_time + timedelta(seconds=60)),
        cash_inputs=[CashState(usd("12000"), bob)],
        stock_inputs=[StockState("AAPL", 500, alice)],
    )
    contract.verify(exercise_tx)
    show("Exercise accepted", exercise_tx)

    print("\nFinal holdings:")
    for party in (alice, bob):
        print(f"  {party.name}: {sum_cash_by(exercise_tx.outputs, party, 'USD')!r}, "
              f"{sum_stock_by(exercise_tx.outputs, party, 'AAPL')} AAPL")


if __name__ == "__main__":
    main()
