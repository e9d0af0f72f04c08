"""
Core types for the option contract verifier.

This module provides the foundational data structures the verifier reads:
1. Exceptions: ContractError and the structural / constraint / domain errors
2. Value types: Amount, Party, TimeWindow
3. Ledger states: CashState, StockState
4. Commands: Issue, Move, Exercise, Redeem, OracleCommand, CommandWithSigners
5. LedgerTransaction: the read-only bundle handed to the verifier
6. Cash helpers: sum_cash_by, sum_stock_by

Everything here is immutable. The verifier never mutates a transaction and
never reads the system clock.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_DOWN
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple, Type, TypeVar, Union


# ============================================================================
# CONSTANTS
# ============================================================================

# ISO 4217 minor units. Currencies not listed default to 2.
MINOR_UNITS = {
    'USD': 2,
    'EUR': 2,
    'GBP': 2,
    'CHF': 2,
    'JPY': 0,
    'KRW': 0,
    'BHD': 3,
}

# Longest time window accepted on transfer and exercise.
MAX_TIME_WINDOW = timedelta(seconds=120)


# ============================================================================
# EXCEPTIONS
# ============================================================================

class ContractError(Exception):
    """Base exception for all contract verification errors."""
    pass


class StructuralError(ContractError):
    """Raised when a transaction has the wrong command shape or lacks a required time window."""
    pass


class ConstraintViolation(ContractError):
    """
    Raised when a named business rule fails.

    Attributes:
        description: Human-readable statement of the rule that failed
        values: Offending values, keyed by name
    """

    def __init__(self, description: str, values: Optional[Dict[str, Any]] = None):
        super().__init__(description)
        self.description = description
        self.values = dict(values or {})

    def __str__(self) -> str:
        if not self.values:
            return self.description
        detail = ", ".join(f"{k}={v!r}" for k, v in self.values.items())
        return f"{self.description} ({detail})"


class AuthorizationError(ConstraintViolation):
    """Raised when a required signer is absent from the command's signers."""

    def __init__(self, description: str, party: 'Party', signers: Iterable[str] = ()):
        super().__init__(description, {'party': party.name, 'signers': sorted(signers)})
        self.party = party


class DomainError(ContractError, ValueError):
    """Raised when the premium calculator receives invalid numeric inputs."""
    pass


# ============================================================================
# VALUE TYPES
# ============================================================================

@dataclass(frozen=True, slots=True)
class Amount:
    """
    A monetary amount held as an integer number of minor currency units.

    Attributes:
        quantity: Amount in minor units (cents for USD)
        currency: ISO currency code

    Amounts of different currencies cannot be combined.
    """
    quantity: int
    currency: str

    def __post_init__(self):
        if not isinstance(self.quantity, int) or isinstance(self.quantity, bool):
            raise ValueError(f"Amount quantity must be int, got {type(self.quantity)}")
        if not self.currency or not self.currency.strip():
            raise ValueError("Amount currency cannot be empty")

    @classmethod
    def from_decimal(cls, value: Decimal, currency: str) -> Amount:
        """Convert a major-unit Decimal (e.g. 95.50) to minor units, truncating sub-minor digits."""
        value = Decimal(str(value)) if not isinstance(value, Decimal) else value
        if not value.is_finite():
            raise ValueError(f"Amount value must be finite, got {value}")
        scale = Decimal(10) ** MINOR_UNITS.get(currency, 2)
        return cls(int((value * scale).to_integral_value(rounding=ROUND_DOWN)), currency)

    @classmethod
    def zero(cls, currency: str) -> Amount:
        return cls(0, currency)

    def to_decimal(self) -> Decimal:
        """Return the amount in major units."""
        return Decimal(self.quantity).scaleb(-MINOR_UNITS.get(self.currency, 2))

    def __add__(self, other: Amount) -> Amount:
        if not isinstance(other, Amount):
            return NotImplemented
        if other.currency != self.currency:
            raise ValueError(f"Currency mismatch: {self.currency} vs {other.currency}")
        return Amount(self.quantity + other.quantity, self.currency)

    def __sub__(self, other: Amount) -> Amount:
        if not isinstance(other, Amount):
            return NotImplemented
        if other.currency != self.currency:
            raise ValueError(f"Currency mismatch: {self.currency} vs {other.currency}")
        return Amount(self.quantity - other.quantity, self.currency)

    def __mul__(self, factor: int) -> Amount:
        if not isinstance(factor, int):
            return NotImplemented
        return Amount(self.quantity * factor, self.currency)

    def __repr__(self) -> str:
        return f"{self.to_decimal()} {self.currency}"


@dataclass(frozen=True, slots=True)
class Party:
    """A ledger identity: a display name plus the public key it signs with."""
    name: str
    owning_key: str

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Party name cannot be empty")
        if not self.owning_key or not self.owning_key.strip():
            raise ValueError("Party owning_key cannot be empty")

    def __repr__(self) -> str:
        return f"Party({self.name})"


@dataclass(frozen=True, slots=True)
class TimeWindow:
    """
    The validity interval a transaction claims. Either bound may be open, not both.

    Stands in for "current time": the verifier never reads a real clock.
    """
    from_time: Optional[datetime] = None
    until_time: Optional[datetime] = None

    def __post_init__(self):
        if self.from_time is None and self.until_time is None:
            raise ValueError("TimeWindow needs at least one bound")
        if self.from_time is not None and self.until_time is not None:
            if self.until_time < self.from_time:
                raise ValueError("TimeWindow until_time precedes from_time")

    @classmethod
    def between(cls, from_time: datetime, until_time: datetime) -> TimeWindow:
        return cls(from_time, until_time)

    @classmethod
    def from_only(cls, from_time: datetime) -> TimeWindow:
        return cls(from_time=from_time)

    @classmethod
    def until_only(cls, until_time: datetime) -> TimeWindow:
        return cls(until_time=until_time)

    @property
    def length(self) -> Optional[timedelta]:
        """Duration of the window, or None if a bound is open."""
        if self.from_time is None or self.until_time is None:
            return None
        return self.until_time - self.from_time


# ============================================================================
# LEDGER STATES
# ============================================================================

@dataclass(frozen=True, slots=True)
class CashState:
    """Cash held by an owner. The issuer is ignored when summing by owner."""
    amount: Amount
    owner: Party
    issuer: str = "central_bank"


@dataclass(frozen=True, slots=True)
class StockState:
    """Shares of an underlying stock held by an owner."""
    ticker: str
    quantity: int
    owner: Party

    def __post_init__(self):
        if not self.ticker or not self.ticker.strip():
            raise ValueError("StockState ticker cannot be empty")
        if not isinstance(self.quantity, int) or self.quantity <= 0:
            raise ValueError(f"StockState quantity must be a positive int, got {self.quantity!r}")


def sum_cash_by(states: Iterable[Any], owner: Party, currency: str) -> Amount:
    """
    Total cash in ``currency`` owned by ``owner`` among ``states``.

    Non-cash states, other owners and other currencies are skipped. Returns a
    zero Amount when nothing matches.
    """
    total = Amount.zero(currency)
    for state in states:
        if isinstance(state, CashState) and state.owner == owner and state.amount.currency == currency:
            total = total + state.amount
    return total


def sum_stock_by(states: Iterable[Any], owner: Party, ticker: str) -> int:
    """Total shares of ``ticker`` owned by ``owner`` among ``states``."""
    return sum(
        s.quantity for s in states
        if isinstance(s, StockState) and s.owner == owner and s.ticker == ticker
    )


# ============================================================================
# COMMANDS
# ============================================================================

class OptionCommand:
    """Marker base for commands verified by the option contract."""
    __slots__ = ()


@dataclass(frozen=True, slots=True)
class Issue(OptionCommand):
    """Create a new option."""


@dataclass(frozen=True, slots=True)
class Move(OptionCommand):
    """Transfer an option to a new owner against the premium."""


@dataclass(frozen=True, slots=True)
class Exercise(OptionCommand):
    """Exercise a matured option with physical delivery."""


@dataclass(frozen=True, slots=True)
class Redeem(OptionCommand):
    """Retire a matured option without delivery."""


@dataclass(frozen=True, slots=True)
class SpotPrice:
    """Oracle-attested price of a stock at a point in time."""
    stock: str
    value: Amount
    at_time: datetime


@dataclass(frozen=True, slots=True)
class Volatility:
    """Oracle-attested annualised volatility of a stock at a point in time."""
    stock: str
    value: Decimal
    at_time: datetime

    def __post_init__(self):
        if not isinstance(self.value, Decimal):
            object.__setattr__(self, 'value', Decimal(str(self.value)))


@dataclass(frozen=True, slots=True)
class OracleCommand:
    """
    Price and volatility attestation embedded in a transaction.

    Its signature by the oracle is checked by the substrate; the verifier only
    compares its values against the option fields derived from it.
    """
    spot_price: SpotPrice
    volatility: Volatility


@dataclass(frozen=True, slots=True)
class CommandWithSigners:
    """A command value together with the owning keys required to sign it."""
    value: Any
    signers: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        if not isinstance(self.signers, frozenset):
            object.__setattr__(self, 'signers', frozenset(self.signers))


# ============================================================================
# TRANSACTION
# ============================================================================

S = TypeVar('S')


@dataclass(frozen=True, slots=True)
class LedgerTransaction:
    """
    A proposed transaction, read-only from the verifier's point of view.

    Attributes:
        inputs: States consumed by the transaction
        outputs: States produced by the transaction
        commands: Declared commands with their signers
        time_window: Claimed validity interval, if any
    """
    inputs: Tuple[Any, ...] = ()
    outputs: Tuple[Any, ...] = ()
    commands: Tuple[CommandWithSigners, ...] = ()
    time_window: Optional[TimeWindow] = None

    def __post_init__(self):
        for name in ('inputs', 'outputs', 'commands'):
            value = getattr(self, name)
            if not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value))

    def inputs_of_type(self, cls: Type[S]) -> Tuple[S, ...]:
        return tuple(s for s in self.inputs if isinstance(s, cls))

    def outputs_of_type(self, cls: Type[S]) -> Tuple[S, ...]:
        return tuple(s for s in self.outputs if isinstance(s, cls))

    def commands_of_type(self, cls: Union[type, Tuple[type, ...]]) -> Tuple[CommandWithSigners, ...]:
        return tuple(c for c in self.commands if isinstance(c.value, cls))

    def __repr__(self) -> str:
        names = ", ".join(type(c.value).__name__ for c in self.commands)
        return f"LedgerTransaction({len(self.inputs)} in, {len(self.outputs)} out, [{names}])"


def require_single_command(tx: LedgerTransaction, cls: Union[type, Tuple[type, ...]], label: str) -> CommandWithSigners:
    """
    Return the one command of the given type(s).

    Raises:
        StructuralError: If there is no such command or more than one.
    """
    matches = tx.commands_of_type(cls)
    if not matches:
        raise StructuralError(f"Required {label} command is missing")
    if len(matches) > 1:
        raise StructuralError(f"Expected exactly one {label} command, found {len(matches)}")
    return matches[0]
