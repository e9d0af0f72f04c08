"""
option.py - The option record and its premium

OptionState is the versioned ledger record of one option contract. It is a
frozen dataclass: a transfer produces the next version through transfer(),
keeping linear_id, and the previous version is consumed by the transaction.

calculate_premium() prices the option with Black-Scholes using the spot price
captured at purchase and the oracle's volatility.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal, ROUND_DOWN
from enum import Enum
from typing import Optional, Tuple
from uuid import uuid4

from ..black_scholes import call, put
from ..config import DEFAULT_PREMIUM_CONFIG, PremiumConfig
from ..core import Amount, DomainError, Party, Volatility


class OptionType(str, Enum):
    CALL = "CALL"
    PUT = "PUT"


def _new_linear_id() -> str:
    return uuid4().hex


@dataclass(frozen=True, slots=True)
class OptionState:
    """
    One version of an option contract.

    Attributes:
        strike_price: Price per unit of underlying, in minor units
        expiry_date: After this the option can no longer be issued or transferred
        maturity_date: From this point the option can be exercised or redeemed
        underlying_stock: Ticker of the underlying
        issuer: Party that wrote the option
        owner: Current holder
        option_type: CALL or PUT
        spot_price_at_issuance: Oracle spot price captured at issue
        spot_price_at_purchase: Oracle spot price captured at the last transfer.
            Defaults to zero in the strike currency.
        exercised: Whether the option has been exercised
        exercised_on_date: When it was exercised, None until then
        linear_id: Shared by every version of the same option
    """
    strike_price: Amount
    expiry_date: datetime
    maturity_date: datetime
    underlying_stock: str
    issuer: Party
    owner: Party
    option_type: OptionType
    spot_price_at_issuance: Amount
    spot_price_at_purchase: Optional[Amount] = None
    exercised: bool = False
    exercised_on_date: Optional[datetime] = None
    linear_id: str = field(default_factory=_new_linear_id)

    def __post_init__(self):
        if not isinstance(self.option_type, OptionType):
            object.__setattr__(self, 'option_type', OptionType(self.option_type))
        if self.spot_price_at_purchase is None:
            object.__setattr__(self, 'spot_price_at_purchase', Amount.zero(self.strike_price.currency))

    @property
    def participants(self) -> Tuple[Party, Party]:
        return (self.owner, self.issuer)

    def transfer(self, new_owner: Party, spot_price_at_purchase: Amount) -> OptionState:
        """Return the next version of this option held by ``new_owner``."""
        return replace(self, owner=new_owner, spot_price_at_purchase=spot_price_at_purchase)

    def __str__(self) -> str:
        return (
            f"{self.option_type.value} option on {self.underlying_stock} "
            f"at strike {self.strike_price!r} expiring on {self.expiry_date.isoformat()}"
        )


# ============================================================================
# PREMIUM
# ============================================================================

def premium(
    spot: Amount,
    strike: Amount,
    volatility: Decimal,
    option_type: OptionType,
    config: PremiumConfig = DEFAULT_PREMIUM_CONFIG,
) -> Amount:
    """
    Black-Scholes premium for one contract.

    The per-unit price is computed on minor-unit quantities, truncated to a
    whole minor unit, then scaled by the contract multiplier. The result is
    denominated in the strike currency.

    Raises:
        DomainError: If spot and strike currencies differ, spot or strike is
            not positive, or volatility is negative
    """
    volatility = Decimal(str(volatility)) if not isinstance(volatility, Decimal) else volatility
    if spot.currency != strike.currency:
        raise DomainError(f"spot and strike currencies differ: {spot.currency} vs {strike.currency}")
    if spot.quantity <= 0:
        raise DomainError(f"spot price must be positive, got {spot!r}")
    if strike.quantity <= 0:
        raise DomainError(f"strike price must be positive, got {strike!r}")
    if not volatility.is_finite() or volatility < 0:
        raise DomainError(f"volatility must be non-negative, got {volatility}")

    price_fn = call if OptionType(option_type) == OptionType.CALL else put
    per_unit = price_fn(
        Decimal(spot.quantity),
        Decimal(strike.quantity),
        config.days_to_maturity,
        volatility,
        config.risk_free_rate,
        config.days_per_year,
    )
    truncated = int(per_unit.to_integral_value(rounding=ROUND_DOWN))
    return Amount(truncated * config.contract_multiplier, strike.currency)


def calculate_premium(
    option: OptionState,
    volatility: Volatility,
    config: PremiumConfig = DEFAULT_PREMIUM_CONFIG,
) -> Amount:
    """Premium of ``option`` at its purchase spot price under the oracle's volatility."""
    return premium(
        option.spot_price_at_purchase,
        option.strike_price,
        volatility.value,
        option.option_type,
        config,
    )


def exercise_entitlement(
    option: OptionState,
    config: PremiumConfig = DEFAULT_PREMIUM_CONFIG,
) -> Tuple[int, Amount]:
    """
    Shares and cash exchanged on physical exercise of one contract.

    Returns:
        (shares of the underlying, strike cash) where shares equals the
        contract multiplier and cash is strike * multiplier. For a CALL the
        owner receives the shares and pays the cash; for a PUT the reverse.
    """
    return config.contract_multiplier, option.strike_price * config.contract_multiplier
