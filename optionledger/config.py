"""
config.py - Pricing constants for the option contract

The premium calculator depends on a handful of fixed parameters. They are
collected in an immutable PremiumConfig that is passed explicitly to the
calculator and the verifier, so tests can vary them without touching
process-wide state.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class PremiumConfig:
    """
    Parameters of the Black-Scholes premium calculation.

    Attributes:
        risk_free_rate: Annualised continuously-compounded rate (r)
        days_to_maturity: Fixed pricing horizon in days. The contract does not
            derive T from the option's dates.
        days_per_year: Day basis converting days_to_maturity to years
        contract_multiplier: Units of underlying per contract; the truncated
            per-unit price is scaled by this factor
    """
    risk_free_rate: Decimal = Decimal("0.01")
    days_to_maturity: Decimal = Decimal("100")
    days_per_year: Decimal = Decimal("252")
    contract_multiplier: int = 100

    def __post_init__(self):
        for name in ('risk_free_rate', 'days_to_maturity', 'days_per_year'):
            value = getattr(self, name)
            if not isinstance(value, Decimal):
                value = Decimal(str(value))
                object.__setattr__(self, name, value)
            if not value.is_finite():
                raise ValueError(f"{name} must be finite, got {value}")
        if self.days_to_maturity <= 0:
            raise ValueError(f"days_to_maturity must be positive, got {self.days_to_maturity}")
        if self.days_per_year <= 0:
            raise ValueError(f"days_per_year must be positive, got {self.days_per_year}")
        if not isinstance(self.contract_multiplier, int) or self.contract_multiplier <= 0:
            raise ValueError(f"contract_multiplier must be a positive int, got {self.contract_multiplier!r}")

    def with_overrides(self, **changes) -> PremiumConfig:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


DEFAULT_PREMIUM_CONFIG = PremiumConfig()
