"""
black_scholes.py - Black-Scholes Option Pricing

Closed-form European option prices with a continuously-compounded risk-free
rate and time given in days. The day basis defaults to 252 trading days per
year and can be overridden per call.

Provides:
- Normal distribution CDF
- d1 / d2
- Call and put prices (float core, Decimal interface)

Zero volatility is accepted by the price functions: the price collapses to the
discounted intrinsic value of the forward.
"""

import math
import numpy as np
from typing import Union
from scipy.special import erf as scipy_erf
from decimal import Decimal, ROUND_HALF_EVEN

from .core import DomainError


# Type alias for scalar or array inputs
Numeric = Union[float, np.ndarray]

# Constants
TRADING_DAYS_PER_YEAR = 252.0
SQRT_2 = math.sqrt(2.0)
PRICE_QUANTUM = Decimal("0.00000001")


# ============================================================================
# NORMAL DISTRIBUTION
# ============================================================================

def normal_cdf(x: Numeric) -> Numeric:
    """Standard normal cumulative distribution function."""
    return 0.5 * (1.0 + scipy_erf(np.asarray(x) / SQRT_2))


# ============================================================================
# D1 AND D2
# ============================================================================

def _validate_bs_inputs(
    s: Numeric,
    k: Numeric,
    t_in_days: Numeric,
    v: Numeric,
    r: Numeric = 0.0,
    allow_zero_vol: bool = False,
) -> None:
    """Validate Black-Scholes inputs to prevent division by zero and NaN/Inf."""
    s_arr = np.asarray(s, dtype=float)
    k_arr = np.asarray(k, dtype=float)
    t_arr = np.asarray(t_in_days, dtype=float)
    v_arr = np.asarray(v, dtype=float)
    if not np.all(np.isfinite(s_arr)) or np.any(s_arr <= 0):
        raise DomainError(f"spot price must be positive and finite, got {s}")
    if not np.all(np.isfinite(k_arr)) or np.any(k_arr <= 0):
        raise DomainError(f"strike must be positive and finite, got {k}")
    if not np.all(np.isfinite(t_arr)) or np.any(t_arr <= 0):
        raise DomainError(f"t_in_days must be positive and finite, got {t_in_days}")
    if not np.all(np.isfinite(v_arr)) or np.any(v_arr < 0):
        raise DomainError(f"volatility must be non-negative and finite, got {v}")
    if not allow_zero_vol and np.any(v_arr == 0):
        raise DomainError("volatility must be positive for d1/d2")
    if not np.all(np.isfinite(np.asarray(r, dtype=float))):
        raise DomainError(f"risk-free rate must be finite, got {r}")


def d1(
    s: Numeric,
    k: Numeric,
    t_in_days: Numeric,
    v: Numeric,
    r: Numeric = 0.0,
    days_per_year: float = TRADING_DAYS_PER_YEAR,
) -> Numeric:
    """
    Calculate d1 in the Black-Scholes formula.

    d1 = (ln(S/K) + (r + σ²/2)*t) / (σ*√t)

    Raises:
        DomainError: If any input is non-positive or not finite
    """
    _validate_bs_inputs(s, k, t_in_days, v, r)
    t = t_in_days / days_per_year
    return (np.log(s / k) + (r + 0.5 * v * v) * t) / (v * np.sqrt(t))


def d2(
    s: Numeric,
    k: Numeric,
    t_in_days: Numeric,
    v: Numeric,
    r: Numeric = 0.0,
    days_per_year: float = TRADING_DAYS_PER_YEAR,
) -> Numeric:
    """
    Calculate d2 in the Black-Scholes formula.

    d2 = d1 - σ*√t

    Raises:
        DomainError: If any input is non-positive or not finite
    """
    t = t_in_days / days_per_year
    return d1(s, k, t_in_days, v, r, days_per_year) - v * np.sqrt(t)


# ============================================================================
# OPTION PRICES
# ============================================================================

def _call_float(
    s: Numeric,
    k: Numeric,
    t_in_days: Numeric,
    v: Numeric,
    r: Numeric = 0.0,
    days_per_year: float = TRADING_DAYS_PER_YEAR,
) -> Numeric:
    """
    Black-Scholes call price. Internal float implementation.

    C = S*N(d1) - K*e^(-rt)*N(d2)
    """
    _validate_bs_inputs(s, k, t_in_days, v, r, allow_zero_vol=True)
    t = t_in_days / days_per_year
    discounted_k = k * np.exp(-r * t)
    if np.all(np.asarray(v) == 0):
        return np.maximum(s - discounted_k, 0.0)
    d1_val = d1(s, k, t_in_days, v, r, days_per_year)
    d2_val = d2(s, k, t_in_days, v, r, days_per_year)
    return s * normal_cdf(d1_val) - discounted_k * normal_cdf(d2_val)


def _put_float(
    s: Numeric,
    k: Numeric,
    t_in_days: Numeric,
    v: Numeric,
    r: Numeric = 0.0,
    days_per_year: float = TRADING_DAYS_PER_YEAR,
) -> Numeric:
    """
    Black-Scholes put price. Internal float implementation.

    P = K*e^(-rt)*N(-d2) - S*N(-d1)
    """
    _validate_bs_inputs(s, k, t_in_days, v, r, allow_zero_vol=True)
    t = t_in_days / days_per_year
    discounted_k = k * np.exp(-r * t)
    if np.all(np.asarray(v) == 0):
        return np.maximum(discounted_k - s, 0.0)
    d1_val = d1(s, k, t_in_days, v, r, days_per_year)
    d2_val = d2(s, k, t_in_days, v, r, days_per_year)
    return discounted_k * normal_cdf(-d2_val) - s * normal_cdf(-d1_val)


def _to_decimal(result: Numeric) -> Decimal:
    return Decimal(str(float(result))).quantize(PRICE_QUANTUM, rounding=ROUND_HALF_EVEN)


def call(
    s: Decimal,
    k: Decimal,
    t_in_days: Decimal,
    v: Decimal,
    r: Decimal = Decimal("0"),
    days_per_year: Decimal = Decimal("252"),
) -> Decimal:
    """Black-Scholes call price with Decimal interface."""
    result = _call_float(float(s), float(k), float(t_in_days), float(v), float(r), float(days_per_year))
    return _to_decimal(result)


def put(
    s: Decimal,
    k: Decimal,
    t_in_days: Decimal,
    v: Decimal,
    r: Decimal = Decimal("0"),
    days_per_year: Decimal = Decimal("252"),
) -> Decimal:
    """Black-Scholes put price with Decimal interface."""
    result = _put_float(float(s), float(k), float(t_in_days), float(v), float(r), float(days_per_year))
    return _to_decimal(result)
