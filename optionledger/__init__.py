"""
optionledger - Option Contract Verifier

Decides whether a proposed transaction is a legal transition of an option
recorded on a ledger, and prices the option with Black-Scholes.

Usage:
    from optionledger import OptionContract, build_issue, TimeWindow

    tx = build_issue(option, oracle, TimeWindow.until_only(until))
    OptionContract().verify(tx)      # raises ContractError on rejection
"""

# Core types
from .core import (
    Amount,
    Party,
    TimeWindow,
    CashState,
    StockState,
    sum_cash_by,
    sum_stock_by,
    OptionCommand,
    Issue,
    Move,
    Exercise,
    Redeem,
    SpotPrice,
    Volatility,
    OracleCommand,
    CommandWithSigners,
    LedgerTransaction,
    require_single_command,
    ContractError,
    StructuralError,
    ConstraintViolation,
    AuthorizationError,
    DomainError,
    MAX_TIME_WINDOW,
)

# Configuration
from .config import PremiumConfig, DEFAULT_PREMIUM_CONFIG

# Black-Scholes pricing
from .black_scholes import call, put

# Options
from .units.option import (
    OptionType,
    OptionState,
    premium,
    calculate_premium,
    exercise_entitlement,
)

# Shape predicates
from .shape import Requirement, require

# Verifier
from .contract import OptionContract, OPTION_CONTRACT_ID, verify, require_signer

# Builders
from .builders import build_issue, build_move, build_exercise, build_redeem

__all__ = [
    'Amount', 'Party', 'TimeWindow', 'CashState', 'StockState',
    'sum_cash_by', 'sum_stock_by',
    'OptionCommand', 'Issue', 'Move', 'Exercise', 'Redeem',
    'SpotPrice', 'Volatility', 'OracleCommand', 'CommandWithSigners',
    'LedgerTransaction', 'require_single_command',
    'ContractError', 'StructuralError', 'ConstraintViolation',
    'AuthorizationError', 'DomainError', 'MAX_TIME_WINDOW',
    'PremiumConfig', 'DEFAULT_PREMIUM_CONFIG',
    'call', 'put',
    'OptionType', 'OptionState', 'premium', 'calculate_premium', 'exercise_entitlement',
    'Requirement', 'require',
    'OptionContract', 'OPTION_CONTRACT_ID', 'verify', 'require_signer',
    'build_issue', 'build_move', 'build_exercise', 'build_redeem',
]
