"""
Units module - The option record and its pricing.

Re-exported here for convenience.
"""

# Option units
from .option import (
    OptionType,
    OptionState,
    premium,
    calculate_premium,
    exercise_entitlement,
)
