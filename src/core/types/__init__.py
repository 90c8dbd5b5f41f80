"""
Core type definitions and utilities.
"""

# Re-export financial utilities for easy access
from .financial import (
    HUNDRED,
    ZERO,
    daily_rate,
    round_amount,
    round_percentage,
    to_decimal,
)

__all__ = [
    # Utility functions
    "to_decimal",
    "round_amount",
    "round_percentage",
    "daily_rate",
    # Constants
    "ZERO",
    "HUNDRED",
]
