"""
Core constants and limits.

Defines the numeric parameters of the performance-simulation engine.
"""

from decimal import Decimal

# Deposit emulation
DAYS_IN_YEAR = 365  # Interest accrues on a 365-day basis regardless of leap years

# Equivalent rate solver
SOLVER_STEPS = (Decimal("10"), Decimal("1"), Decimal("0.1"), Decimal("0.01"))
MAX_SOLVER_MOVES_PER_STEP = 100  # Caps the search at +/-1000% on the coarsest step
PRECISION_WARNING_PERCENT = Decimal("0.1")  # Residual share of the cash scale that is flagged

# Backtesting
MIN_DAYS_FOR_PERFORMANCE = 365  # Trailing history required before performance is reported
SAME_CURRENCY_DEPOSIT_MIN_DAYS = 1  # Minimum history of a deposit reported in its own currency
PORTFOLIO_INSTRUMENT = "Portfolio"  # Reserved name of the real portfolio row
DEFAULT_CURRENCIES = ("USD", "RUB")

# Rounding
CASH_DECIMALS = 2
PERCENTAGE_DECIMALS = 2
