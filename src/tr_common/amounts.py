"""Float amount helpers for the QU-denominated demo ledger.

Balances, stakes and payouts are plain floats. Anything read back from storage
goes through `is_finite_number` before it is trusted.
"""

import math

CURRENCY = "QU"


def is_finite_number(value: object) -> bool:
    """True for int/float values that are neither NaN nor infinite (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def format_amount(amount: float, decimals: int = 2, currency: str = CURRENCY) -> str:
    """1225.0 -> '1,225.00 QU'."""
    return f"{amount:,.{decimals}f} {currency}"


def format_percentage(value: float) -> str:
    """1.234 -> '+1.23%', -0.5 -> '-0.50%'."""
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.2f}%"
