import math
import os
from typing import Optional

CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₱")
INVALID_MARGIN = "Invalid Margin %"


def format_currency(amount: Optional[float], symbol: Optional[str] = None) -> str:
    """Format an amount for dashboard cards, e.g. 1234.5 -> "₱1,234.50"."""
    symbol = CURRENCY_SYMBOL if symbol is None else symbol
    if amount is None:
        amount = 0
    if math.isinf(amount) or math.isnan(amount):
        return INVALID_MARGIN
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"
