"""Rupiah formatting."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any


def format_currency(value: Any) -> str:
    """
    Format an amount as Indonesian Rupiah without decimals.

    Examples:
        >>> format_currency(1250000)
        'Rp1.250.000'
        >>> format_currency(-5000)
        '-Rp5.000'
    """
    amount = Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    grouped = f"{abs(int(amount)):,}".replace(",", ".")
    return f"{sign}Rp{grouped}"
