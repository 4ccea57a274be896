"""Formatting utilities for currency and text display."""

from __future__ import annotations

from typing import Union

from . import config

MONTH_LABELS = [
    'Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
    'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec',
]


def format_currency(amount: Union[float, int], include_sign: bool = True, symbol: str | None = None) -> str:
    """Format a currency amount with proper formatting.

    Args:
        amount: The amount to format
        include_sign: Whether to include the currency symbol
        symbol: Symbol to use instead of the configured one

    Returns:
        Formatted currency string (e.g., "€1,234.56" or "1,234.56")

    Example:
        >>> format_currency(1234.56, symbol='€')
        '€1,234.56'
        >>> format_currency(-50, symbol='€')
        '-€50.00'
    """
    formatted = f"{abs(amount):,.2f}"
    sign = '-' if amount < 0 else ''
    if not include_sign:
        return f"{sign}{formatted}"
    return f"{sign}{symbol if symbol is not None else config.CURRENCY_SYMBOL}{formatted}"


def month_label(month: int) -> str:
    return MONTH_LABELS[month - 1]
