"""Formatting utilities for currency and percentage display."""

from __future__ import annotations

from decimal import Decimal
from typing import Union

from .config import CURRENCY_SYMBOL

Number = Union[Decimal, float, int]


def format_currency(amount: Number, include_sign: bool = True, symbol: str = CURRENCY_SYMBOL) -> str:
    """Format a currency amount with thousands separators.

    Example:
        >>> format_currency(1234.5, symbol='$')
        '$1,234.50'
        >>> format_currency(-20, symbol='$')
        '-$20.00'
        >>> format_currency(1234.56, include_sign=False)
        '1,234.56'
    """
    value = Decimal(str(amount))
    formatted = f"{abs(value):,.2f}"
    prefix = '-' if value < 0 else ''
    return f"{prefix}{symbol}{formatted}" if include_sign else f"{prefix}{formatted}"


def escape_currency_for_markdown(amount: Number, symbol: str = CURRENCY_SYMBOL) -> str:
    """Format an amount for Streamlit markdown.

    A bare ``$`` is read as a LaTeX delimiter by markdown, so it is escaped.
    """
    text = format_currency(amount, symbol=symbol)
    return text.replace("$", "\\$")


def format_percent(value: Number, places: int = 1) -> str:
    """Format a percentage such as a savings rate or budget utilization.

    Example:
        >>> format_percent(Decimal('125.00'))
        '125.0%'
    """
    return f"{float(value):.{places}f}%"
