"""Formatting utilities for currency, dates and markdown display."""

from __future__ import annotations

from datetime import date
from typing import Union

from .models import DateLike, parse_date


def format_currency(amount: Union[float, int], include_sign: bool = True) -> str:
    """Format a currency amount with proper formatting.

    Args:
        amount: The amount to format
        include_sign: Whether to include the dollar sign

    Returns:
        Formatted currency string (e.g., "$1,234.56" or "1,234.56")

    Example:
        >>> format_currency(1234.56)
        '$1,234.56'
        >>> format_currency(-20)
        '-$20.00'
        >>> format_currency(1234.56, include_sign=False)
        '1,234.56'
    """
    formatted = f"{abs(amount):,.2f}"
    prefix = '-' if amount < 0 else ''
    return f"{prefix}${formatted}" if include_sign else f"{prefix}{formatted}"


def escape_dollar_for_markdown(amount: float) -> str:
    """Format a dollar amount and escape the dollar sign for markdown rendering.

    Streamlit markdown treats ``$`` as a LaTeX delimiter, so it is escaped.

    Example:
        >>> escape_dollar_for_markdown(1234.56)
        '\\\\$1,234.56'
    """
    return format_currency(amount).replace("$", "\\$")


def format_date(value: DateLike) -> str:
    """Format a date for display, e.g. ``Jan 05, 2025``."""
    day: date = parse_date(value)
    return day.strftime('%b %d, %Y')
