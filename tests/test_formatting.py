from datetime import date

from finance_tracker.formatting import escape_dollar_for_markdown, format_currency, format_date


def test_format_currency():
    assert format_currency(1234.56) == '$1,234.56'
    assert format_currency(0) == '$0.00'
    assert format_currency(-20) == '-$20.00'
    assert format_currency(1234.5, include_sign=False) == '1,234.50'


def test_escape_dollar_for_markdown():
    assert escape_dollar_for_markdown(1234.56) == '\\$1,234.56'


def test_format_date():
    assert format_date('2025-01-05') == 'Jan 05, 2025'
    assert format_date(date(2024, 12, 31)) == 'Dec 31, 2024'
