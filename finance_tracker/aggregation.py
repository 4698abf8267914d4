"""Expense and income aggregation.

Pure functions that turn record collections into the figures shown on
the dashboard: all-time and current-month totals, the per-category
breakdown, the six-month trend and filtered expense lists.  Records are
loaded into a pandas DataFrame so the group-bys read the same way as
the rest of the analytics code.

Every function that depends on "the current month" accepts an optional
``today`` argument; it defaults to the local calendar date.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd

from .models import (
    EXPENSE_CATEGORIES,
    DateLike,
    Expense,
    ExpenseCategory,
    Income,
    parse_date,
)

TREND_MONTHS = 6
ALL_CATEGORIES = 'All'

_COLUMNS = ['date', 'amount', 'category', 'description']


@dataclass
class MonthlyTotal:
    month: str  # abbreviated month name, e.g. "Mar"
    amount: float
    period: str = ''  # "YYYY-MM"


@dataclass
class ExpenseSummary:
    total_expenses: float
    monthly_expenses: float
    average_expense: float
    expense_count: int
    category_breakdown: Dict[ExpenseCategory, float]
    monthly_trend: List[MonthlyTotal]


@dataclass
class IncomeSummary:
    total_income: float
    monthly_income: float
    income_count: int = 0


@dataclass
class ExpenseFilters:
    """Criteria for :func:`filter_expenses`.

    Empty strings mean "no constraint".  The date range only applies
    when both ``start_date`` and ``end_date`` are set.
    """
    search: str = ''
    category: Union[ExpenseCategory, str] = ALL_CATEGORIES
    start_date: Optional[DateLike] = ''
    end_date: Optional[DateLike] = ''


def records_to_frame(records: Iterable[Union[Expense, Income]]) -> pd.DataFrame:
    """Load expense or income records into a DataFrame.

    Columns: ``date`` (datetime64), ``amount`` (float), ``category``
    (category value string) and ``description``.  An empty input still
    yields a frame with these columns.
    """
    rows = [
        {
            'date': record.date,
            'amount': float(record.amount),
            'category': record.category.value,
            'description': record.description,
        }
        for record in records
    ]
    df = pd.DataFrame(rows, columns=_COLUMNS)
    df['date'] = pd.to_datetime(df['date'])
    df['amount'] = pd.to_numeric(df['amount']).astype(float)
    return df


def _today(today: Optional[date]) -> date:
    return today or date.today()


def current_month(today: Optional[date] = None) -> pd.Period:
    return pd.Period(_today(today), freq='M')


def month_bounds(today: Optional[date] = None) -> tuple[date, date]:
    """First and last calendar day of the month containing ``today``."""
    period = current_month(today)
    return period.start_time.date(), period.end_time.date()


def _in_month(df: pd.DataFrame, period: pd.Period) -> pd.Series:
    start = period.start_time
    end = period.end_time
    return (df['date'] >= start) & (df['date'] <= end)


def monthly_trend(
    records: Iterable[Union[Expense, Income]],
    today: Optional[date] = None,
    months: int = TREND_MONTHS,
) -> List[MonthlyTotal]:
    """Totals for the last ``months`` calendar months, oldest first.

    The final entry is the current month.  Months without records are
    present with an amount of 0.
    """
    df = records_to_frame(records)
    periods = pd.period_range(end=current_month(today), periods=months, freq='M')
    if df.empty:
        totals = pd.Series(0.0, index=periods)
    else:
        totals = (
            df.groupby(df['date'].dt.to_period('M'))['amount']
            .sum()
            .reindex(periods, fill_value=0.0)
        )
    return [
        MonthlyTotal(month=period.strftime('%b'), amount=float(totals[period]), period=str(period))
        for period in periods
    ]


def category_breakdown(expenses: Iterable[Expense]) -> Dict[ExpenseCategory, float]:
    """Total spend for every fixed expense category (0.0 when unused)."""
    df = records_to_frame(expenses)
    totals = df.groupby('category')['amount'].sum()
    return {
        category: float(totals.get(category.value, 0.0))
        for category in EXPENSE_CATEGORIES
    }


def monthly_spending_by_category(
    expenses: Iterable[Expense],
    today: Optional[date] = None,
) -> Dict[ExpenseCategory, float]:
    """Per-category spend restricted to the current calendar month."""
    df = records_to_frame(expenses)
    df = df[_in_month(df, current_month(today))]
    totals = df.groupby('category')['amount'].sum()
    return {
        category: float(totals.get(category.value, 0.0))
        for category in EXPENSE_CATEGORIES
    }


def summarize(expenses: Sequence[Expense], today: Optional[date] = None) -> ExpenseSummary:
    """Build the dashboard summary for a collection of expenses.

    The total is the sum of the category breakdown, so the two always
    agree exactly.

    Example:
        >>> summary = summarize(store.items)
        >>> summary.average_expense
        42.5
    """
    df = records_to_frame(expenses)
    count = len(df)
    breakdown = category_breakdown(expenses)
    total = float(sum(breakdown.values()))
    monthly = float(df.loc[_in_month(df, current_month(today)), 'amount'].sum()) if count else 0.0
    return ExpenseSummary(
        total_expenses=total,
        monthly_expenses=monthly,
        average_expense=total / count if count > 0 else 0.0,
        expense_count=count,
        category_breakdown=breakdown,
        monthly_trend=monthly_trend(expenses, today),
    )


def summarize_income(incomes: Sequence[Income], today: Optional[date] = None) -> IncomeSummary:
    df = records_to_frame(incomes)
    if df.empty:
        return IncomeSummary(total_income=0.0, monthly_income=0.0, income_count=0)
    return IncomeSummary(
        total_income=float(df['amount'].sum()),
        monthly_income=float(df.loc[_in_month(df, current_month(today)), 'amount'].sum()),
        income_count=len(df),
    )


def _optional_date(value: Optional[DateLike]) -> Optional[date]:
    if value is None or value == '':
        return None
    return parse_date(value)


def filter_expenses(expenses: Iterable[Expense], filters: ExpenseFilters) -> List[Expense]:
    """Return the expenses matching every active criterion, in input order.

    * ``search`` matches description or category name, case-insensitive
    * ``category`` "All" matches everything, otherwise exact match
    * the date range is inclusive and only applies when both bounds are set
    """
    needle = (filters.search or '').lower()
    category = filters.category or ALL_CATEGORIES
    if category != ALL_CATEGORIES:
        category = ExpenseCategory.parse(category)
    start = _optional_date(filters.start_date)
    end = _optional_date(filters.end_date)
    use_range = start is not None and end is not None

    matched: List[Expense] = []
    for expense in expenses:
        if needle and not (
            needle in expense.description.lower()
            or needle in expense.category.value.lower()
        ):
            continue
        if category != ALL_CATEGORIES and expense.category != category:
            continue
        if use_range and not (start <= expense.date <= end):
            continue
        matched.append(expense)
    return matched


def sort_newest_first(records: Iterable[Union[Expense, Income]]) -> List[Union[Expense, Income]]:
    """Order records by date, then creation time, newest first."""
    return sorted(records, key=lambda r: (r.date, r.created_at), reverse=True)
