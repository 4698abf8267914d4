"""CSV export of expense lists.

The caller decides the row order (usually newest first, see
:func:`finance_tracker.aggregation.sort_newest_first`); rows are written
in the order given.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Iterable, Optional

from .models import Expense

CSV_HEADER = ('Date', 'Description', 'Category', 'Amount')


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def expense_to_row(expense: Expense) -> str:
    return ','.join([
        expense.date.isoformat(),
        _quote(expense.description),
        expense.category.value,
        f"{expense.amount:.2f}",
    ])


def expenses_to_csv(expenses: Iterable[Expense]) -> str:
    """Render expenses as CSV text.

    The description is always double-quoted with embedded quotes
    doubled; the amount always has two decimals.

    Example:
        >>> print(expenses_to_csv([lunch]))
        Date,Description,Category,Amount
        2025-01-05,"Lunch, large",Food,12.50
    """
    lines = [','.join(CSV_HEADER)]
    lines.extend(expense_to_row(expense) for expense in expenses)
    return '\n'.join(lines)


def export_filename(today: Optional[date] = None) -> str:
    return f"expenses_{(today or date.today()).isoformat()}.csv"


def write_csv(expenses: Iterable[Expense], target: Path) -> Path:
    """Write the CSV export to ``target`` and return the path.

    Raises:
        OSError: If the file cannot be written
    """
    target = Path(target)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(expenses_to_csv(expenses), encoding='utf-8')
    return target
