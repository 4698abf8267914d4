"""Budget status evaluation and monthly planning figures.

:func:`evaluate` classifies how much of a category budget has been
spent.  It is stateless: the spent amount is computed beforehand by
:func:`finance_tracker.aggregation.monthly_spending_by_category`.

:func:`planning_overview` combines income, budgets, savings and the
current month's spending into the numbers shown on the planning page.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from .aggregation import monthly_spending_by_category, summarize_income
from .models import Budget, Expense, ExpenseCategory, Income, SavingsGoal

WARNING_THRESHOLD = 75.0
DANGER_THRESHOLD = 90.0
EXCEEDED_THRESHOLD = 100.0


class BudgetTier(str, Enum):
    SAFE = 'safe'
    WARNING = 'warning'
    DANGER = 'danger'
    EXCEEDED = 'exceeded'


@dataclass
class BudgetStatus:
    category: ExpenseCategory
    budgeted: float
    spent: float
    remaining: float
    percentage: float
    status: BudgetTier

    @property
    def bar_percentage(self) -> float:
        """Percentage clamped to 100 for progress bars."""
        return min(self.percentage, 100.0)


def classify(percentage: float) -> BudgetTier:
    if percentage >= EXCEEDED_THRESHOLD:
        return BudgetTier.EXCEEDED
    if percentage >= DANGER_THRESHOLD:
        return BudgetTier.DANGER
    if percentage >= WARNING_THRESHOLD:
        return BudgetTier.WARNING
    return BudgetTier.SAFE


def evaluate(category, budgeted_amount: float, spent_amount: float) -> BudgetStatus:
    """Compare ``spent_amount`` against ``budgeted_amount`` for one category.

    A zero (missing) budget yields 0% and the ``safe`` tier.

    Example:
        >>> status = evaluate('Food', 100, 80)
        >>> status.remaining, status.percentage, status.status.value
        (20.0, 80.0, 'warning')
    """
    budgeted = float(budgeted_amount)
    spent = float(spent_amount)
    percentage = (spent / budgeted) * 100 if budgeted > 0 else 0.0
    return BudgetStatus(
        category=ExpenseCategory.parse(category),
        budgeted=budgeted,
        spent=spent,
        remaining=budgeted - spent,
        percentage=percentage,
        status=classify(percentage),
    )


def budget_statuses(
    budgets: Iterable[Budget],
    expenses: Iterable[Expense],
    today: Optional[date] = None,
) -> List[BudgetStatus]:
    """One status per budget, in collection order, using this month's spend."""
    spent = monthly_spending_by_category(expenses, today)
    return [evaluate(b.category, b.amount, spent.get(b.category, 0.0)) for b in budgets]


def total_budgeted(budgets: Iterable[Budget]) -> float:
    return float(sum(b.amount for b in budgets))


def total_savings(goals: Iterable[SavingsGoal]) -> float:
    return float(sum(g.current_amount for g in goals))


def available_to_spend(monthly_income: float, budgeted: float, savings: float) -> float:
    """Income left after budgets and savings; may be negative."""
    return monthly_income - budgeted - savings


@dataclass
class PlanningOverview:
    total_income: float
    total_budgeted: float
    total_spent: float
    total_savings: float
    available_to_spend: float
    remaining_from_budget: float
    actual_savings: float
    budget_statuses: List[BudgetStatus] = field(default_factory=list)


def planning_overview(
    expenses: Sequence[Expense],
    incomes: Sequence[Income],
    budgets: Sequence[Budget],
    goals: Sequence[SavingsGoal],
    today: Optional[date] = None,
) -> PlanningOverview:
    monthly_income = summarize_income(incomes, today).monthly_income
    spent_by_category = monthly_spending_by_category(expenses, today)
    spent = float(sum(spent_by_category.values()))
    budgeted = total_budgeted(budgets)
    savings = total_savings(goals)
    return PlanningOverview(
        total_income=monthly_income,
        total_budgeted=budgeted,
        total_spent=spent,
        total_savings=savings,
        available_to_spend=available_to_spend(monthly_income, budgeted, savings),
        remaining_from_budget=budgeted - spent,
        actual_savings=monthly_income - spent,
        budget_statuses=[
            evaluate(b.category, b.amount, spent_by_category.get(b.category, 0.0))
            for b in budgets
        ],
    )


@dataclass
class SavingsProgress:
    percentage: float
    bar_percentage: float
    remaining: float
    is_complete: bool
    days_remaining: Optional[int] = None


def savings_progress(goal: SavingsGoal, today: Optional[date] = None) -> SavingsProgress:
    """Progress figures for one savings goal."""
    target = float(goal.target_amount)
    current = float(goal.current_amount)
    percentage = (current / target) * 100 if target > 0 else 0.0
    days_remaining = None
    if goal.deadline is not None:
        days_remaining = (goal.deadline - (today or date.today())).days
    return SavingsProgress(
        percentage=percentage,
        bar_percentage=min(percentage, 100.0),
        remaining=max(target - current, 0.0),
        is_complete=goal.is_complete,
        days_remaining=days_remaining,
    )
