"""Streamlit app for the finance tracker.

The app keeps one :class:`~finance_tracker.record_store.TrackerState`
per browser session in ``st.session_state`` and renders four views:
Dashboard, Expenses, Income and Planning.  Figures come from
:mod:`finance_tracker.aggregation` and
:mod:`finance_tracker.budget_status`; forms are checked with
:mod:`finance_tracker.validation` before anything reaches a store.

To run the app from the command line::

    streamlit run finance_tracker/dashboard.py

or use ``run_tracker.py`` at the project root.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import date
from typing import Dict, List, Optional

import pandas as pd
import streamlit as st

if __package__:
    from . import aggregation as agg
    from . import budget_status as bs
    from . import config
    from . import visualization as viz
    from .export import expenses_to_csv, export_filename
    from .formatting import escape_dollar_for_markdown, format_currency, format_date
    from .models import (
        EXPENSE_CATEGORIES,
        ExpenseCategory,
        IncomeCategory,
        INCOME_CATEGORIES,
        CATEGORY_ICONS,
        INCOME_CATEGORY_ICONS,
        BudgetForm,
        Expense,
        ExpenseForm,
        Income,
        IncomeForm,
        SavingsGoal,
        SavingsGoalForm,
    )
    from .record_store import DuplicateBudgetError, TrackerState, open_tracker
    from .storage import JsonFileStorage, StorageResult
    from . import validation
else:
    # Allow ``streamlit run finance_tracker/dashboard.py`` to resolve the package.
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from finance_tracker import aggregation as agg  # type: ignore
    from finance_tracker import budget_status as bs  # type: ignore
    from finance_tracker import config  # type: ignore
    from finance_tracker import visualization as viz  # type: ignore
    from finance_tracker.export import expenses_to_csv, export_filename  # type: ignore
    from finance_tracker.formatting import (  # type: ignore
        escape_dollar_for_markdown,
        format_currency,
        format_date,
    )
    from finance_tracker.models import (  # type: ignore
        EXPENSE_CATEGORIES,
        ExpenseCategory,
        IncomeCategory,
        INCOME_CATEGORIES,
        CATEGORY_ICONS,
        INCOME_CATEGORY_ICONS,
        BudgetForm,
        Expense,
        ExpenseForm,
        Income,
        IncomeForm,
        SavingsGoal,
        SavingsGoalForm,
    )
    from finance_tracker.record_store import (  # type: ignore
        DuplicateBudgetError,
        TrackerState,
        open_tracker,
    )
    from finance_tracker.storage import JsonFileStorage, StorageResult  # type: ignore
    from finance_tracker import validation  # type: ignore

logger = logging.getLogger(__name__)

TRACKER_KEY = 'tracker'
STORAGE_ERRORS_KEY = 'storage_errors'
VIEWS = ["🏠 Dashboard", "🧾 Expenses", "💰 Income", "🎯 Planning"]

STATUS_BADGES = {
    bs.BudgetTier.SAFE: "🟢 On track",
    bs.BudgetTier.WARNING: "🟡 Warning",
    bs.BudgetTier.DANGER: "🟠 Danger",
    bs.BudgetTier.EXCEEDED: "🔴 Exceeded",
}


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------

def _record_storage_error(result: StorageResult) -> None:
    st.session_state.setdefault(STORAGE_ERRORS_KEY, []).append(
        f"Could not {result.operation} '{result.key}': {result.error}"
    )


def init_tracker(storage=None) -> TrackerState:
    """Create the session's TrackerState once and return it."""
    if TRACKER_KEY not in st.session_state:
        config.ensure_data_directories()
        st.session_state[STORAGE_ERRORS_KEY] = []
        st.session_state[TRACKER_KEY] = open_tracker(
            storage or JsonFileStorage(),
            on_storage_error=_record_storage_error,
        )
        logger.info("Opened tracker storage in %s", config.get_data_dir())
    return st.session_state[TRACKER_KEY]


def require_tracker() -> TrackerState:
    """Return the session's TrackerState.

    Raises:
        RuntimeError: If called before :func:`init_tracker`
    """
    tracker = st.session_state.get(TRACKER_KEY)
    if tracker is None:
        raise RuntimeError("require_tracker() called before init_tracker()")
    return tracker


# ---------------------------------------------------------------------------
# Form submission
# ---------------------------------------------------------------------------

def submit_expense(tracker: TrackerState, form: ExpenseForm,
                   expense_id: Optional[str] = None) -> validation.FormErrors:
    """Validate ``form`` and add it, or update ``expense_id`` when given."""
    errors = validation.validate_expense_form(form)
    if not errors:
        if expense_id is None:
            tracker.expenses.add(form)
        else:
            tracker.expenses.update(expense_id, form)
    return errors


def submit_income(tracker: TrackerState, form: IncomeForm,
                  income_id: Optional[str] = None) -> validation.FormErrors:
    errors = validation.validate_income_form(form)
    if not errors:
        if income_id is None:
            tracker.incomes.add(form)
        else:
            tracker.incomes.update(income_id, form)
    return errors


def submit_budget(tracker: TrackerState, form: BudgetForm,
                  budget_id: Optional[str] = None) -> validation.FormErrors:
    """Validate and save a budget.

    Editing may keep the budget's own category; moving it onto a
    category held by another budget is reported as a category error.
    """
    existing = [b.category for b in tracker.budgets.items]
    errors = validation.validate_budget_form(form, existing, is_editing=budget_id is not None)
    if errors:
        return errors
    if budget_id is None:
        tracker.budgets.add(form)
        return errors
    try:
        tracker.budgets.update(budget_id, form)
    except DuplicateBudgetError as e:
        errors['category'] = str(e)
    return errors


def submit_goal(tracker: TrackerState, form: SavingsGoalForm,
                goal_id: Optional[str] = None) -> validation.FormErrors:
    errors = validation.validate_savings_form(form)
    if not errors:
        if goal_id is None:
            tracker.savings.add(form)
        else:
            tracker.savings.update(goal_id, form)
    return errors


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------

def amount_of(part: float, whole: float) -> str:
    """Markdown-safe "spent of budgeted" text."""
    return f"{escape_dollar_for_markdown(part)} of {escape_dollar_for_markdown(whole)}"


def remaining_text(remaining: float) -> str:
    if remaining < 0:
        return f"Over by {escape_dollar_for_markdown(abs(remaining))}"
    return f"{escape_dollar_for_markdown(remaining)} left"


def _show_errors(errors: Dict[str, str]) -> None:
    for field_name, message in errors.items():
        st.error(f"{field_name.replace('_', ' ').capitalize()}: {message}")


def _after_submit(errors: Dict[str, str], message: str) -> None:
    if errors:
        _show_errors(errors)
    else:
        st.success(message)
        st.rerun()


def _records_table(records, with_recurring: bool = False) -> pd.DataFrame:
    rows = []
    for record in records:
        row = {
            'Date': format_date(record.date),
            'Description': record.description,
            'Category': record.category.value,
            'Amount': format_currency(record.amount),
        }
        if with_recurring:
            row['Recurring'] = '🔁' if record.is_recurring else ''
        rows.append(row)
    return pd.DataFrame(rows)


def _record_labels(records) -> Dict[str, str]:
    return {
        r.id: f"{format_date(r.date)} · {r.description} · {format_currency(r.amount)}"
        for r in records
    }


# ---------------------------------------------------------------------------
# Forms
# ---------------------------------------------------------------------------

def _expense_form(key: str, expense: Optional[Expense] = None) -> Optional[ExpenseForm]:
    """Render an expense form; returns the filled form once submitted."""
    categories = [c.value for c in EXPENSE_CATEGORIES]
    with st.form(key, clear_on_submit=expense is None):
        col1, col2 = st.columns(2)
        amount = col1.text_input("Amount", value=f"{expense.amount:.2f}" if expense else "",
                                 placeholder="0.00")
        spent_on = col2.date_input("Date", value=expense.date if expense else date.today(),
                                   max_value=date.today())
        category = st.selectbox(
            "Category",
            categories,
            index=categories.index(expense.category.value) if expense else 0,
            format_func=lambda v: f"{CATEGORY_ICONS[ExpenseCategory(v)]} {v}",
        )
        description = st.text_input("Description", value=expense.description if expense else "",
                                    max_chars=200)
        submitted = st.form_submit_button("Save changes" if expense else "Add expense")
    if not submitted:
        return None
    return ExpenseForm(amount=amount, category=category, description=description,
                       date=spent_on.isoformat())


def _income_form(key: str, income: Optional[Income] = None) -> Optional[IncomeForm]:
    categories = [c.value for c in INCOME_CATEGORIES]
    with st.form(key, clear_on_submit=income is None):
        col1, col2 = st.columns(2)
        amount = col1.text_input("Amount", value=f"{income.amount:.2f}" if income else "",
                                 placeholder="0.00")
        received_on = col2.date_input("Date", value=income.date if income else date.today())
        category = st.selectbox(
            "Source",
            categories,
            index=categories.index(income.category.value) if income else 0,
            format_func=lambda v: f"{INCOME_CATEGORY_ICONS[IncomeCategory(v)]} {v}",
        )
        description = st.text_input("Description", value=income.description if income else "")
        recurring = st.checkbox("Recurring income", value=income.is_recurring if income else False)
        submitted = st.form_submit_button("Save changes" if income else "Add income")
    if not submitted:
        return None
    return IncomeForm(amount=amount, category=category, description=description,
                      date=received_on.isoformat(), is_recurring=recurring)


def _goal_form(key: str, goal: Optional[SavingsGoal] = None) -> Optional[SavingsGoalForm]:
    with st.form(key, clear_on_submit=goal is None):
        name = st.text_input("Goal name", value=goal.name if goal else "", max_chars=100)
        col1, col2, col3 = st.columns(3)
        target = col1.text_input("Target amount", value=f"{goal.target_amount:.2f}" if goal else "")
        current = col2.text_input("Already saved", value=f"{goal.current_amount:.2f}" if goal else "0")
        deadline = col3.date_input("Deadline (optional)", value=goal.deadline if goal else None)
        submitted = st.form_submit_button("Save changes" if goal else "Add goal")
    if not submitted:
        return None
    return SavingsGoalForm(name=name, target_amount=target, current_amount=current,
                           deadline=deadline.isoformat() if deadline else None)


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------

def render_dashboard(tracker: TrackerState) -> None:
    st.header("🏠 Dashboard")
    expenses = tracker.expenses.items
    summary = agg.summarize(expenses)
    income = agg.summarize_income(tracker.incomes.items)

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total Spent", format_currency(summary.total_expenses))
    col2.metric("This Month", format_currency(summary.monthly_expenses))
    col3.metric("Average Expense", format_currency(summary.average_expense))
    col4.metric("Monthly Income", format_currency(income.monthly_income))

    left, right = st.columns(2)
    with left:
        st.plotly_chart(viz.create_category_pie(summary.category_breakdown), use_container_width=True)
    with right:
        st.plotly_chart(viz.create_monthly_trend_chart(summary.monthly_trend), use_container_width=True)

    if expenses:
        st.download_button(
            "⬇️ Export CSV",
            data=expenses_to_csv(agg.sort_newest_first(expenses)),
            file_name=export_filename(),
            mime='text/csv',
        )


def render_expenses(tracker: TrackerState) -> None:
    st.header("🧾 Expenses")
    with st.expander("➕ Add expense", expanded=not tracker.expenses.items):
        form = _expense_form('add_expense')
        if form is not None:
            _after_submit(submit_expense(tracker, form), "Expense added")

    col1, col2, col3, col4 = st.columns(4)
    search = col1.text_input("Search")
    category = col2.selectbox("Category filter", [agg.ALL_CATEGORIES] + [c.value for c in EXPENSE_CATEGORIES])
    start = col3.date_input("From", value=None)
    end = col4.date_input("To", value=None)
    filters = agg.ExpenseFilters(search=search, category=category,
                                 start_date=start or '', end_date=end or '')
    shown = agg.filter_expenses(tracker.expenses.items, filters)

    if not shown:
        st.info("No expenses match the current filters.")
        return
    st.dataframe(_records_table(shown), use_container_width=True, hide_index=True)

    labels = _record_labels(shown)
    selected = st.selectbox("Select an expense", list(labels), format_func=labels.get)
    expense = tracker.expenses.get_by_id(selected)
    with st.expander("✏️ Edit selected expense"):
        form = _expense_form(f'edit_expense_{expense.id}', expense)
        if form is not None:
            _after_submit(submit_expense(tracker, form, expense.id), "Expense updated")
    if st.button("🗑️ Delete selected expense"):
        tracker.expenses.delete(expense.id)
        st.rerun()


def render_income(tracker: TrackerState) -> None:
    st.header("💰 Income")
    summary = agg.summarize_income(tracker.incomes.items)
    col1, col2 = st.columns(2)
    col1.metric("This Month", format_currency(summary.monthly_income))
    col2.metric("All Time", format_currency(summary.total_income))

    form = _income_form('add_income')
    if form is not None:
        _after_submit(submit_income(tracker, form), "Income added")

    if not tracker.incomes.items:
        return
    st.dataframe(_records_table(tracker.incomes.items, with_recurring=True),
                 use_container_width=True, hide_index=True)

    labels = _record_labels(tracker.incomes.items)
    selected = st.selectbox("Select an income entry", list(labels), format_func=labels.get)
    income = tracker.incomes.get_by_id(selected)
    with st.expander("✏️ Edit selected income"):
        form = _income_form(f'edit_income_{income.id}', income)
        if form is not None:
            _after_submit(submit_income(tracker, form, income.id), "Income updated")
    if st.button("🗑️ Delete selected income"):
        tracker.incomes.delete(income.id)
        st.rerun()


def _render_budgets(tracker: TrackerState, overview: bs.PlanningOverview) -> None:
    st.subheader("📋 Budgets")
    categories = [c.value for c in EXPENSE_CATEGORIES]
    with st.form('add_budget', clear_on_submit=True):
        col1, col2 = st.columns(2)
        category = col1.selectbox("Category", categories)
        amount = col2.text_input("Monthly limit", placeholder="0.00")
        submitted = st.form_submit_button("Save budget")
    if submitted:
        _after_submit(submit_budget(tracker, BudgetForm(category=category, amount=amount)),
                      "Budget saved")

    if not overview.budget_statuses:
        st.info("No budgets yet.")
        return
    st.plotly_chart(viz.create_budget_progress_chart(overview.budget_statuses), use_container_width=True)
    for budget, status in zip(tracker.budgets.items, overview.budget_statuses):
        col1, col2, col3, col4 = st.columns([3, 2, 2, 1])
        col1.markdown(f"**{CATEGORY_ICONS[status.category]} {status.category.value}** · {STATUS_BADGES[status.status]}")
        col2.write(amount_of(status.spent, status.budgeted))
        col3.write(remaining_text(status.remaining))
        if col4.button("🗑️", key=f"delete_budget_{budget.id}"):
            tracker.budgets.delete(budget.id)
            st.rerun()
        with st.expander(f"✏️ Edit {budget.category.value} budget"):
            with st.form(f'edit_budget_{budget.id}'):
                col1, col2 = st.columns(2)
                new_category = col1.selectbox("Category", categories,
                                              index=categories.index(budget.category.value))
                new_amount = col2.text_input("Monthly limit", value=f"{budget.amount:.2f}")
                saved = st.form_submit_button("Save changes")
            if saved:
                form = BudgetForm(category=new_category, amount=new_amount)
                _after_submit(submit_budget(tracker, form, budget.id), "Budget updated")


def _render_savings(tracker: TrackerState) -> None:
    st.subheader("🎯 Savings goals")
    form = _goal_form('add_goal')
    if form is not None:
        _after_submit(submit_goal(tracker, form), "Goal added")

    for goal in tracker.savings.items:
        progress = bs.savings_progress(goal)
        with st.container(border=True):
            title = f"**{goal.name}**" + (" ✅" if progress.is_complete else "")
            st.markdown(title)
            st.progress(progress.bar_percentage / 100)
            st.caption(
                amount_of(goal.current_amount, goal.target_amount)
                + f" · {progress.percentage:.1f}% complete"
                + (f" · due {format_date(goal.deadline)}" if goal.deadline else "")
            )
            col1, col2, col3 = st.columns([2, 1, 1])
            funds = col1.text_input("Add funds", key=f"funds_{goal.id}", label_visibility='collapsed',
                                    placeholder="Amount to add")
            if col2.button("➕ Add", key=f"add_funds_{goal.id}"):
                errors = validation.validate_funds_amount(funds)
                if errors:
                    _show_errors(errors)
                else:
                    tracker.savings.add_funds(goal.id, float(funds))
                    st.rerun()
            if col3.button("🗑️", key=f"delete_goal_{goal.id}"):
                tracker.savings.delete(goal.id)
                st.rerun()
            with st.expander("✏️ Edit goal"):
                form = _goal_form(f'edit_goal_{goal.id}', goal)
                if form is not None:
                    _after_submit(submit_goal(tracker, form, goal.id), "Goal updated")


def render_planning(tracker: TrackerState) -> None:
    st.header("🎯 Planning")
    overview = bs.planning_overview(
        tracker.expenses.items,
        tracker.incomes.items,
        tracker.budgets.items,
        tracker.savings.items,
    )
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Monthly Income", format_currency(overview.total_income))
    col2.metric("Budgeted", format_currency(overview.total_budgeted))
    col3.metric("Saved", format_currency(overview.total_savings))
    # Clamped for display only; the overview keeps the signed value.
    col4.metric("Available to Spend", format_currency(max(overview.available_to_spend, 0.0)))
    if overview.available_to_spend < 0:
        st.warning("Budgets and savings exceed income by "
                   + escape_dollar_for_markdown(-overview.available_to_spend))

    _render_budgets(tracker, overview)
    _render_savings(tracker)


def main() -> None:
    """Entry point for the Streamlit app."""
    st.set_page_config(
        page_title="Finance Tracker",
        page_icon="💰",
        layout="wide",
        initial_sidebar_state="expanded",
    )
    config.configure_logging()
    init_tracker()
    tracker = require_tracker()

    view = st.sidebar.radio("View", VIEWS)
    errors: List[str] = st.session_state.get(STORAGE_ERRORS_KEY) or []
    if errors:
        st.sidebar.warning("⚠️ Some changes could not be saved to disk:\n\n" + "\n\n".join(errors[-3:]))

    if view == VIEWS[0]:
        render_dashboard(tracker)
    elif view == VIEWS[1]:
        render_expenses(tracker)
    elif view == VIEWS[2]:
        render_income(tracker)
    else:
        render_planning(tracker)


if __name__ == "__main__":
    main()
