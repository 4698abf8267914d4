from datetime import date, datetime, timezone

import pytest

from finance_tracker.models import (
    Budget,
    Expense,
    ExpenseCategory,
    Income,
    IncomeCategory,
    InvalidRecordError,
    SavingsGoal,
    parse_amount,
    parse_date,
    parse_timestamp,
)

STAMP = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_expense_categories_are_fixed_and_ordered():
    assert [c.value for c in ExpenseCategory] == [
        'Food', 'Transportation', 'Entertainment', 'Shopping',
        'Bills', 'Utilities', 'Grocery', 'Other',
    ]
    assert len(IncomeCategory) == 6


def test_unknown_category_is_rejected():
    with pytest.raises(InvalidRecordError):
        ExpenseCategory.parse('Groceries')
    with pytest.raises(InvalidRecordError):
        IncomeCategory.parse('Food')
    assert ExpenseCategory.parse('Bills') is ExpenseCategory.BILLS


def test_parse_amount_accepts_decimal_strings():
    assert parse_amount('12.50') == 12.5
    assert parse_amount(' 3 ') == 3.0
    assert parse_amount(7) == 7.0


@pytest.mark.parametrize('value', ['', '   ', 'abc', 'nan', 'inf', None, True])
def test_parse_amount_rejects_garbage(value):
    with pytest.raises(InvalidRecordError):
        parse_amount(value)


def test_parse_date_accepts_iso_and_timestamps():
    assert parse_date('2025-01-05') == date(2025, 1, 5)
    assert parse_date('2025-01-05T10:00:00.000Z') == date(2025, 1, 5)
    with pytest.raises(InvalidRecordError):
        parse_date('05/01/2025')


def test_parse_timestamp_handles_trailing_z():
    parsed = parse_timestamp('2025-03-01T12:00:00.000Z')
    assert parsed == STAMP


def test_expense_dict_uses_camel_case_and_round_trips():
    expense = Expense('e1', 12.5, ExpenseCategory.FOOD, 'Lunch', date(2025, 3, 2), STAMP, STAMP)
    payload = expense.to_dict()
    assert payload['category'] == 'Food'
    assert payload['date'] == '2025-03-02'
    assert 'createdAt' in payload and 'updatedAt' in payload
    assert Expense.from_dict(payload) == expense


def test_income_round_trip_keeps_recurring_flag():
    income = Income('i1', 3000.0, IncomeCategory.SALARY, 'March pay', date(2025, 3, 1),
                    is_recurring=True, created_at=STAMP, updated_at=STAMP)
    payload = income.to_dict()
    assert payload['isRecurring'] is True
    assert Income.from_dict(payload) == income


def test_budget_round_trip():
    budget = Budget('b1', ExpenseCategory.FOOD, 100.0, STAMP, STAMP)
    assert Budget.from_dict(budget.to_dict()) == budget


def test_savings_goal_round_trip_with_and_without_deadline():
    goal = SavingsGoal('g1', 'Trip', 1200.0, 1000.0, date(2025, 12, 31), STAMP, STAMP)
    assert SavingsGoal.from_dict(goal.to_dict()) == goal

    open_ended = SavingsGoal('g2', 'Rainy day', 500.0, 0.0, None, STAMP, STAMP)
    payload = open_ended.to_dict()
    assert 'deadline' not in payload
    assert SavingsGoal.from_dict(payload) == open_ended


def test_savings_goal_completion():
    goal = SavingsGoal('g1', 'Trip', 1200.0, 1500.0, created_at=STAMP, updated_at=STAMP)
    assert goal.is_complete
    goal.current_amount = 1199.99
    assert not goal.is_complete
