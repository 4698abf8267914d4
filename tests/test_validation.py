from datetime import date

from finance_tracker.models import BudgetForm, ExpenseForm, IncomeForm, SavingsGoalForm
from finance_tracker.validation import (
    validate_budget_form,
    validate_expense_form,
    validate_funds_amount,
    validate_income_form,
    validate_savings_form,
)

TODAY = date(2025, 3, 15)


def expense(**overrides):
    fields = dict(amount='12.50', category='Food', description='Lunch', date='2025-03-15')
    fields.update(overrides)
    return ExpenseForm(**fields)


def test_valid_expense_has_no_errors():
    assert validate_expense_form(expense(), today=TODAY) == {}


def test_expense_amount_rules():
    assert validate_expense_form(expense(amount=''), today=TODAY)['amount'] == 'Amount is required'
    assert 'positive' in validate_expense_form(expense(amount='-3'), today=TODAY)['amount']
    assert 'positive' in validate_expense_form(expense(amount='abc'), today=TODAY)['amount']
    assert 'exceed' in validate_expense_form(expense(amount='1000000.01'), today=TODAY)['amount']
    assert validate_expense_form(expense(amount='1000000'), today=TODAY) == {}


def test_expense_description_rules():
    assert 'required' in validate_expense_form(expense(description='   '), today=TODAY)['description']
    assert 'description' in validate_expense_form(expense(description='x' * 201), today=TODAY)
    assert validate_expense_form(expense(description='x' * 200), today=TODAY) == {}


def test_expense_date_rules():
    assert 'future' in validate_expense_form(expense(date='2025-03-16'), today=TODAY)['date']
    assert 'required' in validate_expense_form(expense(date=''), today=TODAY)['date']
    assert 'valid' in validate_expense_form(expense(date='yesterday'), today=TODAY)['date']


def test_expense_unknown_category():
    assert 'category' in validate_expense_form(expense(category='Rent'), today=TODAY)


def test_income_form():
    good = IncomeForm(amount='3000', category='Salary', description='Pay', date='2025-03-01')
    assert validate_income_form(good) == {}
    bad = IncomeForm(amount='0', category='Lottery', description='', date='')
    assert set(validate_income_form(bad)) == {'amount', 'category', 'description', 'date'}


def test_budget_duplicate_category_only_blocks_creation():
    form = BudgetForm(category='Food', amount='100')
    assert 'category' in validate_budget_form(form, existing_categories=['Food'])
    assert validate_budget_form(form, existing_categories=['Food'], is_editing=True) == {}
    assert validate_budget_form(form, existing_categories=['Bills']) == {}
    assert 'amount' in validate_budget_form(BudgetForm(category='Food', amount='0'))


def test_savings_form():
    assert validate_savings_form(SavingsGoalForm(name='Trip', target_amount='1200')) == {}
    errors = validate_savings_form(
        SavingsGoalForm(name='', target_amount='', current_amount='-5', deadline='soon')
    )
    assert set(errors) == {'name', 'target_amount', 'current_amount', 'deadline'}
    assert validate_savings_form(SavingsGoalForm(name='Trip', target_amount='10', current_amount='')) == {}


def test_funds_amount():
    assert validate_funds_amount('500') == {}
    assert 'amount' in validate_funds_amount('')
    assert 'amount' in validate_funds_amount('-1')
