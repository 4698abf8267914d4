"""Field-level validation for the tracker's input forms.

Each ``validate_*`` function returns a mapping of field name to error
message.  An empty mapping means the form can be submitted.  Nothing
here raises; the UI shows the messages next to the fields.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, Optional

from .models import (
    MAX_DESCRIPTION_LENGTH,
    MAX_EXPENSE_AMOUNT,
    MAX_GOAL_NAME_LENGTH,
    BudgetForm,
    ExpenseCategory,
    ExpenseForm,
    IncomeCategory,
    IncomeForm,
    InvalidRecordError,
    SavingsGoalForm,
    parse_amount,
    parse_date,
)

FormErrors = Dict[str, str]


def _check_positive_amount(value: str, errors: FormErrors, key: str = 'amount',
                           label: str = 'Amount') -> Optional[float]:
    if not str(value or '').strip():
        errors[key] = f'{label} is required'
        return None
    try:
        amount = parse_amount(value, key)
    except InvalidRecordError:
        errors[key] = f'{label} must be a positive number'
        return None
    if amount <= 0:
        errors[key] = f'{label} must be a positive number'
        return None
    return amount


def _check_category(value, enum_cls, errors: FormErrors) -> None:
    try:
        enum_cls.parse(value)
    except InvalidRecordError:
        errors['category'] = 'Please choose a valid category'


def validate_expense_form(form: ExpenseForm, today: Optional[date] = None) -> FormErrors:
    errors: FormErrors = {}
    amount = _check_positive_amount(form.amount, errors)
    if amount is not None and amount > MAX_EXPENSE_AMOUNT:
        errors['amount'] = f'Amount cannot exceed ${MAX_EXPENSE_AMOUNT:,}'

    description = form.description or ''
    if not description.strip():
        errors['description'] = 'Description is required'
    elif len(description) > MAX_DESCRIPTION_LENGTH:
        errors['description'] = f'Description must be less than {MAX_DESCRIPTION_LENGTH} characters'

    if not str(form.date or '').strip():
        errors['date'] = 'Date is required'
    else:
        try:
            if parse_date(form.date) > (today or date.today()):
                errors['date'] = 'Date cannot be in the future'
        except InvalidRecordError:
            errors['date'] = 'Date must be a valid date'

    _check_category(form.category, ExpenseCategory, errors)
    return errors


def validate_income_form(form: IncomeForm) -> FormErrors:
    errors: FormErrors = {}
    _check_positive_amount(form.amount, errors)
    if not (form.description or '').strip():
        errors['description'] = 'Description is required'
    if not str(form.date or '').strip():
        errors['date'] = 'Date is required'
    else:
        try:
            parse_date(form.date)
        except InvalidRecordError:
            errors['date'] = 'Date must be a valid date'
    _check_category(form.category, IncomeCategory, errors)
    return errors


def validate_budget_form(
    form: BudgetForm,
    existing_categories: Iterable = (),
    is_editing: bool = False,
) -> FormErrors:
    """Validate a budget form.

    When creating (``is_editing`` is False) a category that already has a
    budget is rejected, even though the store itself would upsert.
    """
    errors: FormErrors = {}
    _check_positive_amount(form.amount, errors)
    try:
        category = ExpenseCategory.parse(form.category)
    except InvalidRecordError:
        errors['category'] = 'Please choose a valid category'
        return errors
    taken = {ExpenseCategory.parse(c) for c in existing_categories}
    if not is_editing and category in taken:
        errors['category'] = 'A budget for this category already exists'
    return errors


def validate_savings_form(form: SavingsGoalForm) -> FormErrors:
    errors: FormErrors = {}
    name = form.name or ''
    if not name.strip():
        errors['name'] = 'Name is required'
    elif len(name) > MAX_GOAL_NAME_LENGTH:
        errors['name'] = f'Name must be less than {MAX_GOAL_NAME_LENGTH} characters'

    _check_positive_amount(form.target_amount, errors, 'target_amount', 'Target amount')

    if str(form.current_amount or '').strip():
        try:
            current = parse_amount(form.current_amount, 'current_amount')
        except InvalidRecordError:
            current = -1.0
        if current < 0:
            errors['current_amount'] = 'Current amount must be zero or a positive number'

    if form.deadline and str(form.deadline).strip():
        try:
            parse_date(form.deadline, 'deadline')
        except InvalidRecordError:
            errors['deadline'] = 'Deadline must be a valid date'
    return errors


def validate_funds_amount(value: str) -> FormErrors:
    errors: FormErrors = {}
    _check_positive_amount(value, errors)
    return errors
