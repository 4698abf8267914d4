"""Record types for the finance tracker.

Expenses, incomes, budgets and savings goals are plain dataclasses.
Each knows how to convert itself to and from the camelCase JSON
layout used for persistence.  Form inputs arrive as strings (the
shape the UI widgets produce) and are parsed into records by the
stores in :mod:`finance_tracker.record_store`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union

MAX_EXPENSE_AMOUNT = 1_000_000
MAX_DESCRIPTION_LENGTH = 200
MAX_GOAL_NAME_LENGTH = 100

DateLike = Union[date, str]


class InvalidRecordError(ValueError):
    """Raised when malformed data reaches a record store."""


class ExpenseCategory(str, Enum):
    FOOD = 'Food'
    TRANSPORTATION = 'Transportation'
    ENTERTAINMENT = 'Entertainment'
    SHOPPING = 'Shopping'
    BILLS = 'Bills'
    UTILITIES = 'Utilities'
    GROCERY = 'Grocery'
    OTHER = 'Other'

    @classmethod
    def parse(cls, value: Any) -> 'ExpenseCategory':
        return _parse_enum(cls, value)


class IncomeCategory(str, Enum):
    SALARY = 'Salary'
    FREELANCE = 'Freelance'
    INVESTMENT = 'Investment'
    BUSINESS = 'Business'
    GIFT = 'Gift'
    OTHER = 'Other'

    @classmethod
    def parse(cls, value: Any) -> 'IncomeCategory':
        return _parse_enum(cls, value)


def _parse_enum(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidRecordError(
            f"Unknown {enum_cls.__name__} {value!r}; expected one of "
            f"{', '.join(member.value for member in enum_cls)}"
        ) from None


EXPENSE_CATEGORIES = tuple(ExpenseCategory)
INCOME_CATEGORIES = tuple(IncomeCategory)

CATEGORY_COLORS: Dict[ExpenseCategory, str] = {
    ExpenseCategory.FOOD: '#22c55e',
    ExpenseCategory.TRANSPORTATION: '#3b82f6',
    ExpenseCategory.ENTERTAINMENT: '#a855f7',
    ExpenseCategory.SHOPPING: '#f97316',
    ExpenseCategory.BILLS: '#ef4444',
    ExpenseCategory.UTILITIES: '#14b8a6',
    ExpenseCategory.GROCERY: '#84cc16',
    ExpenseCategory.OTHER: '#6b7280',
}

CATEGORY_ICONS: Dict[ExpenseCategory, str] = {
    ExpenseCategory.FOOD: '🍔',
    ExpenseCategory.TRANSPORTATION: '🚗',
    ExpenseCategory.ENTERTAINMENT: '🎬',
    ExpenseCategory.SHOPPING: '🛍️',
    ExpenseCategory.BILLS: '📄',
    ExpenseCategory.UTILITIES: '💡',
    ExpenseCategory.GROCERY: '🛒',
    ExpenseCategory.OTHER: '📦',
}

INCOME_CATEGORY_COLORS: Dict[IncomeCategory, str] = {
    IncomeCategory.SALARY: '#22c55e',
    IncomeCategory.FREELANCE: '#3b82f6',
    IncomeCategory.INVESTMENT: '#a855f7',
    IncomeCategory.BUSINESS: '#f97316',
    IncomeCategory.GIFT: '#ec4899',
    IncomeCategory.OTHER: '#6b7280',
}

INCOME_CATEGORY_ICONS: Dict[IncomeCategory, str] = {
    IncomeCategory.SALARY: '💼',
    IncomeCategory.FREELANCE: '💻',
    IncomeCategory.INVESTMENT: '📈',
    IncomeCategory.BUSINESS: '🏢',
    IncomeCategory.GIFT: '🎁',
    IncomeCategory.OTHER: '💰',
}


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_amount(value: Any, field_name: str = 'amount') -> float:
    """Parse a decimal string (or number) coming from a form field.

    Raises:
        InvalidRecordError: If the value is empty, not numeric, or not finite.
    """
    if isinstance(value, bool):
        raise InvalidRecordError(f"{field_name} must be a number, got {value!r}")
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value or '').strip()
        if not text:
            raise InvalidRecordError(f"{field_name} is required")
        try:
            number = float(text)
        except ValueError:
            raise InvalidRecordError(f"{field_name} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise InvalidRecordError(f"{field_name} must be finite, got {value!r}")
    return number


def parse_date(value: DateLike, field_name: str = 'date') -> date:
    """Parse an ISO ``YYYY-MM-DD`` string (or pass a date through)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or '').strip()
    if not text:
        raise InvalidRecordError(f"{field_name} is required")
    try:
        # Accept full ISO timestamps too, keeping only the calendar date
        return date.fromisoformat(text[:10])
    except ValueError:
        raise InvalidRecordError(f"{field_name} must be an ISO date, got {value!r}") from None


def parse_optional_date(value: Optional[DateLike], field_name: str = 'date') -> Optional[date]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_date(value, field_name)


def parse_timestamp(value: Union[datetime, str]) -> datetime:
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    # Timestamps written by browsers end in "Z", which fromisoformat
    # only understands on newer interpreters.
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    return datetime.fromisoformat(text)


def format_timestamp(value: datetime) -> str:
    return value.isoformat()


# ---------------------------------------------------------------------------
# Form inputs
# ---------------------------------------------------------------------------

@dataclass
class ExpenseForm:
    """Raw expense form input; numeric fields are decimal strings."""
    amount: str
    category: str
    description: str
    date: str


@dataclass
class IncomeForm:
    amount: str
    category: str
    description: str
    date: str
    is_recurring: bool = False


@dataclass
class BudgetForm:
    category: str
    amount: str


@dataclass
class SavingsGoalForm:
    name: str
    target_amount: str
    current_amount: str = '0'
    deadline: Optional[str] = None


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass
class Expense:
    id: str
    amount: float
    category: ExpenseCategory
    description: str
    date: date
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'amount': self.amount,
            'category': self.category.value,
            'description': self.description,
            'date': self.date.isoformat(),
            'createdAt': format_timestamp(self.created_at),
            'updatedAt': format_timestamp(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Expense':
        return cls(
            id=str(data['id']),
            amount=parse_amount(data['amount']),
            category=ExpenseCategory.parse(data['category']),
            description=str(data.get('description', '')),
            date=parse_date(data['date']),
            created_at=parse_timestamp(data['createdAt']),
            updated_at=parse_timestamp(data['updatedAt']),
        )


@dataclass
class Income:
    id: str
    amount: float
    category: IncomeCategory
    description: str
    date: date
    is_recurring: bool = False  # informational only
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'amount': self.amount,
            'category': self.category.value,
            'description': self.description,
            'date': self.date.isoformat(),
            'isRecurring': self.is_recurring,
            'createdAt': format_timestamp(self.created_at),
            'updatedAt': format_timestamp(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Income':
        return cls(
            id=str(data['id']),
            amount=parse_amount(data['amount']),
            category=IncomeCategory.parse(data['category']),
            description=str(data.get('description', '')),
            date=parse_date(data['date']),
            is_recurring=bool(data.get('isRecurring', False)),
            created_at=parse_timestamp(data['createdAt']),
            updated_at=parse_timestamp(data['updatedAt']),
        )


@dataclass
class Budget:
    """A fixed monthly spending limit for one expense category."""
    id: str
    category: ExpenseCategory
    amount: float
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'category': self.category.value,
            'amount': self.amount,
            'createdAt': format_timestamp(self.created_at),
            'updatedAt': format_timestamp(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Budget':
        return cls(
            id=str(data['id']),
            category=ExpenseCategory.parse(data['category']),
            amount=parse_amount(data['amount']),
            created_at=parse_timestamp(data['createdAt']),
            updated_at=parse_timestamp(data['updatedAt']),
        )


@dataclass
class SavingsGoal:
    id: str
    name: str
    target_amount: float
    current_amount: float = 0.0
    deadline: Optional[date] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @property
    def is_complete(self) -> bool:
        return self.current_amount >= self.target_amount

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            'id': self.id,
            'name': self.name,
            'targetAmount': self.target_amount,
            'currentAmount': self.current_amount,
            'createdAt': format_timestamp(self.created_at),
            'updatedAt': format_timestamp(self.updated_at),
        }
        if self.deadline is not None:
            payload['deadline'] = self.deadline.isoformat()
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SavingsGoal':
        return cls(
            id=str(data['id']),
            name=str(data['name']),
            target_amount=parse_amount(data['targetAmount'], 'targetAmount'),
            current_amount=parse_amount(data.get('currentAmount', 0), 'currentAmount'),
            deadline=parse_optional_date(data.get('deadline'), 'deadline'),
            created_at=parse_timestamp(data['createdAt']),
            updated_at=parse_timestamp(data['updatedAt']),
        )
