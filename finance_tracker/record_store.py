"""In-memory record collections with best-effort persistence.

A :class:`RecordStore` owns one collection (expenses, incomes, budgets
or savings goals).  It loads the collection from storage when created,
applies mutations in memory, writes the whole collection back after
every successful mutation and notifies subscribers with the new
snapshot.

:class:`TrackerState` bundles the four stores.  The application root
creates one (see :func:`open_tracker`) and hands it to whatever needs
it; there is no module-level instance.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from . import config
from .models import (
    Budget,
    BudgetForm,
    Expense,
    ExpenseCategory,
    ExpenseForm,
    Income,
    IncomeCategory,
    IncomeForm,
    InvalidRecordError,
    SavingsGoal,
    SavingsGoalForm,
    parse_amount,
    parse_date,
    parse_optional_date,
    utc_now,
)
from .storage import (
    KeyValueStorage,
    StorageErrorHandler,
    StorageResult,
    load_collection,
    save_collection,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')
F = TypeVar('F')

Listener = Callable[[Tuple], None]
Clock = Callable[[], datetime]


class DuplicateBudgetError(InvalidRecordError):
    """Raised when an update would give two budgets the same category."""


def new_id() -> str:
    return str(uuid.uuid4())


class RecordStore(Generic[T, F]):
    """Generic collection of records of type ``T`` created from forms of type ``F``.

    Subclasses provide ``_decode`` (persisted dict -> record), ``_create``
    (form -> new record) and ``_apply`` (form -> updated record).
    """

    storage_key: str = ''
    insert_at_head: bool = True

    def __init__(
        self,
        storage: KeyValueStorage,
        key: Optional[str] = None,
        *,
        clock: Optional[Clock] = None,
        on_storage_error: Optional[StorageErrorHandler] = None,
    ):
        self.storage = storage
        self.key = key or self.storage_key
        self.clock: Clock = clock or utc_now
        self.on_storage_error = on_storage_error
        self.last_storage_result: Optional[StorageResult] = None
        self._listeners: List[Listener] = []
        self._records: List[T] = load_collection(
            storage, self.key, self._decode, on_error=on_storage_error
        )

    # -- hooks -------------------------------------------------------------

    def _decode(self, data: Dict) -> T:
        raise NotImplementedError

    def _create(self, data: F, record_id: str, now: datetime) -> T:
        raise NotImplementedError

    def _apply(self, record: T, data: F, now: datetime) -> T:
        raise NotImplementedError

    # -- queries -----------------------------------------------------------

    @property
    def items(self) -> Tuple[T, ...]:
        """Immutable snapshot of the collection in stored order."""
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(tuple(self._records))

    def get_by_id(self, record_id: str) -> Optional[T]:
        return next((r for r in self._records if r.id == record_id), None)

    def _index_of(self, record_id: str) -> int:
        for index, record in enumerate(self._records):
            if record.id == record_id:
                return index
        return -1

    # -- subscribers -------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for new snapshots; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self) -> None:
        self.last_storage_result = save_collection(
            self.storage, self.key, self._records, on_error=self.on_storage_error
        )
        snapshot = self.items
        for listener in list(self._listeners):
            listener(snapshot)

    # -- mutators ----------------------------------------------------------

    def add(self, data: F) -> T:
        """Create a record from form data, store it, persist, and return it."""
        record = self._create(data, new_id(), self.clock())
        if self.insert_at_head:
            self._records.insert(0, record)
        else:
            self._records.append(record)
        logger.debug("Added %s to '%s'", record.id, self.key)
        self._commit()
        return record

    def update(self, record_id: str, data: F) -> None:
        """Replace the mutable fields of ``record_id``; unknown ids are ignored."""
        index = self._index_of(record_id)
        if index < 0:
            logger.debug("Update of unknown id %s in '%s' ignored", record_id, self.key)
            return
        self._records[index] = self._apply(self._records[index], data, self.clock())
        self._commit()

    def delete(self, record_id: str) -> None:
        """Remove ``record_id`` if present; unknown ids are ignored."""
        index = self._index_of(record_id)
        if index < 0:
            logger.debug("Delete of unknown id %s in '%s' ignored", record_id, self.key)
            return
        del self._records[index]
        self._commit()


def _description(value: str) -> str:
    return str(value or '').strip()


class ExpenseStore(RecordStore[Expense, ExpenseForm]):
    storage_key = config.STORAGE_KEYS['expenses']

    def _decode(self, data):
        return Expense.from_dict(data)

    def _create(self, data, record_id, now):
        return Expense(
            id=record_id,
            amount=parse_amount(data.amount),
            category=ExpenseCategory.parse(data.category),
            description=_description(data.description),
            date=parse_date(data.date),
            created_at=now,
            updated_at=now,
        )

    def _apply(self, record, data, now):
        return Expense(
            id=record.id,
            amount=parse_amount(data.amount),
            category=ExpenseCategory.parse(data.category),
            description=_description(data.description),
            date=parse_date(data.date),
            created_at=record.created_at,
            updated_at=now,
        )


class IncomeStore(RecordStore[Income, IncomeForm]):
    storage_key = config.STORAGE_KEYS['incomes']

    def _decode(self, data):
        return Income.from_dict(data)

    def _create(self, data, record_id, now):
        return Income(
            id=record_id,
            amount=parse_amount(data.amount),
            category=IncomeCategory.parse(data.category),
            description=_description(data.description),
            date=parse_date(data.date),
            is_recurring=bool(data.is_recurring),
            created_at=now,
            updated_at=now,
        )

    def _apply(self, record, data, now):
        return Income(
            id=record.id,
            amount=parse_amount(data.amount),
            category=IncomeCategory.parse(data.category),
            description=_description(data.description),
            date=parse_date(data.date),
            is_recurring=bool(data.is_recurring),
            created_at=record.created_at,
            updated_at=now,
        )


class BudgetStore(RecordStore[Budget, BudgetForm]):
    """Budgets keyed by category: at most one budget per expense category."""

    storage_key = config.STORAGE_KEYS['budgets']
    insert_at_head = False

    def _decode(self, data):
        return Budget.from_dict(data)

    def _create(self, data, record_id, now):
        return Budget(
            id=record_id,
            category=ExpenseCategory.parse(data.category),
            amount=parse_amount(data.amount),
            created_at=now,
            updated_at=now,
        )

    def _apply(self, record, data, now):
        category = ExpenseCategory.parse(data.category)
        holder = self.get_by_category(category)
        if holder is not None and holder.id != record.id:
            raise DuplicateBudgetError(f"A budget for {category.value} already exists")
        return Budget(
            id=record.id,
            category=category,
            amount=parse_amount(data.amount),
            created_at=record.created_at,
            updated_at=now,
        )

    def get_by_category(self, category) -> Optional[Budget]:
        category = ExpenseCategory.parse(category)
        return next((b for b in self._records if b.category == category), None)

    def add(self, data: BudgetForm) -> Budget:
        """Insert a budget, or replace the existing one for the same category.

        A replacement stays at the same position and keeps the original
        id and creation time; only the amount and ``updated_at`` change.
        """
        existing = self.get_by_category(data.category)
        if existing is None:
            return super().add(data)
        index = self._index_of(existing.id)
        replaced = self._apply(existing, data, self.clock())
        self._records[index] = replaced
        logger.debug("Replaced budget for %s in '%s'", replaced.category.value, self.key)
        self._commit()
        return replaced

    @property
    def total_budgeted(self) -> float:
        return float(sum(b.amount for b in self._records))


class SavingsGoalStore(RecordStore[SavingsGoal, SavingsGoalForm]):
    storage_key = config.STORAGE_KEYS['savings']
    insert_at_head = False

    def _decode(self, data):
        return SavingsGoal.from_dict(data)

    @staticmethod
    def _current_amount(value) -> float:
        if value is None or (isinstance(value, str) and not value.strip()):
            return 0.0
        return parse_amount(value, 'current_amount')

    def _create(self, data, record_id, now):
        return SavingsGoal(
            id=record_id,
            name=str(data.name).strip(),
            target_amount=parse_amount(data.target_amount, 'target_amount'),
            current_amount=self._current_amount(data.current_amount),
            deadline=parse_optional_date(data.deadline, 'deadline'),
            created_at=now,
            updated_at=now,
        )

    def _apply(self, record, data, now):
        return SavingsGoal(
            id=record.id,
            name=str(data.name).strip(),
            target_amount=parse_amount(data.target_amount, 'target_amount'),
            current_amount=self._current_amount(data.current_amount),
            deadline=parse_optional_date(data.deadline, 'deadline'),
            created_at=record.created_at,
            updated_at=now,
        )

    def add_funds(self, record_id: str, amount: float) -> None:
        """Increase a goal's saved amount; unknown ids are ignored.

        ``amount`` is expected to be validated by the caller (non-negative).
        """
        index = self._index_of(record_id)
        if index < 0:
            logger.debug("add_funds on unknown goal %s ignored", record_id)
            return
        goal = self._records[index]
        self._records[index] = SavingsGoal(
            id=goal.id,
            name=goal.name,
            target_amount=goal.target_amount,
            current_amount=goal.current_amount + float(amount),
            deadline=goal.deadline,
            created_at=goal.created_at,
            updated_at=self.clock(),
        )
        self._commit()

    @property
    def total_savings(self) -> float:
        return float(sum(g.current_amount for g in self._records))


@dataclass
class TrackerState:
    """The four record stores an application works with."""
    expenses: ExpenseStore
    incomes: IncomeStore
    budgets: BudgetStore
    savings: SavingsGoalStore


def open_tracker(
    storage: KeyValueStorage,
    *,
    clock: Optional[Clock] = None,
    on_storage_error: Optional[StorageErrorHandler] = None,
) -> TrackerState:
    """Load every collection from ``storage`` and return a fresh TrackerState."""
    options = {'clock': clock, 'on_storage_error': on_storage_error}
    return TrackerState(
        expenses=ExpenseStore(storage, **options),
        incomes=IncomeStore(storage, **options),
        budgets=BudgetStore(storage, **options),
        savings=SavingsGoalStore(storage, **options),
    )
