import json
from datetime import date, datetime, timezone

import pytest

from finance_tracker.models import Expense, ExpenseCategory
from finance_tracker.storage import (
    JsonFileStorage,
    MemoryStorage,
    StorageError,
    deserialize_collection,
    load_collection,
    safe_filename,
    save_collection,
    serialize_collection,
)

STAMP = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def sample_expenses():
    return [
        Expense('e1', 12.5, ExpenseCategory.FOOD, 'Lunch "special"', date(2025, 3, 2), STAMP, STAMP),
        Expense('e2', 40.0, ExpenseCategory.BILLS, 'Phone', date(2025, 2, 20), STAMP, STAMP),
    ]


class FailingStorage:
    def get_item(self, key):
        raise StorageError(key, 'read', 'disk on fire')

    def set_item(self, key, value):
        raise StorageError(key, 'write', 'disk full')


def test_safe_filename():
    assert safe_filename('expense-tracker-data') == 'expense-tracker-data'
    assert safe_filename('../etc passwd') == 'etc_passwd'
    assert safe_filename('') == 'collection'


def test_serialize_round_trip_including_empty():
    records = sample_expenses()
    assert deserialize_collection(serialize_collection(records), Expense.from_dict) == records
    assert deserialize_collection(serialize_collection([]), Expense.from_dict) == []


def test_json_file_storage_round_trip(tmp_path):
    storage = JsonFileStorage(tmp_path)
    save_collection(storage, 'expense-tracker-data', sample_expenses())
    assert (tmp_path / 'expense-tracker-data.json').exists()
    assert load_collection(storage, 'expense-tracker-data', Expense.from_dict) == sample_expenses()


def test_missing_key_loads_empty(tmp_path):
    errors = []
    result = load_collection(JsonFileStorage(tmp_path), 'nothing-here', Expense.from_dict, errors.append)
    assert result == []
    assert errors == []


def test_corrupt_file_loads_empty_and_reports(tmp_path):
    (tmp_path / 'expense-tracker-data.json').write_text('{not json', encoding='utf-8')
    errors = []
    result = load_collection(JsonFileStorage(tmp_path), 'expense-tracker-data', Expense.from_dict, errors.append)
    assert result == []
    assert len(errors) == 1
    assert errors[0].operation == 'read'
    assert not errors[0].ok


def test_non_array_payload_loads_empty():
    storage = MemoryStorage({'k': json.dumps({'id': 'x'})})
    errors = []
    assert load_collection(storage, 'k', Expense.from_dict, errors.append) == []
    assert len(errors) == 1


def test_bad_record_is_skipped_and_good_records_kept(caplog):
    good = sample_expenses()[0]
    bad = dict(good.to_dict(), id='x', category='Nope')
    storage = MemoryStorage({'k': json.dumps([good.to_dict(), bad, 'not a record'])})
    errors = []
    assert load_collection(storage, 'k', Expense.from_dict, errors.append) == [good]
    assert len(errors) == 2
    assert all(e.operation == 'read' and not e.ok for e in errors)
    assert 'Skipping bad record 1' in caplog.text


def test_deserialize_without_handler_raises_on_bad_record():
    text = json.dumps([{'id': 'x', 'amount': 5, 'category': 'Nope'}])
    with pytest.raises(ValueError):
        deserialize_collection(text, Expense.from_dict)


def test_read_failure_is_reported_not_raised():
    errors = []
    assert load_collection(FailingStorage(), 'k', Expense.from_dict, errors.append) == []
    assert isinstance(errors[0].error, StorageError)


def test_write_failure_is_reported_not_raised(caplog):
    errors = []
    result = save_collection(FailingStorage(), 'k', sample_expenses(), errors.append)
    assert not result.ok
    assert result.operation == 'write'
    assert errors == [result]
    assert 'Failed to save collection' in caplog.text


def test_memory_storage():
    storage = MemoryStorage()
    assert storage.get_item('k') is None
    result = save_collection(storage, 'k', sample_expenses())
    assert result.ok
    assert json.loads(storage.items['k'])[0]['id'] == 'e1'
