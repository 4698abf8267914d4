import importlib.util
from datetime import date, datetime, timezone
from pathlib import Path

from finance_tracker.export import expenses_to_csv, export_filename, write_csv
from finance_tracker.models import Expense, ExpenseCategory, ExpenseForm
from finance_tracker.record_store import ExpenseStore
from finance_tracker.storage import JsonFileStorage

STAMP = datetime(2025, 3, 1, tzinfo=timezone.utc)
SCRIPT_PATH = Path(__file__).resolve().parents[1] / 'scripts' / 'export_expenses.py'


def sample_expenses():
    return [
        Expense('e1', 12.5, ExpenseCategory.FOOD, 'Lunch "special", large', date(2025, 1, 5), STAMP, STAMP),
        Expense('e2', 3, ExpenseCategory.TRANSPORTATION, 'Bus', date(2025, 1, 4), STAMP, STAMP),
    ]


def _load_script_module():
    spec = importlib.util.spec_from_file_location('export_expenses_test', SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_csv_layout():
    lines = expenses_to_csv(sample_expenses()).split('\n')
    assert lines[0] == 'Date,Description,Category,Amount'
    assert lines[1] == '2025-01-05,"Lunch ""special"", large",Food,12.50'
    assert lines[2] == '2025-01-04,"Bus",Transportation,3.00'


def test_csv_keeps_given_order_and_handles_empty():
    reversed_rows = expenses_to_csv(list(reversed(sample_expenses()))).split('\n')
    assert reversed_rows[1].startswith('2025-01-04')
    assert expenses_to_csv([]) == 'Date,Description,Category,Amount'


def test_export_filename():
    assert export_filename(date(2025, 3, 15)) == 'expenses_2025-03-15.csv'


def test_write_csv(tmp_path):
    target = write_csv(sample_expenses(), tmp_path / 'out' / 'expenses.csv')
    assert target.read_text(encoding='utf-8').startswith('Date,Description')


def test_export_script_writes_newest_first(tmp_path):
    data_dir = tmp_path / 'data'
    store = ExpenseStore(JsonFileStorage(data_dir))
    store.add(ExpenseForm(amount='5', category='Food', description='Old', date='2025-01-01'))
    store.add(ExpenseForm(amount='7', category='Bills', description='Older', date='2024-12-01'))
    store.add(ExpenseForm(amount='9', category='Food', description='New', date='2025-02-01'))

    module = _load_script_module()
    output = tmp_path / 'export.csv'
    assert module.main(data_dir=data_dir, output=str(output), category='Food') == 0
    lines = output.read_text(encoding='utf-8').split('\n')
    assert lines[1:] == ['2025-02-01,"New",Food,9.00', '2025-01-01,"Old",Food,5.00']
