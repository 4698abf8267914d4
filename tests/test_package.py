import importlib
import py_compile
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SOURCES = sorted((PROJECT_ROOT / 'finance_tracker').glob('*.py')) + sorted(
    (PROJECT_ROOT / 'scripts').glob('*.py')
)


@pytest.mark.parametrize('path', SOURCES, ids=lambda p: p.name)
def test_source_compiles(path, tmp_path):
    py_compile.compile(str(path), cfile=str(tmp_path / 'out.pyc'), doraise=True)


def test_package_imports_with_dashboard():
    package = importlib.import_module('finance_tracker')
    assert package.dashboard is not None
    assert package.dashboard.expenses_to_csv is importlib.import_module('finance_tracker.export').expenses_to_csv
