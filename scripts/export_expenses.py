#!/usr/bin/env python3
"""Export stored expenses to CSV, newest first."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from finance_tracker import config
from finance_tracker.aggregation import ExpenseFilters, filter_expenses, sort_newest_first
from finance_tracker.export import expenses_to_csv, export_filename, write_csv
from finance_tracker.record_store import ExpenseStore
from finance_tracker.storage import JsonFileStorage

logger = logging.getLogger(__name__)


def main(data_dir: Optional[Path] = None, output: Optional[str] = None,
         category: str = 'All', start: str = '', end: str = '') -> int:
    store = ExpenseStore(JsonFileStorage(data_dir))
    expenses = filter_expenses(
        store.items,
        ExpenseFilters(category=category, start_date=start, end_date=end),
    )
    rows = sort_newest_first(expenses)
    if output == '-':
        print(expenses_to_csv(rows))
        return 0
    target = Path(output) if output else Path.cwd() / export_filename()
    write_csv(rows, target)
    logger.info("Wrote %d expenses to %s", len(rows), target)
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Export stored expenses to CSV.')
    parser.add_argument('--data-dir', type=Path, default=None,
                        help=f'Storage directory (default: {config.get_data_dir()})')
    parser.add_argument('-o', '--output', default=None,
                        help="Output file, or '-' for stdout (default: expenses_<today>.csv)")
    parser.add_argument('--category', default='All', help='Only export this category')
    parser.add_argument('--start', default='', help='Start date YYYY-MM-DD (needs --end)')
    parser.add_argument('--end', default='', help='End date YYYY-MM-DD (needs --start)')
    args = parser.parse_args()
    config.configure_logging()
    sys.exit(main(args.data_dir, args.output, args.category, args.start, args.end))
