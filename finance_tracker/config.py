"""Configuration management for the finance tracker.

This module centralizes configuration values including the storage
directory, storage keys, logging defaults and environment variable
overrides.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict

# Base project root - assumes this file is in finance_tracker/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Durable storage directory, one JSON document per storage key
DATA_DIR = Path(os.getenv("FINTRACK_DATA_DIR", _PROJECT_ROOT / "data")).resolve()

LOG_LEVEL = os.getenv("FINTRACK_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Logical collection name -> storage key
STORAGE_KEYS: Dict[str, str] = {
    "expenses": "expense-tracker-data",
    "incomes": "expense-tracker-income",
    "budgets": "expense-tracker-budgets",
    "savings": "expense-tracker-savings",
}


def ensure_data_directories() -> None:
    """Create the storage directory if it doesn't exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)


def get_data_dir() -> str:
    """Get the storage directory as a string."""
    return str(DATA_DIR)


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the application entry points."""
    logging.basicConfig(level=(level or LOG_LEVEL), format=LOG_FORMAT)
