"""Top‑level package for the Finance Tracker.

This file makes the directory a Python package and exposes
convenient names.  The primary modules are:

* ``record_store`` – expense, income, budget and savings collections
* ``aggregation`` – summaries, category breakdowns, trends and filters
* ``budget_status`` – budget tiers, planning figures and goal progress
* ``dashboard`` – a Streamlit app that ties everything together

To run the app from the command line you can execute:

```bash
streamlit run finance_tracker/dashboard.py
```

or ``python run_tracker.py`` from the project root.
"""

from . import aggregation  # noqa: F401  # re-exported for convenience
from . import budget_status  # noqa: F401  # re-exported for convenience
from . import record_store  # noqa: F401  # re-exported for convenience
# Import dashboard lazily.  Streamlit may not be installed in all
# environments (e.g. during unit testing).
try:
    from . import dashboard  # type: ignore  # noqa: F401
except ModuleNotFoundError:
    dashboard = None  # type: ignore


__all__ = ["aggregation", "budget_status", "record_store", "dashboard"]
