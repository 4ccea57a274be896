"""Top‑level package for the Portfolio Dashboard.

This file makes the directory a Python package and exposes
convenient names.  The primary modules are:

* ``recurrence``: expansion of recurring incomes/expenses into dated occurrences
* ``cashflow``: monthly totals and calendar counts built on those occurrences
* ``mortgage``: annuity payments, balances and amortization schedules
* ``dashboard``: a Streamlit app that ties everything together

To run the dashboard from the command line you can execute:

```bash
streamlit run portfolio_dashboard/dashboard.py
```
"""

from . import cashflow  # noqa: F401  # re-exported for convenience
from . import mortgage  # noqa: F401  # re-exported for convenience
from . import recurrence  # noqa: F401  # re-exported for convenience
# Import dashboard lazily.  Streamlit may not be installed in all
# environments (e.g. during unit testing).
try:
    from . import dashboard  # type: ignore  # noqa: F401
except ModuleNotFoundError:
    dashboard = None  # type: ignore


__all__ = ["cashflow", "mortgage", "recurrence", "dashboard"]
