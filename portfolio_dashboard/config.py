"""Configuration management for the portfolio dashboard.

This module centralizes all configuration values including paths,
backend connection settings, engine limits, and environment variable
overrides.
"""

from __future__ import annotations

import os
from datetime import date
from pathlib import Path
from typing import Optional

# Base project root - assumes this file is in portfolio_dashboard/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# Data directories
DATA_DIR = Path(os.getenv("PROPIEXPERT_DATA_DIR", _PROJECT_ROOT / "data"))

# Local copy of the last portfolio fetched from the backend
SNAPSHOT_PATH = Path(
    os.getenv("PROPIEXPERT_SNAPSHOT_PATH", DATA_DIR / "portfolio_snapshot.json")
).resolve()

# Backend
API_BASE_URL = os.getenv("PROPIEXPERT_API_URL", "https://api.propiexpert.com").rstrip("/")
API_TOKEN: Optional[str] = os.getenv("PROPIEXPERT_API_TOKEN") or None
API_TIMEOUT = _env_float("PROPIEXPERT_API_TIMEOUT", 20.0)

# Open-ended recurrences are expanded up to the end of this year
HORIZON_YEAR = _env_int("PROPIEXPERT_HORIZON_YEAR", 2055)
RECURRENCE_HORIZON = date(HORIZON_YEAR, 12, 31)

CURRENCY_SYMBOL = os.getenv("PROPIEXPERT_CURRENCY", "€")

LOG_LEVEL = (os.getenv("LOG_LEVEL") or "INFO").upper()
