"""Persistence helpers for the last portfolio fetched from the backend."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, TypeVar

from . import config
from .api_client import Portfolio
from .models import event_to_api, expense_from_api, income_from_api, mortgage_from_api, mortgage_to_api

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _records(data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    value = data.get(key) or []
    if not isinstance(value, list):
        logger.warning("Ignoring snapshot section %r: not a list", key)
        return []
    return [item for item in value if isinstance(item, dict)]


def _decode(data: Dict[str, Any], key: str, decode: Callable[[Dict[str, Any]], T]) -> List[T]:
    decoded: List[T] = []
    for item in _records(data, key):
        try:
            decoded.append(decode(item))
        except (TypeError, ValueError, AttributeError, OverflowError):
            logger.warning("Skipping malformed snapshot record in %r", key, exc_info=True)
    return decoded


def load_snapshot(path: Path | None = None) -> Portfolio:
    target = path or config.SNAPSHOT_PATH
    if not target.exists():
        return Portfolio()
    try:
        with target.open('r', encoding='utf-8') as handle:
            data = json.load(handle)
    except (ValueError, OSError):
        logger.warning("Snapshot at %s is unreadable; starting empty", target)
        return Portfolio()
    if not isinstance(data, dict):
        return Portfolio()
    return Portfolio(
        properties=_records(data, 'properties'),
        incomes=_decode(data, 'incomes', income_from_api),
        expenses=_decode(data, 'expenses', expense_from_api),
        mortgages=_decode(data, 'mortgages', mortgage_from_api),
    )


def save_snapshot(portfolio: Portfolio, path: Path | None = None) -> Path:
    target = path or config.SNAPSHOT_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        'saved_at': datetime.now(timezone.utc).isoformat(),
        'properties': portfolio.properties,
        'incomes': [event_to_api(event) for event in portfolio.incomes],
        'expenses': [event_to_api(event) for event in portfolio.expenses],
        'mortgages': [mortgage_to_api(terms) for terms in portfolio.mortgages],
    }
    with target.open('w', encoding='utf-8') as handle:
        json.dump(payload, handle, indent=2, sort_keys=True)
    return target
