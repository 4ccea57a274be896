#!/usr/bin/env python3
"""Lightweight validator for a saved portfolio snapshot."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, List

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from portfolio_dashboard import config  # noqa: E402
from portfolio_dashboard.logging_config import configure_logging  # noqa: E402
from portfolio_dashboard.models import (  # noqa: E402
    EXPENSE_TYPES,
    FREQUENCY_STEPS,
    INCOME_TYPES,
    MORTGAGE_TYPES,
    parse_date,
)

SECTION_TYPES = {"incomes": INCOME_TYPES, "expenses": EXPENSE_TYPES}


def validate_event(record: Dict[str, Any], allowed_types=None) -> List[str]:
    errors = []
    if parse_date(record.get("date")) is None:
        errors.append(f"unparsable date {record.get('date')!r}")
    amount = record.get("amount")
    if not isinstance(amount, (int, float)) or isinstance(amount, bool):
        errors.append(f"non-numeric amount {amount!r}")
    elif amount < 0:
        errors.append("negative amount")
    if allowed_types and record.get("type") not in allowed_types:
        errors.append(f"unknown type {record.get('type')!r}")
    if record.get("is_recurring"):
        if record.get("frequency") not in FREQUENCY_STEPS:
            errors.append(f"recurring without a known frequency ({record.get('frequency')!r})")
        for key in ("recurrence_start_date", "recurrence_end_date"):
            raw = record.get(key)
            if raw not in (None, "") and parse_date(raw) is None:
                errors.append(f"unparsable {key} {raw!r}")
    return errors


def validate_mortgage(record: Dict[str, Any]) -> List[str]:
    errors = []
    if str(record.get("type") or "").lower() not in MORTGAGE_TYPES:
        errors.append(f"unknown type {record.get('type')!r}")
    if parse_date(record.get("start_date")) is None:
        errors.append(f"unparsable start_date {record.get('start_date')!r}")
    if not isinstance(record.get("years"), int) or record.get("years") <= 0:
        errors.append(f"invalid term {record.get('years')!r}")
    return errors


def validate_snapshot(path: Path) -> List[str]:
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        return ["snapshot root must be an object"]

    issues = []
    for section in ("incomes", "expenses", "mortgages"):
        records = data.get(section) or []
        if not isinstance(records, list):
            issues.append(f"{section} must be a list")
            continue
        for record in records:
            if not isinstance(record, dict):
                issues.append(f"{section}: non-object record")
                continue
            if section == "mortgages":
                errors = validate_mortgage(record)
            else:
                errors = validate_event(record, SECTION_TYPES[section])
            for error in errors:
                issues.append(f"{section}/{record.get('id', '?')}: {error}")
    return issues


def main() -> int:
    configure_logging()
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else config.SNAPSHOT_PATH
    if not path.exists():
        print(f"Snapshot not found: {path}")
        return 1

    try:
        issues = validate_snapshot(path)
    except ValueError as exc:
        print(f"Snapshot is not readable JSON: {exc}")
        return 1

    if issues:
        print("Snapshot validation found records the dashboard will skip or misread:")
        for issue in issues:
            print(f"  - {issue}")
        return 1

    print("Snapshot validated successfully.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
