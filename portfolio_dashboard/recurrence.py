"""Expansion of punctual and recurring incomes/expenses into dated occurrences.

Recurring events are walked on calendar-month granularity: the cadence test
(monthly, quarterly, yearly) only looks at the number of whole months
between the recurrence start and the candidate month, while the day of the
occurrence reuses the anchor date's day clamped to the month length.
Open-ended recurrences stop at ``config.RECURRENCE_HORIZON``.
"""

from __future__ import annotations

import calendar
import logging
from datetime import date
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from . import config
from .models import FREQUENCY_STEPS, FinancialEvent, Occurrence

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Month arithmetic
# ---------------------------------------------------------------------------


def clamp_day(year: int, month: int, day: int) -> int:
    """Clamp day to valid range for the given year/month."""
    return min(day, calendar.monthrange(year, month)[1])


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """Return (first_day, last_day) of a calendar month."""
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def months_between(start: date, end: date) -> int:
    """Number of calendar-month boundaries from ``start``'s month to ``end``'s month."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def add_months(d: date, n: int) -> date:
    """Add n months to date d, clamping day to month end."""
    month = d.month - 1 + n
    year = d.year + month // 12
    month = month % 12 + 1
    return date(year, month, clamp_day(year, month, d.day))


def iter_months(start: date, end: date) -> Iterator[Tuple[int, int]]:
    """Yield (year, month) from ``start``'s month through ``end``'s month."""
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        yield year, month
        month += 1
        if month > 12:
            month = 1
            year += 1


# ---------------------------------------------------------------------------
# Expansion
# ---------------------------------------------------------------------------


def expand_for_window(
    events: Iterable[FinancialEvent],
    window_start: date,
    window_end: date,
    *,
    horizon: Optional[date] = None,
) -> List[Occurrence]:
    """Expand ``events`` into the occurrences falling in ``[window_start, window_end]``.

    Punctual events contribute their own date when it lies inside the window.
    Recurring events contribute at most one occurrence per calendar month.
    Events without a usable date are skipped.
    """
    if window_start > window_end:
        raise ValueError(f"Window start {window_start} is after window end {window_end}")
    horizon = horizon or config.RECURRENCE_HORIZON

    keyed: List[Tuple[date, int, Occurrence]] = []
    for position, event in enumerate(events):
        if event.date is None:
            logger.debug("Skipping event without a usable date", extra={'event_id': event.id})
            continue
        if event.is_expandable_recurring:
            dates = _recurring_dates(event, window_start, window_end, horizon)
        elif window_start <= event.date <= window_end:
            dates = [event.date]
        else:
            dates = []
        keyed.extend((when, position, Occurrence(event, when)) for when in dates)

    keyed.sort(key=lambda item: (item[0], item[1]))
    return [occurrence for _, _, occurrence in keyed]


def expand_for_month(
    events: Iterable[FinancialEvent],
    year: int,
    month: int,
    *,
    horizon: Optional[date] = None,
) -> List[Occurrence]:
    first_day, last_day = month_bounds(year, month)
    return expand_for_window(events, first_day, last_day, horizon=horizon)


def _recurring_dates(
    event: FinancialEvent,
    window_start: date,
    window_end: date,
    horizon: date,
) -> Sequence[date]:
    start = event.anchor_start
    end = min(event.recurrence_end, horizon) if event.recurrence_end else horizon
    effective_start = max(window_start, start)
    effective_end = min(window_end, end)
    if effective_start > effective_end:
        return []

    step = FREQUENCY_STEPS[event.frequency]
    anchor_day = event.date.day
    dates: List[date] = []
    # Recurrence bounds select months; only the caller's window clips by day
    for year, month in iter_months(effective_start, effective_end):
        offset = months_between(start, date(year, month, 1))
        if offset % step:
            continue
        candidate = date(year, month, clamp_day(year, month, anchor_day))
        if window_start <= candidate <= window_end:
            dates.append(candidate)
    return dates
