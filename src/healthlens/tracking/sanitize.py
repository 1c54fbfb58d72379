"""Series sanitization: one point per calendar day, in date order.

Raw logs arrive unordered and may contain several rows for the same day
(re-weighing, edits, offline sync replays). Sanitization keeps the row that
was inserted last for each day and drops rows whose value is not a finite
number. Raw intake events (individual glasses of water, individual meals)
are summed into daily totals with ``daily_totals`` / ``daily_macro_totals``
before they are sanitized.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from datetime import date

from healthlens.tracking.models import MacroTotals, MeasurementPoint

logger = logging.getLogger(__name__)


def is_finite_value(value: object) -> bool:
    """Return True if a point value is usable for analysis."""
    if isinstance(value, MacroTotals):
        return all(
            is_finite_value(v)
            for v in (value.calories, value.protein_g, value.carbs_g, value.fat_g)
        )
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def sanitize(points: Iterable[MeasurementPoint]) -> list[MeasurementPoint]:
    """
    Deduplicate same-day points and sort ascending by date.

    When a day appears more than once, the point inserted last wins.

    Args:
        points: Points in insertion order (not necessarily date order)

    Returns:
        Sorted list with at most one point per calendar day

    Example:
        >>> sanitize([MeasurementPoint(date(2025, 1, 2), 70.0),
        ...           MeasurementPoint(date(2025, 1, 1), 71.0),
        ...           MeasurementPoint(date(2025, 1, 2), 69.8)])
        [MeasurementPoint(date=datetime.date(2025, 1, 1), value=71.0),
         MeasurementPoint(date=datetime.date(2025, 1, 2), value=69.8)]
    """
    by_day: dict[date, MeasurementPoint] = {}
    dropped = 0

    for point in points:
        if not is_finite_value(point.value):
            dropped += 1
            continue
        by_day[point.date] = point

    if dropped:
        logger.debug("Dropped %d malformed rows during sanitization", dropped)

    return [by_day[day] for day in sorted(by_day)]


def daily_totals(events: Iterable[MeasurementPoint]) -> list[MeasurementPoint]:
    """Sum numeric intake events (e.g. water in mL) into one point per day."""
    totals: dict[date, float] = {}
    for event in events:
        if not is_finite_value(event.value) or isinstance(event.value, MacroTotals):
            continue
        totals[event.date] = totals.get(event.date, 0.0) + float(event.value)
    return [MeasurementPoint(day, totals[day]) for day in sorted(totals)]


def daily_macro_totals(meals: Iterable[MeasurementPoint]) -> list[MeasurementPoint]:
    """Sum individual meals into one ``MacroTotals`` point per day."""
    totals: dict[date, MacroTotals] = {}
    for meal in meals:
        if not isinstance(meal.value, MacroTotals) or not is_finite_value(meal.value):
            continue
        totals[meal.date] = totals.get(meal.date, MacroTotals(0.0)) + meal.value
    return [MeasurementPoint(day, totals[day]) for day in sorted(totals)]


def values(points: list[MeasurementPoint]) -> list[float]:
    """Headline numbers of a sanitized series."""
    return [p.numeric for p in points]
