"""Descriptive statistics over a sanitized measurement series."""

from __future__ import annotations

import math

import numpy as np

from healthlens.tracking.models import MeasurementPoint, StatisticsBundle, Streak
from healthlens.tracking.sanitize import values


def daily_deltas(series: list[float]) -> list[float]:
    """Return consecutive differences v[i] - v[i-1]."""
    return [series[i] - series[i - 1] for i in range(1, len(series))]


def volatility(series: list[float]) -> float:
    """
    Population standard deviation of day-to-day deltas.

    Returns 0.0 for fewer than two values.
    """
    deltas = daily_deltas(series)
    if not deltas:
        return 0.0
    result = float(np.std(np.asarray(deltas, dtype=float)))
    return result if math.isfinite(result) else 0.0


def rolling_mean(series: list[float], window: int) -> float:
    """Mean of the last ``window`` values (or fewer if unavailable)."""
    tail = series[-window:]
    if not tail:
        return 0.0
    return float(sum(tail) / len(tail))


def longest_streaks(points: list[MeasurementPoint]) -> tuple[Streak, Streak]:
    """
    Find the longest loss and gain streaks in a sorted series.

    A streak counts consecutive deltas of the same sign. A zero delta
    neither extends nor breaks the running streak.

    Returns:
        Tuple of (longest_loss_streak, longest_gain_streak)
    """
    best_loss = Streak()
    best_gain = Streak()

    loss_days, loss_kg, loss_start = 0, 0.0, None
    gain_days, gain_kg, gain_start = 0, 0.0, None

    for i in range(1, len(points)):
        change = points[i].numeric - points[i - 1].numeric

        if change < 0:
            if loss_days == 0:
                loss_start = points[i - 1].date
            loss_days += 1
            loss_kg += abs(change)

            if gain_days > best_gain.days:
                best_gain = Streak(gain_days, gain_kg, gain_start, points[i - 1].date)
            gain_days, gain_kg, gain_start = 0, 0.0, None
        elif change > 0:
            if gain_days == 0:
                gain_start = points[i - 1].date
            gain_days += 1
            gain_kg += change

            if loss_days > best_loss.days:
                best_loss = Streak(loss_days, loss_kg, loss_start, points[i - 1].date)
            loss_days, loss_kg, loss_start = 0, 0.0, None

    # Close any run still open at the end of the series
    if points:
        last_date = points[-1].date
        if loss_days > best_loss.days:
            best_loss = Streak(loss_days, loss_kg, loss_start, last_date)
        if gain_days > best_gain.days:
            best_gain = Streak(gain_days, gain_kg, gain_start, last_date)

    return best_loss, best_gain


def regularity_pct(points: list[MeasurementPoint]) -> int:
    """Percentage of calendar days in the logged span that have a point."""
    if not points:
        return 0
    span_days = (points[-1].date - points[0].date).days + 1
    if span_days <= 0:
        return 0
    return min(100, round(100 * len(points) / span_days))


def compute_statistics(points: list[MeasurementPoint]) -> StatisticsBundle:
    """
    Compute the statistics bundle for a sanitized series.

    Args:
        points: Output of ``sanitize`` (sorted, one point per day)

    Returns:
        StatisticsBundle; all zero/empty when fewer than two points exist
    """
    if len(points) < 2:
        return StatisticsBundle()

    series = values(points)
    loss, gain = longest_streaks(points)

    return StatisticsBundle(
        mean_7d=rolling_mean(series, 7),
        mean_30d=rolling_mean(series, 30),
        volatility=volatility(series),
        longest_loss_streak=loss,
        longest_gain_streak=gain,
        regularity_pct=regularity_pct(points),
        days_logged=len(points),
    )
