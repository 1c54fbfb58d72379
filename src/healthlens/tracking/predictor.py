"""Multi-horizon projections from a fitted trend.

Projections are a straight-line extrapolation of the fitted daily slope:

    value(t) = current + slope_per_day × t

Time-to-goal uses the same reachability rule as the trend milestone, but
the weekly slope is clamped to ±1.2 (kg/week for weight) so that a short
burst of rapid change does not produce an unrealistically early date.
Scenario spread is two standard deviations of day-to-day change.
"""

from __future__ import annotations

import math
from typing import Optional

from healthlens.tracking.models import (
    UNKNOWN_ETA_DAYS,
    Prediction,
    Scenario,
    StatisticsBundle,
    TrendResult,
)
from healthlens.tracking.trend import WEIGHT_THRESHOLDS, TrendThresholds, is_reachable

# Maximum weekly rate used for ETA estimates (kg/week for weight)
MAX_WEEKLY_RATE = 1.2

HORIZON_SHORT_DAYS = 30
HORIZON_LONG_DAYS = 90

OPTIMISTIC_ETA_FACTOR = 0.7
PESSIMISTIC_ETA_FACTOR = 1.5


def _finite_or(value: float, default: float) -> float:
    return value if math.isfinite(value) else default


def scale_eta(eta_days: int, factor: float) -> int:
    """Scale an ETA, keeping the unknown sentinel intact."""
    if eta_days == UNKNOWN_ETA_DAYS:
        return UNKNOWN_ETA_DAYS
    return int(round(eta_days * factor))


def estimate_eta(
    current: float,
    goal: float,
    trend: TrendResult,
    thresholds: TrendThresholds = WEIGHT_THRESHOLDS,
    max_weekly_rate: float = MAX_WEEKLY_RATE,
) -> int:
    """
    Days until ``goal`` at the clamped trend rate.

    Returns:
        0 if already at goal, ``UNKNOWN_ETA_DAYS`` if the goal is not
        reachable at the current trend
    """
    gap = goal - current
    if gap == 0:
        return 0

    weekly = max(-max_weekly_rate, min(max_weekly_rate, trend.slope_per_week))
    if not is_reachable(gap, weekly, trend.confidence, thresholds):
        return UNKNOWN_ETA_DAYS

    eta = abs(gap) / (abs(weekly) / 7)
    if not math.isfinite(eta):
        return UNKNOWN_ETA_DAYS
    return int(round(eta))


def predict(
    current: float,
    goal: Optional[float],
    trend: TrendResult,
    stats: StatisticsBundle,
    thresholds: TrendThresholds = WEIGHT_THRESHOLDS,
    max_weekly_rate: float = MAX_WEEKLY_RATE,
) -> Prediction:
    """
    Project the series forward and estimate time to goal.

    Args:
        current: Latest value of the series
        goal: Target value; None means "stay where you are"
        trend: Output of ``analyze_trend`` for the same series
        stats: Output of ``compute_statistics`` for the same series
        thresholds: Thresholds used to judge reachability
        max_weekly_rate: Clamp on the weekly slope used for ETA

    Returns:
        Prediction with 30/90-day horizons and three scenarios. Any
        non-finite projection falls back to ``current``.
    """
    goal = current if goal is None else goal
    slope = _finite_or(trend.slope_per_day, 0.0)

    horizon_30 = _finite_or(current + slope * HORIZON_SHORT_DAYS, current)
    horizon_90 = _finite_or(current + slope * HORIZON_LONG_DAYS, current)
    eta = estimate_eta(current, goal, trend, thresholds, max_weekly_rate)

    spread = _finite_or(2 * stats.volatility, 0.0)
    # Optimistic moves further toward the goal, pessimistic away from it
    toward = spread if goal - current > 0 else -spread

    return Prediction(
        horizon_30=horizon_30,
        horizon_90=horizon_90,
        eta_to_goal_days=eta,
        confidence=trend.confidence,
        optimistic=Scenario(
            value=horizon_30 + toward,
            eta_days=scale_eta(eta, OPTIMISTIC_ETA_FACTOR),
        ),
        realistic=Scenario(value=horizon_30, eta_days=eta),
        pessimistic=Scenario(
            value=horizon_30 - toward,
            eta_days=scale_eta(eta, PESSIMISTIC_ETA_FACTOR),
        ),
    )
