"""Windowed linear-trend analysis for a measurement series.

The most recent points (between 5 and 30 of them) are fitted with ordinary
least squares against their day offset, so gaps in logging stretch the
x-axis instead of being silently compressed. The slope is classified into a
direction and velocity, the fit quality and day-to-day noise into a
consistency class, and both are folded into a 0-100 confidence score:

    confidence = 40 × min(1, n/30) + 40 × R² + 20 × consistency_factor

Thresholds are expressed per week in the metric's own unit. The defaults
are tuned for body weight in kilograms; water and calorie series use the
same shape scaled to their units (see ``healthlens.config.settings``).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np
from scipy import stats

from healthlens.tracking.models import (
    UNKNOWN_ETA_DAYS,
    Consistency,
    Direction,
    MeasurementPoint,
    Milestone,
    TrendResult,
    Velocity,
)
from healthlens.tracking.sanitize import values
from healthlens.tracking.statistics import daily_deltas, volatility

logger = logging.getLogger(__name__)

MIN_TREND_POINTS = 5
MAX_TREND_POINTS = 30

# Minimum confidence for a milestone to be considered reachable
MIN_MILESTONE_CONFIDENCE = 35

CONSISTENCY_FACTORS = {
    Consistency.CONSISTENT: 1.0,
    Consistency.IRREGULAR: 0.5,
    Consistency.VERY_IRREGULAR: 0.2,
}


@dataclass(frozen=True)
class TrendThresholds:
    """Classification thresholds in the metric's unit (per week / per day²)."""

    flat_per_week: float = 0.1
    moderate_per_week: float = 0.3
    fast_per_week: float = 0.8
    irregular_variance: float = 0.3
    very_irregular_variance: float = 1.0
    volatility_allowance: float = 0.3
    volatility_penalty: float = 30.0  # confidence points per unit above allowance

    def scaled(self, factor: float) -> TrendThresholds:
        """Return thresholds for a metric measured in ``factor``× smaller units."""
        return TrendThresholds(
            flat_per_week=self.flat_per_week * factor,
            moderate_per_week=self.moderate_per_week * factor,
            fast_per_week=self.fast_per_week * factor,
            irregular_variance=self.irregular_variance * factor**2,
            very_irregular_variance=self.very_irregular_variance * factor**2,
            volatility_allowance=self.volatility_allowance * factor,
            volatility_penalty=self.volatility_penalty / factor,
        )


WEIGHT_THRESHOLDS = TrendThresholds()
WATER_THRESHOLDS = WEIGHT_THRESHOLDS.scaled(1000)
CALORIE_THRESHOLDS = WEIGHT_THRESHOLDS.scaled(100)


def fit_line(x: list[float], y: list[float]) -> tuple[float, float, float]:
    """
    Ordinary least-squares fit y = a + b·x.

    Returns:
        Tuple of (intercept, slope, r_squared). R² is 0 when the series has
        no variance, and every value is finite.
    """
    x_arr = np.asarray(x, dtype=float)
    y_arr = np.asarray(y, dtype=float)

    if len(x_arr) < 2 or np.ptp(x_arr) == 0:
        intercept = float(y_arr.mean()) if len(y_arr) else 0.0
        return intercept, 0.0, 0.0

    fit = stats.linregress(x_arr, y_arr)
    slope = float(fit.slope)
    intercept = float(fit.intercept)

    ss_tot = float(np.sum((y_arr - y_arr.mean()) ** 2))
    if ss_tot == 0:
        return intercept, slope if math.isfinite(slope) else 0.0, 0.0

    residuals = y_arr - (intercept + slope * x_arr)
    ss_res = float(np.sum(residuals**2))
    r_squared = min(1.0, max(0.0, 1 - ss_res / ss_tot))

    if not math.isfinite(slope):
        slope = 0.0
    if not math.isfinite(r_squared):
        r_squared = 0.0
    return intercept, slope, r_squared


def classify_direction(
    slope_per_week: float,
    deltas: list[float],
    thresholds: TrendThresholds = WEIGHT_THRESHOLDS,
) -> Direction:
    """Classify slope direction, overridden to oscillating on balanced deltas."""
    if abs(slope_per_week) <= thresholds.flat_per_week:
        direction = Direction.FLAT
    elif slope_per_week > 0:
        direction = Direction.RISING
    else:
        direction = Direction.FALLING

    ups = sum(1 for d in deltas if d > 0)
    downs = sum(1 for d in deltas if d < 0)
    if ups > 0 and downs > 0 and abs(ups - downs) < 2:
        direction = Direction.OSCILLATING

    return direction


def classify_velocity(
    slope_per_week: float, thresholds: TrendThresholds = WEIGHT_THRESHOLDS
) -> Velocity:
    speed = abs(slope_per_week)
    if speed > thresholds.fast_per_week:
        return Velocity.FAST
    if speed > thresholds.moderate_per_week:
        return Velocity.MODERATE
    return Velocity.SLOW


def classify_consistency(
    r_squared: float,
    variance_of_deltas: float,
    thresholds: TrendThresholds = WEIGHT_THRESHOLDS,
) -> Consistency:
    if r_squared < 0.3 or variance_of_deltas > thresholds.very_irregular_variance:
        return Consistency.VERY_IRREGULAR
    if r_squared < 0.6 or variance_of_deltas > thresholds.irregular_variance:
        return Consistency.IRREGULAR
    return Consistency.CONSISTENT


def confidence_score(n: int, r_squared: float, consistency: Consistency) -> int:
    """Composite 0-100 score from sample size, fit and consistency."""
    raw = (
        40 * min(1.0, n / MAX_TREND_POINTS)
        + 40 * r_squared
        + 20 * CONSISTENCY_FACTORS[consistency]
    )
    if not math.isfinite(raw):
        return 0
    return int(round(min(100.0, max(0.0, raw))))


def is_reachable(
    gap: float,
    slope_per_week: float,
    confidence: float,
    thresholds: TrendThresholds = WEIGHT_THRESHOLDS,
) -> bool:
    """True when the trend moves toward the goal fast and reliably enough."""
    return (
        gap * slope_per_week > 0
        and abs(slope_per_week) > thresholds.flat_per_week
        and confidence >= MIN_MILESTONE_CONFIDENCE
    )


def next_milestone(
    current: float,
    target: float,
    slope_per_day: float,
    confidence: int,
    series_volatility: float,
    thresholds: TrendThresholds = WEIGHT_THRESHOLDS,
) -> Milestone:
    """
    Estimate when the trend reaches ``target``.

    An unreachable target gets the ``UNKNOWN_ETA_DAYS`` sentinel and a
    probability penalised by volatility above the allowance.
    """
    gap = target - current
    if gap == 0:
        return Milestone(value=target, eta_days=0, probability=float(confidence))

    if is_reachable(gap, slope_per_day * 7, confidence, thresholds):
        eta = int(round(abs(gap) / abs(slope_per_day)))
        return Milestone(value=target, eta_days=eta, probability=float(confidence))

    excess = max(0.0, series_volatility - thresholds.volatility_allowance)
    penalty = excess * thresholds.volatility_penalty
    return Milestone(
        value=target,
        eta_days=UNKNOWN_ETA_DAYS,
        probability=max(0.0, confidence - penalty),
    )


def insufficient_trend(target: Optional[float], current: float) -> TrendResult:
    """Neutral result for series with too few distinct days."""
    return TrendResult(
        direction=Direction.FLAT,
        velocity=Velocity.SLOW,
        consistency=Consistency.IRREGULAR,
        confidence=0,
        slope_per_day=0.0,
        r_squared=0.0,
        next_milestone=Milestone(
            value=current if target is None else target,
            eta_days=UNKNOWN_ETA_DAYS,
            probability=0.0,
        ),
    )


def analyze_trend(
    points: list[MeasurementPoint],
    target: Optional[float] = None,
    thresholds: TrendThresholds = WEIGHT_THRESHOLDS,
) -> TrendResult:
    """
    Fit and classify the trend of a sanitized series.

    Args:
        points: Output of ``sanitize`` (sorted, one point per day)
        target: Goal value for the milestone estimate; defaults to the
                latest value (milestone already reached)
        thresholds: Classification thresholds for the metric's unit

    Returns:
        TrendResult. With fewer than five points the result is flat with
        zero confidence and an unknown milestone ETA.
    """
    series = values(points)
    current = series[-1] if series else 0.0

    if len(points) < MIN_TREND_POINTS:
        logger.debug("Trend needs %d points, got %d", MIN_TREND_POINTS, len(points))
        return insufficient_trend(target, current)

    window_size = min(max(len(points), MIN_TREND_POINTS), MAX_TREND_POINTS)
    window = points[-window_size:]
    x = [(p.date - window[0].date).days for p in window]
    y = [p.numeric for p in window]

    _, slope_per_day, r_squared = fit_line(x, y)
    slope_per_week = slope_per_day * 7

    deltas = daily_deltas(series)
    variance_of_deltas = sum(d * d for d in deltas) / len(deltas) if deltas else 0.0

    direction = classify_direction(slope_per_week, deltas, thresholds)
    velocity = classify_velocity(slope_per_week, thresholds)
    consistency = classify_consistency(r_squared, variance_of_deltas, thresholds)
    confidence = confidence_score(window_size, r_squared, consistency)

    milestone = next_milestone(
        current=current,
        target=current if target is None else target,
        slope_per_day=slope_per_day,
        confidence=confidence,
        series_volatility=volatility(series),
        thresholds=thresholds,
    )

    return TrendResult(
        direction=direction,
        velocity=velocity,
        consistency=consistency,
        confidence=confidence,
        slope_per_day=slope_per_day,
        r_squared=r_squared,
        next_milestone=milestone,
    )
