"""Per-metric time-series analytics.

Raw logs flow through a fixed pipeline:

- sanitize: drop non-finite values, keep one point per day (last write wins)
- statistics: rolling means, volatility, streaks and regularity
- trend: least-squares fit over the last 30 points, classified into
  direction, velocity and consistency with a 0-100 confidence
- predictor: 30/90-day projections and optimistic/realistic/pessimistic
  scenarios
"""

from __future__ import annotations

from healthlens.tracking.models import (
    UNKNOWN_ETA_DAYS,
    Alert,
    Consistency,
    Direction,
    MacroTotals,
    MeasurementPoint,
    Prediction,
    Severity,
    StatisticsBundle,
    TrendResult,
    Velocity,
)
from healthlens.tracking.predictor import predict
from healthlens.tracking.sanitize import sanitize
from healthlens.tracking.statistics import compute_statistics
from healthlens.tracking.trend import analyze_trend

__all__ = [
    "UNKNOWN_ETA_DAYS",
    "Alert",
    "Consistency",
    "Direction",
    "MacroTotals",
    "MeasurementPoint",
    "Prediction",
    "Severity",
    "StatisticsBundle",
    "TrendResult",
    "Velocity",
    "analyze_trend",
    "compute_statistics",
    "predict",
    "sanitize",
]
