"""Data models for measurement series and the analytics derived from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Union


# Sentinel used for "unknown" time-to-goal estimates
UNKNOWN_ETA_DAYS = 999


class Direction(Enum):
    """Direction of a fitted trend."""
    RISING = "rising"
    FALLING = "falling"
    FLAT = "flat"
    OSCILLATING = "oscillating"


class Velocity(Enum):
    """Speed class of a fitted trend."""
    SLOW = "slow"
    MODERATE = "moderate"
    FAST = "fast"


class Consistency(Enum):
    """How well the series follows its own trend line."""
    CONSISTENT = "consistent"
    IRREGULAR = "irregular"
    VERY_IRREGULAR = "very_irregular"


class Severity(Enum):
    """Alert severity, ordered by SEVERITY_RANK."""
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


SEVERITY_RANK = {
    Severity.CRITICAL: 3,
    Severity.WARNING: 2,
    Severity.INFO: 1,
    Severity.SUCCESS: 0,
}


@dataclass(frozen=True)
class MacroTotals:
    """Calories and macronutrients for one day (or one meal)."""

    calories: float
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0

    def __add__(self, other: MacroTotals) -> MacroTotals:
        return MacroTotals(
            calories=self.calories + other.calories,
            protein_g=self.protein_g + other.protein_g,
            carbs_g=self.carbs_g + other.carbs_g,
            fat_g=self.fat_g + other.fat_g,
        )


@dataclass(frozen=True)
class MeasurementPoint:
    """A single dated measurement.

    ``value`` is kilograms for weight, millilitres for water and a
    ``MacroTotals`` record for meals.
    """

    date: date
    value: Union[float, MacroTotals]

    @property
    def numeric(self) -> float:
        """Headline number of the point (calories for meals)."""
        if isinstance(self.value, MacroTotals):
            return float(self.value.calories)
        return float(self.value)


@dataclass(frozen=True)
class Streak:
    """Longest run of same-signed day-to-day changes."""

    days: int = 0
    magnitude: float = 0.0  # cumulative absolute change
    start: Optional[date] = None
    end: Optional[date] = None


@dataclass(frozen=True)
class StatisticsBundle:
    """Descriptive statistics over a sanitized series."""

    mean_7d: float = 0.0
    mean_30d: float = 0.0
    volatility: float = 0.0
    longest_loss_streak: Streak = field(default_factory=Streak)
    longest_gain_streak: Streak = field(default_factory=Streak)
    regularity_pct: int = 0
    days_logged: int = 0


@dataclass(frozen=True)
class Milestone:
    """Next target value with an estimated arrival."""

    value: float
    eta_days: int
    probability: float


@dataclass(frozen=True)
class TrendResult:
    """Classified linear trend over the recent window."""

    direction: Direction
    velocity: Velocity
    consistency: Consistency
    confidence: int
    slope_per_day: float
    r_squared: float
    next_milestone: Milestone

    @property
    def slope_per_week(self) -> float:
        return self.slope_per_day * 7


@dataclass(frozen=True)
class Scenario:
    """Projected value and time-to-goal for one outlook."""

    value: float
    eta_days: int


@dataclass(frozen=True)
class Prediction:
    """Multi-horizon projection with scenario spread."""

    horizon_30: float
    horizon_90: float
    eta_to_goal_days: int
    confidence: int
    optimistic: Scenario
    realistic: Scenario
    pessimistic: Scenario


@dataclass(frozen=True)
class Alert:
    """A human-readable alert for the insight layer."""

    severity: Severity
    title: str
    message: str
    icon: str
    action: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.severity, Severity):
            raise ValueError(f"severity must be a Severity, got '{self.severity}'")
