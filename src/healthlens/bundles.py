"""Per-metric analysis bundles returned by ``healthlens.engine``."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from healthlens.goals.nutrition import MacroGoals
from healthlens.goals.water import WaterGoal
from healthlens.goals.weight import WeightGoal
from healthlens.insights.progress import (
    MealProgress,
    MealWeekSummary,
    Tip,
    WaterProgress,
    WaterWeekSummary,
)
from healthlens.tracking.models import (
    Alert,
    MacroTotals,
    MeasurementPoint,
    Prediction,
    StatisticsBundle,
    TrendResult,
)


@dataclass(frozen=True)
class WeightBundle:
    points: list[MeasurementPoint]
    statistics: StatisticsBundle
    trend: TrendResult
    goal: WeightGoal
    prediction: Prediction
    alerts: list[Alert] = field(default_factory=list)


@dataclass(frozen=True)
class WaterBundle:
    points: list[MeasurementPoint]  # daily totals in mL
    statistics: StatisticsBundle
    trend: TrendResult
    goal: WaterGoal
    today: WaterProgress
    week: WaterWeekSummary
    tips: list[Tip] = field(default_factory=list)


@dataclass(frozen=True)
class MealBundle:
    points: list[MeasurementPoint]  # daily MacroTotals
    statistics: StatisticsBundle    # over daily calories
    trend: TrendResult              # over daily calories
    goals: MacroGoals
    today: MealProgress
    week: MealWeekSummary
    tips: list[Tip] = field(default_factory=list)
    today_totals: Optional[MacroTotals] = None
