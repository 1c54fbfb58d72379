"""Cross-metric insights and the overall wellness score.

The composer only reads the three finished bundles; it never recomputes
per-metric analytics. Insights come from simple threshold rules across
bundles and are ordered by priority. The wellness score averages three
per-domain scores:

    weight:    healthy 100, underweight 80, overweight 70, obesity 50
    hydration: high 100, normal 80, excessive 60, low 40
    nutrition: calories within 80-120% → 100, within ±30% → 70, else 50
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from healthlens.bundles import MealBundle, WaterBundle, WeightBundle
from healthlens.insights.progress import IntakeStatus
from healthlens.profiles.body_calc import HealthStatus
from healthlens.tracking.models import Direction


class Priority(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class InsightKind(Enum):
    CORRELATION = "correlation"
    TREND = "trend"
    RECOMMENDATION = "recommendation"
    ALERT = "alert"
    ACHIEVEMENT = "achievement"


class WellnessBand(Enum):
    EXCELLENT = "excellent"
    VERY_GOOD = "very_good"
    GOOD = "good"
    NEEDS_ATTENTION = "needs_attention"


PRIORITY_RANK = {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}

WEIGHT_SCORES = {
    HealthStatus.HEALTHY: 100,
    HealthStatus.UNDERWEIGHT: 80,
    HealthStatus.OVERWEIGHT: 70,
    HealthStatus.OBESITY: 50,
}
UNKNOWN_WEIGHT_SCORE = 70

HYDRATION_SCORES = {
    IntakeStatus.HIGH: 100,
    IntakeStatus.NORMAL: 80,
    IntakeStatus.EXCESSIVE: 60,
    IntakeStatus.LOW: 40,
}

# Minimum history (days) before correlating weight with hydration
CORRELATION_MIN_DAYS = 7
HIGH_VOLATILITY_KG = 1.5
EVENING_HOUR = 18


@dataclass(frozen=True)
class Insight:
    kind: InsightKind
    priority: Priority
    title: str
    description: str
    icon: str
    metrics: list[str] = field(default_factory=list)
    action: Optional[str] = None


@dataclass(frozen=True)
class WellnessReport:
    insights: list[Insight]
    wellness_score: int
    wellness_band: WellnessBand
    domain_scores: dict[str, int]


def _hydration_insight(weight: WeightBundle, water: WaterBundle) -> Optional[Insight]:
    if (
        weight.statistics.days_logged <= CORRELATION_MIN_DAYS
        or water.statistics.days_logged <= CORRELATION_MIN_DAYS
    ):
        return None

    losing = weight.trend.direction == Direction.FALLING
    well_hydrated = water.today.percent > 90

    if losing and well_hydrated:
        return Insight(
            kind=InsightKind.CORRELATION,
            priority=Priority.HIGH,
            title="Hydration supporting weight loss",
            description="Good hydration is going hand in hand with healthy weight loss.",
            icon="💧✨",
            metrics=[f"Weight: {weight.trend.direction.value}", f"Water: {water.today.percent}%"],
        )
    status = weight.goal.health_status
    if not losing and not well_hydrated and status not in (None, HealthStatus.HEALTHY):
        return Insight(
            kind=InsightKind.RECOMMENDATION,
            priority=Priority.HIGH,
            title="Hydration can speed up results",
            description="Drinking more water can help your metabolism and weight loss.",
            icon="💧🎯",
            action="Try 2-3 extra cups of water a day",
        )
    return None


def _calorie_insight(weight: WeightBundle, meals: MealBundle) -> Optional[Insight]:
    trying_to_lose = weight.goal.target_kg < weight.goal.current_kg
    if meals.today.calories_pct > 110 and trying_to_lose:
        return Insight(
            kind=InsightKind.ALERT,
            priority=Priority.HIGH,
            title="Calories above target",
            description="You are eating more than recommended for your weight-loss goal.",
            icon="⚠️🍽️",
            action="Review portions in your next meals",
        )
    return None


def _consistency_insight(
    weight: WeightBundle, water: WaterBundle, meals: MealBundle
) -> Optional[Insight]:
    if (
        weight.statistics.regularity_pct > 70
        and water.week.days_met >= 5
        and len(meals.points) > 5
    ):
        return Insight(
            kind=InsightKind.ACHIEVEMENT,
            priority=Priority.MEDIUM,
            title="Outstanding consistency! 🎉",
            description="You are logging consistently across weight, water and meals.",
            icon="🏆",
            metrics=["Weight: regular", "Water: consistent", "Nutrition: active"],
        )
    return None


def _evening_hydration_insight(water: WaterBundle, hour: Optional[int]) -> Optional[Insight]:
    if hour is not None and hour >= EVENING_HOUR and water.today.percent < 60:
        return Insight(
            kind=InsightKind.RECOMMENDATION,
            priority=Priority.MEDIUM,
            title="Catch up on hydration",
            description="It's late in the day and you are still below your water goal.",
            icon="⏰💧",
            action="Drink at least 2 cups in the next few hours",
        )
    return None


def _volatility_insight(weight: WeightBundle) -> Optional[Insight]:
    if weight.statistics.volatility > HIGH_VOLATILITY_KG:
        return Insight(
            kind=InsightKind.RECOMMENDATION,
            priority=Priority.MEDIUM,
            title="Highly variable weight",
            description="Your weight swings a lot, which may point to fluid retention or an irregular diet.",
            icon="📊⚖️",
            action="Weigh in and drink water at consistent times",
        )
    return None


def _forecast_insight(weight: WeightBundle) -> Optional[Insight]:
    prediction = weight.prediction
    if prediction.confidence > 70 and 0 < prediction.eta_to_goal_days < 90:
        return Insight(
            kind=InsightKind.TREND,
            priority=Priority.LOW,
            title="Weight goal within reach",
            description=(
                f"At your current pace you should reach your goal in about "
                f"{prediction.eta_to_goal_days} days."
            ),
            icon="🎯📈",
            metrics=[f"Confidence: {prediction.confidence}%"],
        )
    return None


def weight_score(weight: WeightBundle) -> int:
    status = weight.goal.health_status
    return WEIGHT_SCORES[status] if status is not None else UNKNOWN_WEIGHT_SCORE


def hydration_score(water: WaterBundle) -> int:
    return HYDRATION_SCORES[water.today.status]


def nutrition_score(meals: MealBundle) -> int:
    pct = meals.today.calories_pct
    if 80 <= pct <= 120:
        return 100
    if abs(pct - 100) <= 30:
        return 70
    return 50


def wellness_band(score: float) -> WellnessBand:
    if score >= 90:
        return WellnessBand.EXCELLENT
    if score >= 75:
        return WellnessBand.VERY_GOOD
    if score >= 60:
        return WellnessBand.GOOD
    return WellnessBand.NEEDS_ATTENTION


def compose(
    weight: WeightBundle,
    water: WaterBundle,
    meals: MealBundle,
    hour: Optional[int] = None,
) -> WellnessReport:
    """
    Combine the three metric bundles into insights and a wellness score.

    Args:
        weight: Output of ``analyze_weight``
        water: Output of ``analyze_water``
        meals: Output of ``analyze_meals``
        hour: Caller's local hour (0-23) for time-of-day rules; None skips them

    Returns:
        WellnessReport with insights sorted by priority (high first)
    """
    candidates = [
        _hydration_insight(weight, water),
        _calorie_insight(weight, meals),
        _consistency_insight(weight, water, meals),
        _evening_hydration_insight(water, hour),
        _volatility_insight(weight),
        _forecast_insight(weight),
    ]
    insights = sorted(
        (insight for insight in candidates if insight is not None),
        key=lambda insight: PRIORITY_RANK[insight.priority],
        reverse=True,
    )

    scores = {
        "weight": weight_score(weight),
        "hydration": hydration_score(water),
        "nutrition": nutrition_score(meals),
    }
    overall = sum(scores.values()) / len(scores)

    return WellnessReport(
        insights=insights,
        wellness_score=int(round(overall)),
        wellness_band=wellness_band(overall),
        domain_scores=scores,
    )
