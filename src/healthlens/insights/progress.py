"""Daily progress, weekly summaries and tips for water and meals."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from healthlens.goals.nutrition import MacroGoals
from healthlens.goals.water import WaterGoal
from healthlens.tracking.models import Direction, MacroTotals, MeasurementPoint


class IntakeStatus(Enum):
    """How today's intake compares with the goal."""
    LOW = "low"
    NORMAL = "normal"        # water
    ADEQUATE = "adequate"    # meals
    HIGH = "high"
    EXCESSIVE = "excessive"


class TipKind(Enum):
    MOTIVATION = "motivation"
    ALERT = "alert"
    CONGRATS = "congrats"
    CAUTION = "caution"


@dataclass(frozen=True)
class Tip:
    kind: TipKind
    title: str
    message: str
    icon: str


@dataclass(frozen=True)
class WaterProgress:
    consumed_ml: float
    consumed_cups: int
    percent: int
    remaining_ml: float
    remaining_cups: int
    status: IntakeStatus


@dataclass(frozen=True)
class MealProgress:
    calories_pct: int
    protein_pct: int
    carbs_pct: int
    fat_pct: int
    status: IntakeStatus


@dataclass(frozen=True)
class WaterWeekSummary:
    mean_ml: int = 0
    mean_cups: int = 0
    best_day_ml: float = 0.0
    worst_day_ml: float = 0.0
    days_met: int = 0
    trend: Direction = Direction.FLAT


@dataclass(frozen=True)
class MealWeekSummary:
    days_on_target: int = 0
    mean_calories: int = 0
    consistency_pct: int = 0
    trend: Direction = Direction.FLAT


# Change between the first and last three days that counts as a trend
WATER_TREND_ML = 200
CALORIE_TREND_KCAL = 100
CALORIE_TARGET_BAND = (0.8, 1.2)


def percent_of(value: float, target: float) -> int:
    """Rounded percentage, 0 when the target is not positive."""
    if target <= 0:
        return 0
    result = value / target * 100
    return int(round(result)) if math.isfinite(result) else 0


def water_progress(consumed_ml: float, goal: WaterGoal) -> WaterProgress:
    """Today's intake against the water goal."""
    percent = percent_of(consumed_ml, goal.target_ml)
    remaining = max(0.0, goal.target_ml - consumed_ml)

    if percent < 50:
        status = IntakeStatus.LOW
    elif percent >= 150:
        status = IntakeStatus.EXCESSIVE
    elif percent >= 100:
        status = IntakeStatus.HIGH
    else:
        status = IntakeStatus.NORMAL

    return WaterProgress(
        consumed_ml=consumed_ml,
        consumed_cups=int(round(consumed_ml / goal.cup_ml)),
        percent=percent,
        remaining_ml=remaining,
        remaining_cups=int(round(remaining / goal.cup_ml)),
        status=status,
    )


def meal_progress(today: Optional[MacroTotals], goals: MacroGoals) -> MealProgress:
    """Today's intake against the nutrition goals; status follows calories."""
    if today is None:
        return MealProgress(0, 0, 0, 0, IntakeStatus.LOW)

    calories_pct = percent_of(today.calories, goals.calories)
    if calories_pct < 50:
        status = IntakeStatus.LOW
    elif calories_pct <= 100:
        status = IntakeStatus.ADEQUATE
    elif calories_pct <= 120:
        status = IntakeStatus.HIGH
    else:
        status = IntakeStatus.EXCESSIVE

    return MealProgress(
        calories_pct=calories_pct,
        protein_pct=percent_of(today.protein_g, goals.protein_g),
        carbs_pct=percent_of(today.carbs_g, goals.carbs_g),
        fat_pct=percent_of(today.fat_g, goals.fat_g),
        status=status,
    )


def _three_day_trend(series: list[float], threshold: float) -> Direction:
    """Compare the mean of the last three days with the first three."""
    if len(series) < 6:
        return Direction.FLAT
    first = sum(series[:3]) / 3
    last = sum(series[-3:]) / 3
    if last - first > threshold:
        return Direction.RISING
    if last - first < -threshold:
        return Direction.FALLING
    return Direction.FLAT


def water_week_summary(days: list[MeasurementPoint], goal: WaterGoal) -> WaterWeekSummary:
    """Summarise sanitized daily water totals (typically the last 7 days)."""
    totals = [p.numeric for p in days]
    if not totals:
        return WaterWeekSummary()

    mean = sum(totals) / len(totals)
    return WaterWeekSummary(
        mean_ml=int(round(mean)),
        mean_cups=int(round(mean / goal.cup_ml)),
        best_day_ml=max(totals),
        worst_day_ml=min(totals),
        days_met=sum(1 for ml in totals if ml >= goal.target_ml),
        trend=_three_day_trend(totals, WATER_TREND_ML),
    )


def meal_week_summary(days: list[MeasurementPoint], goals: MacroGoals) -> MealWeekSummary:
    """Summarise sanitized daily meal totals; days without calories are ignored."""
    calories = [p.numeric for p in days if p.numeric > 0]
    if not calories:
        return MealWeekSummary()

    low, high = CALORIE_TARGET_BAND
    on_target = sum(
        1 for kcal in calories if goals.calories * low <= kcal <= goals.calories * high
    )
    return MealWeekSummary(
        days_on_target=on_target,
        mean_calories=int(round(sum(calories) / len(calories))),
        consistency_pct=int(round(on_target / len(calories) * 100)),
        trend=_three_day_trend(calories, CALORIE_TREND_KCAL),
    )


def hydration_tips(progress: WaterProgress, hour: Optional[int] = None) -> list[Tip]:
    """
    Tips for the hydration card.

    ``hour`` is the caller's local hour (0-23); time-of-day tips are skipped
    when it is None.
    """
    tips: list[Tip] = []

    if progress.status == IntakeStatus.LOW:
        if hour is not None and hour < 12:
            tips.append(Tip(
                TipKind.MOTIVATION,
                "Start the day hydrated!",
                f"Drink {progress.remaining_cups} cups through the day to reach your goal.",
                "☀️",
            ))
        else:
            tips.append(Tip(
                TipKind.ALERT,
                "Time to drink some water!",
                f"You are below your goal. Drink {min(3, progress.remaining_cups)} cups now.",
                "💧",
            ))
    elif progress.status == IntakeStatus.HIGH:
        tips.append(Tip(
            TipKind.CONGRATS,
            "Goal reached! 🎉",
            "Well done, you met your hydration goal today.",
            "✅",
        ))
    elif progress.status == IntakeStatus.EXCESSIVE:
        tips.append(Tip(
            TipKind.CAUTION,
            "Watch the excess",
            "You have already had a lot today. Spread your intake out.",
            "⚠️",
        ))

    if hour is not None and 6 <= hour <= 8 and progress.consumed_cups == 0:
        tips.append(Tip(
            TipKind.MOTIVATION,
            "Great morning for water",
            "Have 1-2 cups of water before breakfast.",
            "🌅",
        ))

    return tips


def nutrition_tips(progress: MealProgress) -> list[Tip]:
    """Tips for the nutrition card, driven by macro percentages."""
    tips: list[Tip] = []

    if progress.calories_pct < 50:
        tips.append(Tip(TipKind.MOTIVATION, "Low calories", "You are eating little today. Consider adding a meal.", "🍽️"))
    elif progress.calories_pct > 120:
        tips.append(Tip(TipKind.CAUTION, "Too many calories", "Watch your portions for the rest of the day.", "⚠️"))

    if progress.protein_pct < 80:
        tips.append(Tip(TipKind.MOTIVATION, "More protein", "Add protein sources such as eggs, fish, legumes or dairy.", "💪"))
    if progress.carbs_pct < 60:
        tips.append(Tip(TipKind.MOTIVATION, "More carbohydrates", "Add healthy carbohydrates such as oats, brown rice or fruit.", "🍞"))
    if progress.fat_pct < 50:
        tips.append(Tip(TipKind.MOTIVATION, "Healthy fats", "Include olive oil, nuts or avocado.", "🥑"))

    if not tips:
        tips.append(Tip(TipKind.CONGRATS, "On track", "You are following your plan well.", "✅"))

    return tips
