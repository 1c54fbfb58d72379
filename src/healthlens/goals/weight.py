"""Adaptive body-weight target.

Without a manual goal the target is the weight at the ideal BMI (22.5) for
the profile's height, but a single cycle never moves it more than 10% away
from the current weight. The recommended pace is a quarter of the remaining
gap per week, capped at 0.8 kg/week.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from healthlens.config.settings import GoalsConfig
from healthlens.goals.source import AutomaticGoal, GoalSource, ManualGoal
from healthlens.profiles.body_calc import (
    HealthStatus,
    Objective,
    Profile,
    calculate_bmi,
    classify_bmi,
)

logger = logging.getLogger(__name__)

DEFAULT_WEIGHT_KG = 70.0
DEFAULT_HEIGHT_CM = 170.0


@dataclass(frozen=True)
class WeightGoal:
    """Weight target with pace and BMI context."""

    current_kg: float
    target_kg: float
    source: GoalSource
    weekly_rate_kg: float
    eta_days: int
    objective: Objective
    bmi: Optional[float] = None  # rounded to 0.1, None without a height
    health_status: Optional[HealthStatus] = None


def ideal_weight(height_cm: float, ideal_bmi: float) -> float:
    height_m = height_cm / 100
    return ideal_bmi * height_m * height_m


def clamp_change(current: float, desired: float, max_fraction: float) -> float:
    """Move from ``current`` toward ``desired`` by at most max_fraction × current."""
    max_change = current * max_fraction
    diff = desired - current
    if abs(diff) <= max_change:
        return desired
    return current + max_change if diff > 0 else current - max_change


def weight_goal(
    profile: Profile,
    current_kg: Optional[float] = None,
    manual_goal_kg: Optional[float] = None,
    config: Optional[GoalsConfig] = None,
) -> WeightGoal:
    """
    Compute the weight target for a profile.

    Args:
        profile: Biometric profile (height and weight may be missing)
        current_kg: Latest logged weight; falls back to the profile weight,
                    then to 70 kg
        manual_goal_kg: User-entered goal, used as-is when present
        config: Goal tuning; defaults to ``GoalsConfig()``

    Returns:
        WeightGoal with target, pace and ETA
    """
    config = config or GoalsConfig()

    current = current_kg if current_kg is not None and math.isfinite(current_kg) else None
    if current is None:
        current = profile.weight_kg if profile.weight_kg else DEFAULT_WEIGHT_KG

    height = profile.height_cm if profile.height_cm else None
    bmi = calculate_bmi(current, height)

    source: GoalSource
    if manual_goal_kg is not None:
        source = ManualGoal(manual_goal_kg)
        target = float(manual_goal_kg)
    else:
        if height is None:
            logger.debug("No height in profile, using %.0f cm for ideal weight", DEFAULT_HEIGHT_CM)
        ideal = ideal_weight(height or DEFAULT_HEIGHT_CM, config.ideal_bmi)
        target = clamp_change(current, ideal, config.max_change_fraction)
        source = AutomaticGoal(
            target,
            {
                "ideal_bmi": config.ideal_bmi,
                "ideal_weight_kg": round(ideal, 1),
                "capped": target != ideal,
                "default_height": height is None,
            },
        )

    gap = abs(target - current)
    weekly_rate = min(config.max_weekly_rate_kg, gap / 4)
    eta_days = math.ceil(gap / (weekly_rate / 7)) if weekly_rate > 0 else 0

    return WeightGoal(
        current_kg=current,
        target_kg=target,
        source=source,
        weekly_rate_kg=weekly_rate,
        eta_days=eta_days,
        objective=profile.objective,
        bmi=round(bmi, 1) if bmi is not None else None,
        health_status=classify_bmi(bmi) if bmi is not None else None,
    )
