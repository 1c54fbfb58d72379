"""Adaptive daily water target.

The automatic target starts from the body-weight recommendation (or a 2 L
fallback) and goes through a fixed sequence of adjustments:

1. ambient temperature bonus (+200 / +400 / +600 mL above 24 / 28 / 32 °C)
2. +500 mL for very intense activity
3. history correction against the 5-day average intake
   (×0.9 when under 70% of target, ×1.05 when over 110%),
   bounded to [1500, 4000] mL
4. clamp to a band that depends on BMI (skipped without a BMI)
5. round to whole cups, at least one cup

A manual goal (in cups) bypasses steps 1-4.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from healthlens.config.settings import WaterConfig
from healthlens.goals.source import AutomaticGoal, GoalSource, ManualGoal
from healthlens.profiles.body_calc import (
    ActivityLevel,
    NutritionTargets,
    Profile,
    calculate_targets,
)
from healthlens.tracking.models import MeasurementPoint

logger = logging.getLogger(__name__)

# (threshold °C, bonus mL), checked from hottest down
TEMPERATURE_BONUSES = [(32, 600), (28, 400), (24, 200)]
VERY_INTENSE_BONUS_ML = 500

HISTORY_WINDOW_DAYS = 5
LOW_INTAKE_RATIO = 0.7
HIGH_INTAKE_RATIO = 1.1
LOW_INTAKE_SCALE = 0.9
HIGH_INTAKE_SCALE = 1.05
MIN_TARGET_ML = 1500
MAX_TARGET_ML = 4000

# (BMI upper bound exclusive, (min mL, max mL))
BMI_BANDS = [
    (18.5, (1800, 3200)),
    (25.0, (1800, 3800)),
    (math.inf, (1600, 3600)),
]


@dataclass(frozen=True)
class ExternalSignals:
    """Inputs from outside the log history."""

    ambient_temperature_c: Optional[float] = None


@dataclass(frozen=True)
class WaterGoal:
    """Daily water target in mL and cups."""

    target_ml: int
    cups: int
    cup_ml: int
    source: GoalSource


def temperature_bonus(temperature_c: Optional[float]) -> int:
    if temperature_c is None or not math.isfinite(temperature_c):
        return 0
    for threshold, bonus in TEMPERATURE_BONUSES:
        if temperature_c > threshold:
            return bonus
    return 0


def history_correction(target: float, history: list[MeasurementPoint]) -> float:
    """Scale the target toward what the user actually drinks."""
    recent = [p.numeric for p in history[-HISTORY_WINDOW_DAYS:]]
    if not recent or target <= 0:
        return target

    average = sum(recent) / len(recent)
    if average < target * LOW_INTAKE_RATIO:
        return max(MIN_TARGET_ML, target * LOW_INTAKE_SCALE)
    if average > target * HIGH_INTAKE_RATIO:
        return min(MAX_TARGET_ML, target * HIGH_INTAKE_SCALE)
    return target


def bmi_band(bmi: float) -> tuple[int, int]:
    for upper, band in BMI_BANDS:
        if bmi < upper:
            return band
    return BMI_BANDS[-1][1]


def round_to_cups(
    target_ml: float, cup_ml: int, band: Optional[tuple[int, int]] = None
) -> int:
    """
    Round to the nearest whole number of cups (minimum one).

    When a band is given and rounding lands outside it, step to the nearest
    cup count inside the band.
    """
    cups = max(1, int(round(target_ml / cup_ml)))
    if band is not None:
        low, high = band
        if cups * cup_ml > high:
            cups = max(1, high // cup_ml)
        if cups * cup_ml < low:
            cups = math.ceil(low / cup_ml)
    return cups


def water_goal(
    profile: Profile,
    history: Optional[list[MeasurementPoint]] = None,
    signals: Optional[ExternalSignals] = None,
    manual_cups: Optional[int] = None,
    cup_ml: Optional[int] = None,
    nutrition: Optional[NutritionTargets] = None,
    config: Optional[WaterConfig] = None,
) -> WaterGoal:
    """
    Compute the daily water target.

    Args:
        profile: Biometric profile
        history: Sanitized daily intake totals in mL
        signals: External inputs such as ambient temperature
        manual_cups: User-entered goal in cups; bypasses the adjustments
        cup_ml: Cup size in mL; defaults to the configured cup
        nutrition: Precomputed nutrition targets (computed when omitted)
        config: Water tuning; defaults to ``WaterConfig()``

    Returns:
        WaterGoal whose target is a multiple of the cup size; only a manual
        goal can be zero
    """
    config = config or WaterConfig()
    cup_ml = config.default_cup_ml if cup_ml is None else cup_ml
    if cup_ml <= 0:
        raise ValueError(f"cup size must be positive, got {cup_ml}")

    if manual_cups is not None:
        cups = int(manual_cups)
        return WaterGoal(
            target_ml=cups * cup_ml,
            cups=cups,
            cup_ml=cup_ml,
            source=ManualGoal(cups * cup_ml),
        )

    signals = signals or ExternalSignals()
    nutrition = nutrition or calculate_targets(profile)
    target = float(nutrition.water_ml if nutrition.calculated else config.fallback_target_ml)
    steps: list[tuple[str, float]] = [("base", target)]

    bonus = temperature_bonus(signals.ambient_temperature_c)
    if bonus:
        target += bonus
        steps.append(("temperature", target))

    if profile.activity_level == ActivityLevel.VERY_INTENSE:
        target += VERY_INTENSE_BONUS_ML
        steps.append(("activity", target))

    target = history_correction(target, history or [])
    target = min(MAX_TARGET_ML, max(MIN_TARGET_ML, target))
    steps.append(("history", target))
    pre_clamp_ml = target

    band: Optional[tuple[int, int]] = None
    bmi = profile.bmi
    if bmi is not None:
        band = bmi_band(bmi)
        target = min(band[1], max(band[0], target))
        steps.append(("bmi_band", target))
    else:
        logger.debug("No BMI available, skipping water band clamp")

    cups = round_to_cups(target, cup_ml, band)
    target_ml = cups * cup_ml

    return WaterGoal(
        target_ml=target_ml,
        cups=cups,
        cup_ml=cup_ml,
        source=AutomaticGoal(
            target_ml,
            {"steps": steps, "pre_clamp_ml": pre_clamp_ml, "band": band},
        ),
    )
