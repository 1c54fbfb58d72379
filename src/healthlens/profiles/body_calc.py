"""Body composition calculator for calorie, macro and water targets.

Calculates BMI, TDEE (Total Daily Energy Expenditure) and daily nutrition
targets from a biometric profile and an objective (lose, gain, maintain).

Uses the Mifflin-St Jeor equation for BMR as it's widely validated for
calculating resting metabolic rate. Profiles with missing height, age,
weight or sex fall back to static default targets instead of failing.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class Sex(Enum):
    """Biological sex for BMR calculation."""
    MALE = "male"
    FEMALE = "female"


class ActivityLevel(Enum):
    """Activity level multipliers for TDEE calculation."""
    SEDENTARY = "sedentary"          # Little or no exercise
    LIGHT = "light"                  # Light exercise 1-3 days/week
    MODERATE = "moderate"            # Moderate exercise 3-5 days/week
    INTENSE = "intense"              # Hard exercise 6-7 days/week
    VERY_INTENSE = "very_intense"    # Athlete, physical job


class Objective(Enum):
    """Body weight objective."""
    LOSE = "lose"
    GAIN = "gain"
    MAINTAIN = "maintain"


class HealthStatus(Enum):
    """BMI classification."""
    UNDERWEIGHT = "underweight"
    HEALTHY = "healthy"
    OVERWEIGHT = "overweight"
    OBESITY = "obesity"


# Activity level multipliers (Harris-Benedict activity factors)
ACTIVITY_MULTIPLIERS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.INTENSE: 1.725,
    ActivityLevel.VERY_INTENSE: 1.9,
}

# Calorie adjustment from TDEE by objective
OBJECTIVE_ADJUSTMENTS = {
    Objective.LOSE: -500,      # ~0.5 kg/week
    Objective.GAIN: 300,       # controlled surplus
    Objective.MAINTAIN: 0,
}

# Extra water for exercise sweat losses (mL/day)
ACTIVITY_WATER_EXTRA = {
    ActivityLevel.SEDENTARY: 0,
    ActivityLevel.LIGHT: 200,
    ActivityLevel.MODERATE: 400,
    ActivityLevel.INTENSE: 600,
    ActivityLevel.VERY_INTENSE: 800,
}

PROTEIN_G_PER_KG = 1.6
PROTEIN_G_PER_KG_ATHLETE = 2.0
FAT_CALORIE_SHARE = 0.25

MIN_PROTEIN_G = 50
MIN_FAT_G = 30
MIN_CARBS_G = 50
MAX_WATER_ML = 4000

# Used when the profile lacks the data needed for Mifflin-St Jeor
DEFAULT_CALORIES = 2000
DEFAULT_PROTEIN_G = 150
DEFAULT_CARBS_G = 250
DEFAULT_FAT_G = 65
DEFAULT_WATER_ML = 2000


@dataclass(frozen=True)
class Profile:
    """Biometric profile. Any biometric field may be missing."""

    weight_kg: Optional[float] = None
    height_cm: Optional[float] = None
    age: Optional[int] = None
    sex: Optional[Sex] = None
    activity_level: ActivityLevel = ActivityLevel.MODERATE
    objective: Objective = Objective.MAINTAIN

    def __post_init__(self) -> None:
        # Accept plain strings from config files and questionnaires
        if isinstance(self.sex, str):
            object.__setattr__(self, "sex", _parse_enum(Sex, self.sex, "sex"))
        if isinstance(self.activity_level, str):
            object.__setattr__(
                self,
                "activity_level",
                _parse_enum(ActivityLevel, self.activity_level, "activity_level"),
            )
        if isinstance(self.objective, str):
            object.__setattr__(
                self, "objective", _parse_enum(Objective, self.objective, "objective")
            )

    @property
    def bmi(self) -> Optional[float]:
        return calculate_bmi(self.weight_kg, self.height_cm)

    @property
    def is_complete(self) -> bool:
        """True when every field Mifflin-St Jeor needs is present and positive."""
        return (
            _positive(self.weight_kg)
            and _positive(self.height_cm)
            and _positive(self.age)
            and self.sex is not None
        )


def _parse_enum(enum_cls: type[Enum], raw: str, name: str) -> Enum:
    try:
        return enum_cls(raw.lower())
    except ValueError:
        valid = tuple(member.value for member in enum_cls)  # type: ignore[attr-defined]
        raise ValueError(f"{name} must be one of {valid}, got '{raw}'") from None


def _positive(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value) and value > 0


@dataclass(frozen=True)
class NutritionTargets:
    """Daily nutrition targets derived from a profile."""

    calories: int
    protein_g: int
    carbs_g: int
    fat_g: int
    water_ml: int

    # Reference values (None when defaults were used)
    bmr: Optional[int] = None
    tdee: Optional[int] = None
    calculated: bool = False


def calculate_bmi(weight_kg: Optional[float], height_cm: Optional[float]) -> Optional[float]:
    """BMI = kg / m², or None when weight or height is missing."""
    if not _positive(weight_kg) or not _positive(height_cm):
        return None
    height_m = height_cm / 100  # type: ignore[operator]
    return weight_kg / (height_m * height_m)  # type: ignore[operator]


def classify_bmi(bmi: float) -> HealthStatus:
    """Map a BMI value to its WHO band."""
    if bmi < 18.5:
        return HealthStatus.UNDERWEIGHT
    if bmi < 25:
        return HealthStatus.HEALTHY
    if bmi < 30:
        return HealthStatus.OVERWEIGHT
    return HealthStatus.OBESITY


def calculate_bmr(age: int, sex: Sex, height_cm: float, weight_kg: float) -> float:
    """Calculate Basal Metabolic Rate using Mifflin-St Jeor equation.

    Args:
        age: Age in years
        sex: Biological sex
        height_cm: Height in centimetres
        weight_kg: Weight in kilograms

    Returns:
        BMR in calories per day
    """
    base = (10 * weight_kg) + (6.25 * height_cm) - (5 * age)
    if sex == Sex.MALE:
        return base + 5
    return base - 161


def calculate_tdee(bmr: float, activity_level: ActivityLevel) -> float:
    """Calculate Total Daily Energy Expenditure."""
    return bmr * ACTIVITY_MULTIPLIERS[activity_level]


def recommended_water_ml(weight_kg: float, sex: Sex, activity_level: ActivityLevel) -> float:
    """Body-weight based water recommendation, capped at 4 L/day."""
    per_kg = 30 if sex == Sex.FEMALE else 35
    return min(weight_kg * per_kg + ACTIVITY_WATER_EXTRA[activity_level], MAX_WATER_ML)


def default_targets() -> NutritionTargets:
    """Static targets used when the profile is incomplete."""
    return NutritionTargets(
        calories=DEFAULT_CALORIES,
        protein_g=DEFAULT_PROTEIN_G,
        carbs_g=DEFAULT_CARBS_G,
        fat_g=DEFAULT_FAT_G,
        water_ml=DEFAULT_WATER_ML,
    )


def calculate_targets(profile: Profile) -> NutritionTargets:
    """Calculate calorie, macro and water targets for a profile.

    Protein is 1.6 g/kg (2.0 g/kg for intense activity), fat is 25% of
    calories and carbohydrates fill the remainder.

    Args:
        profile: Biometric profile with objective and activity level

    Returns:
        NutritionTargets; static defaults when the profile is incomplete
    """
    if not profile.is_complete:
        logger.debug("Incomplete profile, using default nutrition targets")
        return default_targets()

    weight = float(profile.weight_kg)  # type: ignore[arg-type]
    bmr = calculate_bmr(profile.age, profile.sex, profile.height_cm, weight)  # type: ignore[arg-type]
    tdee = calculate_tdee(bmr, profile.activity_level)
    calories = tdee + OBJECTIVE_ADJUSTMENTS[profile.objective]

    if profile.activity_level in (ActivityLevel.INTENSE, ActivityLevel.VERY_INTENSE):
        protein_per_kg = PROTEIN_G_PER_KG_ATHLETE
    else:
        protein_per_kg = PROTEIN_G_PER_KG

    protein = max(weight * protein_per_kg, MIN_PROTEIN_G)
    fat = max(calories * FAT_CALORIE_SHARE / 9, MIN_FAT_G)
    carbs = max((calories - protein * 4 - fat * 9) / 4, MIN_CARBS_G)
    water = recommended_water_ml(weight, profile.sex, profile.activity_level)  # type: ignore[arg-type]

    return NutritionTargets(
        calories=int(round(calories)),
        protein_g=int(round(protein)),
        carbs_g=int(round(carbs)),
        fat_g=int(round(fat)),
        water_ml=int(round(water)),
        bmr=int(round(bmr)),
        tdee=int(round(tdee)),
        calculated=True,
    )


def targets_to_dict(targets: NutritionTargets) -> dict:
    """Convert NutritionTargets to dict for JSON output."""
    return {
        "calories": targets.calories,
        "protein_g": targets.protein_g,
        "carbs_g": targets.carbs_g,
        "fat_g": targets.fat_g,
        "water_ml": targets.water_ml,
        "reference": {
            "bmr": targets.bmr,
            "tdee": targets.tdee,
            "calculated": targets.calculated,
        },
    }
