"""Calorie and macronutrient goals.

Manual goals win field by field: a user who only set a calorie goal still
gets computed protein, carb and fat targets. Without any manual field the
targets come from ``calculate_targets`` (Mifflin-St Jeor) or its static
defaults when the profile is incomplete.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from healthlens.goals.source import AutomaticGoal, GoalSource, ManualGoal
from healthlens.profiles.body_calc import NutritionTargets, Profile, calculate_targets


@dataclass(frozen=True)
class ManualMacros:
    """User-entered goals; None means "not set"."""

    calories: Optional[float] = None
    protein_g: Optional[float] = None
    carbs_g: Optional[float] = None
    fat_g: Optional[float] = None

    @property
    def any_set(self) -> bool:
        return any(
            bool(v) for v in (self.calories, self.protein_g, self.carbs_g, self.fat_g)
        )


@dataclass(frozen=True)
class MacroGoals:
    """Effective daily nutrition goals."""

    calories: int
    protein_g: int
    carbs_g: int
    fat_g: int
    source: GoalSource
    computed: NutritionTargets


def nutrition_goals(
    profile: Profile,
    manual: Optional[ManualMacros] = None,
) -> MacroGoals:
    """
    Resolve the nutrition goals for a profile.

    Args:
        profile: Biometric profile
        manual: Optional user-entered goals

    Returns:
        MacroGoals whose ``source`` is a ManualGoal (calorie value) when any
        manual field is set, else an AutomaticGoal
    """
    computed = calculate_targets(profile)

    if manual is not None and manual.any_set:
        calories = int(round(manual.calories or computed.calories))
        return MacroGoals(
            calories=calories,
            protein_g=int(round(manual.protein_g or computed.protein_g)),
            carbs_g=int(round(manual.carbs_g or computed.carbs_g)),
            fat_g=int(round(manual.fat_g or computed.fat_g)),
            source=ManualGoal(calories),
            computed=computed,
        )

    return MacroGoals(
        calories=computed.calories,
        protein_g=computed.protein_g,
        carbs_g=computed.carbs_g,
        fat_g=computed.fat_g,
        source=AutomaticGoal(
            computed.calories,
            {"bmr": computed.bmr, "tdee": computed.tdee, "defaults": not computed.calculated},
        ),
        computed=computed,
    )
