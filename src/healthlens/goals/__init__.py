"""Adaptive personalised targets for weight, water and nutrition."""

from __future__ import annotations

from healthlens.goals.nutrition import MacroGoals, ManualMacros, nutrition_goals
from healthlens.goals.source import AutomaticGoal, GoalSource, ManualGoal, goal_source_kind
from healthlens.goals.water import ExternalSignals, WaterGoal, water_goal
from healthlens.goals.weight import WeightGoal, weight_goal

__all__ = [
    "AutomaticGoal",
    "ExternalSignals",
    "GoalSource",
    "MacroGoals",
    "ManualGoal",
    "ManualMacros",
    "WaterGoal",
    "WeightGoal",
    "goal_source_kind",
    "nutrition_goals",
    "water_goal",
    "weight_goal",
]
