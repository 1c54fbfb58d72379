"""Rule-based weight alerts.

Each rule looks at the goal, BMI and trend independently and contributes at
most one alert. The final list is ordered by severity (critical first), with
one exception: success alerts always come first when present.
"""

from __future__ import annotations

from typing import Optional

from healthlens.goals.weight import WeightGoal
from healthlens.profiles.body_calc import HealthStatus, Objective
from healthlens.tracking.models import (
    SEVERITY_RANK,
    Alert,
    Consistency,
    Direction,
    Severity,
    TrendResult,
    Velocity,
)

DEFAULT_TOLERANCE_KG = 1.0


def sort_alerts(alerts: list[Alert]) -> list[Alert]:
    """Order by severity rank descending, then pull success alerts to the front."""
    ranked = sorted(alerts, key=lambda a: SEVERITY_RANK[a.severity], reverse=True)
    successes = [a for a in ranked if a.severity == Severity.SUCCESS]
    others = [a for a in ranked if a.severity != Severity.SUCCESS]
    return successes + others


def goal_proximity_alert(goal: WeightGoal, tolerance: float) -> Optional[Alert]:
    distance = abs(goal.current_kg - goal.target_kg)
    if distance <= tolerance:
        return Alert(
            severity=Severity.SUCCESS,
            title="Goal reached",
            message=f"You are within {tolerance:g} kg of your {goal.target_kg:.1f} kg goal.",
            icon="🎯",
        )
    if distance <= 2 * tolerance:
        return Alert(
            severity=Severity.INFO,
            title="Almost there",
            message=f"Only {distance:.1f} kg left to your {goal.target_kg:.1f} kg goal.",
            icon="🏁",
        )
    return None


def bmi_alert(goal: WeightGoal) -> Optional[Alert]:
    if goal.health_status == HealthStatus.OBESITY:
        return Alert(
            severity=Severity.CRITICAL,
            title="High BMI",
            message=f"Your BMI ({goal.bmi}) indicates obesity. Consider talking to a health professional.",
            icon="⚠️",
            action="Seek medical guidance",
        )
    if goal.health_status == HealthStatus.OVERWEIGHT:
        return Alert(
            severity=Severity.WARNING,
            title="BMI above healthy range",
            message=f"Your BMI ({goal.bmi}) indicates overweight. Aim for a gradual return to the healthy range.",
            icon="📊",
            action="Plan a gradual reduction",
        )
    if goal.health_status == HealthStatus.UNDERWEIGHT:
        return Alert(
            severity=Severity.WARNING,
            title="BMI below healthy range",
            message=f"Your BMI ({goal.bmi}) is low. Consider healthy weight gain.",
            icon="📈",
        )
    return None


def _opposes(objective: Objective, direction: Direction) -> bool:
    if objective == Objective.LOSE:
        return direction == Direction.RISING
    if objective == Objective.GAIN:
        return direction == Direction.FALLING
    return direction in (Direction.RISING, Direction.FALLING)


def _aligned(objective: Objective, direction: Direction) -> bool:
    return (objective == Objective.LOSE and direction == Direction.FALLING) or (
        objective == Objective.GAIN and direction == Direction.RISING
    )


def trend_alert(goal: WeightGoal, trend: TrendResult) -> Optional[Alert]:
    if trend.velocity != Velocity.FAST:
        return None

    verb = "increasing" if trend.direction == Direction.RISING else "decreasing"
    icon = "📈" if trend.direction == Direction.RISING else "📉"

    if _opposes(goal.objective, trend.direction):
        return Alert(
            severity=Severity.WARNING,
            title="Rapid change contrary to goal",
            message=f"Weight is {verb} quickly, against your goal to {goal.objective.value}.",
            icon=icon,
            action="Review your recent routine",
        )
    if _aligned(goal.objective, trend.direction):
        return Alert(
            severity=Severity.INFO,
            title="Rapid weight change",
            message=f"Weight is {verb} quickly. Check that this pace is healthy for you.",
            icon=icon,
        )
    return None


def consistency_alert(trend: TrendResult) -> Optional[Alert]:
    if trend.consistency != Consistency.VERY_IRREGULAR:
        return None
    return Alert(
        severity=Severity.WARNING,
        title="Very irregular readings",
        message="Your weigh-ins vary a lot. Try weighing at the same time each day.",
        icon="📊",
    )


def generate_alerts(
    goal: WeightGoal,
    trend: TrendResult,
    tolerance: float = DEFAULT_TOLERANCE_KG,
) -> list[Alert]:
    """
    Evaluate every alert rule and return the ordered alerts.

    Args:
        goal: Weight goal with BMI context
        trend: Weight trend
        tolerance: Distance to goal (kg) that counts as reached

    Returns:
        Alerts ordered for display
    """
    candidates = [
        goal_proximity_alert(goal, tolerance),
        bmi_alert(goal),
        trend_alert(goal, trend),
        consistency_alert(trend),
    ]
    return sort_alerts([alert for alert in candidates if alert is not None])
