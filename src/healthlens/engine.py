"""Per-metric analysis entry points.

Every function here is a pure function of its arguments: logs, profile,
optional manual goals, external signals and the caller's notion of "today".
Nothing is read from the clock or the filesystem. Settings
default to the built-in values; callers that honour a config file (the CLI)
pass ``get_settings()`` explicitly.

Data flow per metric:

    raw logs → sanitize → {statistics, trend} → {goal, prediction} → alerts

``healthlens.insights.composer.compose`` then reads the three bundles.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
import logging
from collections import OrderedDict
from collections.abc import Callable, Iterable
from datetime import date, timedelta
from enum import Enum
from typing import Any, Optional, TypeVar

from healthlens.bundles import MealBundle, WaterBundle, WeightBundle
from healthlens.config.settings import Settings
from healthlens.goals.nutrition import ManualMacros, nutrition_goals
from healthlens.goals.water import ExternalSignals, water_goal
from healthlens.goals.weight import weight_goal
from healthlens.insights.alerts import generate_alerts
from healthlens.insights.progress import (
    hydration_tips,
    meal_progress,
    meal_week_summary,
    nutrition_tips,
    water_progress,
    water_week_summary,
)
from healthlens.profiles.body_calc import Profile, calculate_targets
from healthlens.tracking.models import MacroTotals, MeasurementPoint
from healthlens.tracking.predictor import MAX_WEEKLY_RATE, predict
from healthlens.tracking.sanitize import daily_macro_totals, daily_totals, sanitize
from healthlens.tracking.statistics import compute_statistics
from healthlens.tracking.trend import analyze_trend

logger = logging.getLogger(__name__)

T = TypeVar("T")

WEEK_DAYS = 7

_MISSING = object()


def _last_week(points: list[MeasurementPoint], today: date) -> list[MeasurementPoint]:
    start = today - timedelta(days=WEEK_DAYS - 1)
    return [p for p in points if start <= p.date <= today]


def _on_day(points: list[MeasurementPoint], day: date) -> Optional[MeasurementPoint]:
    for point in points:
        if point.date == day:
            return point
    return None


def analyze_weight(
    logs: Iterable[MeasurementPoint],
    profile: Profile,
    manual_goal_kg: Optional[float] = None,
    settings: Optional[Settings] = None,
) -> WeightBundle:
    """
    Analyze body-weight logs.

    Args:
        logs: Weight measurements in kg, in insertion order
        profile: Biometric profile
        manual_goal_kg: User-entered target weight
        settings: Settings to use; defaults to built-in ``Settings()``

    Returns:
        WeightBundle with statistics, trend, goal, prediction and alerts
    """
    settings = settings or Settings()
    thresholds = settings.trend.weight

    points = sanitize(logs)
    stats = compute_statistics(points)
    current = points[-1].numeric if points else None

    goal = weight_goal(profile, current, manual_goal_kg, settings.goals)
    trend = analyze_trend(points, goal.target_kg, thresholds)
    prediction = predict(
        goal.current_kg, goal.target_kg, trend, stats, thresholds, MAX_WEEKLY_RATE
    )
    alerts = generate_alerts(goal, trend, settings.goals.goal_tolerance_kg)

    return WeightBundle(
        points=points,
        statistics=stats,
        trend=trend,
        goal=goal,
        prediction=prediction,
        alerts=alerts,
    )


def analyze_water(
    intakes: Iterable[MeasurementPoint],
    profile: Profile,
    today: date,
    signals: Optional[ExternalSignals] = None,
    manual_cups: Optional[int] = None,
    cup_ml: Optional[int] = None,
    hour: Optional[int] = None,
    settings: Optional[Settings] = None,
) -> WaterBundle:
    """
    Analyze water intake logs.

    Args:
        intakes: Individual intakes in mL (summed per day)
        profile: Biometric profile
        today: Caller's current date; today's partial total is excluded
               from the history correction
        signals: External inputs such as ambient temperature
        manual_cups: User-entered daily goal in cups
        cup_ml: Cup size in mL
        hour: Caller's local hour for time-of-day tips
        settings: Settings to use; defaults to built-in ``Settings()``

    Returns:
        WaterBundle with goal, statistics, trend, today's progress,
        weekly summary and tips
    """
    settings = settings or Settings()

    points = sanitize(daily_totals(intakes))
    history = [p for p in points if p.date < today]
    today_point = _on_day(points, today)
    consumed = today_point.numeric if today_point else 0.0

    goal = water_goal(
        profile,
        history=history,
        signals=signals,
        manual_cups=manual_cups,
        cup_ml=cup_ml,
        nutrition=calculate_targets(profile),
        config=settings.water,
    )
    progress = water_progress(consumed, goal)

    return WaterBundle(
        points=points,
        statistics=compute_statistics(points),
        trend=analyze_trend(points, float(goal.target_ml), settings.trend.water),
        goal=goal,
        today=progress,
        week=water_week_summary(_last_week(points, today), goal),
        tips=hydration_tips(progress, hour),
    )


def analyze_meals(
    meals: Iterable[MeasurementPoint],
    profile: Profile,
    today: date,
    manual: Optional[ManualMacros] = None,
    settings: Optional[Settings] = None,
) -> MealBundle:
    """
    Analyze meal logs.

    Args:
        meals: Individual meals as ``MacroTotals`` points (summed per day)
        profile: Biometric profile
        today: Caller's current date
        manual: User-entered macro goals
        settings: Settings to use; defaults to built-in ``Settings()``

    Returns:
        MealBundle; statistics and trend are computed over daily calories
    """
    settings = settings or Settings()

    points = sanitize(daily_macro_totals(meals))
    goals = nutrition_goals(profile, manual)
    today_point = _on_day(points, today)
    today_totals = today_point.value if today_point else None
    if today_totals is not None and not isinstance(today_totals, MacroTotals):
        today_totals = None

    progress = meal_progress(today_totals, goals)

    return MealBundle(
        points=points,
        statistics=compute_statistics(points),
        trend=analyze_trend(points, float(goals.calories), settings.trend.calories),
        goals=goals,
        today=progress,
        week=meal_week_summary(_last_week(points, today), goals),
        tips=nutrition_tips(progress),
        today_totals=today_totals,
    )


def _canonical(obj: Any) -> Any:
    """Convert inputs to a JSON-stable structure for hashing."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            "__type__": type(obj).__name__,
            **{f.name: _canonical(getattr(obj, f.name)) for f in dataclasses.fields(obj)},
        }
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {str(k): _canonical(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_canonical(v) for v in obj]
    return obj


def input_hash(subject_id: str, *parts: Any, **named: Any) -> str:
    """
    SHA-256 over the canonical JSON of the inputs.

    Lists of measurement points are stably sorted by date first, so
    reordering different days does not change the key while the relative
    order of same-day entries (which decides last-write-wins) still does.
    """

    def normalise(value: Any) -> Any:
        if isinstance(value, (list, tuple)) and value and all(
            isinstance(v, MeasurementPoint) for v in value
        ):
            return sorted(value, key=lambda p: p.date)
        return value

    payload = {
        "subject": subject_id,
        "args": [_canonical(normalise(p)) for p in parts],
        "kwargs": {k: _canonical(normalise(v)) for k, v in sorted(named.items())},
    }
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"), allow_nan=True)
    return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


class AnalysisCache:
    """
    Memoizes analysis results keyed by a hash of their inputs.

    Results are immutable and recomputation is idempotent, so concurrent
    misses may compute the same value twice. Each lookup touches the dict
    once, so an entry evicted by another thread reads as a miss.
    """

    def __init__(self, max_entries: int = 256):
        if max_entries <= 0:
            raise ValueError(f"max_entries must be positive, got {max_entries}")
        self.max_entries = max_entries
        self._entries: OrderedDict[str, Any] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def get_or_compute(
        self,
        subject_id: str,
        func: Callable[..., T],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Return the cached result of ``func(*args, **kwargs)`` for this subject."""
        key = input_hash(subject_id, func.__qualname__, *args, **kwargs)

        cached = self._entries.get(key, _MISSING)
        if cached is not _MISSING:
            logger.debug("Analysis cache hit for %s (%s)", subject_id, func.__qualname__)
            try:
                self._entries.move_to_end(key)
            except KeyError:
                pass  # evicted since the lookup
            return cached

        result = func(*args, **kwargs)
        self._entries[key] = result
        while len(self._entries) > self.max_entries:
            try:
                self._entries.popitem(last=False)
            except KeyError:
                break
        return result

    def clear(self) -> None:
        self._entries.clear()
