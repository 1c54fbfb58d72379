"""Tests for the per-metric analysis entry points and the analysis cache."""

from __future__ import annotations

import json
from collections import OrderedDict

import pytest

from healthlens.cli import to_jsonable
from healthlens.config import get_settings
from healthlens.engine import AnalysisCache, analyze_meals, analyze_water, analyze_weight, input_hash
from healthlens.goals.source import AutomaticGoal
from healthlens.insights.progress import IntakeStatus
from healthlens.profiles.body_calc import HealthStatus, Profile
from healthlens.tracking.models import (
    UNKNOWN_ETA_DAYS,
    Direction,
    MacroTotals,
    MeasurementPoint,
    Severity,
    Velocity,
)


class TestAnalyzeWeight:
    """Tests for analyze_weight()."""

    def test_steady_loss(self, falling_weights, male_profile, settings) -> None:
        bundle = analyze_weight(falling_weights, male_profile, settings=settings)

        assert bundle.statistics.days_logged == 14
        assert bundle.trend.direction == Direction.FALLING
        assert bundle.trend.velocity == Velocity.FAST
        assert bundle.trend.confidence == 79

        goal = bundle.goal
        assert goal.current_kg == 87.4
        assert goal.target_kg == pytest.approx(78.66)
        assert isinstance(goal.source, AutomaticGoal)
        assert goal.health_status == HealthStatus.OVERWEIGHT

        # ETA uses the weekly rate clamped to 1.2 kg
        assert bundle.prediction.eta_to_goal_days == 51
        assert bundle.trend.next_milestone.eta_days == 44

        assert [a.severity for a in bundle.alerts] == [Severity.WARNING, Severity.INFO]

    def test_manual_goal(self, falling_weights, male_profile, settings) -> None:
        bundle = analyze_weight(falling_weights, male_profile, manual_goal_kg=87.0, settings=settings)
        assert bundle.goal.target_kg == 87.0
        assert bundle.alerts[0].severity == Severity.SUCCESS

    def test_same_day_duplicate(self, day, falling_weights, male_profile, settings) -> None:
        logs = falling_weights + [MeasurementPoint(day(13), 87.0)]
        bundle = analyze_weight(logs, male_profile, settings=settings)
        assert len(bundle.points) == 14
        assert bundle.goal.current_kg == 87.0

    def test_no_logs(self, settings) -> None:
        """An empty history degrades to defaults instead of raising."""
        bundle = analyze_weight([], Profile(), settings=settings)
        assert bundle.goal.current_kg == 70.0
        assert bundle.trend.confidence == 0
        assert bundle.trend.next_milestone.eta_days == UNKNOWN_ETA_DAYS
        assert bundle.prediction.horizon_30 == 70.0

    def test_idempotent(self, falling_weights, male_profile, settings) -> None:
        """Identical inputs give byte-identical serialized outputs."""
        first = analyze_weight(falling_weights, male_profile, settings=settings)
        second = analyze_weight(list(falling_weights), male_profile, settings=settings)
        assert first == second
        assert json.dumps(to_jsonable(first)) == json.dumps(to_jsonable(second))


class TestDefaultSettings:
    """Tests for the engine without explicit settings."""

    def test_ignores_config_file_in_home(
        self, falling_weights, male_profile, settings, tmp_path, monkeypatch
    ) -> None:
        config_dir = tmp_path / ".healthlens"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("goals:\n  ideal_bmi: 27\n")
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.setattr("healthlens.config.settings._settings", None)

        assert get_settings().goals.ideal_bmi == 27

        implicit = analyze_weight(falling_weights, male_profile)
        explicit = analyze_weight(falling_weights, male_profile, settings=settings)
        assert implicit.goal.target_kg == pytest.approx(78.66)
        assert implicit == explicit


class TestAnalyzeWater:
    """Tests for analyze_water()."""

    def test_steady_intake(self, day, steady_water, male_profile, settings) -> None:
        bundle = analyze_water(steady_water, male_profile, today=day(14), settings=settings)

        # 90 kg male, moderate: 3550 mL, clamped to 14 cups of 250 mL
        assert bundle.goal.target_ml == 3500
        assert bundle.today.consumed_ml == 3500
        assert bundle.today.status == IntakeStatus.HIGH
        assert bundle.week.days_met == 7
        assert bundle.statistics.days_logged == 15
        assert bundle.trend.direction == Direction.FLAT

    def test_today_is_not_history(self, day, series, male_profile, settings) -> None:
        """A big partial today does not raise the goal through the history step."""
        intakes = series([1000.0] * 4) + [MeasurementPoint(day(4), 20000.0)]
        bundle = analyze_water(intakes, male_profile, today=day(4), settings=settings)
        assert bundle.goal.target_ml == 3250
        assert bundle.today.status == IntakeStatus.EXCESSIVE

    def test_nothing_logged_today(self, day, series, male_profile, settings) -> None:
        bundle = analyze_water(series([2000.0] * 3), male_profile, today=day(10), settings=settings)
        assert bundle.today.consumed_ml == 0.0
        assert bundle.today.status == IntakeStatus.LOW
        assert bundle.week.mean_ml == 0

    def test_hour_drives_tips(self, day, male_profile, settings) -> None:
        morning = analyze_water([], male_profile, today=day(0), hour=7, settings=settings)
        evening = analyze_water([], male_profile, today=day(0), hour=20, settings=settings)
        assert morning.tips != evening.tips


class TestAnalyzeMeals:
    """Tests for analyze_meals()."""

    def test_today_totals(self, day, on_target_meals, male_profile, settings) -> None:
        bundle = analyze_meals(on_target_meals, male_profile, today=day(14), settings=settings)

        assert bundle.goals.calories == 2375
        assert bundle.today_totals == MacroTotals(2375, 120, 290, 75)
        assert bundle.today.calories_pct == 100
        assert len(bundle.points) == 7
        assert bundle.week.days_on_target == 7

    def test_no_meals_today(self, day, on_target_meals, male_profile, settings) -> None:
        bundle = analyze_meals(on_target_meals, male_profile, today=day(20), settings=settings)
        assert bundle.today_totals is None
        assert bundle.today.status == IntakeStatus.LOW


class TestInputHash:
    """Tests for input_hash()."""

    def test_day_order_does_not_matter(self, day) -> None:
        a = [MeasurementPoint(day(0), 70.0), MeasurementPoint(day(1), 69.5)]
        assert input_hash("u1", a) == input_hash("u1", list(reversed(a)))

    def test_same_day_order_matters(self, day) -> None:
        """Same-day order decides last-write-wins, so it is part of the key."""
        a = [MeasurementPoint(day(0), 70.0), MeasurementPoint(day(0), 69.5)]
        assert input_hash("u1", a) != input_hash("u1", list(reversed(a)))

    def test_subject_and_profile_matter(self, series) -> None:
        logs = series([70.0, 70.5])
        assert input_hash("u1", logs) != input_hash("u2", logs)
        assert input_hash("u1", logs, Profile(age=30)) != input_hash("u1", logs, Profile(age=31))


class TestAnalysisCache:
    """Tests for AnalysisCache."""

    def test_hit_returns_same_result(self, falling_weights, male_profile, settings) -> None:
        cache = AnalysisCache()
        first = cache.get_or_compute("u1", analyze_weight, falling_weights, male_profile, settings=settings)
        second = cache.get_or_compute("u1", analyze_weight, falling_weights, male_profile, settings=settings)
        assert first is second
        assert len(cache) == 1

    def test_new_inputs_are_computed(self, falling_weights, male_profile, settings) -> None:
        cache = AnalysisCache()
        cache.get_or_compute("u1", analyze_weight, falling_weights, male_profile, settings=settings)
        cache.get_or_compute("u1", analyze_weight, falling_weights[:-1], male_profile, settings=settings)
        cache.get_or_compute("u2", analyze_weight, falling_weights, male_profile, settings=settings)
        assert len(cache) == 3

    def test_eviction(self, falling_weights, male_profile, settings) -> None:
        cache = AnalysisCache(max_entries=1)
        cache.get_or_compute("u1", analyze_weight, falling_weights, male_profile, settings=settings)
        cache.get_or_compute("u2", analyze_weight, falling_weights, male_profile, settings=settings)
        assert len(cache) == 1

    def test_hit_survives_concurrent_eviction(self, falling_weights, male_profile, settings) -> None:
        """An entry evicted between lookup and reordering is still returned."""

        class EvictedOnReorder(OrderedDict):
            def move_to_end(self, key, last=True):
                del self[key]
                raise KeyError(key)

        cache = AnalysisCache()
        first = cache.get_or_compute("u1", analyze_weight, falling_weights, male_profile, settings=settings)
        cache._entries = EvictedOnReorder(cache._entries)
        second = cache.get_or_compute("u1", analyze_weight, falling_weights, male_profile, settings=settings)
        assert second is first
        assert len(cache) == 0

    def test_clear(self, falling_weights, male_profile, settings) -> None:
        cache = AnalysisCache()
        cache.get_or_compute("u1", analyze_weight, falling_weights, male_profile, settings=settings)
        cache.clear()
        assert len(cache) == 0

    def test_invalid_size(self) -> None:
        with pytest.raises(ValueError):
            AnalysisCache(max_entries=0)
