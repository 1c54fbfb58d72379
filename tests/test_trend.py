"""Tests for windowed linear-trend analysis."""

from __future__ import annotations

import math

import pytest

from healthlens.tracking.models import (
    UNKNOWN_ETA_DAYS,
    Consistency,
    Direction,
    MeasurementPoint,
    Velocity,
)
from healthlens.tracking.trend import (
    CALORIE_THRESHOLDS,
    WATER_THRESHOLDS,
    WEIGHT_THRESHOLDS,
    analyze_trend,
    classify_consistency,
    classify_direction,
    classify_velocity,
    confidence_score,
    fit_line,
    next_milestone,
)


class TestFitLine:
    """Tests for the least-squares fit."""

    def test_perfect_line(self) -> None:
        intercept, slope, r2 = fit_line([0, 1, 2, 3], [1.0, 3.0, 5.0, 7.0])
        assert intercept == pytest.approx(1.0)
        assert slope == pytest.approx(2.0)
        assert r2 == pytest.approx(1.0)

    def test_zero_variance_gives_zero_r_squared(self) -> None:
        """A flat series has R² = 0, never NaN."""
        _, slope, r2 = fit_line([0, 1, 2, 3, 4], [70.0] * 5)
        assert slope == 0.0
        assert r2 == 0.0

    def test_single_point(self) -> None:
        intercept, slope, r2 = fit_line([0], [70.0])
        assert (intercept, slope, r2) == (70.0, 0.0, 0.0)


class TestClassification:
    """Tests for direction, velocity and consistency classes."""

    def test_direction_thresholds(self) -> None:
        assert classify_direction(0.05, [0.1, 0.1]) == Direction.FLAT
        assert classify_direction(0.5, [0.1, 0.1]) == Direction.RISING
        assert classify_direction(-0.5, [-0.1, -0.1]) == Direction.FALLING

    def test_balanced_deltas_are_oscillating(self) -> None:
        """Up and down counts within one of each other override the slope."""
        assert classify_direction(0.5, [1.0, -1.0, 1.0]) == Direction.OSCILLATING

    def test_one_sided_deltas_are_not_oscillating(self) -> None:
        assert classify_direction(0.5, [1.0, 1.0, 1.0, -0.2]) == Direction.RISING

    def test_velocity(self) -> None:
        assert classify_velocity(0.2) == Velocity.SLOW
        assert classify_velocity(-0.5) == Velocity.MODERATE
        assert classify_velocity(1.2) == Velocity.FAST

    def test_consistency(self) -> None:
        assert classify_consistency(0.9, 0.1) == Consistency.CONSISTENT
        assert classify_consistency(0.5, 0.1) == Consistency.IRREGULAR
        assert classify_consistency(0.9, 0.5) == Consistency.IRREGULAR
        assert classify_consistency(0.2, 0.1) == Consistency.VERY_IRREGULAR
        assert classify_consistency(0.9, 1.5) == Consistency.VERY_IRREGULAR


class TestConfidenceScore:
    """Tests for confidence_score()."""

    def test_maximum(self) -> None:
        assert confidence_score(30, 1.0, Consistency.CONSISTENT) == 100

    def test_non_decreasing_in_r_squared(self) -> None:
        scores = [
            confidence_score(10, r2 / 10, Consistency.CONSISTENT) for r2 in range(11)
        ]
        assert scores == sorted(scores)

    def test_sample_size_saturates_at_thirty(self) -> None:
        assert confidence_score(60, 0.5, Consistency.IRREGULAR) == confidence_score(
            30, 0.5, Consistency.IRREGULAR
        )

    def test_non_finite_is_zero(self) -> None:
        assert confidence_score(10, math.nan, Consistency.CONSISTENT) == 0


class TestNextMilestone:
    """Tests for next_milestone()."""

    def test_already_at_target(self) -> None:
        milestone = next_milestone(70.0, 70.0, -0.1, 60, 0.2)
        assert milestone.eta_days == 0
        assert milestone.probability == 60.0

    def test_reachable(self) -> None:
        """Moving toward the target at 0.2/day covers 2 kg in 10 days."""
        milestone = next_milestone(72.0, 70.0, -0.2, 80, 0.1)
        assert milestone.eta_days == 10
        assert milestone.probability == 80.0

    def test_moving_away_is_unreachable(self) -> None:
        milestone = next_milestone(72.0, 70.0, 0.2, 80, 0.1)
        assert milestone.eta_days == UNKNOWN_ETA_DAYS
        assert milestone.probability == 80.0

    def test_low_confidence_is_unreachable(self) -> None:
        milestone = next_milestone(72.0, 70.0, -0.2, 20, 0.1)
        assert milestone.eta_days == UNKNOWN_ETA_DAYS

    def test_volatility_penalty(self) -> None:
        """Volatility 0.8 is 0.5 above the allowance: 15 points off."""
        milestone = next_milestone(72.0, 70.0, 0.2, 50, 0.8)
        assert milestone.probability == pytest.approx(35.0)

    def test_penalty_floors_at_zero(self) -> None:
        milestone = next_milestone(72.0, 70.0, 0.2, 10, 5.0)
        assert milestone.probability == 0.0


class TestAnalyzeTrend:
    """Tests for analyze_trend()."""

    def test_fewer_than_five_points(self, series) -> None:
        result = analyze_trend(series([70.0, 70.5, 71.0, 71.5]), target=75.0)
        assert result.direction == Direction.FLAT
        assert result.confidence == 0
        assert result.next_milestone.eta_days == UNKNOWN_ETA_DAYS
        assert result.next_milestone.value == 75.0

    def test_constant_series(self, series) -> None:
        result = analyze_trend(series([70.0] * 10))
        assert result.slope_per_day == 0.0
        assert result.direction == Direction.FLAT
        assert result.velocity == Velocity.SLOW
        assert result.r_squared == 0.0

    def test_weight_gain_scenario(self, series) -> None:
        """Six days gaining about 0.27 kg/day is a fast rise."""
        result = analyze_trend(series([70.0, 70.2, 70.5, 70.8, 71.1, 71.3]))
        assert result.direction == Direction.RISING
        assert result.velocity == Velocity.FAST
        assert result.confidence > 0
        assert result.slope_per_week == pytest.approx(1.9, abs=0.01)

    def test_monotonic_series(self, series) -> None:
        """A constant-step rise is rising, consistent and well fitted."""
        result = analyze_trend(series([60.0 + 0.5 * i for i in range(12)]))
        assert result.direction == Direction.RISING
        assert result.consistency == Consistency.CONSISTENT
        assert result.r_squared == pytest.approx(1.0)
        assert result.slope_per_day == pytest.approx(0.5)

    def test_confidence_grows_with_history(self, series) -> None:
        """More points on the same line never lower the confidence."""
        short = analyze_trend(series([60.0 + 0.5 * i for i in range(10)]))
        long = analyze_trend(series([60.0 + 0.5 * i for i in range(20)]))
        assert long.confidence >= short.confidence

    def test_gaps_stretch_the_x_axis(self, day) -> None:
        """Slope is per calendar day, not per logged point."""
        points = [MeasurementPoint(day(2 * i), 80.0 - 0.4 * i) for i in range(6)]
        result = analyze_trend(points)
        assert result.slope_per_day == pytest.approx(-0.2)

    def test_window_uses_last_thirty_points(self, series) -> None:
        """An old opposite trend outside the window does not affect the slope."""
        old = [100.0 - i for i in range(20)]
        recent = [80.0 + 0.1 * i for i in range(30)]
        result = analyze_trend(series(old + recent))
        assert result.slope_per_day == pytest.approx(0.1)

    def test_milestone_toward_target(self, series) -> None:
        points = series([70.0 + 0.2 * i for i in range(14)])
        result = analyze_trend(points, target=75.0)
        assert result.next_milestone.value == 75.0
        assert result.next_milestone.eta_days == 12
        assert result.next_milestone.probability == result.confidence

    def test_oscillating_series(self, series) -> None:
        result = analyze_trend(series([70.0, 71.0, 70.0, 71.0, 70.0, 71.0, 70.0, 71.0]))
        assert result.direction == Direction.OSCILLATING


class TestScaledThresholds:
    """Tests for per-unit threshold scaling."""

    def test_water_thresholds_are_in_millilitres(self) -> None:
        assert WATER_THRESHOLDS.flat_per_week == pytest.approx(100.0)
        assert WATER_THRESHOLDS.fast_per_week == pytest.approx(800.0)
        assert WATER_THRESHOLDS.irregular_variance == pytest.approx(300_000.0)

    def test_calorie_thresholds(self) -> None:
        assert CALORIE_THRESHOLDS.moderate_per_week == pytest.approx(30.0)
        assert CALORIE_THRESHOLDS.volatility_penalty == pytest.approx(0.3)

    def test_same_shape_across_units(self, series) -> None:
        """A water series classifies like the equivalent weight series."""
        kg = series([2.0 + 0.1 * i for i in range(10)])
        ml = series([2000.0 + 100.0 * i for i in range(10)])
        by_kg = analyze_trend(kg, thresholds=WEIGHT_THRESHOLDS)
        by_ml = analyze_trend(ml, thresholds=WATER_THRESHOLDS)
        assert by_kg.direction == by_ml.direction
        assert by_kg.velocity == by_ml.velocity
        assert by_kg.consistency == by_ml.consistency
