"""Tests for cross-metric insights and the wellness score."""

from __future__ import annotations

import pytest
from datetime import date

from healthlens.engine import analyze_meals, analyze_water, analyze_weight
from healthlens.insights.composer import (
    InsightKind,
    Priority,
    WellnessBand,
    compose,
    nutrition_score,
    wellness_band,
)
from healthlens.tracking.models import MacroTotals, MeasurementPoint

TODAY = date(2025, 3, 15)


@pytest.fixture
def bundles(falling_weights, steady_water, on_target_meals, male_profile, settings):
    """Weight, water and meal bundles for a user losing weight on plan."""
    return (
        analyze_weight(falling_weights, male_profile, settings=settings),
        analyze_water(steady_water, male_profile, today=TODAY, settings=settings),
        analyze_meals(on_target_meals, male_profile, today=TODAY, settings=settings),
    )


class TestCompose:
    """Tests for compose()."""

    def test_on_plan_user(self, bundles) -> None:
        weight, water, meals = bundles
        report = compose(weight, water, meals)

        assert [i.kind for i in report.insights] == [
            InsightKind.CORRELATION,
            InsightKind.ACHIEVEMENT,
            InsightKind.TREND,
        ]
        assert [i.priority for i in report.insights] == [
            Priority.HIGH,
            Priority.MEDIUM,
            Priority.LOW,
        ]
        assert report.domain_scores == {"weight": 70, "hydration": 100, "nutrition": 100}
        assert report.wellness_score == 90
        assert report.wellness_band == WellnessBand.EXCELLENT

    def test_overeating_while_losing(self, bundles, male_profile, settings) -> None:
        weight, water, _ = bundles
        meals = analyze_meals(
            [MeasurementPoint(TODAY, MacroTotals(2800, 150, 300, 90))],
            male_profile,
            today=TODAY,
            settings=settings,
        )
        report = compose(weight, water, meals)
        titles = [i.title for i in report.insights]
        assert "Calories above target" in titles
        assert report.insights[0].priority == Priority.HIGH

    def test_evening_nudge_needs_hour(self, bundles, male_profile, settings) -> None:
        weight, _, meals = bundles
        water = analyze_water(
            [MeasurementPoint(TODAY, 500.0)], male_profile, today=TODAY, settings=settings
        )

        evening = compose(weight, water, meals, hour=20)
        undated = compose(weight, water, meals)

        assert "Catch up on hydration" in [i.title for i in evening.insights]
        assert "Catch up on hydration" not in [i.title for i in undated.insights]
        assert evening.domain_scores["hydration"] == 40
        assert evening.wellness_band == WellnessBand.GOOD

    def test_deterministic(self, bundles) -> None:
        assert compose(*bundles, hour=9) == compose(*bundles, hour=9)


class TestScores:
    """Tests for domain scores and bands."""

    @pytest.mark.parametrize(
        "score,band",
        [
            (95, WellnessBand.EXCELLENT),
            (90, WellnessBand.EXCELLENT),
            (80, WellnessBand.VERY_GOOD),
            (60, WellnessBand.GOOD),
            (59.9, WellnessBand.NEEDS_ATTENTION),
        ],
    )
    def test_wellness_band(self, score: float, band: WellnessBand) -> None:
        assert wellness_band(score) == band

    def test_nutrition_score(self, bundles, male_profile, settings) -> None:
        def score_for(kcal: float) -> int:
            meals = analyze_meals(
                [MeasurementPoint(TODAY, MacroTotals(kcal))], male_profile, today=TODAY, settings=settings
            )
            return nutrition_score(meals)

        # Goal is 2375 kcal
        assert score_for(2375) == 100
        assert score_for(2969) == 70
        assert score_for(3800) == 50
