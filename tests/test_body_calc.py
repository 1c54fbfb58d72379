"""Tests for BMI, BMR/TDEE and nutrition target calculations."""

from __future__ import annotations

import pytest

from healthlens.profiles.body_calc import (
    ActivityLevel,
    HealthStatus,
    Objective,
    Profile,
    Sex,
    calculate_bmi,
    calculate_bmr,
    calculate_targets,
    calculate_tdee,
    classify_bmi,
    recommended_water_ml,
    targets_to_dict,
)


class TestProfile:
    """Tests for Profile parsing and completeness."""

    def test_parses_strings(self) -> None:
        profile = Profile(sex="Female", activity_level="light", objective="gain")
        assert profile.sex == Sex.FEMALE
        assert profile.activity_level == ActivityLevel.LIGHT
        assert profile.objective == Objective.GAIN

    def test_invalid_enum_string(self) -> None:
        with pytest.raises(ValueError, match="activity_level"):
            Profile(activity_level="couch")

    def test_defaults(self) -> None:
        profile = Profile()
        assert profile.activity_level == ActivityLevel.MODERATE
        assert profile.objective == Objective.MAINTAIN
        assert profile.bmi is None
        assert not profile.is_complete

    def test_missing_sex_is_incomplete(self) -> None:
        assert not Profile(weight_kg=70, height_cm=170, age=30).is_complete
        assert Profile(weight_kg=70, height_cm=170, age=30, sex="male").is_complete


class TestBMI:
    """Tests for BMI and health status."""

    def test_calculate(self) -> None:
        assert calculate_bmi(110, 170) == pytest.approx(38.06, abs=0.01)

    def test_missing_values(self) -> None:
        assert calculate_bmi(None, 170) is None
        assert calculate_bmi(70, 0) is None

    @pytest.mark.parametrize(
        "bmi,status",
        [
            (17.0, HealthStatus.UNDERWEIGHT),
            (18.5, HealthStatus.HEALTHY),
            (24.9, HealthStatus.HEALTHY),
            (25.0, HealthStatus.OVERWEIGHT),
            (30.0, HealthStatus.OBESITY),
        ],
    )
    def test_classify(self, bmi: float, status: HealthStatus) -> None:
        assert classify_bmi(bmi) == status


class TestEnergy:
    """Tests for BMR and TDEE."""

    def test_bmr_male(self) -> None:
        """80 kg, 180 cm, 30 y male: 800 + 1125 - 150 + 5."""
        assert calculate_bmr(30, Sex.MALE, 180, 80) == pytest.approx(1780)

    def test_bmr_female(self) -> None:
        """60 kg, 165 cm, 30 y female: 600 + 1031.25 - 150 - 161."""
        assert calculate_bmr(30, Sex.FEMALE, 165, 60) == pytest.approx(1320.25)

    def test_tdee(self) -> None:
        assert calculate_tdee(1780, ActivityLevel.MODERATE) == pytest.approx(2759)

    def test_water_recommendation(self) -> None:
        assert recommended_water_ml(80, Sex.MALE, ActivityLevel.MODERATE) == 3200
        assert recommended_water_ml(60, Sex.FEMALE, ActivityLevel.SEDENTARY) == 1800

    def test_water_recommendation_is_capped(self) -> None:
        assert recommended_water_ml(150, Sex.MALE, ActivityLevel.VERY_INTENSE) == 4000


class TestCalculateTargets:
    """Tests for calculate_targets()."""

    def test_complete_profile(self) -> None:
        profile = Profile(
            weight_kg=80, height_cm=180, age=30, sex="male", activity_level="moderate"
        )
        targets = calculate_targets(profile)

        assert targets.calculated
        assert targets.bmr == 1780
        assert targets.tdee == 2759
        assert targets.calories == 2759
        assert targets.protein_g == 128
        assert targets.fat_g == 77
        assert targets.carbs_g == 389
        assert targets.water_ml == 3200

    def test_objective_adjusts_calories(self) -> None:
        base = dict(weight_kg=80, height_cm=180, age=30, sex="male")
        maintain = calculate_targets(Profile(**base))
        lose = calculate_targets(Profile(**base, objective="lose"))
        gain = calculate_targets(Profile(**base, objective="gain"))
        assert lose.calories == maintain.calories - 500
        assert gain.calories == maintain.calories + 300

    def test_athletes_get_more_protein(self) -> None:
        profile = Profile(
            weight_kg=80, height_cm=180, age=30, sex="male", activity_level="intense"
        )
        assert calculate_targets(profile).protein_g == 160

    def test_macro_floors(self) -> None:
        """A very light profile still gets the minimum protein."""
        profile = Profile(
            weight_kg=25, height_cm=120, age=11, sex="female", activity_level="sedentary"
        )
        targets = calculate_targets(profile)
        assert targets.protein_g >= 50
        assert targets.fat_g >= 30
        assert targets.carbs_g >= 50

    def test_incomplete_profile_uses_defaults(self) -> None:
        targets = calculate_targets(Profile(weight_kg=80))
        assert not targets.calculated
        assert (targets.calories, targets.protein_g, targets.carbs_g, targets.fat_g) == (
            2000,
            150,
            250,
            65,
        )
        assert targets.water_ml == 2000
        assert targets.bmr is None

    def test_to_dict(self) -> None:
        data = targets_to_dict(calculate_targets(Profile()))
        assert data["calories"] == 2000
        assert data["reference"]["calculated"] is False
