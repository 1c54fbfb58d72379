"""Tests for YAML settings."""

from __future__ import annotations

import pytest
import yaml

from healthlens.config.settings import Settings, reload_settings
from healthlens.tracking.trend import WATER_THRESHOLDS, WEIGHT_THRESHOLDS


class TestSettings:
    """Tests for Settings loading and saving."""

    def test_missing_file_gives_defaults(self, tmp_path) -> None:
        settings = Settings.load(tmp_path / "missing.yaml")
        assert settings.goals.ideal_bmi == 22.5
        assert settings.water.default_cup_ml == 250
        assert settings.trend.weight == WEIGHT_THRESHOLDS
        assert settings.trend.water == WATER_THRESHOLDS

    def test_partial_overrides(self) -> None:
        settings = Settings.from_dict({
            "goals": {"ideal_bmi": 23},
            "trend": {"weight": {"fast_per_week": 1.0}},
            "water": {"default_cup_ml": 300},
        })
        assert settings.goals.ideal_bmi == 23.0
        assert settings.goals.max_change_fraction == 0.10
        assert settings.trend.weight.fast_per_week == 1.0
        assert settings.trend.weight.flat_per_week == 0.1
        assert settings.water.default_cup_ml == 300

    def test_invalid_cup(self) -> None:
        with pytest.raises(ValueError, match="default_cup_ml"):
            Settings.from_dict({"water": {"default_cup_ml": 0}})

    def test_invalid_output_format(self) -> None:
        with pytest.raises(ValueError, match="output_format"):
            Settings.from_dict({"defaults": {"output_format": "xml"}})

    def test_save_and_reload(self, tmp_path) -> None:
        path = tmp_path / "config.yaml"
        settings = Settings()
        settings.goals.goal_tolerance_kg = 0.5
        settings.save(path)

        with open(path) as f:
            assert yaml.safe_load(f)["goals"]["goal_tolerance_kg"] == 0.5

        reloaded = reload_settings(path)
        assert reloaded.goals.goal_tolerance_kg == 0.5
        assert reloaded.trend.calories == settings.trend.calories
