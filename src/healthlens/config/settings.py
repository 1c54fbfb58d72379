"""Application settings and configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from healthlens.tracking.trend import (
    CALORIE_THRESHOLDS,
    WATER_THRESHOLDS,
    WEIGHT_THRESHOLDS,
    TrendThresholds,
)

VALID_OUTPUT_FORMATS = ("table", "json")
TREND_METRICS = ("weight", "water", "calories")
THRESHOLD_FIELDS = (
    "flat_per_week",
    "moderate_per_week",
    "fast_per_week",
    "irregular_variance",
    "very_irregular_variance",
    "volatility_allowance",
    "volatility_penalty",
)


def _default_config_dir() -> Path:
    """Return the default configuration directory."""
    return Path.home() / ".healthlens"


@dataclass
class TrendConfig:
    """Per-metric trend classification thresholds."""

    weight: TrendThresholds = WEIGHT_THRESHOLDS
    water: TrendThresholds = WATER_THRESHOLDS
    calories: TrendThresholds = CALORIE_THRESHOLDS


@dataclass
class GoalsConfig:
    """Adaptive weight goal configuration."""

    ideal_bmi: float = 22.5
    max_change_fraction: float = 0.10  # max goal shift per cycle, share of current weight
    max_weekly_rate_kg: float = 0.8
    goal_tolerance_kg: float = 1.0


@dataclass
class WaterConfig:
    """Hydration goal configuration."""

    default_cup_ml: int = 250
    fallback_target_ml: int = 2000


@dataclass
class DefaultsConfig:
    """Default values for various operations."""

    output_format: str = "table"  # "table", "json"


@dataclass
class Settings:
    """Main application settings."""

    trend: TrendConfig = field(default_factory=TrendConfig)
    goals: GoalsConfig = field(default_factory=GoalsConfig)
    water: WaterConfig = field(default_factory=WaterConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from YAML file or return defaults.

        Args:
            config_path: Path to config.yaml. If None, uses ~/.healthlens/config.yaml

        Returns:
            Settings instance
        """
        if config_path is None:
            config_path = _default_config_dir() / "config.yaml"

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        """Build settings from a parsed YAML mapping, keeping defaults for gaps."""
        settings = cls()

        # Parse trend thresholds, metric by metric
        if "trend" in data:
            trend_data = data["trend"] or {}
            for metric in TREND_METRICS:
                if metric in trend_data:
                    base: TrendThresholds = getattr(settings.trend, metric)
                    overrides = {
                        key: float(value)
                        for key, value in (trend_data[metric] or {}).items()
                        if key in THRESHOLD_FIELDS
                    }
                    values = {key: getattr(base, key) for key in THRESHOLD_FIELDS}
                    values.update(overrides)
                    setattr(settings.trend, metric, TrendThresholds(**values))

        # Parse goals config
        if "goals" in data:
            goals_data = data["goals"] or {}
            if "ideal_bmi" in goals_data:
                settings.goals.ideal_bmi = float(goals_data["ideal_bmi"])
            if "max_change_fraction" in goals_data:
                settings.goals.max_change_fraction = float(goals_data["max_change_fraction"])
            if "max_weekly_rate_kg" in goals_data:
                settings.goals.max_weekly_rate_kg = float(goals_data["max_weekly_rate_kg"])
            if "goal_tolerance_kg" in goals_data:
                settings.goals.goal_tolerance_kg = float(goals_data["goal_tolerance_kg"])

        # Parse water config
        if "water" in data:
            water_data = data["water"] or {}
            if "default_cup_ml" in water_data:
                cup = int(water_data["default_cup_ml"])
                if cup <= 0:
                    raise ValueError(f"default_cup_ml must be positive, got {cup}")
                settings.water.default_cup_ml = cup
            if "fallback_target_ml" in water_data:
                settings.water.fallback_target_ml = int(water_data["fallback_target_ml"])

        # Parse defaults
        if "defaults" in data:
            def_data = data["defaults"] or {}
            if "output_format" in def_data:
                output_format = def_data["output_format"]
                if output_format not in VALID_OUTPUT_FORMATS:
                    raise ValueError(
                        f"output_format must be one of {VALID_OUTPUT_FORMATS}, "
                        f"got '{output_format}'"
                    )
                settings.defaults.output_format = output_format

        return settings

    def to_dict(self) -> dict:
        """Serialize settings to the YAML layout read by ``from_dict``."""
        return {
            "trend": {
                metric: {
                    key: getattr(getattr(self.trend, metric), key)
                    for key in THRESHOLD_FIELDS
                }
                for metric in TREND_METRICS
            },
            "goals": {
                "ideal_bmi": self.goals.ideal_bmi,
                "max_change_fraction": self.goals.max_change_fraction,
                "max_weekly_rate_kg": self.goals.max_weekly_rate_kg,
                "goal_tolerance_kg": self.goals.goal_tolerance_kg,
            },
            "water": {
                "default_cup_ml": self.water.default_cup_ml,
                "fallback_target_ml": self.water.fallback_target_ml,
            },
            "defaults": {
                "output_format": self.defaults.output_format,
            },
        }

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save current settings to YAML file.

        Args:
            config_path: Path to save config.yaml. If None, uses ~/.healthlens/config.yaml
        """
        if config_path is None:
            config_path = _default_config_dir() / "config.yaml"

        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, loading from disk if needed."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings(config_path: Optional[Path] = None) -> Settings:
    """Force reload settings from disk."""
    global _settings
    _settings = Settings.load(config_path)
    return _settings
