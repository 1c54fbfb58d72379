"""Pytest fixtures for healthlens tests."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from healthlens.config.settings import Settings
from healthlens.profiles.body_calc import Profile
from healthlens.tracking.models import MacroTotals, MeasurementPoint

START = date(2025, 3, 1)


def _day(offset: int) -> date:
    return START + timedelta(days=offset)


def _series(values: list[float], start: int = 0) -> list[MeasurementPoint]:
    return [MeasurementPoint(_day(start + i), v) for i, v in enumerate(values)]


@pytest.fixture
def day():
    """Calendar day ``offset`` days after the fixed start date."""
    return _day


@pytest.fixture
def series():
    """Builder for consecutive daily points starting at ``day(start)``."""
    return _series


@pytest.fixture
def settings():
    """Default settings, independent of any config file on disk."""
    return Settings()


@pytest.fixture
def male_profile():
    """Complete profile: 90 kg, 180 cm, 35 y, moderate activity, losing weight."""
    return Profile(
        weight_kg=90.0,
        height_cm=180.0,
        age=35,
        sex="male",
        activity_level="moderate",
        objective="lose",
    )


@pytest.fixture
def falling_weights():
    """14 days losing exactly 0.2 kg/day from 90 kg."""
    return _series([round(90.0 - 0.2 * i, 1) for i in range(14)])


@pytest.fixture
def steady_water():
    """Two 1750 mL intakes a day for 15 days (day 14 is 'today')."""
    intakes = []
    for i in range(15):
        intakes.append(MeasurementPoint(_day(i), 1750.0))
        intakes.append(MeasurementPoint(_day(i), 1750.0))
    return intakes


@pytest.fixture
def on_target_meals():
    """Two meals a day totalling 2375 kcal for days 8-14."""
    meals = []
    for i in range(8, 15):
        meals.append(MeasurementPoint(_day(i), MacroTotals(1200, 60, 150, 40)))
        meals.append(MeasurementPoint(_day(i), MacroTotals(1175, 60, 140, 35)))
    return meals
