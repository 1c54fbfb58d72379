"""Load measurement logs and profiles from files.

Log formats (CSV or JSON records):

    weight / water:  date,value
                     2025-01-15,82.4

    meals:           date,calories,protein_g,carbs_g,fat_g
                     2025-01-15,650,35,70,20

Rows keep their file order, which decides last-write-wins for same-day
weight entries. Non-finite values are passed through untouched; the
sanitizer is responsible for dropping them.

Profile files are YAML:

    profile:
      weight_kg: 82
      height_cm: 178
      age: 34
      sex: male
      activity_level: moderate
      objective: lose
    goals:
      weight_kg: 75
      water_cups: 10
      cup_ml: 300
      calories: 2200
    signals:
      temperature_c: 31

A ``questionnaire`` mapping of free-text answers may replace ``profile``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Optional

import pandas as pd
import yaml

from healthlens.goals.nutrition import ManualMacros
from healthlens.goals.water import ExternalSignals
from healthlens.profiles.body_calc import Profile
from healthlens.profiles.questionnaire import profile_from_answers
from healthlens.tracking.models import MacroTotals, MeasurementPoint

logger = logging.getLogger(__name__)

VALUE_COLUMNS = ["date", "value"]
MEAL_COLUMNS = ["date", "calories"]
OPTIONAL_MEAL_COLUMNS = ["protein_g", "carbs_g", "fat_g"]
PROFILE_FIELDS = ("weight_kg", "height_cm", "age", "sex", "activity_level", "objective")


@dataclass
class ProfileFile:
    """Everything a profile YAML file can carry."""

    profile: Profile
    manual_weight_kg: Optional[float] = None
    manual_water_cups: Optional[int] = None
    cup_ml: Optional[int] = None
    manual_macros: ManualMacros = field(default_factory=ManualMacros)
    signals: ExternalSignals = field(default_factory=ExternalSignals)


def _read_frame(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"Log file not found: {path}")
    if path.suffix.lower() == ".json":
        return pd.read_json(path, orient="records", convert_dates=False)
    return pd.read_csv(path)


def _require_columns(df: pd.DataFrame, required: list[str], path: Path) -> None:
    missing = set(required) - set(df.columns)
    if missing:
        raise ValueError(
            f"{path.name}: missing required columns: {sorted(missing)}. "
            f"Required columns are: {required}"
        )


def _parse_dates(df: pd.DataFrame, path: Path) -> pd.Series:
    parsed = pd.to_datetime(df["date"], errors="coerce")
    bad = int(parsed.isna().sum())
    if bad:
        logger.debug("%s: skipping %d rows with unparseable dates", path.name, bad)
    return parsed


def _optional_float(value: object) -> float:
    return 0.0 if pd.isna(value) else float(value)


def load_value_log(path: Path) -> list[MeasurementPoint]:
    """
    Load a single-value log (weight in kg or water intakes in mL).

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If required columns are missing
    """
    df = _read_frame(path)
    _require_columns(df, VALUE_COLUMNS, path)
    dates = _parse_dates(df, path)
    values = pd.to_numeric(df["value"], errors="coerce")

    points = []
    for day, value in zip(dates, values):
        if pd.isna(day):
            continue
        points.append(MeasurementPoint(date=day.date(), value=float(value)))
    return points


def load_meal_log(path: Path) -> list[MeasurementPoint]:
    """
    Load a meal log; missing macro columns count as zero grams.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If required columns are missing
    """
    df = _read_frame(path)
    _require_columns(df, MEAL_COLUMNS, path)
    dates = _parse_dates(df, path)
    for column in OPTIONAL_MEAL_COLUMNS:
        if column not in df.columns:
            df[column] = 0.0

    points = []
    for day, (_, row) in zip(dates, df.iterrows()):
        if pd.isna(day):
            continue
        calories = pd.to_numeric(row["calories"], errors="coerce")
        points.append(
            MeasurementPoint(
                date=day.date(),
                value=MacroTotals(
                    calories=float(calories),
                    protein_g=_optional_float(row["protein_g"]),
                    carbs_g=_optional_float(row["carbs_g"]),
                    fat_g=_optional_float(row["fat_g"]),
                ),
            )
        )
    return points


def load_profile(path: Path, today: Optional[date] = None) -> ProfileFile:
    """
    Load a profile YAML file.

    Args:
        path: YAML file path
        today: Reference date for a questionnaire ``birth_date``

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: On invalid enum strings or goal values
    """
    if not path.exists():
        raise FileNotFoundError(f"Profile file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    goals = data.get("goals", {}) or {}
    signals = data.get("signals", {}) or {}

    if "questionnaire" in data:
        birth = data.get("birth_date")
        profile = profile_from_answers(
            {str(k): str(v) for k, v in (data["questionnaire"] or {}).items()},
            today=today or date.today(),
            birth_date=date.fromisoformat(str(birth)) if birth else None,
            target_weight_kg=goals.get("weight_kg"),
        )
    else:
        raw = data.get("profile", {}) or {}
        unknown = set(raw) - set(PROFILE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown profile fields: {sorted(unknown)}")
        profile = Profile(**raw)

    return ProfileFile(
        profile=profile,
        manual_weight_kg=goals.get("weight_kg"),
        manual_water_cups=goals.get("water_cups"),
        cup_ml=goals.get("cup_ml"),
        manual_macros=ManualMacros(
            calories=goals.get("calories"),
            protein_g=goals.get("protein_g"),
            carbs_g=goals.get("carbs_g"),
            fat_g=goals.get("fat_g"),
        ),
        signals=ExternalSignals(ambient_temperature_c=signals.get("temperature_c")),
    )
