"""Build a Profile from free-text questionnaire answers.

Answers are stored as ``{question: answer}`` strings. Numbers may use a
decimal comma, and values outside a plausible range are treated as missing
rather than rejected, so a typo degrades to default targets instead of an
error. Both English and Portuguese keywords are recognised.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from healthlens.profiles.body_calc import ActivityLevel, Objective, Profile, Sex

WEIGHT_KEYS = ("Weight (kg)", "Current weight (kg)", "Peso (kg)", "Peso atual (kg)")
HEIGHT_KEYS = ("Height (cm)", "Altura (cm)")
AGE_KEYS = ("Age", "Idade")
SEX_KEYS = ("Sex", "Sexo")
ACTIVITY_KEYS = (
    "Activity level",
    "Physical activity",
    "Training frequency",
    "Nível de atividade física",
    "Atividade física",
    "Frequência de treinos",
)
OBJECTIVE_KEYS = (
    "Objective",
    "Goal",
    "Main goal",
    "Objetivo",
    "Meta",
    "Objetivo principal",
    "Objetivo nutricional",
)

WEIGHT_RANGE = (20, 300)
HEIGHT_RANGE = (100, 250)
AGE_RANGE = (10, 120)

# Checked in order; the first matching keyword wins. Bare "very" or "muito"
# only count once no lighter level has matched ("very light", "muito pouco").
ACTIVITY_KEYWORDS = [
    (ActivityLevel.SEDENTARY, ("sedentary", "none", "sedentário", "nenhuma", "parado")),
    (ActivityLevel.LIGHT, ("light", "1-2", "leve", "pouco")),
    (ActivityLevel.MODERATE, ("moderate", "3-4", "regular", "moderado")),
    (ActivityLevel.VERY_INTENSE, ("very intense", "very high", "muito intenso", "muito alto")),
    (ActivityLevel.INTENSE, ("intense", "5-6", "high", "intenso", "alto")),
    (ActivityLevel.VERY_INTENSE, ("very", "athlete", "professional", "daily", "muito", "atleta", "profissional", "diário")),
]

OBJECTIVE_KEYWORDS = [
    (Objective.LOSE, ("lose", "reduce", "cut", "perder", "emagrecer", "reduzir", "diminuir")),
    (Objective.GAIN, ("gain", "bulk", "muscle", "ganhar", "massa", "aumentar", "hipertrofia")),
    (Objective.MAINTAIN, ("maintain", "keep", "manter", "manutenção", "estabilizar")),
]

# Weight gap (kg) below which a target weight counts as maintenance
SIGNIFICANT_GAP_KG = 2.0


def _first_answer(answers: dict[str, str], keys: tuple[str, ...]) -> str:
    for key in keys:
        value = answers.get(key)
        if value:
            return value
    return ""


def parse_number(raw: Optional[str], low: float, high: float) -> Optional[float]:
    """Parse ``raw`` as a number within [low, high], else None."""
    if not raw:
        return None
    try:
        value = float(raw.strip().replace(",", "."))
    except ValueError:
        return None
    return value if low <= value <= high else None


def age_from_birth_date(birth_date: Optional[date], today: date) -> Optional[int]:
    """Age in whole years at ``today``, or None if implausible."""
    if birth_date is None:
        return None
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age if AGE_RANGE[0] <= age <= AGE_RANGE[1] else None


def infer_sex(raw: str) -> Optional[Sex]:
    text = raw.strip().lower()
    if not text:
        return None
    if any(word in text for word in ("female", "woman", "feminino", "mulher")) or text == "f":
        return Sex.FEMALE
    if any(word in text for word in ("male", "man", "masculino", "homem")) or text == "m":
        return Sex.MALE
    return None


def infer_activity_level(raw: str) -> ActivityLevel:
    """Keyword match on the activity answer; moderate when unknown."""
    text = raw.lower()
    for level, keywords in ACTIVITY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return level
    return ActivityLevel.MODERATE


def infer_objective(
    raw: str,
    current_weight_kg: Optional[float] = None,
    target_weight_kg: Optional[float] = None,
) -> Objective:
    """Keyword match on the objective answer, else infer from target weight."""
    text = raw.lower()
    for objective, keywords in OBJECTIVE_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return objective

    if current_weight_kg and target_weight_kg and current_weight_kg > 0 and target_weight_kg > 0:
        if abs(target_weight_kg - current_weight_kg) > SIGNIFICANT_GAP_KG:
            return Objective.LOSE if target_weight_kg < current_weight_kg else Objective.GAIN

    return Objective.MAINTAIN


def profile_from_answers(
    answers: dict[str, str],
    today: date,
    birth_date: Optional[date] = None,
    target_weight_kg: Optional[float] = None,
) -> Profile:
    """
    Build a Profile from questionnaire answers.

    Args:
        answers: Question text mapped to the answer text
        today: Reference date for computing age from ``birth_date``
        birth_date: Account birth date; preferred over the "Age" answer
        target_weight_kg: Account target weight, used to infer the objective

    Returns:
        Profile with unparseable or out-of-range fields left as None
    """
    weight = parse_number(_first_answer(answers, WEIGHT_KEYS), *WEIGHT_RANGE)
    height = parse_number(_first_answer(answers, HEIGHT_KEYS), *HEIGHT_RANGE)

    age: Optional[int] = age_from_birth_date(birth_date, today)
    if age is None:
        parsed_age = parse_number(_first_answer(answers, AGE_KEYS), *AGE_RANGE)
        age = int(parsed_age) if parsed_age is not None else None

    return Profile(
        weight_kg=weight,
        height_cm=height,
        age=age,
        sex=infer_sex(_first_answer(answers, SEX_KEYS)),
        activity_level=infer_activity_level(_first_answer(answers, ACTIVITY_KEYS)),
        objective=infer_objective(
            _first_answer(answers, OBJECTIVE_KEYS), weight, target_weight_kg
        ),
    )
