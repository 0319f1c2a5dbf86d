"""Energy expenditure and calorie targets.

BMR uses Mifflin-St Jeor with the male coefficient set only. Inputs are
imperial (pounds, feet'inches) as collected by the intake form; values
returned here are indicative, not clinical advice.
"""

from __future__ import annotations

import math
import re

from app.engine.models import (
    ActivityLevel,
    EnergyEstimate,
    Goal,
    Macros,
    NutritionCategoryKind,
    Profile,
)
from app.engine.normalizer import match_activity, normalize_goal
from app.engine.rules import DEFAULT_RULES, RuleSet

DEFAULT_WEIGHT_LBS = 180.0
DEFAULT_HEIGHT_INCHES = 70  # 5'10"
DEFAULT_AGE = 30
DEFAULT_ACTIVITY_MULTIPLIER = 1.55

ACTIVITY_MULTIPLIERS: dict[ActivityLevel, float] = {
    ActivityLevel.sedentary: 1.2,
    ActivityLevel.light: 1.375,
    ActivityLevel.moderate: 1.55,
    ActivityLevel.active: 1.725,
    ActivityLevel.very_active: 1.9,
}

AGGRESSIVE_CUT_TDEE = 2500

# Grams of protein per pound of bodyweight, by goal.
PROTEIN_PER_LB: dict[Goal, float] = {
    Goal.fat_loss: 1.2,
    Goal.muscle_gain: 1.0,
}
DEFAULT_PROTEIN_PER_LB = 1.1
MIN_CARBS_G = 50

_HEIGHT_RE = re.compile(r"(\d+)\s*(?:'|ft|feet|\s)\s*(\d+)?")
_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def parse_weight(value: str | float | None) -> float:
    """Pounds from "185", "185 lbs" or a number. Default 180."""
    if value is None:
        return DEFAULT_WEIGHT_LBS
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value) if value > 0 else DEFAULT_WEIGHT_LBS
    match = _NUMBER_RE.search(str(value))
    if match is None:
        return DEFAULT_WEIGHT_LBS
    weight = float(match.group(0))
    return weight if weight > 0 else DEFAULT_WEIGHT_LBS


def parse_height(value: str | None) -> tuple[int, int]:
    """(feet, inches) from 5'10", 5' 10, 5ft 10in or 6'. Default 5'10"."""
    if not value:
        return divmod(DEFAULT_HEIGHT_INCHES, 12)
    match = _HEIGHT_RE.search(value.strip())
    if match is None:
        return divmod(DEFAULT_HEIGHT_INCHES, 12)
    feet = int(match.group(1))
    inches = int(match.group(2)) if match.group(2) else 0
    if feet == 0:
        return divmod(DEFAULT_HEIGHT_INCHES, 12)
    return feet, inches


def compute_bmr(weight_lbs: float, feet: int, inches: int, age: int) -> float:
    """Mifflin-St Jeor (male): 10·kg + 6.25·cm − 5·age + 5, inputs clamped."""
    weight = _clamp(weight_lbs, 50, 500)
    feet = int(_clamp(feet, 3, 8))
    inches = int(_clamp(inches, 0, 11))
    age = int(_clamp(age, 13, 120))

    weight_kg = weight * 0.453592
    height_cm = (feet * 12 + inches) * 2.54
    return 10 * weight_kg + 6.25 * height_cm - 5 * age + 5


def activity_multiplier(level: ActivityLevel | None) -> float:
    if level is None:
        return DEFAULT_ACTIVITY_MULTIPLIER
    return ACTIVITY_MULTIPLIERS.get(level, DEFAULT_ACTIVITY_MULTIPLIER)


def compute_tdee(bmr: float, level: ActivityLevel | None) -> int:
    return round_half_up(bmr * activity_multiplier(level))


def goal_adjustment(
    tdee: int,
    goal: Goal,
    level: ActivityLevel | None,
) -> tuple[int, NutritionCategoryKind]:
    """Target calories and nutrition category kind for a goal."""
    if goal == Goal.fat_loss:
        if tdee > AGGRESSIVE_CUT_TDEE:
            return tdee - 750, NutritionCategoryKind.fat_loss_aggressive
        return tdee - 500, NutritionCategoryKind.fat_loss_moderate
    if goal == Goal.muscle_gain:
        if level in (ActivityLevel.active, ActivityLevel.very_active):
            return tdee + 500, NutritionCategoryKind.muscle_building_mass
        return tdee + 300, NutritionCategoryKind.muscle_building_lean
    return tdee, NutritionCategoryKind.recomposition


def compute_macros(weight_lbs: float, target_calories: int, goal: Goal) -> Macros:
    """Protein by bodyweight, fat at 25% of calories, carbs the remainder."""
    weight = _clamp(weight_lbs, 50, 500)
    protein = round_half_up(weight * PROTEIN_PER_LB.get(goal, DEFAULT_PROTEIN_PER_LB))
    fats = round_half_up(target_calories * 0.25 / 9)
    carbs = round_half_up((target_calories - protein * 4 - fats * 9) / 4)
    return Macros(protein_g=protein, carbs_g=max(carbs, MIN_CARBS_G), fats_g=fats)


def estimate_energy(
    *,
    weight: str | float | None,
    height: str | None,
    age: int | None,
    activity: ActivityLevel | None,
    goal: Goal,
    rules: RuleSet = DEFAULT_RULES,
) -> EnergyEstimate:
    weight_lbs = parse_weight(weight)
    feet, inches = parse_height(height)
    years = age if age and age > 0 else DEFAULT_AGE

    bmr = compute_bmr(weight_lbs, feet, inches, years)
    tdee = compute_tdee(bmr, activity)
    target, kind = goal_adjustment(tdee, goal, activity)

    return EnergyEstimate(
        bmr=round_half_up(bmr),
        tdee=tdee,
        target_calories=target,
        recommended_kind=kind,
        recommended_category_name=rules.nutrition_names.get(kind, kind.value),
        macros=compute_macros(weight_lbs, target, goal),
    )


def estimate_for_profile(profile: Profile, rules: RuleSet = DEFAULT_RULES) -> EnergyEstimate:
    return estimate_energy(
        weight=profile.weight,
        height=profile.height,
        age=profile.age,
        activity=match_activity(profile.activity_level),
        goal=normalize_goal(profile.goal),
        rules=rules,
    )
