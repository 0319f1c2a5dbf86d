"""Profile normalization — free-form intake text to canonical enums.

Pure functions, never raise. Absent or unrecognized input falls back to
the most conservative value.
"""

from __future__ import annotations

from app.engine.models import (
    ActivityLevel,
    BodyComposition,
    ExperienceLevel,
    Goal,
    NormalizedProfile,
    Profile,
)

# Checked in order; first vocabulary with a substring hit wins.
_EXPERIENCE_VOCAB: list[tuple[ExperienceLevel, tuple[str, ...]]] = [
    (ExperienceLevel.beginner, ("never", "0-1", "beginner", "none", "new to")),
    (ExperienceLevel.intermediate, ("1-3", "intermediate", "some")),
    (ExperienceLevel.advanced, ("3+", "advanced", "expert")),
]

_ACTIVITY_VOCAB: list[tuple[ActivityLevel, tuple[str, ...]]] = [
    (ActivityLevel.sedentary, ("sedentary", "desk", "inactive", "not very", "not active")),
    (ActivityLevel.very_active, ("very active", "very_active", "extremely", "athlete")),
    (ActivityLevel.moderate, ("moderate",)),
    (ActivityLevel.light, ("light",)),
    (ActivityLevel.active, ("active",)),
]

_BODY_VOCAB: list[tuple[BodyComposition, tuple[str, ...]]] = [
    (BodyComposition.obese, ("obese",)),
    (BodyComposition.overweight, ("overweight", "above average", "high")),
    (BodyComposition.lean, ("lean", "athletic", "low", "shredded")),
    (BodyComposition.average, ("average", "normal", "moderate")),
]

_GOAL_LABELS: dict[str, Goal] = {
    "lose fat": Goal.fat_loss,
    "lose_fat": Goal.fat_loss,
    "fat_loss": Goal.fat_loss,
    "fat loss": Goal.fat_loss,
    "build muscle": Goal.muscle_gain,
    "build_muscle": Goal.muscle_gain,
    "muscle_gain": Goal.muscle_gain,
    "muscle gain": Goal.muscle_gain,
    "both - lose fat and build muscle": Goal.recomposition,
    "recomposition": Goal.recomposition,
    "maintain": Goal.maintain,
    "maintenance": Goal.maintain,
}

_DIETARY_TAGS: dict[str, str] = {
    "gluten-free": "gluten-free",
    "gluten free": "gluten-free",
    "dairy-free": "dairy-free",
    "dairy free": "dairy-free",
    "vegetarian": "vegetarian",
    "keto": "keto",
    "keto/low-carb": "keto",
    "low-carb": "keto",
}


def _match(text: str | None, vocab):
    if not text:
        return None
    lower = text.strip().lower()
    for value, needles in vocab:
        if any(n in lower for n in needles):
            return value
    return None


def normalize_experience(text: str | None) -> ExperienceLevel:
    return _match(text, _EXPERIENCE_VOCAB) or ExperienceLevel.beginner


def match_activity(text: str | None) -> ActivityLevel | None:
    """Activity level when the text is recognizable, else None."""
    return _match(text, _ACTIVITY_VOCAB)


def normalize_activity(text: str | None) -> ActivityLevel:
    return match_activity(text) or ActivityLevel.sedentary


def normalize_body_composition(text: str | None) -> BodyComposition:
    return _match(text, _BODY_VOCAB) or BodyComposition.average


def normalize_goal(text: str | None) -> Goal:
    if not text:
        return Goal.recomposition
    return _GOAL_LABELS.get(text.strip().lower(), Goal.recomposition)


def has_injuries(text: str | None) -> bool:
    return bool(text and text.strip())


def parse_equipment(value: list[str] | str | None) -> list[str]:
    """Comma-separated string or list → lowercased, stripped, non-empty tags."""
    if not value:
        return []
    items = value.split(",") if isinstance(value, str) else value
    return [item.strip().lower() for item in items if item and item.strip()]


def parse_dietary_tags(text: str | None) -> list[str]:
    """Map intake restrictions to template dietary tags, dropping unknowns."""
    if not text:
        return []
    tags: list[str] = []
    for raw in text.split(","):
        tag = _DIETARY_TAGS.get(raw.strip().lower())
        if tag is not None and tag not in tags:
            tags.append(tag)
    return tags


def normalize_profile(profile: Profile) -> NormalizedProfile:
    days = profile.training_days_per_week
    return NormalizedProfile(
        goal=normalize_goal(profile.goal),
        experience=normalize_experience(profile.experience),
        activity=normalize_activity(profile.activity_level),
        body_composition=normalize_body_composition(profile.body_fat_estimate),
        training_days=days if days and days > 0 else None,
        has_injuries=has_injuries(profile.injuries),
        equipment=parse_equipment(profile.equipment),
        dietary_tags=parse_dietary_tags(profile.dietary_restrictions),
    )
