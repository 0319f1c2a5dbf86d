"""Scoring rule configuration — no DB, config only.

Rules are keyed by a stable category kind, never by the display name an
administrator typed into the library. Display names are only consulted
to resolve a kind for legacy rows that carry none.

A RuleSet is passed into every scorer; DEFAULT_RULES is the shipped one.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields

from app.engine.models import (
    ActivityLevel,
    BodyComposition,
    CategoryKind,
    ExperienceLevel,
    NutritionCategoryKind,
)


@dataclass(frozen=True, slots=True)
class CategoryRule:
    experience: frozenset[ExperienceLevel]
    body_composition: frozenset[BodyComposition]
    activity: frozenset[ActivityLevel]
    min_days: int
    max_days: int
    injury_friendly: bool
    intensity: float  # 1 (easiest) – 3 (hardest)
    label: str = ""


def _check_weights(weights: object) -> None:
    total = sum(getattr(weights, f.name) for f in fields(weights))
    if not math.isclose(total, 1.0, abs_tol=1e-9):
        raise ValueError(f"{type(weights).__name__} must sum to 1.0, got {total}")


@dataclass(frozen=True, slots=True)
class CategoryWeights:
    experience: float = 0.35
    body_fat: float = 0.20
    activity: float = 0.20
    training_days: float = 0.15
    injury: float = 0.10

    def __post_init__(self) -> None:
        _check_weights(self)


@dataclass(frozen=True, slots=True)
class TemplateWeights:
    training_days: float = 0.35
    equipment: float = 0.30
    intensity: float = 0.25
    injury: float = 0.10

    def __post_init__(self) -> None:
        _check_weights(self)


_E = ExperienceLevel
_B = BodyComposition
_A = ActivityLevel

CATEGORY_RULES: dict[CategoryKind, CategoryRule] = {
    CategoryKind.beginner_basics: CategoryRule(
        experience=frozenset({_E.beginner}),
        body_composition=frozenset({_B.obese, _B.overweight, _B.average}),
        activity=frozenset({_A.sedentary, _A.light}),
        min_days=3,
        max_days=4,
        injury_friendly=True,
        intensity=1.0,
        label="Beginner Basics",
    ),
    CategoryKind.foundation_builder: CategoryRule(
        experience=frozenset({_E.beginner, _E.intermediate}),
        body_composition=frozenset({_B.overweight, _B.average}),
        activity=frozenset({_A.light, _A.moderate}),
        min_days=3,
        max_days=5,
        injury_friendly=True,
        intensity=1.5,
        label="Foundation Builder",
    ),
    CategoryKind.intermediate_growth: CategoryRule(
        experience=frozenset({_E.intermediate}),
        body_composition=frozenset({_B.average, _B.lean}),
        activity=frozenset({_A.moderate, _A.very_active}),
        min_days=4,
        max_days=6,
        injury_friendly=False,
        intensity=2.0,
        label="Intermediate Growth",
    ),
    CategoryKind.advanced_performance: CategoryRule(
        experience=frozenset({_E.advanced}),
        body_composition=frozenset({_B.lean, _B.average}),
        activity=frozenset({_A.very_active}),
        min_days=5,
        max_days=7,
        injury_friendly=False,
        intensity=3.0,
        label="Advanced Performance",
    ),
    CategoryKind.athletic_conditioning: CategoryRule(
        experience=frozenset({_E.beginner, _E.intermediate, _E.advanced}),
        body_composition=frozenset({_B.lean, _B.average, _B.overweight}),
        activity=frozenset({_A.moderate, _A.very_active}),
        min_days=3,
        max_days=6,
        injury_friendly=False,
        intensity=2.5,
        label="Athletic Conditioning",
    ),
}

NUTRITION_CATEGORY_NAMES: dict[NutritionCategoryKind, str] = {
    NutritionCategoryKind.fat_loss_aggressive: "Fat Loss - Aggressive",
    NutritionCategoryKind.fat_loss_moderate: "Fat Loss - Moderate",
    NutritionCategoryKind.muscle_building_mass: "Muscle Building - Mass",
    NutritionCategoryKind.muscle_building_lean: "Muscle Building - Lean",
    NutritionCategoryKind.recomposition: "Recomposition",
}

# Categories at or below this intensity are considered safe with injuries.
LOW_INTENSITY_CEILING = 1.5
DEFAULT_CATEGORY_INTENSITY = 2.0


def _name_key(name: str) -> str:
    # Library content mixes "-", en dash and spacing; compare on letters only.
    return "".join(ch for ch in name.lower() if ch.isalnum())


@dataclass(frozen=True, slots=True)
class RuleSet:
    category_rules: dict[CategoryKind, CategoryRule] = field(default_factory=lambda: dict(CATEGORY_RULES))
    category_weights: CategoryWeights = field(default_factory=CategoryWeights)
    template_weights: TemplateWeights = field(default_factory=TemplateWeights)
    nutrition_names: dict[NutritionCategoryKind, str] = field(
        default_factory=lambda: dict(NUTRITION_CATEGORY_NAMES)
    )

    def rule_for(self, kind: CategoryKind | None) -> CategoryRule | None:
        if kind is None:
            return None
        return self.category_rules.get(kind)

    def resolve_kind(self, kind: CategoryKind | None, name: str) -> CategoryKind | None:
        """Prefer the stored kind; fall back to matching the display name."""
        if kind is not None:
            return kind
        key = _name_key(name)
        for candidate, rule in self.category_rules.items():
            if _name_key(rule.label) == key or candidate.value.replace("_", "") == key:
                return candidate
        return None

    def resolve_nutrition_kind(self, kind: NutritionCategoryKind | None, name: str) -> NutritionCategoryKind | None:
        if kind is not None:
            return kind
        key = _name_key(name)
        for candidate, label in self.nutrition_names.items():
            if _name_key(label) == key or candidate.value.replace("_", "") == key:
                return candidate
        return None

    def intensity_for(self, kind: CategoryKind | None) -> float:
        rule = self.rule_for(kind)
        return rule.intensity if rule is not None else DEFAULT_CATEGORY_INTENSITY


DEFAULT_RULES = RuleSet()


def get_rule(kind: CategoryKind) -> CategoryRule | None:
    return DEFAULT_RULES.rule_for(kind)


def list_rules() -> list[tuple[CategoryKind, CategoryRule]]:
    return list(DEFAULT_RULES.category_rules.items())
