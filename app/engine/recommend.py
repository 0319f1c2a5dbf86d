"""Read-only recommendation preview.

Category ranking first, then template ranking inside the top category.
An empty candidate list is a normal outcome: the recommendation is None.
"""

from __future__ import annotations

from app.engine import scoring
from app.engine.energy import estimate_for_profile
from app.engine.models import (
    MealPlanTemplate,
    NutritionCategory,
    NutritionCategoryKind,
    NutritionRecommendation,
    Profile,
    ProgramTemplate,
    TemplateCategory,
    WorkoutRecommendation,
)
from app.engine.normalizer import normalize_profile
from app.engine.rules import DEFAULT_RULES, RuleSet


def recommend_workout(
    profile: Profile,
    categories: list[TemplateCategory],
    templates: list[ProgramTemplate],
    rules: RuleSet = DEFAULT_RULES,
) -> WorkoutRecommendation:
    normalized = normalize_profile(profile)
    ranked = scoring.rank_categories(categories, normalized, rules)
    if not ranked:
        return WorkoutRecommendation()

    top = ranked[0]
    scored = scoring.rank_workout_templates(templates, top.category, normalized, rules)
    return WorkoutRecommendation(
        categories=ranked,
        templates=scored,
        recommended_category=top,
        recommendation=scored[0] if scored else None,
    )


def find_nutrition_category(
    categories: list[NutritionCategory],
    energy_kind: NutritionCategoryKind,
    rules: RuleSet = DEFAULT_RULES,
) -> NutritionCategory | None:
    for category in categories:
        if rules.resolve_nutrition_kind(category.kind, category.name) == energy_kind:
            return category
    return None


def recommend_nutrition(
    profile: Profile,
    categories: list[NutritionCategory],
    templates: list[MealPlanTemplate],
    rules: RuleSet = DEFAULT_RULES,
) -> NutritionRecommendation:
    energy = estimate_for_profile(profile, rules)
    category = find_nutrition_category(categories, energy.recommended_kind, rules)
    if category is None:
        return NutritionRecommendation(energy=energy)

    in_category = [t for t in templates if t.category_id == category.id]
    candidates = scoring.filter_by_dietary_tags(in_category, normalize_profile(profile).dietary_tags)
    scored = scoring.rank_nutrition_templates(candidates, energy)
    return NutritionRecommendation(
        energy=energy,
        category=category,
        templates=scored,
        recommendation=scored[0] if scored else None,
    )
